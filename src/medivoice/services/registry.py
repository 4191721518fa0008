from __future__ import annotations

import logging
import threading
import time

from medivoice.models import UNKNOWN_VOICE_NAME, GeneratedMessage, VoiceIdentity

logger = logging.getLogger(__name__)


class Registry:
    """Process-scoped, in-memory collections of voices and generated messages.

    Both collections iterate in insertion order. Mutations are serialised by a lock
    so concurrent workflows cannot interleave appends.
    """

    def __init__(self) -> None:
        self._voices: dict[str, VoiceIdentity] = {}
        self._messages: list[GeneratedMessage] = []
        self._last_message_id = 0
        self._lock = threading.Lock()

    # --- Voices ---

    def add_voice(self, voice: VoiceIdentity) -> None:
        with self._lock:
            if voice.id in self._voices:
                logger.warning(f"Voice {voice.id} already registered; replacing record")
            self._voices[voice.id] = voice

    def remove_voice(self, voice_id: str) -> bool:
        """Remove a voice. Returns False if no voice had that id."""
        with self._lock:
            return self._voices.pop(voice_id, None) is not None

    def list_voices(self) -> list[VoiceIdentity]:
        with self._lock:
            return list(self._voices.values())

    def find_voice_name(self, voice_id: str) -> str:
        voice = self._voices.get(voice_id)
        return voice.display_name if voice else UNKNOWN_VOICE_NAME

    # --- Messages ---

    def next_message_id(self) -> int:
        """Allocate a strictly increasing, millisecond-based message id."""
        with self._lock:
            self._last_message_id = max(time.time_ns() // 1_000_000, self._last_message_id + 1)
            return self._last_message_id

    def add_message(self, message: GeneratedMessage) -> None:
        with self._lock:
            self._messages.append(message)

    def list_messages(self) -> list[GeneratedMessage]:
        with self._lock:
            return list(self._messages)
