from __future__ import annotations

from abc import ABC, abstractmethod

from medivoice.models import VoiceSettings


class VoiceProvider(ABC):
    """Abstract base class for voice cloning and synthesis providers.

    Implementations raise :class:`medivoice.errors.ProviderError` for both transport
    failures and error responses.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the (unique) short-name for this provider (e.g. 'eleven')."""

    @abstractmethod
    async def register_voice(
        self,
        *,
        display_name: str,
        description: str,
        audio: bytes,
        file_name: str = "sample",
        content_type: str = "audio/mpeg",
    ) -> str:
        """Register a voice from a sample recording and return the provider's voice id."""

    @abstractmethod
    async def synthesize(
        self,
        *,
        voice_id: str,
        text: str,
        settings: VoiceSettings | None = None,
    ) -> bytes:
        """Render *text* with *voice_id* and return the encoded audio bytes."""

    @abstractmethod
    async def delete_voice(self, voice_id: str) -> None:
        """Delete a previously registered voice."""

    async def aclose(self) -> None:
        """Release any resources held by the provider."""
