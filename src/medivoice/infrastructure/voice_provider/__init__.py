"""Voice provider implementations (ElevenLabs)."""

# Re-export for easier access, e.g. `from medivoice.infrastructure.voice_provider import ElevenLabsProvider`
from .base import VoiceProvider
from .elevenlabs_provider import ElevenLabsProvider

__all__ = [
    "ElevenLabsProvider",
    "VoiceProvider",
]
