import pytest

from medivoice.errors import ProviderError
from medivoice.infrastructure import AssetStore, LocatorEncoder
from medivoice.infrastructure.voice_provider import VoiceProvider
from medivoice.models import AudioUpload, VoiceSettings
from medivoice.services import Orchestrator, Registry

FAKE_MP3 = b"ID3\x03\x00\x00\x00\x00\x00\x00fake-mp3-frames"
VALID_WAV = b"RIFF\x24\x00\x00\x00WAVEfmt " + b"\x00" * 24


class FakeVoiceProvider(VoiceProvider):
    """In-memory provider that records every call."""

    name = "fake"

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.register_error: ProviderError | None = None
        self.synthesize_error: ProviderError | None = None
        self.delete_error: ProviderError | None = None
        self.audio = FAKE_MP3
        self._next_id = 0

    async def register_voice(self, *, display_name, description, audio, file_name="sample", content_type="audio/mpeg"):
        self.calls.append(("register_voice", display_name, description, audio, file_name, content_type))
        if self.register_error:
            raise self.register_error
        self._next_id += 1
        return f"voice-{self._next_id}"

    async def synthesize(self, *, voice_id, text, settings: VoiceSettings | None = None):
        self.calls.append(("synthesize", voice_id, text, settings))
        if self.synthesize_error:
            raise self.synthesize_error
        return self.audio

    async def delete_voice(self, voice_id):
        self.calls.append(("delete_voice", voice_id))
        if self.delete_error:
            raise self.delete_error

    def called(self, operation: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == operation]


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def assets(tmp_path):
    store = AssetStore(tmp_path / "staging", tmp_path / "content", "/uploads")
    store.ensure_dirs()
    return store


@pytest.fixture
def provider():
    return FakeVoiceProvider()


@pytest.fixture
def orchestrator(registry, assets, provider):
    return Orchestrator(registry, assets, provider, LocatorEncoder())


@pytest.fixture
def wav_upload():
    return AudioUpload(data=VALID_WAV, file_name="sample.wav", content_type="audio/wav")
