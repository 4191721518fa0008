"""Wire-level tests for the ElevenLabs provider using httpx.MockTransport."""

import json

import httpx
import pytest

from medivoice.errors import ProviderError
from medivoice.infrastructure.voice_provider import ElevenLabsProvider
from medivoice.models import VoiceSettings


def make_provider(handler, **kwargs) -> ElevenLabsProvider:
    return ElevenLabsProvider("test-key", transport=httpx.MockTransport(handler), **kwargs)


def raw_path(request: httpx.Request) -> bytes:
    return request.url.raw_path.split(b"?")[0]


@pytest.mark.asyncio
async def test_register_voice_sends_multipart():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"voice_id": "abc123", "requires_verification": False})

    async with make_provider(handler) as provider:
        voice_id = await provider.register_voice(
            display_name="Dr. Smith",
            description="Doctor voice clone",
            audio=b"RIFFwav",
            file_name="sample.wav",
            content_type="audio/wav",
        )

    assert voice_id == "abc123"
    [request] = seen
    assert request.method == "POST"
    assert request.url.host == "api.elevenlabs.io"
    assert request.url.path == "/v1/voices/add"
    assert request.headers["xi-api-key"] == "test-key"
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.read()
    assert b'name="name"' in body and b"Dr. Smith" in body
    assert b'name="description"' in body and b"Doctor voice clone" in body
    assert b'filename="sample.wav"' in body and b"RIFFwav" in body


@pytest.mark.asyncio
async def test_register_voice_without_voice_id_is_provider_error():
    provider = make_provider(lambda request: httpx.Response(200, json={"status": "ok"}))

    with pytest.raises(ProviderError) as exc:
        await provider.register_voice(display_name="Dr. Smith", description="d", audio=b"x")
    assert exc.value.status == 200
    await provider.aclose()


@pytest.mark.asyncio
async def test_synthesize_returns_raw_audio():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"ID3mp3data", headers={"content-type": "audio/mpeg"})

    async with make_provider(handler, model_id="eleven_monolingual_v1") as provider:
        audio = await provider.synthesize(
            voice_id="abc123",
            text="Take two tablets daily.",
            settings=VoiceSettings(stability=0.7, similarity_boost=0.3),
        )

    assert audio == b"ID3mp3data"
    [request] = seen
    assert request.method == "POST"
    assert request.url.path == "/v1/text-to-speech/abc123"
    assert request.headers["xi-api-key"] == "test-key"
    body = json.loads(request.read())
    assert body["text"] == "Take two tablets daily."
    assert body["model_id"] == "eleven_monolingual_v1"
    assert body["voice_settings"]["stability"] == 0.7
    assert body["voice_settings"]["similarity_boost"] == 0.3


@pytest.mark.asyncio
async def test_synthesize_uses_default_settings():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.read()))
        return httpx.Response(200, content=b"ID3")

    async with make_provider(handler) as provider:
        await provider.synthesize(voice_id="abc123", text="Hello")

    assert seen[0]["voice_settings"]["stability"] == 0.5
    assert seen[0]["voice_settings"]["similarity_boost"] == 0.5


@pytest.mark.asyncio
async def test_synthesize_empty_body_is_provider_error():
    async with make_provider(lambda request: httpx.Response(200, content=b"")) as provider:
        with pytest.raises(ProviderError) as exc:
            await provider.synthesize(voice_id="abc123", text="Hello")

    assert exc.value.status == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "voice_id, expected_path",
    [
        ("../voices/add", b"/v1/text-to-speech/..%2Fvoices%2Fadd"),
        ("victim?x=1", b"/v1/text-to-speech/victim%3Fx%3D1"),
        ("a/b#c", b"/v1/text-to-speech/a%2Fb%23c"),
    ],
)
async def test_synthesize_escapes_voice_id(voice_id, expected_path):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"ID3")

    async with make_provider(handler) as provider:
        await provider.synthesize(voice_id=voice_id, text="Hello")

    [request] = seen
    assert raw_path(request) == expected_path
    assert request.url.params.get("x") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "voice_id, expected_path",
    [
        ("victim?x=1", b"/v1/voices/victim%3Fx%3D1"),
        ("../voices/add", b"/v1/voices/..%2Fvoices%2Fadd"),
    ],
)
async def test_delete_voice_escapes_voice_id(voice_id, expected_path):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "ok"})

    async with make_provider(handler) as provider:
        await provider.delete_voice(voice_id)

    assert [(r.method, raw_path(r)) for r in seen] == [("DELETE", expected_path)]


@pytest.mark.asyncio
async def test_error_response_is_normalised():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": {"status": "voice_not_found"}})

    async with make_provider(handler) as provider:
        with pytest.raises(ProviderError) as exc:
            await provider.synthesize(voice_id="missing", text="Hello")

    assert exc.value.status == 404
    assert "voice_not_found" in exc.value.body
    assert not exc.value.is_transport_failure


@pytest.mark.asyncio
async def test_delete_error_response_is_normalised():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"detail": {"status": "invalid_api_key"}})

    async with make_provider(handler) as provider:
        with pytest.raises(ProviderError) as exc:
            await provider.delete_voice("abc123")

    assert exc.value.status == 401
    assert "invalid_api_key" in exc.value.body


@pytest.mark.asyncio
async def test_transport_failure_is_normalised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_provider(handler) as provider:
        with pytest.raises(ProviderError) as exc:
            await provider.delete_voice("abc123")

    assert exc.value.is_transport_failure
    assert "connection refused" in exc.value.body


@pytest.mark.asyncio
async def test_timeout_is_a_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with make_provider(handler, timeout=0.1) as provider:
        with pytest.raises(ProviderError) as exc:
            await provider.synthesize(voice_id="abc123", text="Hello")

    assert exc.value.status is None


@pytest.mark.asyncio
async def test_undecodable_audio_body_is_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=b"not-gzip",
            headers={"content-type": "audio/mpeg", "content-encoding": "gzip"},
        )

    async with make_provider(handler) as provider:
        with pytest.raises(ProviderError) as exc:
            await provider.synthesize(voice_id="abc123", text="Hello")

    assert exc.value.is_transport_failure
    assert "DecodingError" in exc.value.body


@pytest.mark.asyncio
async def test_delete_voice():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "ok"})

    async with make_provider(handler) as provider:
        await provider.delete_voice("abc123")

    assert [(r.method, r.url.path) for r in seen] == [("DELETE", "/v1/voices/abc123")]


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("ELEVEN_API_KEY", raising=False)
    monkeypatch.delenv("ELEVEN_LABS_API_KEY", raising=False)
    monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)

    with pytest.raises(ValueError):
        ElevenLabsProvider()


@pytest.mark.asyncio
async def test_api_key_from_elevenlabs_env_var(monkeypatch):
    monkeypatch.delenv("ELEVEN_API_KEY", raising=False)
    monkeypatch.delenv("ELEVEN_LABS_API_KEY", raising=False)
    monkeypatch.setenv("ELEVENLABS_API_KEY", "sdk-style-key")
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "ok"})

    async with ElevenLabsProvider(transport=httpx.MockTransport(handler)) as provider:
        await provider.delete_voice("abc123")

    assert seen[0].headers["xi-api-key"] == "sdk-style-key"
