from __future__ import annotations

import json
import logging
import os
from urllib.parse import quote

import httpx
from dotenv import load_dotenv
from elevenlabs import AsyncElevenLabs
from elevenlabs import VoiceSettings as ElevenVoiceSettings
from elevenlabs.core.api_error import ApiError

from medivoice.errors import ProviderError
from medivoice.infrastructure.voice_provider.base import VoiceProvider
from medivoice.models import VoiceSettings

load_dotenv()
logger = logging.getLogger(__name__)

ELEVENLABS_BASE_URL = "https://api.elevenlabs.io"
DEFAULT_MODEL_ID = "eleven_monolingual_v1"
OUTPUT_FORMAT = "mp3_44100_128"


def _path_segment(voice_id: str) -> str:
    """Escape a voice id so it stays a single path segment in the upstream URL."""
    return quote(voice_id, safe="")


def _body_text(body) -> str:
    if isinstance(body, str):
        return body
    return json.dumps(body, default=str)


class ElevenLabsProvider(VoiceProvider):
    """Voice cloning and synthesis through the ElevenLabs SDK (2.x)."""

    name: str = "eleven"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = ELEVENLABS_BASE_URL,
        model_id: str = DEFAULT_MODEL_ID,
        timeout: float = 60.0,
        default_settings: VoiceSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        key = (
            api_key
            or os.getenv("ELEVEN_API_KEY")
            or os.getenv("ELEVEN_LABS_API_KEY")
            or os.getenv("ELEVENLABS_API_KEY")
        )
        if not key:
            raise ValueError(
                "ElevenLabs API key not found. Set ELEVEN_API_KEY or ELEVENLABS_API_KEY or pass api_key."
            )
        self.model_id = model_id
        self.default_settings = default_settings or VoiceSettings()
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)
        self.client = AsyncElevenLabs(
            api_key=key,
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            httpx_client=self._http,
        )

    async def __aenter__(self) -> ElevenLabsProvider:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _provider_error(self, operation: str, error: Exception) -> ProviderError:
        """Normalise SDK and httpx failures into ProviderError."""
        if isinstance(error, ApiError):
            body = _body_text(error.body)
            logger.error(f"[ElevenLabs] {operation} failed with {error.status_code}: {body}")
            return ProviderError(operation, status=error.status_code, body=body)
        logger.error(f"[ElevenLabs] {operation} transport failure: {type(error).__name__}: {error}")
        return ProviderError(operation, body=f"{type(error).__name__}: {error}")

    async def register_voice(
        self,
        *,
        display_name: str,
        description: str,
        audio: bytes,
        file_name: str = "sample",
        content_type: str = "audio/mpeg",
    ) -> str:
        try:
            response = await self.client.voices.ivc.create(
                name=display_name,
                description=description,
                files=[(file_name, audio, content_type)],
            )
        except (ApiError, httpx.HTTPError) as e:
            raise self._provider_error("register_voice", e) from e

        voice_id = getattr(response, "voice_id", None)
        if not isinstance(voice_id, str) or not voice_id:
            raise ProviderError("register_voice", status=200, body=f"no voice_id in {response!r}")

        logger.info(f"[ElevenLabs] Registered voice {voice_id} for {display_name!r}")
        return voice_id

    async def synthesize(
        self,
        *,
        voice_id: str,
        text: str,
        settings: VoiceSettings | None = None,
    ) -> bytes:
        settings = settings or self.default_settings
        chunks: list[bytes] = []
        try:
            audio_stream = self.client.text_to_speech.convert(
                voice_id=_path_segment(voice_id),
                text=text,
                model_id=self.model_id,
                output_format=OUTPUT_FORMAT,
                voice_settings=ElevenVoiceSettings(
                    stability=settings.stability,
                    similarity_boost=settings.similarity_boost,
                ),
            )
            async for chunk in audio_stream:
                if isinstance(chunk, bytes):
                    chunks.append(chunk)
        except (ApiError, httpx.HTTPError) as e:
            raise self._provider_error("synthesize", e) from e

        audio = b"".join(chunks)
        if not audio:
            raise ProviderError("synthesize", status=200, body="empty audio body")

        logger.info(f"[ElevenLabs] Synthesized {len(text)} chars with voice {voice_id}")
        return audio

    async def delete_voice(self, voice_id: str) -> None:
        try:
            await self.client.voices.delete(voice_id=_path_segment(voice_id))
        except (ApiError, httpx.HTTPError) as e:
            raise self._provider_error("delete_voice", e) from e
        logger.info(f"[ElevenLabs] Deleted voice {voice_id}")
