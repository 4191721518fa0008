import logging
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from medivoice.models import VoiceSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables or `.env` file."""

    env: Literal["dev", "docker", "production"] = Field(
        default="dev",
        description="Runtime environment: dev (local), docker (docker-compose), or production",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # ElevenLabs
    eleven_labs_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVEN_LABS_API_KEY", "ELEVENLABS_API_KEY"),
    )
    eleven_labs_base_url: str = Field(default="https://api.elevenlabs.io")
    tts_model_id: str = Field(default="eleven_monolingual_v1", description="Synthesis model")
    provider_timeout_seconds: float = Field(default=60.0, gt=0, description="Per-call timeout")
    default_stability: float = Field(default=0.5, ge=0.0, le=1.0)
    default_similarity_boost: float = Field(default=0.5, ge=0.0, le=1.0)

    # Local storage
    staging_dir: str = Field(default="var/staging", description="Transient upload storage")
    content_dir: str = Field(default="public/uploads", description="Generated audio storage")
    content_url_path: str = Field(default="/uploads", description="URL path serving content_dir")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("content_url_path", mode="after")
    @classmethod
    def validate_content_url_path(cls, v: str) -> str:
        """Normalise to a single leading slash and no trailing slash."""
        path = "/" + v.strip("/")
        if path == "/":
            raise ValueError("content_url_path must not be the site root")
        return path

    @property
    def voice_settings(self) -> VoiceSettings:
        return VoiceSettings(
            stability=self.default_stability,
            similarity_boost=self.default_similarity_boost,
        )


@lru_cache
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached instance of Settings."""
    s = Settings()
    logging.basicConfig(level=s.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info(f"Starting MediVoice in {s.env.upper()} environment")
    logger.info("=" * 60)
    logger.info(f"Staging dir: {s.staging_dir}")
    logger.info(f"Content dir: {s.content_dir} (served at {s.content_url_path})")
    logger.info(f"Voice provider: {s.eleven_labs_base_url} model={s.tts_model_id}")
    logger.info("=" * 60)

    if s.env == "production" and not s.eleven_labs_api_key:
        logger.warning("ELEVEN_LABS_API_KEY not set in production!")

    return s
