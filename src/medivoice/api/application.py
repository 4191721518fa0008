import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from medivoice.infrastructure import AssetStore, LocatorEncoder
from medivoice.infrastructure.voice_provider import ElevenLabsProvider, VoiceProvider
from medivoice.services import Orchestrator, Registry

from .messages import router as messages_router
from .middleware import LoggingMiddleware
from .settings import Settings, get_settings
from .voices import router as voices_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, provider: VoiceProvider | None = None) -> FastAPI:
    """Build the API with a fresh registry; the provider is created at startup unless supplied."""
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    assets = AssetStore(settings.staging_dir, settings.content_dir, settings.content_url_path)
    assets.ensure_dirs()
    registry = Registry()
    encoder = LocatorEncoder()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        assets.purge_staging()
        voice_provider = provider or ElevenLabsProvider(
            settings.eleven_labs_api_key,
            base_url=settings.eleven_labs_base_url,
            model_id=settings.tts_model_id,
            timeout=settings.provider_timeout_seconds,
            default_settings=settings.voice_settings,
        )
        app.state.orchestrator = Orchestrator(
            registry,
            assets,
            voice_provider,
            encoder,
            default_settings=settings.voice_settings,
        )
        logger.info(f"Voice provider '{voice_provider.name}' ready")
        try:
            yield
        finally:
            await voice_provider.aclose()

    app = FastAPI(title="MediVoice API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(LoggingMiddleware)

    # CORS middleware (allow all for now; adjust in prod)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(voices_router)
    app.include_router(messages_router)

    @app.get("/api/health", tags=["Utility"])
    async def health() -> dict[str, str]:
        """Return basic service health status."""
        return {"status": "ok"}

    # Generated audio must stay reachable at the address encoded in each QR code.
    app.mount(settings.content_url_path, StaticFiles(directory=settings.content_dir), name="content")

    return app
