import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path, PurePath

from medivoice.errors import InvalidMediaType, StorageFailure
from medivoice.models import AudioUpload, PersistedFile, StagedFile

logger = logging.getLogger(__name__)

AUDIO_MEDIA_PREFIX = "audio/"


class AssetStore:
    """Local file storage for staged uploads and generated audio."""

    def __init__(self, staging_dir: str | Path, content_dir: str | Path, content_url_path: str = "/uploads"):
        self.staging_dir = Path(staging_dir)
        self.content_dir = Path(content_dir)
        self.content_url_path = "/" + content_url_path.strip("/")

    def ensure_dirs(self) -> None:
        """Create the staging and content areas if they are missing."""
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            self.content_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageFailure(f"Could not create storage directories: {e}") from e

    def purge_staging(self) -> int:
        """Remove leftovers from a previous process. Returns the number of files removed."""
        removed = 0
        if not self.staging_dir.exists():
            return removed
        try:
            for path in self.staging_dir.iterdir():
                if path.is_file():
                    path.unlink(missing_ok=True)
                    removed += 1
        except OSError as e:
            raise StorageFailure(f"Could not purge staging area: {e}") from e
        if removed:
            logger.info(f"[AssetStore] Purged {removed} stale staged file(s)")
        return removed

    # ------------------------------------------------------------------
    # Staging area
    # ------------------------------------------------------------------

    def stage_upload(self, upload: AudioUpload) -> StagedFile:
        """Write an audio upload to the staging area under a non-colliding name."""
        content_type = upload.content_type or ""
        if not content_type.startswith(AUDIO_MEDIA_PREFIX):
            raise InvalidMediaType(upload.content_type)

        original_name = PurePath(upload.file_name.replace("\\", "/")).name or "upload"
        file_name = f"{time.time_ns()}-{uuid.uuid4().hex[:8]}-{original_name}"
        path = self.staging_dir / file_name
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(upload.data)
        except OSError as e:
            logger.error(f"[AssetStore] Staging write failed for {file_name}: {e}")
            raise StorageFailure(f"Could not stage upload {original_name}: {e}") from e

        logger.debug(f"[AssetStore] Staged {original_name} as {file_name} ({len(upload.data)} bytes)")
        return StagedFile(
            file_name=file_name,
            path=path,
            original_name=original_name,
            content_type=content_type,
            size_bytes=len(upload.data),
        )

    def read(self, handle: StagedFile) -> bytes:
        try:
            return handle.path.read_bytes()
        except OSError as e:
            raise StorageFailure(f"Could not read staged file {handle.file_name}: {e}") from e

    def discard(self, handle: StagedFile) -> None:
        """Delete a staged file. Deleting an already missing file is not an error."""
        try:
            handle.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageFailure(f"Could not discard staged file {handle.file_name}: {e}") from e
        logger.debug(f"[AssetStore] Discarded {handle.file_name}")

    @asynccontextmanager
    async def staged(self, upload: AudioUpload) -> AsyncIterator[StagedFile]:
        """Stage *upload* for the duration of the block and discard it on every exit path.

        A discard failure after the block completed normally is logged rather than raised,
        since the work done inside the block has already taken effect.
        """
        loop = asyncio.get_running_loop()
        handle = await loop.run_in_executor(None, self.stage_upload, upload)
        try:
            yield handle
        finally:
            try:
                await loop.run_in_executor(None, self.discard, handle)
            except StorageFailure as e:
                logger.warning(f"[AssetStore] {e}")

    # ------------------------------------------------------------------
    # Content area
    # ------------------------------------------------------------------

    def url_for(self, file_name: str, base_url: str) -> str:
        return f"{base_url.rstrip('/')}{self.content_url_path}/{file_name}"

    def persist(self, data: bytes, suggested_extension: str, base_url: str) -> PersistedFile:
        """Write synthesized audio under a fresh unique name and compute its address."""
        extension = suggested_extension if suggested_extension.startswith(".") else f".{suggested_extension}"
        file_name = f"message-{time.time_ns()}-{uuid.uuid4().hex[:8]}{extension}"
        path = self.content_dir / file_name
        try:
            self.content_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"[AssetStore] Audio write failed for {file_name}: {e}")
            raise StorageFailure(f"Could not persist {file_name}: {e}") from e

        logger.info(f"[AssetStore] Persisted audio {file_name} ({len(data)} bytes)")
        return PersistedFile(file_name=file_name, path=path, url=self.url_for(file_name, base_url))
