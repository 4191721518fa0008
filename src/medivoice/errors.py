"""Exception taxonomy raised by the asset store, locator encoder and provider client."""

from __future__ import annotations

from medivoice.models import FailureKind


class MediVoiceError(Exception):
    """Base class for every classified failure."""

    kind: FailureKind

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class MissingInput(MediVoiceError):
    kind = FailureKind.MISSING_INPUT


class InvalidMediaType(MediVoiceError):
    kind = FailureKind.INVALID_MEDIA_TYPE

    def __init__(self, content_type: str | None) -> None:
        super().__init__(f"Rejected upload with media type {content_type!r}")
        self.content_type = content_type


class StorageFailure(MediVoiceError):
    kind = FailureKind.STORAGE_FAILURE


class EncodingFailure(MediVoiceError):
    kind = FailureKind.ENCODING_FAILURE


class ProviderError(MediVoiceError):
    """Remote failure, either a transport error (no status) or an error response."""

    kind = FailureKind.PROVIDER_ERROR

    def __init__(self, operation: str, status: int | None = None, body: str | None = None) -> None:
        if status is None:
            detail = f"{operation}: transport failure: {body}"
        else:
            detail = f"{operation}: provider returned {status}: {body}"
        super().__init__(detail)
        self.operation = operation
        self.status = status
        self.body = body

    @property
    def is_transport_failure(self) -> bool:
        return self.status is None
