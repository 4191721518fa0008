from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DEFAULT_VOICE_DESCRIPTION = "Doctor voice clone"
DEFAULT_PATIENT_NAME = "Patient"
UNKNOWN_VOICE_NAME = "Unknown"

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Failure classification
# =============================================================================


class FailureKind(str, Enum):
    """Classified reasons a workflow can end in the FAILED state."""

    MISSING_INPUT = "MISSING_INPUT"
    INVALID_MEDIA_TYPE = "INVALID_MEDIA_TYPE"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    ENCODING_FAILURE = "ENCODING_FAILURE"


# =============================================================================
# Workflow states
# =============================================================================


class CloneVoiceState(str, Enum):
    VALIDATING = "VALIDATING"
    STAGING = "STAGING"
    REGISTERING = "REGISTERING"
    RECORDING = "RECORDING"
    CLEANUP = "CLEANUP"
    DONE = "DONE"
    FAILED = "FAILED"


class GenerateMessageState(str, Enum):
    VALIDATING = "VALIDATING"
    SYNTHESIZING = "SYNTHESIZING"
    PERSISTING = "PERSISTING"
    ENCODING = "ENCODING"
    RECORDING = "RECORDING"
    DONE = "DONE"
    FAILED = "FAILED"


class DeleteVoiceState(str, Enum):
    DELETING_UPSTREAM = "DELETING_UPSTREAM"
    REMOVING = "REMOVING"
    DONE = "DONE"
    FAILED = "FAILED"


# =============================================================================
# Provider configuration
# =============================================================================


class VoiceSettings(BaseModel):
    """Synthesis options sent along with every text-to-speech request."""

    stability: float = Field(0.5, ge=0.0, le=1.0, description="Consistency vs expressiveness")
    similarity_boost: float = Field(
        0.5, ge=0.0, le=1.0, description="Closeness to the source timbre"
    )


# =============================================================================
# Files
# =============================================================================


class AudioUpload(BaseModel):
    """An inbound audio attachment as received from the caller."""

    data: bytes
    file_name: str
    content_type: str | None = None


class StagedFile(BaseModel):
    """Handle to an upload written to the staging area."""

    file_name: str = Field(..., description="Non-colliding name inside the staging area")
    path: Path
    original_name: str
    content_type: str
    size_bytes: int


class PersistedFile(BaseModel):
    """Synthesized audio written to the content area."""

    file_name: str
    path: Path
    url: str = Field(..., description="Externally reachable address of the file")


# =============================================================================
# Registry records
# =============================================================================


class VoiceIdentity(BaseModel):
    """A voice registered with the synthesis provider."""

    id: str = Field(..., description="Opaque id assigned by the provider")
    display_name: str
    description: str = DEFAULT_VOICE_DESCRIPTION
    source_file_name: str
    created_at: datetime = Field(default_factory=utcnow)


class GeneratedMessage(BaseModel):
    """One text-to-speech rendering and the scannable code pointing at it."""

    id: int
    voice_id: str
    voice_name: str = Field(..., description="Voice display name resolved at creation time")
    message_text: str
    patient_name: str = DEFAULT_PATIENT_NAME
    audio_file_name: str
    audio_url: str
    scannable_code: str = Field(..., description="PNG data URL encoding audio_url")
    created_at: datetime = Field(default_factory=utcnow)


# =============================================================================
# Workflow results
# =============================================================================


class WorkflowFailure(BaseModel):
    kind: FailureKind
    message: str = Field(..., description="User-safe failure message")
    state: str = Field(..., description="Workflow step in which the failure occurred")


class WorkflowResult(BaseModel, Generic[T]):
    """Outcome of a workflow: either a value or a classified failure."""

    value: T | None = None
    failure: WorkflowFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None
