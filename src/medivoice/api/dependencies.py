from fastapi import HTTPException, Request

from medivoice.models import FailureKind, WorkflowFailure
from medivoice.services import Orchestrator

FAILURE_STATUS = {
    FailureKind.MISSING_INPUT: 400,
    FailureKind.INVALID_MEDIA_TYPE: 400,
    FailureKind.PROVIDER_ERROR: 502,
    FailureKind.STORAGE_FAILURE: 500,
    FailureKind.ENCODING_FAILURE: 500,
}


def get_orchestrator(request: Request) -> Orchestrator:
    """Return the orchestrator built during application startup."""
    return request.app.state.orchestrator


def raise_for_failure(failure: WorkflowFailure) -> None:
    raise HTTPException(status_code=FAILURE_STATUS[failure.kind], detail=failure.message)
