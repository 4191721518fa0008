from fastapi import APIRouter, Depends, Form, Request

from medivoice.api.dependencies import get_orchestrator, raise_for_failure
from medivoice.models import GeneratedMessage, VoiceSettings
from medivoice.services import Orchestrator

router = APIRouter(prefix="/api/v1", tags=["Messages"])


@router.get("/messages", response_model=list[GeneratedMessage])
def list_messages(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """List generated messages in creation order."""
    return orchestrator.list_messages()


@router.post("/messages", response_model=GeneratedMessage, status_code=201)
async def generate_message(
    request: Request,
    voice_id: str | None = Form(None, alias="voiceId"),
    message_text: str | None = Form(None, alias="messageText"),
    patient_name: str | None = Form(None, alias="patientName"),
    stability: float | None = Form(None, ge=0.0, le=1.0),
    similarity_boost: float | None = Form(None, ge=0.0, le=1.0, alias="similarityBoost"),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Render text with a cloned voice and return the message with its QR code."""
    settings = None
    if stability is not None or similarity_boost is not None:
        defaults = orchestrator.default_settings
        settings = VoiceSettings(
            stability=defaults.stability if stability is None else stability,
            similarity_boost=defaults.similarity_boost if similarity_boost is None else similarity_boost,
        )

    result = await orchestrator.generate_message(
        voice_id,
        message_text,
        base_url=str(request.base_url),
        patient_name=patient_name,
        settings=settings,
    )
    if not result.ok:
        raise_for_failure(result.failure)
    return result.value
