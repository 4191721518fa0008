from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from medivoice.api.dependencies import get_orchestrator, raise_for_failure
from medivoice.models import AudioUpload, VoiceIdentity
from medivoice.services import Orchestrator

router = APIRouter(prefix="/api/v1", tags=["Voices"])


class VoiceDeleted(BaseModel):
    voice_id: str
    deleted: bool = True


@router.get("/voices", response_model=list[VoiceIdentity])
def list_voices(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """List cloned voices in creation order."""
    return orchestrator.list_voices()


@router.post("/voices", response_model=VoiceIdentity, status_code=201)
async def clone_voice(
    doctor_name: str | None = Form(None, alias="doctorName"),
    description: str | None = Form(None),
    audio_file: UploadFile | None = File(None, alias="audioFile"),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Clone a voice from an uploaded audio sample."""
    audio = None
    if audio_file is not None and audio_file.filename:
        audio = AudioUpload(
            data=await audio_file.read(),
            file_name=audio_file.filename,
            content_type=audio_file.content_type,
        )

    result = await orchestrator.clone_voice(doctor_name, audio, description)
    if not result.ok:
        raise_for_failure(result.failure)
    return result.value


@router.delete("/voices/{voice_id}", response_model=VoiceDeleted)
async def delete_voice(voice_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Delete a voice upstream, then forget it locally."""
    result = await orchestrator.delete_voice(voice_id)
    if not result.ok:
        raise_for_failure(result.failure)
    return VoiceDeleted(voice_id=voice_id)
