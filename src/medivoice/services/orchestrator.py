"""Workflows that sequence the asset store, provider, locator encoder and registry.

Each workflow walks a fixed sequence of states and returns a :class:`WorkflowResult`.
Component errors are caught at the step that raised them and turned into a classified
failure carrying a user-safe message; the underlying diagnostic is only logged.

CloneVoice:      VALIDATING -> STAGING -> REGISTERING -> RECORDING -> CLEANUP -> DONE
GenerateMessage: VALIDATING -> SYNTHESIZING -> PERSISTING -> ENCODING -> RECORDING -> DONE
DeleteVoice:     DELETING_UPSTREAM -> REMOVING -> DONE
"""

from __future__ import annotations

import asyncio
import logging

from medivoice.errors import MediVoiceError, MissingInput, ProviderError
from medivoice.infrastructure.asset_store import AssetStore
from medivoice.infrastructure.locator import LocatorEncoder
from medivoice.infrastructure.voice_provider import VoiceProvider
from medivoice.models import (
    DEFAULT_PATIENT_NAME,
    DEFAULT_VOICE_DESCRIPTION,
    AudioUpload,
    CloneVoiceState,
    DeleteVoiceState,
    FailureKind,
    GeneratedMessage,
    GenerateMessageState,
    VoiceIdentity,
    VoiceSettings,
    WorkflowFailure,
    WorkflowResult,
)
from medivoice.services.registry import Registry

logger = logging.getLogger(__name__)

CLONE_MISSING_INPUT = "Please provide doctor name and audio file"
CLONE_FAILED = "Failed to clone voice. Please try again."
GENERATE_MISSING_INPUT = "Please select a voice and provide message text"
GENERATE_FAILED = "Failed to generate voice message. Please try again."
DELETE_FAILED = "Failed to delete voice. Please try again."
INVALID_MEDIA_TYPE = "Only audio files are allowed!"

AUDIO_EXTENSION = ".mp3"


def _failure(error: MediVoiceError, state: str, generic_message: str) -> WorkflowFailure:
    """Map a component error onto the message the caller is allowed to see."""
    if error.kind is FailureKind.INVALID_MEDIA_TYPE:
        message = INVALID_MEDIA_TYPE
    elif error.kind is FailureKind.MISSING_INPUT:
        message = error.detail
    else:
        message = generic_message
    return WorkflowFailure(kind=error.kind, message=message, state=state)


class Orchestrator:
    """Runs the CloneVoice, GenerateMessage and DeleteVoice workflows."""

    def __init__(
        self,
        registry: Registry,
        assets: AssetStore,
        provider: VoiceProvider,
        encoder: LocatorEncoder,
        default_settings: VoiceSettings | None = None,
    ) -> None:
        self.registry = registry
        self.assets = assets
        self.provider = provider
        self.encoder = encoder
        self.default_settings = default_settings or VoiceSettings()

    # ------------------------------------------------------------------
    # CloneVoice
    # ------------------------------------------------------------------

    async def clone_voice(
        self,
        display_name: str | None,
        audio: AudioUpload | None,
        description: str | None = None,
    ) -> WorkflowResult[VoiceIdentity]:
        state = CloneVoiceState.VALIDATING
        description = description or DEFAULT_VOICE_DESCRIPTION
        try:
            if not display_name or audio is None:
                raise MissingInput(CLONE_MISSING_INPUT)

            state = CloneVoiceState.STAGING
            async with self.assets.staged(audio) as staged:
                state = CloneVoiceState.REGISTERING
                logger.debug(f"CloneVoice {display_name!r}: registering {staged.file_name}")
                loop = asyncio.get_running_loop()
                sample = await loop.run_in_executor(None, self.assets.read, staged)
                voice_id = await self.provider.register_voice(
                    display_name=display_name,
                    description=description,
                    audio=sample,
                    file_name=staged.original_name,
                    content_type=staged.content_type,
                )

                state = CloneVoiceState.RECORDING
                voice = VoiceIdentity(
                    id=voice_id,
                    display_name=display_name,
                    description=description,
                    source_file_name=staged.file_name,
                )
                self.registry.add_voice(voice)
                state = CloneVoiceState.CLEANUP
        except MediVoiceError as e:
            self._log_failure("CloneVoice", state.value, e)
            return WorkflowResult[VoiceIdentity](failure=_failure(e, state.value, CLONE_FAILED))

        logger.info(f"Voice clone created for {display_name!r}: {voice.id}")
        return WorkflowResult[VoiceIdentity](value=voice)

    # ------------------------------------------------------------------
    # GenerateMessage
    # ------------------------------------------------------------------

    async def generate_message(
        self,
        voice_id: str | None,
        message_text: str | None,
        base_url: str,
        patient_name: str | None = None,
        settings: VoiceSettings | None = None,
    ) -> WorkflowResult[GeneratedMessage]:
        state = GenerateMessageState.VALIDATING
        patient_name = patient_name or DEFAULT_PATIENT_NAME
        try:
            if not voice_id or not message_text:
                raise MissingInput(GENERATE_MISSING_INPUT)

            state = GenerateMessageState.SYNTHESIZING
            logger.debug(f"GenerateMessage voice={voice_id}: synthesizing {len(message_text)} chars")
            audio = await self.provider.synthesize(
                voice_id=voice_id,
                text=message_text,
                settings=settings or self.default_settings,
            )

            state = GenerateMessageState.PERSISTING
            loop = asyncio.get_running_loop()
            persisted = await loop.run_in_executor(
                None, lambda: self.assets.persist(audio, AUDIO_EXTENSION, base_url)
            )

            # A failure past this point leaves the persisted file without a message record.
            state = GenerateMessageState.ENCODING
            code = self.encoder.encode(persisted.url)

            state = GenerateMessageState.RECORDING
            message = GeneratedMessage(
                id=self.registry.next_message_id(),
                voice_id=voice_id,
                voice_name=self.registry.find_voice_name(voice_id),
                message_text=message_text,
                patient_name=patient_name,
                audio_file_name=persisted.file_name,
                audio_url=persisted.url,
                scannable_code=code,
            )
            self.registry.add_message(message)
        except MediVoiceError as e:
            self._log_failure("GenerateMessage", state.value, e)
            return WorkflowResult[GeneratedMessage](
                failure=_failure(e, state.value, GENERATE_FAILED)
            )

        logger.info(f"Voice message {message.id} generated with voice {voice_id}")
        return WorkflowResult[GeneratedMessage](value=message)

    # ------------------------------------------------------------------
    # DeleteVoice
    # ------------------------------------------------------------------

    async def delete_voice(self, voice_id: str) -> WorkflowResult[str]:
        state = DeleteVoiceState.DELETING_UPSTREAM
        try:
            await self.provider.delete_voice(voice_id)
        except ProviderError as e:
            self._log_failure("DeleteVoice", state.value, e)
            return WorkflowResult[str](failure=_failure(e, state.value, DELETE_FAILED))

        state = DeleteVoiceState.REMOVING
        logger.debug(f"DeleteVoice {voice_id}: {state.value}")
        if not self.registry.remove_voice(voice_id):
            logger.info(f"Voice {voice_id} deleted upstream but was not in the registry")
        logger.info(f"Voice {voice_id} deleted")
        return WorkflowResult[str](value=voice_id)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_voices(self) -> list[VoiceIdentity]:
        return self.registry.list_voices()

    def list_messages(self) -> list[GeneratedMessage]:
        return self.registry.list_messages()

    @staticmethod
    def _log_failure(workflow: str, state: str, error: MediVoiceError) -> None:
        if isinstance(error, ProviderError):
            logger.error(
                f"{workflow} failed in {state}: provider status={error.status} body={error.body}"
            )
        elif error.kind in (FailureKind.MISSING_INPUT, FailureKind.INVALID_MEDIA_TYPE):
            logger.warning(f"{workflow} rejected in {state}: {error.detail}")
        else:
            logger.error(f"{workflow} failed in {state}: {error.detail}")
