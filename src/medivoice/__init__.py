"""
MediVoice – clone a clinician's voice and deliver spoken instructions.

This top-level package exposes the core records shared by the asset store,
the provider client, the registry and the orchestrator.
"""

from .models import (
    GeneratedMessage,
    VoiceIdentity,
    VoiceSettings,
    WorkflowFailure,
    WorkflowResult,
)

__all__ = [
    "GeneratedMessage",
    "VoiceIdentity",
    "VoiceSettings",
    "WorkflowFailure",
    "WorkflowResult",
]
