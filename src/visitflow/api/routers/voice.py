"""Voice-assisted form filling endpoints."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile

from ...application.dto.voice_dto import AudioArtifact
from ...application.use_cases.process_voice_intake import (
    ProcessVoiceIntakeRequest,
    ProcessVoiceIntakeUseCase,
)
from ...core.exceptions import VoiceDisabledError
from ..deps import MergeEngineDep, SettingsDep, TranscriptionServiceDep
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.voice import VoiceIntakeResponse, VoiceStatusResponse
from ..utils.responses import ok

router = APIRouter(prefix="/voice", tags=["voice"])
logger = logging.getLogger("visitflow")


@router.get("/status", response_model=ApiResponse[VoiceStatusResponse])
async def voice_status(request: Request, settings: SettingsDep):
    """Lets clients hide the microphone button when extraction is unavailable."""
    if settings.voice_ai_available:
        message = "Voice AI features are available"
    elif not settings.voice.enabled:
        message = "Voice AI features are disabled. Use manual form entry."
    else:
        message = "OpenAI API key is not configured. Use manual form entry."
    return ok(
        request,
        data=VoiceStatusResponse(ai_enabled=settings.voice_ai_available, message=message),
    )


@router.post(
    "/intake",
    response_model=ApiResponse[VoiceIntakeResponse],
    responses={
        422: {"model": ErrorResponse, "description": "Invalid audio or form"},
        502: {"model": ErrorResponse, "description": "Transcription or extraction failed"},
        503: {"model": ErrorResponse, "description": "Voice AI not configured"},
    },
)
async def voice_intake(
    request: Request,
    settings: SettingsDep,
    service: TranscriptionServiceDep,
    merge_engine: MergeEngineDep,
    audio: UploadFile = File(..., description="Recorded audio"),
    form: str = Form("{}", description="Current form state as a JSON object"),
    context: str = Form("intake", description="intake or registration"),
    duration_seconds: Optional[int] = Form(None, ge=0),
):
    """
    Transcribe a recording, extract fields and merge them into ``form``.

    Only fields the extractor populated overwrite the submitted form; the
    merged form is returned for review before saving.
    """
    if not settings.voice_ai_available or service is None:
        raise VoiceDisabledError()

    try:
        current_form = json.loads(form or "{}")
    except ValueError:
        raise ValueError("form must be a JSON object")
    if not isinstance(current_form, dict):
        raise ValueError("form must be a JSON object")

    max_bytes = settings.voice.max_audio_mb * 1024 * 1024
    # One byte past the cap is enough to tell the upload is too large
    data = await audio.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValueError(f"Audio file too large (max {settings.voice.max_audio_mb} MB)")
    artifact = AudioArtifact(
        data=data,
        mime_type=audio.content_type or "audio/webm",
        duration_seconds=duration_seconds or 0,
        filename=(audio.filename or "recording").rsplit(".", 1)[0],
    )

    use_case = ProcessVoiceIntakeUseCase(service, settings, merge_engine)
    result = await use_case.execute(
        ProcessVoiceIntakeRequest(artifact=artifact, form=current_form, context=context)
    )
    return ok(
        request,
        data=VoiceIntakeResponse(
            transcript=result.transcript,
            confidence=result.confidence,
            form=result.form,
            applied_fields=result.applied_fields,
            field_confidence=result.field_confidence,
            audio_duration_seconds=duration_seconds,
        ),
        message="Fields extracted" if result.changed else "No fields extracted",
    )
