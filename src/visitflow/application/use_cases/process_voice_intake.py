"""Process Voice Intake use case: transcribe, extract and merge into a form."""

from typing import Any, Dict, Optional

from visitflow.application.dto.voice_dto import AudioArtifact, MergeResult
from visitflow.application.ports.services.transcription_service import (
    TranscriptionExtractionService,
)
from visitflow.application.services.extraction_merge import ExtractionMergeEngine
from visitflow.core.config import Settings
from visitflow.core.exceptions import ExtractionFailedError, VoiceDisabledError
from visitflow.core.structured_logger import StructuredLogger
from visitflow.domain.enums.voice import ExtractionContext

structured_logger = StructuredLogger("visitflow.voice")


class ProcessVoiceIntakeRequest:
    """Request for one voice-assisted form fill."""

    def __init__(
        self,
        artifact: AudioArtifact,
        form: Optional[Dict[str, Any]] = None,
        context: str = ExtractionContext.INTAKE.value,
    ):
        self.artifact = artifact
        self.form = form or {}
        self.context = context


class ProcessVoiceIntakeUseCase:
    """
    Sends a recording through transcription + extraction and merges the result.

    On any failure the caller's form is returned to it untouched (the error
    propagates and nothing has been merged).
    """

    def __init__(
        self,
        transcription_service: Optional[TranscriptionExtractionService],
        settings: Settings,
        merge_engine: Optional[ExtractionMergeEngine] = None,
    ):
        self._transcription_service = transcription_service
        self._settings = settings
        self._merge_engine = merge_engine or ExtractionMergeEngine()

    async def execute(self, request: ProcessVoiceIntakeRequest) -> MergeResult:
        if not self._settings.voice.enabled or self._transcription_service is None:
            raise VoiceDisabledError()

        try:
            context = ExtractionContext(str(request.context).lower())
        except ValueError:
            raise ValueError("context must be 'intake' or 'registration'")

        artifact = request.artifact
        if artifact.size_bytes == 0:
            raise ValueError("Audio recording is empty")
        max_bytes = self._settings.voice.max_audio_mb * 1024 * 1024
        if artifact.size_bytes > max_bytes:
            raise ValueError(
                f"Audio file too large: {artifact.size_bytes} bytes "
                f"(max {self._settings.voice.max_audio_mb} MB)"
            )

        try:
            transcript = await self._transcription_service.transcribe_and_extract(
                artifact, context
            )
        except ExtractionFailedError as exc:
            structured_logger.error(
                "Voice extraction failed",
                context=context.value,
                error_code=exc.error_code,
                error=exc.message,
                exc_info=True,
            )
            raise
        except Exception as exc:
            structured_logger.error(
                "Voice extraction failed",
                context=context.value,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise ExtractionFailedError(str(exc) or type(exc).__name__) from exc

        result = self._merge_engine.merge_transcript(request.form, transcript)
        structured_logger.info(
            "Voice extraction merged",
            context=context.value,
            audio_bytes=artifact.size_bytes,
            mime_type=artifact.mime_type,
            confidence=result.confidence,
            applied_fields=result.applied_fields,
        )
        return result
