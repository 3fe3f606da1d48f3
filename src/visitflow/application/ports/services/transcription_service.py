"""
Transcription + structured extraction service interface.
"""

from abc import ABC, abstractmethod

from visitflow.application.dto.voice_dto import AudioArtifact, VoiceTranscript
from visitflow.domain.enums.voice import ExtractionContext


class TranscriptionExtractionService(ABC):
    """Abstract collaborator turning recorded audio into candidate form fields."""

    @abstractmethod
    async def transcribe_and_extract(
        self,
        artifact: AudioArtifact,
        context: ExtractionContext,
    ) -> VoiceTranscript:
        """
        Transcribe audio and extract structured fields.

        Args:
            artifact: Completed recording
            context: Whether fields target the intake (vitals) or registration form

        Returns:
            VoiceTranscript with transcript text, overall confidence and extracted fields

        Raises:
            ExtractionFailedError: the service could not produce a result
        """
        pass
