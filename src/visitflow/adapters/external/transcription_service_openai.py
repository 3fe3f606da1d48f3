"""
OpenAI-based transcription + extraction service.

Speech-to-text goes through Whisper; a chat model then turns the transcript
into candidate form fields as JSON.
"""

import json
import logging
import re
from typing import Any, Dict, Optional, Tuple

from openai import AsyncOpenAI, OpenAIError

from visitflow.adapters.external.extraction_prompts import SYSTEM_PROMPTS, build_prompt
from visitflow.application.dto.voice_dto import AudioArtifact, VoiceTranscript
from visitflow.application.ports.services.transcription_service import (
    TranscriptionExtractionService,
)
from visitflow.core.config import Settings, get_settings
from visitflow.core.exceptions import ConfigurationError, ExtractionFailedError
from visitflow.domain.enums.voice import ExtractionContext

logger = logging.getLogger("visitflow")

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_extraction(content: Optional[str]) -> Tuple[Dict[str, Any], float]:
    """Parse the model's JSON reply into (fields, confidence).

    An unparseable reply yields no fields and zero confidence rather than an
    error: the transcript alone is still useful to the operator.
    """
    text = _FENCE.sub("", (content or "").strip()).strip()
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        logger.warning("Extraction reply was not valid JSON; returning empty fields")
        return {}, 0.0
    if not isinstance(data, dict):
        return {}, 0.0

    confidence = data.pop("confidence", 0.0)
    try:
        confidence = float(confidence) if confidence is not None else 0.0
    except (TypeError, ValueError):
        confidence = 0.0

    symptoms = data.pop("symptoms", None)
    if isinstance(symptoms, list):
        symptoms = ", ".join(str(item) for item in symptoms if item)
    if symptoms:
        data["symptoms_description"] = symptoms
    return data, confidence


class OpenAITranscriptionExtractionService(TranscriptionExtractionService):
    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None) -> None:
        self._settings = settings or get_settings()
        if client is None:
            api_key = self._settings.openai.api_key
            if not api_key:
                raise ConfigurationError("OPENAI_API_KEY is not set")
            client = AsyncOpenAI(api_key=api_key, timeout=self._settings.openai.timeout_seconds)
        self._client = client

    async def transcribe_and_extract(
        self,
        artifact: AudioArtifact,
        context: ExtractionContext,
    ) -> VoiceTranscript:
        transcript = await self._transcribe(artifact)
        if not transcript:
            return VoiceTranscript(transcript="", confidence=0.0, context=context)

        fields, confidence = await self._extract(transcript, context)
        logger.info(
            "Extraction complete context=%s fields=%d confidence=%.2f",
            context.value,
            len(fields),
            confidence,
        )
        return VoiceTranscript(
            transcript=transcript,
            confidence=confidence,
            extracted_fields=fields,
            context=context,
        )

    async def _transcribe(self, artifact: AudioArtifact) -> str:
        voice = self._settings.voice
        filename = f"{artifact.filename}.{artifact.extension}"
        try:
            resp = await self._client.audio.transcriptions.create(
                model=voice.transcription_model,
                file=(filename, artifact.data, artifact.mime_type.split(";")[0]),
                language=voice.language or "en",
            )
        except OpenAIError as e:
            logger.error("Whisper transcription failed: %s", e)
            raise ExtractionFailedError(f"Transcription failed: {e}")
        return (resp.text or "").strip()

    async def _extract(self, transcript: str, context: ExtractionContext) -> Tuple[Dict[str, Any], float]:
        voice = self._settings.voice
        try:
            response = await self._client.chat.completions.create(
                model=voice.extraction_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPTS[context]},
                    {"role": "user", "content": build_prompt(context, transcript)},
                ],
                temperature=voice.extraction_temperature,
                max_tokens=1000,
            )
        except OpenAIError as e:
            logger.error("Field extraction failed: %s", e)
            raise ExtractionFailedError(f"Extraction failed: {e}")
        content = response.choices[0].message.content if response.choices else None
        return parse_extraction(content)
