"""Data transfer objects for voice capture and extraction."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from visitflow.domain.enums.voice import ExtractionContext


@dataclass(frozen=True)
class AudioArtifact:
    """A completed recording."""

    data: bytes
    mime_type: str
    duration_seconds: int = 0
    filename: str = "recording"

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        subtype = self.mime_type.split(";")[0].split("/")[-1]
        return {"mpeg": "mp3", "x-wav": "wav"}.get(subtype, subtype)


@dataclass
class VoiceTranscript:
    """Transcription + extraction result. Ephemeral: consumed by the merge engine."""

    transcript: str
    confidence: float
    extracted_fields: Dict[str, Any] = field(default_factory=dict)
    field_confidence: Optional[Dict[str, float]] = None
    context: ExtractionContext = ExtractionContext.INTAKE

    def __post_init__(self) -> None:
        if self.confidence is None:
            self.confidence = 0.0
        self.confidence = min(1.0, max(0.0, float(self.confidence)))


@dataclass
class MergeResult:
    """Outcome of merging one extraction into a form."""

    form: Dict[str, Any]
    applied_fields: List[str]
    confidence: float
    field_confidence: Optional[Dict[str, float]] = None
    transcript: str = ""

    @property
    def changed(self) -> bool:
        return bool(self.applied_fields)
