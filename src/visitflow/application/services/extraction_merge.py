"""
Sparse, last-writer-wins merge of extracted fields into a clinical form.

Only fields the extractor actually populated are written; everything else the
operator typed stays as it is. Confidence is carried along for review and
never gates the merge.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from visitflow.application.dto.voice_dto import MergeResult, VoiceTranscript

logger = logging.getLogger("visitflow")

# Canonical snake_case field -> other names extractors and forms use for it
FIELD_SYNONYMS: Dict[str, List[str]] = {
    "blood_pressure_systolic": ["bp_systolic", "systolic"],
    "blood_pressure_diastolic": ["bp_diastolic", "diastolic"],
    "pulse_rate": ["pulse", "heart_rate"],
    "oxygen_saturation": ["spo2", "o2_saturation"],
    "respiratory_rate": ["resp_rate"],
    "symptoms_description": ["symptoms"],
    "first_name": ["firstname", "given_name"],
    "last_name": ["lastname", "surname", "family_name"],
    "phone_number": ["phone", "mobile"],
    "date_of_birth": ["dob", "birth_date"],
}

_SYNONYM_TO_CANONICAL = {
    alias: canonical for canonical, aliases in FIELD_SYNONYMS.items() for alias in aliases
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


def to_camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def is_empty_value(value: Any) -> bool:
    """None, blank strings and empty collections count as "not extracted"."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


class ExtractionMergeEngine:
    """Merges candidate extractions into form state."""

    def resolve_field(self, name: str, form: Mapping[str, Any]) -> str:
        """Form key a candidate field should land on.

        Prefers a key already present in the form under any known spelling;
        falls back to the candidate's own name.
        """
        if name in form:
            return name
        snake = to_snake_case(name)
        canonical = _SYNONYM_TO_CANONICAL.get(snake, snake)
        family = [canonical, *FIELD_SYNONYMS.get(canonical, [])]
        for option in family:
            for spelling in (option, to_camel_case(option)):
                if spelling in form:
                    return spelling
        return name

    def merge(
        self,
        form: Mapping[str, Any],
        candidate: Optional[Mapping[str, Any]],
        confidence: float = 0.0,
        field_confidence: Optional[Dict[str, float]] = None,
    ) -> MergeResult:
        """Return a new form with every non-empty candidate field assigned.

        The input form is not mutated. Merging the same candidate twice gives
        the same form as merging it once.
        """
        merged = dict(form)
        applied: List[str] = []
        for name, value in (candidate or {}).items():
            if is_empty_value(value):
                continue
            key = self.resolve_field(name, merged)
            merged[key] = value
            applied.append(key)

        logger.debug(
            "Merged extraction applied=%s skipped=%d confidence=%.2f",
            applied,
            len(candidate or {}) - len(applied),
            confidence,
        )
        return MergeResult(
            form=merged,
            applied_fields=applied,
            confidence=confidence,
            field_confidence=field_confidence,
        )

    def merge_transcript(self, form: Mapping[str, Any], transcript: VoiceTranscript) -> MergeResult:
        result = self.merge(
            form,
            transcript.extracted_fields,
            confidence=transcript.confidence,
            field_confidence=transcript.field_confidence,
        )
        result.transcript = transcript.transcript
        return result
