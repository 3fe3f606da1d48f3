"""
Voice intake API schemas.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class VoiceStatusResponse(BaseModel):
    ai_enabled: bool = Field(..., description="Whether voice extraction can be used")
    message: str


class VoiceIntakeResponse(BaseModel):
    transcript: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    form: Dict[str, Any] = Field(..., description="Form state after merging extracted fields")
    applied_fields: List[str]
    field_confidence: Optional[Dict[str, float]] = None
    audio_duration_seconds: Optional[int] = None
