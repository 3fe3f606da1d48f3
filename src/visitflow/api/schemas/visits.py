"""
Visit-related API schemas.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, validator

from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import Priority, RecordedVia


class CreateVisitRequest(BaseModel):
    """Check-in payload."""

    patient_id: str = Field(..., min_length=1, max_length=100, description="Patient ID")
    chief_complaint: str = Field(..., min_length=1, max_length=500, description="Reason for visit")
    priority: Priority = Field(Priority.NORMAL, description="NORMAL, URGENT or EMERGENCY")

    @validator("patient_id", "chief_complaint")
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @validator("priority", pre=True)
    def normalize_priority(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class VitalsRequest(BaseModel):
    """Vitals capture payload. Every clinical field is optional."""

    blood_pressure_systolic: Optional[int] = Field(None, ge=0, le=300)
    blood_pressure_diastolic: Optional[int] = Field(None, ge=0, le=250)
    pulse_rate: Optional[int] = Field(None, ge=0, le=300)
    temperature: Optional[float] = Field(None, ge=0, le=50, description="Celsius")
    respiratory_rate: Optional[int] = Field(None, ge=0, le=100)
    oxygen_saturation: Optional[float] = Field(None, ge=0, le=100)
    weight: Optional[float] = Field(None, ge=0, description="kg")
    height: Optional[float] = Field(None, ge=0, description="cm")
    pain_level: Optional[int] = Field(None, ge=0, le=10)
    pain_location: Optional[str] = Field(None, max_length=200)
    symptoms_description: Optional[str] = Field(None, max_length=2000)
    symptom_duration: Optional[str] = Field(None, max_length=100)
    recorded_via: RecordedVia = Field(RecordedVia.MANUAL, description="MANUAL or VOICE")

    @validator("recorded_via", pre=True)
    def normalize_recorded_via(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    def vitals_fields(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"recorded_via"})
        return {name: value for name, value in data.items() if value is not None}


class AssignDoctorRequest(BaseModel):
    doctor_id: str = Field(..., min_length=1, max_length=100, description="Doctor to assign")

    @validator("doctor_id")
    def validate_doctor_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("doctor_id cannot be empty")
        return v.strip()


class DispenseRequest(BaseModel):
    pharmacist_notes: Optional[str] = Field(None, max_length=2000)


class StatusChangeSchema(BaseModel):
    from_status: str
    event: str
    to_status: str
    at: str


class VisitResponse(BaseModel):
    """Serialized visit."""

    visit_id: str
    visit_number: str
    patient_id: str
    chief_complaint: str
    priority: str
    status: str
    assigned_doctor_id: Optional[str] = None
    created_at: str
    updated_at: str
    vitals: Optional[Dict[str, Any]] = None
    dispensed_at: Optional[str] = None
    allowed_events: List[str] = Field(default_factory=list)
    status_history: List[StatusChangeSchema] = Field(default_factory=list)

    @classmethod
    def from_visit(cls, visit: Visit, allowed_events: Optional[List[str]] = None) -> "VisitResponse":
        return cls(**visit.get_summary(), allowed_events=sorted(allowed_events or []))


class QueueEntrySchema(BaseModel):
    position: int
    waiting_minutes: int
    visit_id: str
    visit_number: str
    patient_id: str
    chief_complaint: str
    priority: str
    status: str
    assigned_doctor_id: Optional[str] = None
    created_at: str


class QueueCounts(BaseModel):
    total: int
    emergency: int
    urgent: int
    normal: int


class QueueResponse(BaseModel):
    generated_at: str
    counts: QueueCounts
    entries: List[QueueEntrySchema]
