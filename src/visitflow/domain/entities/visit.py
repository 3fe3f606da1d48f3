"""Visit domain entity representing one patient's episode of care.

Status is only ever changed by :class:`visitflow.domain.state_machine.VisitStateMachine`.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..enums.workflow import Priority, RecordedVia, VisitEvent, VisitStatus
from ..errors import VitalsValidationError
from ..value_objects.visit_id import VisitId
from ..value_objects.visit_number import VisitNumber


@dataclass
class VitalsRecord:
    """Vitals and symptom capture for a visit. Overwritten on repeated intake."""

    blood_pressure_systolic: Optional[int] = None
    blood_pressure_diastolic: Optional[int] = None
    pulse_rate: Optional[int] = None
    temperature: Optional[float] = None  # Celsius
    respiratory_rate: Optional[int] = None
    oxygen_saturation: Optional[float] = None
    weight: Optional[float] = None  # kg
    height: Optional[float] = None  # cm
    pain_level: Optional[int] = None
    pain_location: Optional[str] = None
    symptoms_description: Optional[str] = None
    symptom_duration: Optional[str] = None
    recorded_via: RecordedVia = RecordedVia.MANUAL
    recorded_by: Optional[str] = None
    recorded_at: datetime = field(default_factory=datetime.utcnow)

    NUMERIC_FIELDS = (
        "blood_pressure_systolic",
        "blood_pressure_diastolic",
        "pulse_rate",
        "temperature",
        "respiratory_rate",
        "oxygen_saturation",
        "weight",
        "height",
        "pain_level",
    )

    def __post_init__(self) -> None:
        if not isinstance(self.recorded_via, RecordedVia):
            try:
                self.recorded_via = RecordedVia(str(self.recorded_via).upper())
            except ValueError:
                raise VitalsValidationError("recorded_via", self.recorded_via)
        self.validate()

    def validate(self) -> None:
        """Reject values that cannot be physiological readings."""
        for name in self.NUMERIC_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise VitalsValidationError(name, value)
            if value < 0:
                raise VitalsValidationError(name, value)
        if self.oxygen_saturation is not None and self.oxygen_saturation > 100:
            raise VitalsValidationError("oxygen_saturation", self.oxygen_saturation)
        if self.pain_level is not None and not 0 <= self.pain_level <= 10:
            raise VitalsValidationError("pain_level", self.pain_level)

    @classmethod
    def field_names(cls) -> List[str]:
        """Names of the clinical form fields (excludes capture metadata)."""
        skip = {"recorded_via", "recorded_by", "recorded_at"}
        return [f.name for f in fields(cls) if f.name not in skip]

    def to_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in self.field_names()}
        data["recorded_via"] = self.recorded_via.value
        data["recorded_by"] = self.recorded_by
        data["recorded_at"] = self.recorded_at.isoformat()
        return data


@dataclass(frozen=True)
class StatusChange:
    """One applied transition."""

    from_status: VisitStatus
    event: VisitEvent
    to_status: VisitStatus
    at: datetime


@dataclass
class Visit:
    """Visit (appointment) domain entity."""

    visit_id: VisitId
    visit_number: VisitNumber
    patient_id: str
    chief_complaint: str
    priority: Priority = Priority.NORMAL
    status: VisitStatus = VisitStatus.CREATED
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None

    assigned_doctor_id: Optional[str] = None
    assigned_by: Optional[str] = None
    vitals: Optional[VitalsRecord] = None

    # Lifecycle timestamps
    vitals_recorded_at: Optional[datetime] = None
    doctor_assigned_at: Optional[datetime] = None
    queued_at: Optional[datetime] = None
    consultation_started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    # Pharmacy hand-off
    dispensed_at: Optional[datetime] = None
    dispensed_by: Optional[str] = None
    pharmacist_notes: Optional[str] = None

    status_history: List[StatusChange] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Normalize free text and enum inputs."""
        self.chief_complaint = (self.chief_complaint or "").strip()
        if not isinstance(self.priority, Priority):
            self.priority = Priority(str(self.priority).upper())
        if not isinstance(self.status, VisitStatus):
            self.status = VisitStatus(str(self.status).upper())

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    def waiting_minutes(self, now: Optional[datetime] = None) -> int:
        """Whole minutes since arrival."""
        now = now or datetime.utcnow()
        elapsed = (now - self.created_at).total_seconds()
        return max(0, int(elapsed // 60))

    def get_summary(self) -> Dict[str, Any]:
        """Serializable view of the visit."""
        return {
            "visit_id": self.visit_id.value,
            "visit_number": self.visit_number.value,
            "patient_id": self.patient_id,
            "chief_complaint": self.chief_complaint,
            "priority": self.priority.value,
            "status": self.status.value,
            "assigned_doctor_id": self.assigned_doctor_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "vitals": self.vitals.to_dict() if self.vitals else None,
            "dispensed_at": self.dispensed_at.isoformat() if self.dispensed_at else None,
            "status_history": [
                {
                    "from_status": change.from_status.value,
                    "event": change.event.value,
                    "to_status": change.to_status.value,
                    "at": change.at.isoformat(),
                }
                for change in self.status_history
            ],
        }
