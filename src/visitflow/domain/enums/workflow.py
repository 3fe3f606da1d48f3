"""
Visit lifecycle enums: statuses, events, priority tiers and intake source.
"""

from enum import Enum


class VisitStatus(str, Enum):
    """Closed set of visit statuses."""

    CREATED = "CREATED"
    VITALS_RECORDED = "VITALS_RECORDED"
    ASSIGNED = "ASSIGNED"
    IN_QUEUE = "IN_QUEUE"
    IN_CONSULTATION = "IN_CONSULTATION"
    PENDING_PHARMACY = "PENDING_PHARMACY"
    PENDING_REFERRAL = "PENDING_REFERRAL"

    # Terminal statuses
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (VisitStatus.COMPLETED, VisitStatus.CANCELLED)

    @property
    def is_active(self) -> bool:
        """Active visits are the ones the queue considers."""
        return not self.is_terminal


class VisitEvent(str, Enum):
    """Events that drive a visit through its lifecycle."""

    RECORD_VITALS = "record_vitals"
    UPDATE_VITALS = "update_vitals"
    ASSIGN_DOCTOR = "assign_doctor"
    ENTER_QUEUE = "enter_queue"
    START_CONSULTATION = "start_consultation"
    SEND_TO_PHARMACY = "send_to_pharmacy"
    REFER_OUT = "refer_out"
    DISPENSE = "dispense"
    RESOLVE_REFERRAL = "resolve_referral"
    CANCEL = "cancel"


class Priority(str, Enum):
    """Priority tiers; a higher rank is seen first."""

    NORMAL = "NORMAL"
    URGENT = "URGENT"
    EMERGENCY = "EMERGENCY"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.NORMAL: 1,
    Priority.URGENT: 2,
    Priority.EMERGENCY: 3,
}


class RecordedVia(str, Enum):
    """How vitals were captured. Metadata only."""

    MANUAL = "MANUAL"
    VOICE = "VOICE"
