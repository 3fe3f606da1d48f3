"""
Visit lifecycle state machine.

The machine only validates and applies transitions; the owning workflow
(vitals save, doctor assignment, dispense action, ...) decides when to fire.
"""

import logging
from datetime import datetime
from typing import Dict, FrozenSet, Optional, Tuple

from .entities.visit import StatusChange, Visit
from .enums.workflow import VisitEvent, VisitStatus
from .errors import InvalidTransitionError

logger = logging.getLogger("visitflow")


def _build_transitions() -> Dict[Tuple[VisitStatus, VisitEvent], VisitStatus]:
    table = {
        (VisitStatus.CREATED, VisitEvent.RECORD_VITALS): VisitStatus.VITALS_RECORDED,
        (VisitStatus.VITALS_RECORDED, VisitEvent.UPDATE_VITALS): VisitStatus.VITALS_RECORDED,
        (VisitStatus.VITALS_RECORDED, VisitEvent.ASSIGN_DOCTOR): VisitStatus.ASSIGNED,
        (VisitStatus.ASSIGNED, VisitEvent.ENTER_QUEUE): VisitStatus.IN_QUEUE,
        (VisitStatus.IN_QUEUE, VisitEvent.START_CONSULTATION): VisitStatus.IN_CONSULTATION,
        (VisitStatus.IN_CONSULTATION, VisitEvent.SEND_TO_PHARMACY): VisitStatus.PENDING_PHARMACY,
        (VisitStatus.IN_CONSULTATION, VisitEvent.REFER_OUT): VisitStatus.PENDING_REFERRAL,
        (VisitStatus.PENDING_PHARMACY, VisitEvent.DISPENSE): VisitStatus.COMPLETED,
        (VisitStatus.PENDING_REFERRAL, VisitEvent.RESOLVE_REFERRAL): VisitStatus.COMPLETED,
    }
    for status in VisitStatus:
        if not status.is_terminal:
            table[(status, VisitEvent.CANCEL)] = VisitStatus.CANCELLED
    return table


TRANSITIONS: Dict[Tuple[VisitStatus, VisitEvent], VisitStatus] = _build_transitions()

# Every non-terminal status must have a way forward, terminal ones none.
for _status in VisitStatus:
    _has_exit = any(src is _status for src, _ in TRANSITIONS)
    if _has_exit == _status.is_terminal:
        raise RuntimeError(f"Transition table is not exhaustive for {_status.value}")


class VisitStateMachine:
    """Validates and applies visit status transitions."""

    def __init__(self, transitions: Optional[Dict[Tuple[VisitStatus, VisitEvent], VisitStatus]] = None) -> None:
        self._transitions = transitions or TRANSITIONS

    def next_status(self, status: VisitStatus, event: VisitEvent) -> Optional[VisitStatus]:
        """Target status for ``event`` from ``status``, or None if illegal."""
        return self._transitions.get((status, event))

    def can_fire(self, status: VisitStatus, event: VisitEvent) -> bool:
        return (status, event) in self._transitions

    def allowed_events(self, status: VisitStatus) -> FrozenSet[VisitEvent]:
        return frozenset(evt for (src, evt) in self._transitions if src is status)

    def fire(self, visit: Visit, event: VisitEvent, at: Optional[datetime] = None) -> VisitStatus:
        """Apply ``event`` to ``visit``.

        Raises InvalidTransitionError and leaves the visit untouched when the
        event is not legal for the current status.
        """
        from_status = visit.status
        to_status = self.next_status(from_status, event)
        if to_status is None:
            logger.warning(
                "Rejected transition visit_id=%s from=%s event=%s",
                visit.visit_id.value,
                from_status.value,
                event.value,
            )
            raise InvalidTransitionError(visit.visit_id.value, from_status.value, event.value)

        now = at or datetime.utcnow()
        timestamp_field = _EVENT_TIMESTAMPS.get(event)
        if timestamp_field:
            setattr(visit, timestamp_field, now)
        visit.status = to_status
        visit.status_history.append(StatusChange(from_status, event, to_status, now))
        visit.updated_at = now

        logger.info(
            "Visit transition visit_id=%s from=%s event=%s to=%s",
            visit.visit_id.value,
            from_status.value,
            event.value,
            to_status.value,
        )
        return to_status


_EVENT_TIMESTAMPS = {
    VisitEvent.RECORD_VITALS: "vitals_recorded_at",
    VisitEvent.UPDATE_VITALS: "vitals_recorded_at",
    VisitEvent.ASSIGN_DOCTOR: "doctor_assigned_at",
    VisitEvent.ENTER_QUEUE: "queued_at",
    VisitEvent.START_CONSULTATION: "consultation_started_at",
    VisitEvent.DISPENSE: "completed_at",
    VisitEvent.RESOLVE_REFERRAL: "completed_at",
    VisitEvent.CANCEL: "cancelled_at",
}
