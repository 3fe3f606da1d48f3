"""Advance Visit use case: queue, consultation, hand-off and cancellation events."""

import logging
from typing import Optional

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.application.services.action_tracker import ActionTracker
from visitflow.application.use_cases.visit_lookup import load_visit
from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import VisitEvent
from visitflow.domain.state_machine import VisitStateMachine

logger = logging.getLogger("visitflow")

# Events with their own workflow (vitals, assignment, dispense) are not fired here
ADVANCE_EVENTS = frozenset(
    {
        VisitEvent.ENTER_QUEUE,
        VisitEvent.START_CONSULTATION,
        VisitEvent.SEND_TO_PHARMACY,
        VisitEvent.REFER_OUT,
        VisitEvent.RESOLVE_REFERRAL,
        VisitEvent.CANCEL,
    }
)


class AdvanceVisitRequest:
    """Request for firing a lifecycle event on a visit."""

    def __init__(self, visit_id: str, event: str, performed_by: Optional[str] = None):
        self.visit_id = visit_id
        self.event = event
        self.performed_by = performed_by


class AdvanceVisitUseCase:
    """Fires one lifecycle event and persists it with a status compare-and-set."""

    def __init__(
        self,
        visit_repository: VisitRepository,
        state_machine: Optional[VisitStateMachine] = None,
        action_tracker: Optional[ActionTracker] = None,
    ):
        self._visit_repository = visit_repository
        self._state_machine = state_machine or VisitStateMachine()
        self._action_tracker = action_tracker or ActionTracker()

    @staticmethod
    def parse_event(event: str) -> VisitEvent:
        try:
            parsed = VisitEvent(str(event).strip().lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"Unknown visit event: {event}")
        if parsed not in ADVANCE_EVENTS:
            raise ValueError(f"Event '{parsed.value}' has a dedicated endpoint")
        return parsed

    async def execute(self, request: AdvanceVisitRequest) -> Visit:
        event = self.parse_event(request.event)
        async with self._action_tracker.track(request.visit_id, event.value):
            visit = await load_visit(self._visit_repository, request.visit_id)
            expected_status = visit.status
            self._state_machine.fire(visit, event)
            saved = await self._visit_repository.update_if_status(visit, expected_status)
            logger.info(
                "Visit advanced visit_id=%s event=%s status=%s by=%s",
                saved.visit_id.value,
                event.value,
                saved.status.value,
                request.performed_by,
            )
            return saved
