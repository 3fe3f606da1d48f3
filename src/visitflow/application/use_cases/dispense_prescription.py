"""Dispense Prescription use case: pharmacy completes the visit."""

import logging
from datetime import datetime
from typing import Optional

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.application.services.action_tracker import ActionTracker
from visitflow.application.use_cases.visit_lookup import load_visit
from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import VisitEvent, VisitStatus
from visitflow.domain.errors import AlreadyDispensedError, InvalidTransitionError
from visitflow.domain.state_machine import VisitStateMachine

logger = logging.getLogger("visitflow")


class DispensePrescriptionRequest:
    """Request for dispensing a visit's prescription."""

    def __init__(
        self,
        visit_id: str,
        dispensed_by: Optional[str] = None,
        pharmacist_notes: Optional[str] = None,
    ):
        self.visit_id = visit_id
        self.dispensed_by = dispensed_by
        self.pharmacist_notes = pharmacist_notes


class DispensePrescriptionUseCase:
    """PENDING_PHARMACY -> COMPLETED. A second dispense is refused."""

    def __init__(
        self,
        visit_repository: VisitRepository,
        state_machine: Optional[VisitStateMachine] = None,
        action_tracker: Optional[ActionTracker] = None,
    ):
        self._visit_repository = visit_repository
        self._state_machine = state_machine or VisitStateMachine()
        self._action_tracker = action_tracker or ActionTracker()

    async def execute(self, request: DispensePrescriptionRequest) -> Visit:
        async with self._action_tracker.track(request.visit_id, "dispense"):
            visit = await load_visit(self._visit_repository, request.visit_id)
            if visit.dispensed_at is not None:
                raise AlreadyDispensedError(request.visit_id)

            now = datetime.utcnow()
            self._state_machine.fire(visit, VisitEvent.DISPENSE, at=now)
            visit.dispensed_at = now
            visit.dispensed_by = request.dispensed_by
            notes = (request.pharmacist_notes or "").strip()
            visit.pharmacist_notes = notes or None

            try:
                saved = await self._visit_repository.update_if_status(
                    visit, VisitStatus.PENDING_PHARMACY
                )
            except InvalidTransitionError:
                logger.warning("Dispense lost race visit_id=%s", request.visit_id)
                raise

            logger.info(
                "Prescription dispensed visit_id=%s dispensed_by=%s",
                saved.visit_id.value,
                saved.dispensed_by,
            )
            return saved
