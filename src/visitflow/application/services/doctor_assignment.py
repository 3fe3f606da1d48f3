"""Doctor assignment coordination."""

import logging
from datetime import datetime
from typing import Optional

from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import VisitEvent, VisitStatus
from visitflow.domain.errors import IllegalAssignmentError
from visitflow.domain.state_machine import VisitStateMachine

logger = logging.getLogger("visitflow")


class DoctorAssignmentCoordinator:
    """
    Sets the assigned doctor and fires the ASSIGNED transition as one unit.

    Only legal from VITALS_RECORDED. Reassignment is not supported.
    """

    def __init__(self, state_machine: Optional[VisitStateMachine] = None) -> None:
        self._state_machine = state_machine or VisitStateMachine()

    def can_assign(self, visit: Visit) -> bool:
        return visit.status is VisitStatus.VITALS_RECORDED

    def assign(
        self,
        visit: Visit,
        doctor_id: str,
        assigned_by: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> Visit:
        doctor_id = (doctor_id or "").strip()
        if not doctor_id:
            raise ValueError("doctor_id is required")

        if not self.can_assign(visit):
            logger.warning(
                "Rejected doctor assignment visit_id=%s status=%s doctor_id=%s",
                visit.visit_id.value,
                visit.status.value,
                doctor_id,
            )
            raise IllegalAssignmentError(visit.visit_id.value, visit.status.value)

        # Status is checked above, so fire cannot reject here
        self._state_machine.fire(visit, VisitEvent.ASSIGN_DOCTOR, at=at)
        visit.assigned_doctor_id = doctor_id
        visit.assigned_by = assigned_by
        return visit
