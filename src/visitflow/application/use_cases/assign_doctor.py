"""Assign Doctor use case."""

import logging
from typing import Optional

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.application.services.action_tracker import ActionTracker
from visitflow.application.services.doctor_assignment import DoctorAssignmentCoordinator
from visitflow.application.use_cases.visit_lookup import load_visit
from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import VisitStatus
from visitflow.domain.errors import IllegalAssignmentError, InvalidTransitionError

logger = logging.getLogger("visitflow")


class AssignDoctorRequest:
    """Request for assigning a doctor to a visit."""

    def __init__(self, visit_id: str, doctor_id: str, assigned_by: Optional[str] = None):
        self.visit_id = visit_id
        self.doctor_id = doctor_id
        self.assigned_by = assigned_by


class AssignDoctorUseCase:
    """Use case for doctor assignment (VITALS_RECORDED -> ASSIGNED)."""

    def __init__(
        self,
        visit_repository: VisitRepository,
        coordinator: Optional[DoctorAssignmentCoordinator] = None,
        action_tracker: Optional[ActionTracker] = None,
    ):
        self._visit_repository = visit_repository
        self._coordinator = coordinator or DoctorAssignmentCoordinator()
        self._action_tracker = action_tracker or ActionTracker()

    async def execute(self, request: AssignDoctorRequest) -> Visit:
        async with self._action_tracker.track(request.visit_id, "assign_doctor"):
            visit = await load_visit(self._visit_repository, request.visit_id)
            self._coordinator.assign(visit, request.doctor_id, assigned_by=request.assigned_by)
            try:
                saved = await self._visit_repository.update_if_status(
                    visit, VisitStatus.VITALS_RECORDED
                )
            except InvalidTransitionError as exc:
                # Another operator moved the visit between our read and write
                raise IllegalAssignmentError(exc.visit_id, exc.from_status) from exc

            logger.info(
                "Doctor assigned visit_id=%s doctor_id=%s",
                saved.visit_id.value,
                saved.assigned_doctor_id,
            )
            return saved
