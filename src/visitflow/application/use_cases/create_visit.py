"""Create Visit use case: patient check-in."""

import logging
from typing import Optional

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import Priority, VisitStatus
from visitflow.domain.value_objects.visit_id import VisitId
from visitflow.domain.value_objects.visit_number import VisitNumber

logger = logging.getLogger("visitflow")


class CreateVisitRequest:
    """Request for creating a visit."""

    def __init__(
        self,
        patient_id: str,
        chief_complaint: str,
        priority: str = Priority.NORMAL.value,
        created_by: Optional[str] = None,
    ):
        self.patient_id = patient_id
        self.chief_complaint = chief_complaint
        self.priority = priority
        self.created_by = created_by


class CreateVisitUseCase:
    """Use case for checking a patient in."""

    def __init__(self, visit_repository: VisitRepository):
        self._visit_repository = visit_repository

    async def execute(self, request: CreateVisitRequest) -> Visit:
        patient_id = (request.patient_id or "").strip()
        if not patient_id:
            raise ValueError("patient_id is required")
        if not (request.chief_complaint or "").strip():
            raise ValueError("chief_complaint is required")
        try:
            priority = Priority(str(request.priority or Priority.NORMAL.value).upper())
        except ValueError:
            raise ValueError("Priority must be NORMAL, URGENT, or EMERGENCY")

        visit = Visit(
            visit_id=VisitId.generate(),
            visit_number=VisitNumber.generate(),
            patient_id=patient_id,
            chief_complaint=request.chief_complaint,
            priority=priority,
            status=VisitStatus.CREATED,
            created_by=request.created_by,
        )
        await self._visit_repository.save(visit)

        logger.info(
            "Visit created visit_id=%s visit_number=%s priority=%s",
            visit.visit_id.value,
            visit.visit_number.value,
            priority.value,
        )
        return visit
