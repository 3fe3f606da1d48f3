"""Get Queue use case: ordered view of active visits."""

from typing import Optional

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.application.services.queue_scheduler import QueueScheduler, QueueSnapshot


class GetQueueRequest:
    """Request for the current queue."""

    def __init__(self, doctor_id: Optional[str] = None, limit: Optional[int] = None):
        self.doctor_id = doctor_id
        self.limit = limit


class GetQueueUseCase:
    """Reads active visits and orders them. Never writes."""

    def __init__(
        self,
        visit_repository: VisitRepository,
        scheduler: Optional[QueueScheduler] = None,
    ):
        self._visit_repository = visit_repository
        self._scheduler = scheduler or QueueScheduler()

    async def execute(self, request: GetQueueRequest) -> QueueSnapshot:
        doctor_id = (request.doctor_id or "").strip() or None
        visits = await self._visit_repository.list_active(doctor_id=doctor_id)
        return self._scheduler.snapshot(visits, limit=request.limit)
