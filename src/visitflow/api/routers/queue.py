"""Queue endpoint: active visits in attention order."""

from typing import Optional

from fastapi import APIRouter, Query, Request

from ...application.use_cases.get_queue import GetQueueRequest, GetQueueUseCase
from ..deps import QueueSchedulerDep, SettingsDep, VisitRepositoryDep
from ..schemas.common import ApiResponse
from ..schemas.visits import QueueCounts, QueueEntrySchema, QueueResponse
from ..utils.responses import ok

router = APIRouter(prefix="/queue", tags=["queue"])


@router.get("", response_model=ApiResponse[QueueResponse])
async def get_queue(
    request: Request,
    visit_repo: VisitRepositoryDep,
    scheduler: QueueSchedulerDep,
    settings: SettingsDep,
    doctor_id: Optional[str] = Query(None, description="Only visits assigned to this doctor"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
):
    """Emergency first, then urgent, then normal; earliest arrival first within a tier."""
    use_case = GetQueueUseCase(visit_repo, scheduler)
    snapshot = await use_case.execute(
        GetQueueRequest(doctor_id=doctor_id, limit=limit or settings.queue.default_limit)
    )
    return ok(
        request,
        data=QueueResponse(
            generated_at=snapshot.generated_at.isoformat(),
            counts=QueueCounts(**snapshot.counts()),
            entries=[QueueEntrySchema(**entry.to_dict()) for entry in snapshot.entries],
        ),
    )
