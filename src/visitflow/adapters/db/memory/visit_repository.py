"""
In-memory implementation of VisitRepository.

Stored visits are never handed out directly: every read returns a deep copy
so callers can mutate a snapshot and write it back with ``update_if_status``.
"""

import asyncio
import copy
import logging
from typing import Dict, List, Optional

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import VisitStatus
from visitflow.domain.errors import InvalidTransitionError, VisitNotFoundError
from visitflow.domain.value_objects.visit_id import VisitId

logger = logging.getLogger("visitflow")


class InMemoryVisitRepository(VisitRepository):
    """Process-local visit store guarded by an asyncio lock."""

    def __init__(self) -> None:
        self._visits: Dict[str, Visit] = {}
        self._lock = asyncio.Lock()

    async def save(self, visit: Visit) -> Visit:
        async with self._lock:
            self._visits[visit.visit_id.value] = copy.deepcopy(visit)
        return visit

    async def find_by_id(self, visit_id: VisitId) -> Optional[Visit]:
        async with self._lock:
            stored = self._visits.get(visit_id.value)
            return copy.deepcopy(stored) if stored is not None else None

    async def list_active(self, doctor_id: Optional[str] = None) -> List[Visit]:
        async with self._lock:
            visits = [
                copy.deepcopy(visit)
                for visit in self._visits.values()
                if visit.is_active and (doctor_id is None or visit.assigned_doctor_id == doctor_id)
            ]
        return visits

    async def update_if_status(self, visit: Visit, expected_status: VisitStatus) -> Visit:
        key = visit.visit_id.value
        async with self._lock:
            stored = self._visits.get(key)
            if stored is None:
                raise VisitNotFoundError(key)
            if stored.status is not expected_status:
                logger.warning(
                    "Stale write rejected visit_id=%s expected=%s actual=%s",
                    key,
                    expected_status.value,
                    stored.status.value,
                )
                last_event = visit.status_history[-1].event.value if visit.status_history else "update"
                raise InvalidTransitionError(key, stored.status.value, last_event)
            self._visits[key] = copy.deepcopy(visit)
        return visit

    async def clear(self) -> None:
        async with self._lock:
            self._visits.clear()
