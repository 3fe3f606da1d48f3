"""
Visit repository interface for managing visit data.
"""

from typing import List, Optional

from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.workflow import VisitStatus
from visitflow.domain.value_objects.visit_id import VisitId


class VisitRepository:
    """Repository interface for managing visits."""

    async def save(self, visit: Visit) -> Visit:
        """Insert or overwrite a visit."""
        raise NotImplementedError

    async def find_by_id(self, visit_id: VisitId) -> Optional[Visit]:
        """Find a visit by ID. Returns an independent snapshot."""
        raise NotImplementedError

    async def list_active(self, doctor_id: Optional[str] = None) -> List[Visit]:
        """All visits not COMPLETED/CANCELLED, optionally for one assigned doctor."""
        raise NotImplementedError

    async def update_if_status(self, visit: Visit, expected_status: VisitStatus) -> Visit:
        """
        Persist ``visit`` only if the stored status still equals ``expected_status``.

        This is the authoritative re-validation of a transition: when another
        operator moved the visit first, raises InvalidTransitionError and
        nothing is written.
        """
        raise NotImplementedError
