"""Shared visit lookup for use cases."""

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.domain.entities.visit import Visit
from visitflow.domain.errors import VisitNotFoundError
from visitflow.domain.value_objects.visit_id import VisitId


async def load_visit(visit_repository: VisitRepository, visit_id: str) -> Visit:
    """Fetch a visit snapshot or raise VisitNotFoundError."""
    try:
        key = VisitId(visit_id)
    except ValueError:
        raise VisitNotFoundError(visit_id)
    visit = await visit_repository.find_by_id(key)
    if visit is None:
        raise VisitNotFoundError(visit_id)
    return visit
