"""Save Vitals use case: intake capture before doctor assignment."""

import logging
from typing import Any, Dict, Optional

from visitflow.application.ports.repositories.visit_repo import VisitRepository
from visitflow.application.services.action_tracker import ActionTracker
from visitflow.application.use_cases.visit_lookup import load_visit
from visitflow.domain.entities.visit import Visit, VitalsRecord
from visitflow.domain.enums.workflow import RecordedVia, VisitEvent, VisitStatus
from visitflow.domain.errors import VitalsValidationError
from visitflow.domain.state_machine import VisitStateMachine

logger = logging.getLogger("visitflow")


class SaveVitalsRequest:
    """Request for saving vitals."""

    def __init__(
        self,
        visit_id: str,
        vitals_fields: Dict[str, Any],
        recorded_via: str = RecordedVia.MANUAL.value,
        recorded_by: Optional[str] = None,
    ):
        self.visit_id = visit_id
        self.vitals_fields = vitals_fields or {}
        self.recorded_via = recorded_via
        self.recorded_by = recorded_by


class SaveVitalsUseCase:
    """
    Record or overwrite vitals.

    CREATED fires "record vitals"; VITALS_RECORDED fires the re-entrant
    "update vitals". Any other status is an invalid transition.
    """

    def __init__(
        self,
        visit_repository: VisitRepository,
        state_machine: Optional[VisitStateMachine] = None,
        action_tracker: Optional[ActionTracker] = None,
    ):
        self._visit_repository = visit_repository
        self._state_machine = state_machine or VisitStateMachine()
        self._action_tracker = action_tracker or ActionTracker()

    async def execute(self, request: SaveVitalsRequest) -> Visit:
        async with self._action_tracker.track(request.visit_id, "save_vitals"):
            visit = await load_visit(self._visit_repository, request.visit_id)
            vitals = self._build_vitals(request)

            expected_status = visit.status
            event = (
                VisitEvent.UPDATE_VITALS
                if expected_status is VisitStatus.VITALS_RECORDED
                else VisitEvent.RECORD_VITALS
            )
            self._state_machine.fire(visit, event, at=vitals.recorded_at)
            visit.vitals = vitals

            saved = await self._visit_repository.update_if_status(visit, expected_status)
            logger.info(
                "Vitals saved visit_id=%s recorded_via=%s",
                saved.visit_id.value,
                vitals.recorded_via.value,
            )
            return saved

    @staticmethod
    def _build_vitals(request: SaveVitalsRequest) -> VitalsRecord:
        allowed = set(VitalsRecord.field_names())
        for name, value in request.vitals_fields.items():
            if name not in allowed:
                raise VitalsValidationError(name, value)
        fields = {
            name: value
            for name, value in request.vitals_fields.items()
            if not (isinstance(value, str) and not value.strip())
        }
        return VitalsRecord(
            **fields,
            recorded_via=request.recorded_via or RecordedVia.MANUAL,
            recorded_by=request.recorded_by,
        )
