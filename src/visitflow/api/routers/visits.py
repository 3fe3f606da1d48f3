"""Visit lifecycle endpoints: check-in, vitals, assignment, events, dispense."""

import logging
from typing import Optional

from fastapi import APIRouter, Request, status

from ...application.use_cases.advance_visit import AdvanceVisitRequest, AdvanceVisitUseCase
from ...application.use_cases.assign_doctor import AssignDoctorRequest as AssignDoctorCommand
from ...application.use_cases.assign_doctor import AssignDoctorUseCase
from ...application.use_cases.create_visit import CreateVisitRequest as CreateVisitCommand
from ...application.use_cases.create_visit import CreateVisitUseCase
from ...application.use_cases.dispense_prescription import (
    DispensePrescriptionRequest,
    DispensePrescriptionUseCase,
)
from ...application.use_cases.save_vitals import SaveVitalsRequest, SaveVitalsUseCase
from ...application.use_cases.visit_lookup import load_visit
from ...domain.entities.visit import Visit
from ...domain.state_machine import VisitStateMachine
from ..deps import (
    ActionTrackerDep,
    AssignmentCoordinatorDep,
    OperatorDep,
    StateMachineDep,
    VisitRepositoryDep,
)
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.visits import (
    AssignDoctorRequest,
    CreateVisitRequest,
    DispenseRequest,
    VisitResponse,
    VitalsRequest,
)
from ..utils.responses import ok

router = APIRouter(prefix="/visits", tags=["visits"])
logger = logging.getLogger("visitflow")

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Visit not found"}}
_CONFLICT = {409: {"model": ErrorResponse, "description": "Transition not allowed"}}
_INVALID = {422: {"model": ErrorResponse, "description": "Validation error"}}


def _serialize(visit: Visit, state_machine: VisitStateMachine) -> VisitResponse:
    allowed = [event.value for event in state_machine.allowed_events(visit.status)]
    return VisitResponse.from_visit(visit, allowed)


@router.post(
    "",
    response_model=ApiResponse[VisitResponse],
    status_code=status.HTTP_201_CREATED,
    responses={**_INVALID},
)
async def create_visit(
    http_request: Request,
    request: CreateVisitRequest,
    visit_repo: VisitRepositoryDep,
    state_machine: StateMachineDep,
    operator: OperatorDep,
):
    """Check a patient in. The visit starts in CREATED."""
    use_case = CreateVisitUseCase(visit_repo)
    visit = await use_case.execute(
        CreateVisitCommand(
            patient_id=request.patient_id,
            chief_complaint=request.chief_complaint,
            priority=request.priority.value,
            created_by=operator.user_id,
        )
    )
    return ok(http_request, data=_serialize(visit, state_machine), message="Visit created")


@router.get(
    "/{visit_id}",
    response_model=ApiResponse[VisitResponse],
    responses={**_NOT_FOUND},
)
async def get_visit(
    http_request: Request,
    visit_id: str,
    visit_repo: VisitRepositoryDep,
    state_machine: StateMachineDep,
):
    visit = await load_visit(visit_repo, visit_id)
    return ok(http_request, data=_serialize(visit, state_machine))


@router.post(
    "/{visit_id}/vitals",
    response_model=ApiResponse[VisitResponse],
    responses={**_NOT_FOUND, **_CONFLICT, **_INVALID},
)
async def save_vitals(
    http_request: Request,
    visit_id: str,
    request: VitalsRequest,
    visit_repo: VisitRepositoryDep,
    state_machine: StateMachineDep,
    tracker: ActionTrackerDep,
    operator: OperatorDep,
):
    """
    Record vitals (CREATED) or overwrite them (VITALS_RECORDED).

    Fields that came from a voice extraction should be sent with
    ``recorded_via=VOICE``; values the operator edits afterwards stay theirs.
    """
    use_case = SaveVitalsUseCase(visit_repo, state_machine, tracker)
    visit = await use_case.execute(
        SaveVitalsRequest(
            visit_id=visit_id,
            vitals_fields=request.vitals_fields(),
            recorded_via=request.recorded_via.value,
            recorded_by=operator.user_id,
        )
    )
    return ok(http_request, data=_serialize(visit, state_machine), message="Vitals recorded")


@router.post(
    "/{visit_id}/assign-doctor",
    response_model=ApiResponse[VisitResponse],
    responses={**_NOT_FOUND, **_CONFLICT, **_INVALID},
)
async def assign_doctor(
    http_request: Request,
    visit_id: str,
    request: AssignDoctorRequest,
    visit_repo: VisitRepositoryDep,
    state_machine: StateMachineDep,
    coordinator: AssignmentCoordinatorDep,
    tracker: ActionTrackerDep,
    operator: OperatorDep,
):
    """Assign a doctor. Only legal once vitals are recorded."""
    use_case = AssignDoctorUseCase(visit_repo, coordinator, tracker)
    visit = await use_case.execute(
        AssignDoctorCommand(
            visit_id=visit_id, doctor_id=request.doctor_id, assigned_by=operator.user_id
        )
    )
    return ok(http_request, data=_serialize(visit, state_machine), message="Doctor assigned")


@router.post(
    "/{visit_id}/events/{event}",
    response_model=ApiResponse[VisitResponse],
    responses={**_NOT_FOUND, **_CONFLICT, **_INVALID},
)
async def fire_event(
    http_request: Request,
    visit_id: str,
    event: str,
    visit_repo: VisitRepositoryDep,
    state_machine: StateMachineDep,
    tracker: ActionTrackerDep,
    operator: OperatorDep,
):
    """
    Fire a lifecycle event: enter-queue, start-consultation, send-to-pharmacy,
    refer, resolve-referral or cancel.
    """
    if event == "refer":
        event = "refer_out"
    use_case = AdvanceVisitUseCase(visit_repo, state_machine, tracker)
    visit = await use_case.execute(
        AdvanceVisitRequest(visit_id=visit_id, event=event, performed_by=operator.user_id)
    )
    return ok(http_request, data=_serialize(visit, state_machine), message=f"Visit is {visit.status.value}")


@router.post(
    "/{visit_id}/dispense",
    response_model=ApiResponse[VisitResponse],
    responses={**_NOT_FOUND, **_CONFLICT},
)
async def dispense(
    http_request: Request,
    visit_id: str,
    visit_repo: VisitRepositoryDep,
    state_machine: StateMachineDep,
    tracker: ActionTrackerDep,
    operator: OperatorDep,
    request: Optional[DispenseRequest] = None,
):
    """Mark the prescription dispensed and complete the visit."""
    use_case = DispensePrescriptionUseCase(visit_repo, state_machine, tracker)
    visit = await use_case.execute(
        DispensePrescriptionRequest(
            visit_id=visit_id,
            dispensed_by=operator.user_id,
            pharmacist_notes=request.pharmacist_notes if request else None,
        )
    )
    return ok(http_request, data=_serialize(visit, state_machine), message="Prescription dispensed")
