"""
Visit lifecycle state machine tests.
"""

import pytest

from conftest import make_visit, minutes_after
from visitflow.domain.enums.workflow import VisitEvent, VisitStatus
from visitflow.domain.errors import InvalidTransitionError
from visitflow.domain.state_machine import TRANSITIONS, VisitStateMachine


@pytest.fixture
def machine():
    return VisitStateMachine()


def test_happy_path_to_pharmacy_completion(machine):
    visit = make_visit()
    for event in (
        VisitEvent.RECORD_VITALS,
        VisitEvent.ASSIGN_DOCTOR,
        VisitEvent.ENTER_QUEUE,
        VisitEvent.START_CONSULTATION,
        VisitEvent.SEND_TO_PHARMACY,
        VisitEvent.DISPENSE,
    ):
        machine.fire(visit, event)

    assert visit.status is VisitStatus.COMPLETED
    assert [change.to_status for change in visit.status_history] == [
        VisitStatus.VITALS_RECORDED,
        VisitStatus.ASSIGNED,
        VisitStatus.IN_QUEUE,
        VisitStatus.IN_CONSULTATION,
        VisitStatus.PENDING_PHARMACY,
        VisitStatus.COMPLETED,
    ]
    assert visit.completed_at is not None


def test_referral_path(machine):
    visit = make_visit(status=VisitStatus.IN_CONSULTATION)
    machine.fire(visit, VisitEvent.REFER_OUT)
    assert visit.status is VisitStatus.PENDING_REFERRAL
    machine.fire(visit, VisitEvent.RESOLVE_REFERRAL)
    assert visit.status is VisitStatus.COMPLETED


def test_update_vitals_is_a_self_loop(machine):
    visit = make_visit(status=VisitStatus.VITALS_RECORDED)
    assert machine.fire(visit, VisitEvent.UPDATE_VITALS) is VisitStatus.VITALS_RECORDED
    assert visit.status is VisitStatus.VITALS_RECORDED
    assert len(visit.status_history) == 1


def test_rejected_event_leaves_visit_untouched(machine):
    visit = make_visit(status=VisitStatus.CREATED)
    before_updated = visit.updated_at

    with pytest.raises(InvalidTransitionError) as exc_info:
        machine.fire(visit, VisitEvent.ASSIGN_DOCTOR)

    assert exc_info.value.from_status == "CREATED"
    assert exc_info.value.event == "assign_doctor"
    assert exc_info.value.error_code == "INVALID_TRANSITION"
    assert visit.status is VisitStatus.CREATED
    assert visit.status_history == []
    assert visit.updated_at == before_updated
    assert visit.doctor_assigned_at is None


@pytest.mark.parametrize(
    "status",
    [status for status in VisitStatus if not status.is_terminal],
)
def test_cancel_is_allowed_from_every_non_terminal_status(machine, status):
    visit = make_visit(status=status)
    machine.fire(visit, VisitEvent.CANCEL, at=minutes_after(5))
    assert visit.status is VisitStatus.CANCELLED
    assert visit.cancelled_at == minutes_after(5)


@pytest.mark.parametrize("status", [VisitStatus.COMPLETED, VisitStatus.CANCELLED])
def test_terminal_statuses_accept_no_events(machine, status):
    assert machine.allowed_events(status) == frozenset()
    visit = make_visit(status=status)
    for event in VisitEvent:
        with pytest.raises(InvalidTransitionError):
            machine.fire(visit, event)
    assert visit.status is status


def test_every_non_terminal_status_has_a_way_forward():
    for status in VisitStatus:
        exits = {event for (src, event) in TRANSITIONS if src is status}
        assert bool(exits) != status.is_terminal


def test_allowed_events(machine):
    assert machine.allowed_events(VisitStatus.IN_CONSULTATION) == frozenset(
        {VisitEvent.SEND_TO_PHARMACY, VisitEvent.REFER_OUT, VisitEvent.CANCEL}
    )
    assert machine.can_fire(VisitStatus.ASSIGNED, VisitEvent.ENTER_QUEUE)
    assert not machine.can_fire(VisitStatus.ASSIGNED, VisitEvent.ASSIGN_DOCTOR)


def test_fire_records_history_and_timestamps(machine):
    visit = make_visit()
    machine.fire(visit, VisitEvent.RECORD_VITALS, at=minutes_after(3))

    change = visit.status_history[-1]
    assert change.from_status is VisitStatus.CREATED
    assert change.event is VisitEvent.RECORD_VITALS
    assert change.to_status is VisitStatus.VITALS_RECORDED
    assert change.at == minutes_after(3)
    assert visit.vitals_recorded_at == minutes_after(3)
    assert visit.updated_at == minutes_after(3)
