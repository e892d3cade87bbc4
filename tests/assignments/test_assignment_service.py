import threading
from datetime import timedelta

import pytest

from src.staffing_workflow.staffing_workflow.core.enums import AssignmentStatus, NoopReason
from src.staffing_workflow.staffing_workflow.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
)

from tests.fakes import CLOCK, CREW_CHIEF, EMPLOYEE, OTHER_CREW_CHIEF, OTHER_SHIFT_ID, SHIFT_ID, STAFF

WORKER_ASSIGNMENT_ID = 1002


@pytest.fixture
def service(world):
    world.assignments.add(WORKER_ASSIGNMENT_ID, SHIFT_ID, EMPLOYEE.user_id)
    return world.container.assignment_service


def _status(world, assignment_id=WORKER_ASSIGNMENT_ID):
    return world.assignments.get_by_id(assignment_id).status


def test_clock_in_activates_and_opens_first_entry(world, service):
    outcome = service.clock_in(actor=CREW_CHIEF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)

    assert outcome.changed is True
    assert outcome.assignment.status is AssignmentStatus.ACTIVE
    assert outcome.time_entry.entry_number == 1
    assert outcome.time_entry.clock_in == CLOCK
    assert _status(world) is AssignmentStatus.ACTIVE
    assert world.publisher.on(f"shift-{SHIFT_ID}") == [
        ("assignment-update", {"assignment_id": WORKER_ASSIGNMENT_ID, "status": "ACTIVE"})
    ]


def test_clock_in_twice_is_rejected(service):
    service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)

    with pytest.raises(InvalidStateError, match="already clocked in"):
        service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)


def test_clock_in_stops_at_three_entries(world, service):
    for i in range(3):
        start = CLOCK + timedelta(hours=i * 2)
        service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=start)
        service.clock_out(
            actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=start + timedelta(hours=1)
        )

    with pytest.raises(InvalidStateError, match="Maximum time entries"):
        service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)

    assert [e.entry_number for e in world.assignments.list_entries(WORKER_ASSIGNMENT_ID)] == [1, 2, 3]


def test_clock_in_after_no_show_is_rejected(world, service):
    service.mark_no_show(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID)

    with pytest.raises(InvalidStateError, match="no show"):
        service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)
    assert world.assignments.list_entries(WORKER_ASSIGNMENT_ID) == []


def test_clock_out_closes_open_entry(world, service):
    service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)
    later = CLOCK + timedelta(hours=4)

    outcome = service.clock_out(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=later)

    assert outcome.changed is True
    assert outcome.time_entry.clock_out == later
    assert outcome.time_entry.is_active is False
    assert world.assignments.get_open_entry(WORKER_ASSIGNMENT_ID) is None
    # the worker may still clock back in
    assert _status(world) is AssignmentStatus.ACTIVE


def test_clock_out_without_open_entry_is_a_noop(world, service):
    outcome = service.clock_out(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)

    assert outcome.changed is False
    assert outcome.noop_reason is NoopReason.NO_OPEN_ENTRY
    assert world.publisher.events == []


def test_mark_no_show_is_idempotent(world, service):
    first = service.mark_no_show(actor=CREW_CHIEF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID)
    second = service.mark_no_show(actor=CREW_CHIEF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID)

    assert first.changed is True
    assert second.changed is False
    assert second.noop_reason is NoopReason.ALREADY_TERMINAL
    assert _status(world) is AssignmentStatus.NO_SHOW
    assert len(world.publisher.events) == 1


def test_mark_no_show_refused_while_clocked_in(world, service):
    service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)

    with pytest.raises(InvalidStateError, match="already started"):
        service.mark_no_show(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID)
    assert _status(world) is AssignmentStatus.ACTIVE


def test_mark_no_show_refused_after_hours_were_worked(world, service):
    service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)
    service.clock_out(
        actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK + timedelta(hours=4)
    )

    with pytest.raises(InvalidStateError, match="already started their shift"):
        service.mark_no_show(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID)

    assert _status(world) is AssignmentStatus.ACTIVE
    assert len(world.assignments.list_entries(WORKER_ASSIGNMENT_ID)) == 1


def test_end_shift_twice_converges(world, service):
    service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)
    end = CLOCK + timedelta(hours=8)

    first = service.end_shift(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=end)
    after_first = (world.assignments.get_by_id(WORKER_ASSIGNMENT_ID), world.assignments.list_entries(WORKER_ASSIGNMENT_ID))
    second = service.end_shift(
        actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=end + timedelta(minutes=5)
    )
    after_second = (world.assignments.get_by_id(WORKER_ASSIGNMENT_ID), world.assignments.list_entries(WORKER_ASSIGNMENT_ID))

    assert first.changed is True
    assert first.time_entry.clock_out == end
    assert second.changed is False
    assert second.noop_reason is NoopReason.ALREADY_TERMINAL
    assert after_first == after_second
    assert after_second[0].status is AssignmentStatus.SHIFT_ENDED


@pytest.mark.parametrize("terminal", [AssignmentStatus.NO_SHOW, AssignmentStatus.SHIFT_ENDED])
def test_terminal_assignment_never_changes(world, service, terminal):
    world.assignments.add(1003, SHIFT_ID, 77, status=terminal)

    results = [
        service.mark_no_show(actor=STAFF, shift_id=SHIFT_ID, assignment_id=1003),
        service.clock_out(actor=STAFF, shift_id=SHIFT_ID, assignment_id=1003, now=CLOCK),
        service.end_shift(actor=STAFF, shift_id=SHIFT_ID, assignment_id=1003, now=CLOCK),
    ]

    assert all(r.changed is False for r in results)
    assert _status(world, 1003) is terminal
    assert world.publisher.events == []


def test_assignment_on_another_shift_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.clock_in(actor=STAFF, shift_id=OTHER_SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)

    with pytest.raises(NotFoundError):
        service.end_shift(actor=STAFF, shift_id=SHIFT_ID, assignment_id=424242, now=CLOCK)


def test_crew_chief_of_another_shift_is_forbidden(world, service):
    with pytest.raises(AuthorizationError):
        service.mark_no_show(actor=OTHER_CREW_CHIEF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID)
    assert _status(world) is AssignmentStatus.PENDING


def test_employee_cannot_clock_themselves_in(world, service):
    with pytest.raises(AuthorizationError):
        service.clock_in(actor=EMPLOYEE, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)
    assert world.assignments.list_entries(WORKER_ASSIGNMENT_ID) == []


def test_apply_end_shift_skips_authorization(world, service):
    outcome = service.apply_end_shift(WORKER_ASSIGNMENT_ID, now=CLOCK)

    assert outcome.changed is True
    assert _status(world) is AssignmentStatus.SHIFT_ENDED


def test_concurrent_clock_ins_open_one_entry(world, service):
    barrier = threading.Barrier(8)
    results, errors = [], []

    def attempt():
        barrier.wait()
        try:
            results.append(
                service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)
            )
        except InvalidStateError as e:
            errors.append(e)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 1
    assert len(errors) == 7
    assert len(world.assignments.list_entries(WORKER_ASSIGNMENT_ID)) == 1


def test_end_shift_racing_clock_out_leaves_entry_closed_once(world, service):
    service.clock_in(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=CLOCK)
    end = CLOCK + timedelta(hours=8)
    barrier = threading.Barrier(2)
    outcomes = []

    def end_it():
        barrier.wait()
        outcomes.append(service.end_shift(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=end))

    def clock_out():
        barrier.wait()
        outcomes.append(service.clock_out(actor=STAFF, shift_id=SHIFT_ID, assignment_id=WORKER_ASSIGNMENT_ID, now=end))

    threads = [threading.Thread(target=end_it), threading.Thread(target=clock_out)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    entries = world.assignments.list_entries(WORKER_ASSIGNMENT_ID)
    assert len(outcomes) == 2
    assert _status(world) is AssignmentStatus.SHIFT_ENDED
    assert [(e.is_active, e.clock_out) for e in entries] == [(False, end)]
    # exactly one of the two calls closed the entry
    assert sum(1 for o in outcomes if o.time_entry is not None) == 1
