import pytest

from src.staffing_workflow.staffing_workflow.authorization.policy import (
    Action,
    AuthorizationPolicy,
    ShiftResource,
)
from src.staffing_workflow.staffing_workflow.core.enums import Role
from src.staffing_workflow.staffing_workflow.core.exceptions import AuthenticationError, AuthorizationError

from tests.fakes import (
    ADMIN,
    CLIENT,
    COMPANY_ID,
    CREW_CHIEF,
    EMPLOYEE,
    OTHER_CLIENT,
    OTHER_CREW_CHIEF,
    OTHER_SHIFT_ID,
    SHIFT_ID,
    STAFF,
)

SHIFT = ShiftResource(shift_id=SHIFT_ID, company_id=COMPANY_ID)


@pytest.fixture
def policy(world) -> AuthorizationPolicy:
    return world.container.policy


@pytest.mark.parametrize("action", list(Action))
def test_admin_may_do_everything(policy, action):
    assert policy.authorize(ADMIN, action, SHIFT)


@pytest.mark.parametrize("action", list(Action))
def test_employee_may_do_nothing(policy, action):
    assert not policy.authorize(EMPLOYEE, action, SHIFT)


def test_missing_identity_is_denied(policy):
    assert not policy.authorize(None, Action.VIEW_TIMESHEET, SHIFT)
    with pytest.raises(AuthenticationError):
        policy.require(None, Action.VIEW_TIMESHEET, SHIFT)


def test_staff_handles_the_floor_but_not_approvals(policy):
    assert policy.authorize(STAFF, Action.CLOCK_IN, SHIFT)
    assert policy.authorize(STAFF, Action.END_ALL_SHIFTS, SHIFT)
    assert not policy.authorize(STAFF, Action.APPROVE_SUPERVISOR_STAGE, SHIFT)
    assert not policy.authorize(STAFF, Action.FINALIZE_TIMESHEET, SHIFT)


def test_crew_chief_is_scoped_to_managed_shift(policy):
    assert policy.authorize(CREW_CHIEF, Action.FINALIZE_TIMESHEET, SHIFT)
    assert policy.authorize(CREW_CHIEF, Action.MARK_NO_SHOW, SHIFT)

    other = ShiftResource(shift_id=OTHER_SHIFT_ID)
    assert not policy.authorize(CREW_CHIEF, Action.FINALIZE_TIMESHEET, other)
    assert policy.authorize(OTHER_CREW_CHIEF, Action.FINALIZE_TIMESHEET, other)
    assert not policy.authorize(OTHER_CREW_CHIEF, Action.CLOCK_OUT, SHIFT)


def test_worker_assignment_does_not_make_a_crew_chief(world, policy):
    # a WR assignment on the shift is not a CC assignment
    world.assignments.add(3001, OTHER_SHIFT_ID, CREW_CHIEF.user_id)
    assert not policy.authorize(CREW_CHIEF, Action.FINALIZE_TIMESHEET, ShiftResource(shift_id=OTHER_SHIFT_ID))


def test_crew_chief_denied_when_shift_unknown(policy):
    assert not policy.authorize(CREW_CHIEF, Action.FINALIZE_TIMESHEET, ShiftResource(shift_id=None))


def test_crew_chief_scope_lookup_failure_fails_closed(world, policy):
    world.assignments.scope_error = RuntimeError("connection reset")

    decision = policy.authorize(CREW_CHIEF, Action.FINALIZE_TIMESHEET, SHIFT)

    assert not decision
    assert decision.reason == "scope lookup failed"


def test_company_user_limited_to_own_company(policy):
    assert policy.authorize(CLIENT, Action.APPROVE_SUPERVISOR_STAGE, SHIFT)
    assert policy.authorize(CLIENT, Action.VIEW_TIMESHEET, SHIFT)
    assert not policy.authorize(OTHER_CLIENT, Action.APPROVE_SUPERVISOR_STAGE, SHIFT)
    assert not policy.authorize(CLIENT, Action.FINALIZE_TIMESHEET, SHIFT)
    assert not policy.authorize(CLIENT, Action.CLOCK_IN, SHIFT)


def test_rejection_follows_the_approver_scopes(policy):
    assert policy.authorize(CLIENT, Action.REJECT_TIMESHEET, SHIFT)
    assert policy.authorize(CREW_CHIEF, Action.REJECT_TIMESHEET, SHIFT)
    assert not policy.authorize(OTHER_CLIENT, Action.REJECT_TIMESHEET, SHIFT)
    assert not policy.authorize(OTHER_CREW_CHIEF, Action.REJECT_TIMESHEET, SHIFT)
    assert not policy.authorize(STAFF, Action.REJECT_TIMESHEET, SHIFT)


def test_company_user_denied_when_shift_has_no_company(policy):
    assert not policy.authorize(CLIENT, Action.VIEW_TIMESHEET, ShiftResource(shift_id=SHIFT_ID, company_id=None))


def test_require_raises_forbidden(policy):
    with pytest.raises(AuthorizationError) as exc:
        policy.require(EMPLOYEE, Action.CLOCK_IN, SHIFT)
    assert exc.value.http_status == 403


def test_every_role_has_a_rule():
    from src.staffing_workflow.staffing_workflow.authorization import policy as module

    assert set(module._RULES) == set(Role)


def test_policy_accepts_any_scope_lookup():
    class NeverManages:
        def is_crew_chief_for_shift(self, *, user_id, shift_id):
            return False

    policy = AuthorizationPolicy(NeverManages())
    assert not policy.authorize(CREW_CHIEF, Action.SUBMIT_TIMESHEET, SHIFT)
    assert policy.authorize(ADMIN, Action.SUBMIT_TIMESHEET, SHIFT)
