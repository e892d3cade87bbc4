"""Role-based authorization for shift and timesheet transitions.

Every role in ``Role`` has exactly one rule in ``_RULES``; the module refuses
to import when a role is left out. Crew chiefs are scoped to the shifts they
manage, and that lookup fails closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

import structlog

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .identity import Actor

logger = structlog.get_logger(__name__)


class Action(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    MARK_NO_SHOW = "mark_no_show"
    END_WORKER_SHIFT = "end_worker_shift"
    END_ALL_SHIFTS = "end_all_shifts"
    SUBMIT_TIMESHEET = "submit_timesheet"
    APPROVE_SUPERVISOR_STAGE = "approve_supervisor_stage"
    FINALIZE_TIMESHEET = "finalize_timesheet"
    REJECT_TIMESHEET = "reject_timesheet"
    VIEW_TIMESHEET = "view_timesheet"


FLOOR_ACTIONS = frozenset(
    {
        Action.CLOCK_IN,
        Action.CLOCK_OUT,
        Action.MARK_NO_SHOW,
        Action.END_WORKER_SHIFT,
        Action.END_ALL_SHIFTS,
    }
)
STAFF_ACTIONS = FLOOR_ACTIONS | {Action.VIEW_TIMESHEET}
CREW_CHIEF_ACTIONS = FLOOR_ACTIONS | {
    Action.SUBMIT_TIMESHEET,
    Action.APPROVE_SUPERVISOR_STAGE,
    Action.FINALIZE_TIMESHEET,
    Action.REJECT_TIMESHEET,
    Action.VIEW_TIMESHEET,
}
COMPANY_USER_ACTIONS = frozenset(
    {Action.APPROVE_SUPERVISOR_STAGE, Action.REJECT_TIMESHEET, Action.VIEW_TIMESHEET}
)


@dataclass(frozen=True)
class ShiftResource:
    """The shift an action targets; ``company_id`` is the client that owns it."""

    shift_id: Optional[int]
    company_id: Optional[int] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True, "allowed")


def deny(reason: str) -> Decision:
    return Decision(False, reason)


class CrewChiefScope(Protocol):
    def is_crew_chief_for_shift(self, *, user_id: int, shift_id: int) -> bool:
        raise NotImplementedError


class AuthorizationPolicy:
    def __init__(self, scope: CrewChiefScope):
        self._scope = scope

    def authorize(self, actor: Optional[Actor], action: Action, resource: ShiftResource) -> Decision:
        if actor is None:
            return deny("no identity")
        rule = _RULES[actor.role]
        return rule(self, actor, action, resource)

    def require(self, actor: Optional[Actor], action: Action, resource: ShiftResource) -> None:
        """Raise unless ``actor`` may perform ``action`` on ``resource``."""

        if actor is None:
            raise AuthenticationError("Authentication required")
        decision = self.authorize(actor, action, resource)
        if not decision:
            logger.warning(
                "authorization_denied",
                user_id=actor.user_id,
                role=actor.role.value,
                action=action.value,
                shift_id=resource.shift_id,
                reason=decision.reason,
            )
            raise AuthorizationError(f"You do not have permission to {action.value.replace('_', ' ')} for this shift")

    def manages_shift(self, actor: Actor, shift_id: Optional[int]) -> Decision:
        if shift_id is None:
            return deny("shift unknown")
        try:
            managed = self._scope.is_crew_chief_for_shift(user_id=actor.user_id, shift_id=int(shift_id))
        except Exception as e:
            logger.warning("crew_chief_scope_lookup_failed", user_id=actor.user_id, shift_id=shift_id, error=str(e))
            return deny("scope lookup failed")
        return ALLOW if managed is True else deny("not crew chief of this shift")


Rule = Callable[[AuthorizationPolicy, Actor, Action, ShiftResource], Decision]


def _admin_rule(policy: AuthorizationPolicy, actor: Actor, action: Action, resource: ShiftResource) -> Decision:
    return ALLOW


def _staff_rule(policy: AuthorizationPolicy, actor: Actor, action: Action, resource: ShiftResource) -> Decision:
    return ALLOW if action in STAFF_ACTIONS else deny("staff cannot approve timesheets")


def _crew_chief_rule(policy: AuthorizationPolicy, actor: Actor, action: Action, resource: ShiftResource) -> Decision:
    if action not in CREW_CHIEF_ACTIONS:
        return deny("action not available to crew chiefs")
    return policy.manages_shift(actor, resource.shift_id)


def _company_user_rule(policy: AuthorizationPolicy, actor: Actor, action: Action, resource: ShiftResource) -> Decision:
    if action not in COMPANY_USER_ACTIONS:
        return deny("action not available to company users")
    if actor.company_id is None or resource.company_id is None:
        return deny("company unknown")
    return ALLOW if actor.company_id == resource.company_id else deny("shift belongs to another company")


def _employee_rule(policy: AuthorizationPolicy, actor: Actor, action: Action, resource: ShiftResource) -> Decision:
    return deny("employees cannot manage shifts")


_RULES: Dict[Role, Rule] = {
    Role.ADMIN: _admin_rule,
    Role.STAFF: _staff_rule,
    Role.CREW_CHIEF: _crew_chief_rule,
    Role.COMPANY_USER: _company_user_rule,
    Role.EMPLOYEE: _employee_rule,
}

_missing = set(Role) - set(_RULES)
if _missing:
    raise RuntimeError(f"Authorization rules missing for roles: {sorted(r.value for r in _missing)}")
