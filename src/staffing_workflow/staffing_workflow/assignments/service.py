from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import structlog

from ..authorization.identity import Actor
from ..authorization.policy import Action, AuthorizationPolicy, ShiftResource
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_MAX_TIME_ENTRIES
from ..core.enums import AssignmentStatus, NoopReason
from ..core.exceptions import InvalidStateError, NotFoundError
from ..notifications.emitter import NotificationEmitter
from ..shifts.repository import ShiftRepository
from .model import Assignment, TransitionOutcome
from .repository import AssignmentRepository

logger = structlog.get_logger(__name__)


class AssignmentService:
    """Lifecycle of a worker's assignment: PENDING -> ACTIVE -> NO_SHOW | SHIFT_ENDED.

    Public operations authorize ``actor`` against the assignment's shift, then
    apply the transition through a conditional write. Reaching a terminal
    state twice is a no-op, not an error.
    """

    def __init__(
        self,
        assignments: AssignmentRepository,
        shifts: ShiftRepository,
        policy: AuthorizationPolicy,
        notifier: NotificationEmitter,
        *,
        max_entries: int = DEFAULT_MAX_TIME_ENTRIES,
    ):
        self._assignments = assignments
        self._shifts = shifts
        self._policy = policy
        self._notifier = notifier
        self._max_entries = int(max_entries)

    def _load(self, assignment_id: int, *, shift_id: Optional[int] = None) -> Assignment:
        assignment = self._assignments.get_by_id(int(assignment_id))
        if not assignment or (shift_id is not None and assignment.shift_id != int(shift_id)):
            raise NotFoundError("Worker not found on this shift")
        return assignment

    def _authorize(self, actor: Actor, action: Action, assignment: Assignment) -> None:
        shift = self._shifts.get_by_id(assignment.shift_id)
        if not shift:
            raise NotFoundError("Shift not found")
        self._policy.require(actor, action, ShiftResource(shift_id=shift.shift_id, company_id=shift.company_id))

    def _changed(self, assignment: Assignment, operation: str, **fields) -> None:
        logger.info(
            "assignment_transition",
            operation=operation,
            assignment_id=assignment.assignment_id,
            shift_id=assignment.shift_id,
            status=assignment.status.value,
            **fields,
        )
        self._notifier.assignment_changed(assignment)

    def clock_in(
        self,
        *,
        actor: Actor,
        assignment_id: int,
        shift_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> TransitionOutcome:
        assignment = self._load(assignment_id, shift_id=shift_id)
        self._authorize(actor, Action.CLOCK_IN, assignment)
        now = now or now_local()

        self._check_can_clock_in(assignment)
        entry = self._assignments.open_entry(
            assignment_id=assignment.assignment_id,
            clock_in=now,
            max_entries=self._max_entries,
        )
        if entry is None:
            # Lost a race; re-read to report the precondition that failed.
            self._check_can_clock_in(self._load(assignment.assignment_id))
            raise InvalidStateError("Worker could not be clocked in")

        updated = replace(assignment, status=AssignmentStatus.ACTIVE)
        self._changed(updated, "clock_in", entry_number=entry.entry_number, user_id=actor.user_id)
        return TransitionOutcome(assignment=updated, changed=True, time_entry=entry)

    def _check_can_clock_in(self, assignment: Assignment) -> None:
        if assignment.status is AssignmentStatus.NO_SHOW:
            raise InvalidStateError("Cannot clock in a worker marked as no show")
        if assignment.status is AssignmentStatus.SHIFT_ENDED:
            raise InvalidStateError("Cannot clock in - worker shift has already ended")

        entries = self._assignments.list_entries(assignment.assignment_id)
        if any(e.is_active for e in entries):
            raise InvalidStateError("Worker is already clocked in")
        if len(entries) >= self._max_entries:
            raise InvalidStateError(f"Maximum time entries ({self._max_entries}) reached for this shift")

    def clock_out(
        self,
        *,
        actor: Actor,
        assignment_id: int,
        shift_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> TransitionOutcome:
        assignment = self._load(assignment_id, shift_id=shift_id)
        self._authorize(actor, Action.CLOCK_OUT, assignment)

        closed = self._assignments.close_open_entry(
            assignment_id=assignment.assignment_id,
            clock_out=now or now_local(),
        )
        if closed is None:
            return TransitionOutcome(assignment=assignment, changed=False, noop_reason=NoopReason.NO_OPEN_ENTRY)

        self._changed(assignment, "clock_out", entry_number=closed.entry_number, user_id=actor.user_id)
        return TransitionOutcome(assignment=assignment, changed=True, time_entry=closed)

    def mark_no_show(
        self,
        *,
        actor: Actor,
        assignment_id: int,
        shift_id: Optional[int] = None,
    ) -> TransitionOutcome:
        assignment = self._load(assignment_id, shift_id=shift_id)
        self._authorize(actor, Action.MARK_NO_SHOW, assignment)

        if assignment.status.is_terminal:
            return TransitionOutcome(assignment=assignment, changed=False, noop_reason=NoopReason.ALREADY_TERMINAL)

        if not self._assignments.mark_no_show(assignment_id=assignment.assignment_id):
            current = self._load(assignment.assignment_id)
            if current.status.is_terminal:
                return TransitionOutcome(assignment=current, changed=False, noop_reason=NoopReason.ALREADY_TERMINAL)
            raise InvalidStateError("Cannot mark as no-show - worker has already started their shift")

        updated = replace(assignment, status=AssignmentStatus.NO_SHOW)
        self._changed(updated, "mark_no_show", user_id=actor.user_id)
        return TransitionOutcome(assignment=updated, changed=True)

    def end_shift(
        self,
        *,
        actor: Actor,
        assignment_id: int,
        shift_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> TransitionOutcome:
        assignment = self._load(assignment_id, shift_id=shift_id)
        self._authorize(actor, Action.END_WORKER_SHIFT, assignment)
        return self._end(assignment, now=now)

    def apply_end_shift(self, assignment_id: int, *, now: datetime | None = None) -> TransitionOutcome:
        """End one assignment without authorizing.

        Used by the bulk closer, which authorizes the whole shift once.
        """

        return self._end(self._load(assignment_id), now=now)

    def _end(self, assignment: Assignment, *, now: datetime | None) -> TransitionOutcome:
        if assignment.status.is_terminal:
            return TransitionOutcome(assignment=assignment, changed=False, noop_reason=NoopReason.ALREADY_TERMINAL)

        result = self._assignments.end_assignment(
            assignment_id=assignment.assignment_id,
            ended_at=now or now_local(),
        )
        if result is None:
            current = self._load(assignment.assignment_id)
            if current.status.is_terminal:
                return TransitionOutcome(assignment=current, changed=False, noop_reason=NoopReason.ALREADY_TERMINAL)
            raise InvalidStateError("Worker shift could not be ended")

        updated = replace(assignment, status=AssignmentStatus.SHIFT_ENDED)
        self._changed(updated, "end_shift", closed_entry=result.closed_entry is not None)
        return TransitionOutcome(assignment=updated, changed=True, time_entry=result.closed_entry)
