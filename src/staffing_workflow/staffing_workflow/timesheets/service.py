from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import structlog

from ..assignments.repository import AssignmentRepository
from ..authorization.identity import Actor
from ..authorization.policy import Action, AuthorizationPolicy, ShiftResource
from ..common.datetime_utils import now_local
from ..common.validators import optional_text
from ..core.enums import TimesheetStatus
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ..notifications.emitter import NotificationEmitter
from ..shifts.repository import ShiftRepository
from .model import Timesheet
from .repository import TimesheetRepository
from .stages.base import ApprovalStage
from .stages.factory import ApprovalStageFactory

logger = structlog.get_logger(__name__)

OPEN_ENTRIES_MESSAGE = "Cannot submit timesheet - some workers have not clocked out"
NOT_REJECTABLE_MESSAGE = "Only a timesheet awaiting approval can be rejected"


class TimesheetService:
    """Walks a timesheet forward through its approval chain.

    DRAFT -> PENDING_SUPERVISOR_APPROVAL -> PENDING_MANAGER_APPROVAL -> COMPLETED.
    Either pending stage may instead be rejected, which is final. Nothing
    moves backwards, and each step is decided by a conditional write
    so concurrent approvers cannot both win.
    """

    def __init__(
        self,
        timesheets: TimesheetRepository,
        shifts: ShiftRepository,
        assignments: AssignmentRepository,
        policy: AuthorizationPolicy,
        notifier: NotificationEmitter,
        *,
        stage_factory: ApprovalStageFactory | None = None,
    ):
        self._timesheets = timesheets
        self._shifts = shifts
        self._assignments = assignments
        self._policy = policy
        self._notifier = notifier
        self._stages = stage_factory or ApprovalStageFactory()

    def _resource(self, shift_id: int) -> ShiftResource:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return ShiftResource(shift_id=shift.shift_id, company_id=shift.company_id)

    def _load(self, timesheet_id: int) -> Timesheet:
        timesheet = self._timesheets.get_by_id(int(timesheet_id))
        if not timesheet:
            raise NotFoundError("Timesheet not found")
        return timesheet

    def get(self, *, actor: Actor, timesheet_id: int) -> Timesheet:
        timesheet = self._load(timesheet_id)
        self._policy.require(actor, Action.VIEW_TIMESHEET, self._resource(timesheet.shift_id))
        return timesheet

    def submit_for_review(self, *, actor: Actor, shift_id: int, now: datetime | None = None) -> Timesheet:
        resource = self._resource(shift_id)
        stage = self._stages.for_status(TimesheetStatus.DRAFT)
        self._policy.require(actor, stage.action, resource)

        if self._assignments.count_open_entries_for_shift(resource.shift_id) > 0:
            raise InvalidStateError(OPEN_ENTRIES_MESSAGE)

        timesheet = self._timesheets.get_by_shift(resource.shift_id) or self._timesheets.ensure_draft(resource.shift_id)
        return self._apply(stage, actor=actor, timesheet=timesheet, now=now, notes=None)

    def approve_supervisor_stage(
        self,
        *,
        actor: Actor,
        timesheet_id: int,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> Timesheet:
        return self._run(
            self._stages.for_status(TimesheetStatus.PENDING_SUPERVISOR_APPROVAL),
            actor=actor,
            timesheet_id=timesheet_id,
            notes=notes,
            now=now,
        )

    def finalize(
        self,
        *,
        actor: Actor,
        timesheet_id: int,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> Timesheet:
        return self._run(
            self._stages.for_status(TimesheetStatus.PENDING_MANAGER_APPROVAL),
            actor=actor,
            timesheet_id=timesheet_id,
            notes=notes,
            now=now,
        )

    def advance(
        self,
        *,
        actor: Actor,
        timesheet_id: int,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> Timesheet:
        """Apply whichever approval the timesheet is currently waiting for."""

        timesheet = self._load(timesheet_id)
        if timesheet.status is TimesheetStatus.DRAFT:
            raise InvalidStateError("Timesheet has not been submitted")
        stage = self._stages.for_status(timesheet.status)
        return self._run(stage, actor=actor, timesheet_id=timesheet.timesheet_id, notes=notes, now=now)

    def reject(
        self,
        *,
        actor: Actor,
        timesheet_id: int,
        reason: Optional[str],
        now: datetime | None = None,
    ) -> Timesheet:
        """Send a pending timesheet to REJECTED; the reason is mandatory."""

        timesheet = self._load(timesheet_id)
        self._policy.require(actor, Action.REJECT_TIMESHEET, self._resource(timesheet.shift_id))

        reason = optional_text(reason, "reason")
        if reason is None:
            raise ValidationError("Rejection reason is required")
        if not timesheet.status.is_awaiting_approval:
            raise InvalidStateError(NOT_REJECTABLE_MESSAGE)

        now = now or now_local()
        if not self._timesheets.reject(
            timesheet_id=timesheet.timesheet_id,
            rejected_by=actor.user_id,
            rejected_at=now,
            reason=reason,
        ):
            logger.info("timesheet_rejection_lost", timesheet_id=timesheet.timesheet_id, user_id=actor.user_id)
            raise InvalidStateError(NOT_REJECTABLE_MESSAGE)

        rejected = replace(
            timesheet,
            status=TimesheetStatus.REJECTED,
            rejected_by=actor.user_id,
            rejected_at=now,
            rejection_reason=reason,
        )
        return self._announce(rejected, from_status=timesheet.status, actor=actor)

    def _run(
        self,
        stage: ApprovalStage,
        *,
        actor: Actor,
        timesheet_id: int,
        notes: Optional[str],
        now: datetime | None,
    ) -> Timesheet:
        timesheet = self._load(timesheet_id)
        self._policy.require(actor, stage.action, self._resource(timesheet.shift_id))
        return self._apply(stage, actor=actor, timesheet=timesheet, now=now, notes=notes)

    def _apply(
        self,
        stage: ApprovalStage,
        *,
        actor: Actor,
        timesheet: Timesheet,
        now: datetime | None,
        notes: Optional[str],
    ) -> Timesheet:
        if timesheet.status is not stage.source:
            raise InvalidStateError(stage.invalid_state_message)

        changes = stage.changes(actor=actor, now=now or now_local(), notes=optional_text(notes, "notes"))
        if not stage.apply(self._timesheets, timesheet=timesheet, changes=changes):
            current = self._load(timesheet.timesheet_id)
            if current.status is stage.source and stage.source is TimesheetStatus.DRAFT:
                # Still a draft, so someone clocked in again since the check.
                raise InvalidStateError(OPEN_ENTRIES_MESSAGE)
            logger.info(
                "timesheet_transition_lost",
                timesheet_id=timesheet.timesheet_id,
                expected=stage.source.value,
                found=current.status.value,
                user_id=actor.user_id,
            )
            raise InvalidStateError(stage.invalid_state_message)

        # The write is committed; build the result from what was written.
        updated = replace(timesheet, status=stage.target, **changes)
        return self._announce(updated, from_status=stage.source, actor=actor)

    def _announce(self, updated: Timesheet, *, from_status: TimesheetStatus, actor: Actor) -> Timesheet:
        logger.info(
            "timesheet_transition",
            timesheet_id=updated.timesheet_id,
            shift_id=updated.shift_id,
            from_status=from_status.value,
            to_status=updated.status.value,
            user_id=actor.user_id,
        )
        self._notifier.timesheet_status_changed(updated)
        return updated
