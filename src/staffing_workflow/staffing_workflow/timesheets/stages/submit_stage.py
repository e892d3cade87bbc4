from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ...authorization.identity import Actor
from ...authorization.policy import Action
from ...core.enums import TimesheetStatus
from ..model import Timesheet
from ..repository import TimesheetRepository
from .base import ApprovalStage


class SubmitStage(ApprovalStage):
    """Crew chief hands the finished shift over for approval."""

    source = TimesheetStatus.DRAFT
    target = TimesheetStatus.PENDING_SUPERVISOR_APPROVAL
    action = Action.SUBMIT_TIMESHEET
    invalid_state_message = "Timesheet has already been submitted"

    def changes(self, *, actor: Actor, now: datetime, notes: Optional[str]) -> Dict[str, Any]:
        return {"submitted_by": actor.user_id, "submitted_at": now}

    def apply(self, timesheets: TimesheetRepository, *, timesheet: Timesheet, changes: Dict[str, Any]) -> bool:
        return timesheets.submit(
            timesheet_id=timesheet.timesheet_id,
            submitted_by=changes["submitted_by"],
            submitted_at=changes["submitted_at"],
        )
