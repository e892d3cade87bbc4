from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ...authorization.identity import Actor
from ...authorization.policy import Action
from ...core.enums import TimesheetStatus
from ..model import Timesheet
from ..repository import TimesheetRepository
from .base import ApprovalStage


class ManagerApprovalStage(ApprovalStage):
    """Final approval; completes the timesheet and its shift."""

    source = TimesheetStatus.PENDING_MANAGER_APPROVAL
    target = TimesheetStatus.COMPLETED
    action = Action.FINALIZE_TIMESHEET
    invalid_state_message = "Timesheet is not awaiting final approval"

    def changes(self, *, actor: Actor, now: datetime, notes: Optional[str]) -> Dict[str, Any]:
        return {
            "manager_approved_by": actor.user_id,
            "manager_approved_at": now,
            "manager_notes": notes,
        }

    def apply(self, timesheets: TimesheetRepository, *, timesheet: Timesheet, changes: Dict[str, Any]) -> bool:
        return timesheets.finalize(
            timesheet_id=timesheet.timesheet_id,
            approved_by=changes["manager_approved_by"],
            approved_at=changes["manager_approved_at"],
            notes=changes["manager_notes"],
        )
