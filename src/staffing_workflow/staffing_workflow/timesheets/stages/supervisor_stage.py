from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ...authorization.identity import Actor
from ...authorization.policy import Action
from ...core.enums import TimesheetStatus
from ..model import Timesheet
from ..repository import TimesheetRepository
from .base import ApprovalStage


class SupervisorApprovalStage(ApprovalStage):
    """Client (or the shift's crew chief) signs off on the hours."""

    source = TimesheetStatus.PENDING_SUPERVISOR_APPROVAL
    target = TimesheetStatus.PENDING_MANAGER_APPROVAL
    action = Action.APPROVE_SUPERVISOR_STAGE
    invalid_state_message = "Timesheet is not awaiting supervisor approval"

    def changes(self, *, actor: Actor, now: datetime, notes: Optional[str]) -> Dict[str, Any]:
        return {
            "supervisor_approved_by": actor.user_id,
            "supervisor_approved_at": now,
            "supervisor_notes": notes,
        }

    def apply(self, timesheets: TimesheetRepository, *, timesheet: Timesheet, changes: Dict[str, Any]) -> bool:
        return timesheets.approve_supervisor(
            timesheet_id=timesheet.timesheet_id,
            approved_by=changes["supervisor_approved_by"],
            approved_at=changes["supervisor_approved_at"],
            notes=changes["supervisor_notes"],
        )
