from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import format_ts
from ..core.enums import TimesheetStatus


@dataclass(frozen=True)
class Timesheet:
    """Domain entity: the approvable work record of one shift."""

    timesheet_id: int
    shift_id: int
    status: TimesheetStatus = TimesheetStatus.DRAFT
    submitted_by: Optional[int] = None
    submitted_at: Optional[datetime] = None
    supervisor_approved_by: Optional[int] = None
    supervisor_approved_at: Optional[datetime] = None
    supervisor_notes: Optional[str] = None
    manager_approved_by: Optional[int] = None
    manager_approved_at: Optional[datetime] = None
    manager_notes: Optional[str] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.timesheet_id,
            "shift_id": self.shift_id,
            "status": self.status.value,
            "submitted_by": self.submitted_by,
            "submitted_at": format_ts(self.submitted_at),
            "supervisor_approved_by": self.supervisor_approved_by,
            "supervisor_approved_at": format_ts(self.supervisor_approved_at),
            "supervisor_notes": self.supervisor_notes,
            "manager_approved_by": self.manager_approved_by,
            "manager_approved_at": format_ts(self.manager_approved_at),
            "manager_notes": self.manager_notes,
            "rejected_by": self.rejected_by,
            "rejected_at": format_ts(self.rejected_at),
            "rejection_reason": self.rejection_reason,
        }
