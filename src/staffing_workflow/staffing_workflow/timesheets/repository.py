from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Timesheet


class TimesheetRepository(Protocol):
    """Persistence port for timesheets.

    Each transition is a single conditional write on the current status and
    returns False when the predicate matched nothing.
    """

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def get_by_shift(self, shift_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def ensure_draft(self, shift_id: int) -> Timesheet:
        """Return the shift's timesheet, creating it in DRAFT if missing."""
        raise NotImplementedError

    def submit(self, *, timesheet_id: int, submitted_by: int, submitted_at: datetime) -> bool:
        """DRAFT -> PENDING_SUPERVISOR_APPROVAL, only while no entry on the shift is open."""
        raise NotImplementedError

    def approve_supervisor(
        self, *, timesheet_id: int, approved_by: int, approved_at: datetime, notes: Optional[str]
    ) -> bool:
        raise NotImplementedError

    def finalize(self, *, timesheet_id: int, approved_by: int, approved_at: datetime, notes: Optional[str]) -> bool:
        """PENDING_MANAGER_APPROVAL -> COMPLETED, and the shift becomes COMPLETED with it."""
        raise NotImplementedError

    def reject(self, *, timesheet_id: int, rejected_by: int, rejected_at: datetime, reason: str) -> bool:
        """Either pending stage -> REJECTED."""
        raise NotImplementedError
