from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import format_ts
from ..core.constants import WORKER_ROLE_CODE
from ..core.enums import AssignmentStatus, NoopReason


@dataclass(frozen=True)
class Assignment:
    """Domain entity: one worker's placement on one shift."""

    assignment_id: int
    shift_id: int
    user_id: int
    status: AssignmentStatus
    role_code: str = WORKER_ROLE_CODE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assignment_id": self.assignment_id,
            "shift_id": self.shift_id,
            "user_id": self.user_id,
            "role_code": self.role_code,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class TimeEntry:
    """One clock-in/clock-out interval; open while ``clock_out`` is None."""

    time_entry_id: int
    assignment_id: int
    entry_number: int
    clock_in: datetime
    clock_out: Optional[datetime]
    is_active: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time_entry_id": self.time_entry_id,
            "assignment_id": self.assignment_id,
            "entry_number": self.entry_number,
            "clock_in": format_ts(self.clock_in),
            "clock_out": format_ts(self.clock_out),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class ShiftEndResult:
    """What a committed end-of-shift closed alongside the status change."""

    closed_entry: Optional[TimeEntry] = None


@dataclass(frozen=True)
class TransitionOutcome:
    """Result of a lifecycle call.

    ``changed`` is False for the benign no-ops (already terminal, nothing to
    clock out); ``noop_reason`` says which.
    """

    assignment: Assignment
    changed: bool
    noop_reason: Optional[NoopReason] = None
    time_entry: Optional[TimeEntry] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assignment": self.assignment.to_dict(),
            "changed": self.changed,
            "noop_reason": self.noop_reason.value if self.noop_reason else None,
            "time_entry": self.time_entry.to_dict() if self.time_entry else None,
        }
