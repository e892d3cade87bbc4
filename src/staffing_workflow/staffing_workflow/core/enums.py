from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of user roles used for authorization."""

    ADMIN = "Admin"
    CREW_CHIEF = "CrewChief"
    STAFF = "Staff"
    EMPLOYEE = "Employee"
    COMPANY_USER = "CompanyUser"


class AssignmentStatus(str, Enum):
    """Lifecycle of one worker's placement on a shift."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    NO_SHOW = "NO_SHOW"
    SHIFT_ENDED = "SHIFT_ENDED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_ASSIGNMENT_STATUSES


TERMINAL_ASSIGNMENT_STATUSES = frozenset({AssignmentStatus.NO_SHOW, AssignmentStatus.SHIFT_ENDED})


class TimesheetStatus(str, Enum):
    """Approval chain, declared in the order it is walked.

    REJECTED is a dead end reachable from either pending stage.
    """

    DRAFT = "DRAFT"
    PENDING_SUPERVISOR_APPROVAL = "PENDING_SUPERVISOR_APPROVAL"
    PENDING_MANAGER_APPROVAL = "PENDING_MANAGER_APPROVAL"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (TimesheetStatus.COMPLETED, TimesheetStatus.REJECTED)

    @property
    def is_awaiting_approval(self) -> bool:
        return self in (TimesheetStatus.PENDING_SUPERVISOR_APPROVAL, TimesheetStatus.PENDING_MANAGER_APPROVAL)


class ShiftStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class NoopReason(str, Enum):
    """Why a lifecycle call succeeded without changing anything."""

    ALREADY_TERMINAL = "ALREADY_TERMINAL"
    NO_OPEN_ENTRY = "NO_OPEN_ENTRY"
