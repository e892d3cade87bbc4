from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from ...authorization.identity import Actor
from ...authorization.policy import Action
from ...core.enums import TimesheetStatus
from ..model import Timesheet
from ..repository import TimesheetRepository


class ApprovalStage(ABC):
    """Strategy Pattern: one forward step of the timesheet approval chain."""

    source: TimesheetStatus
    target: TimesheetStatus
    action: Action
    invalid_state_message: str

    @abstractmethod
    def changes(self, *, actor: Actor, now: datetime, notes: Optional[str]) -> Dict[str, Any]:
        """Timesheet fields written alongside ``status``, keyed by model attribute."""
        raise NotImplementedError

    @abstractmethod
    def apply(self, timesheets: TimesheetRepository, *, timesheet: Timesheet, changes: Dict[str, Any]) -> bool:
        """Run the conditional write; False when the timesheet was not in ``source``."""
        raise NotImplementedError
