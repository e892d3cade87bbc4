from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ...core.enums import TimesheetStatus
from ...core.exceptions import InvalidStateError
from .base import ApprovalStage
from .manager_stage import ManagerApprovalStage
from .submit_stage import SubmitStage
from .supervisor_stage import SupervisorApprovalStage


def _default_stages() -> Dict[TimesheetStatus, ApprovalStage]:
    stages = (SubmitStage(), SupervisorApprovalStage(), ManagerApprovalStage())
    return {s.source: s for s in stages}


@dataclass
class ApprovalStageFactory:
    """Factory Pattern: pick the stage that leaves a given status."""

    stages: Dict[TimesheetStatus, ApprovalStage] = field(default_factory=_default_stages)

    def for_status(self, status: TimesheetStatus) -> ApprovalStage:
        if status is TimesheetStatus.REJECTED:
            raise InvalidStateError("Timesheet has been rejected")
        stage = self.stages.get(status)
        if stage is None or status.is_terminal:
            raise InvalidStateError("Timesheet is already completed")
        return stage
