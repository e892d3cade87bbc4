from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class Shift:
    """Domain entity: a scheduled block of work at a job site."""

    shift_id: int
    title: str
    company_id: Optional[int]
    starts_at: datetime
    ends_at: datetime
    status: ShiftStatus = ShiftStatus.PENDING
