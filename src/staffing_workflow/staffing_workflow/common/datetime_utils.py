from __future__ import annotations

from datetime import datetime
from typing import Optional


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def format_ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="seconds") if value else None
