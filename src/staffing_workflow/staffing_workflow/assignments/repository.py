from __future__ import annotations

from datetime import datetime
from typing import Collection, Optional, Protocol, Sequence

from ..core.enums import AssignmentStatus
from .model import Assignment, ShiftEndResult, TimeEntry


class AssignmentRepository(Protocol):
    """Storage for assignments and their time entries.

    Mutations are conditional: each one re-checks its precondition inside the
    write and reports whether it matched, so concurrent callers cannot both win.
    """

    def get_by_id(self, assignment_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def list_for_shift(
        self,
        shift_id: int,
        *,
        exclude_statuses: Collection[AssignmentStatus] = (),
    ) -> Sequence[Assignment]:
        raise NotImplementedError

    def is_crew_chief_for_shift(self, *, user_id: int, shift_id: int) -> bool:
        raise NotImplementedError

    def list_entries(self, assignment_id: int) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def get_open_entry(self, assignment_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def count_open_entries_for_shift(self, shift_id: int) -> int:
        raise NotImplementedError

    def open_entry(self, *, assignment_id: int, clock_in: datetime, max_entries: int) -> Optional[TimeEntry]:
        """Start a time entry and mark the assignment ACTIVE.

        Returns None (nothing written) when the assignment is terminal, already
        has an open entry or has reached ``max_entries``.
        """

        raise NotImplementedError

    def close_open_entry(self, *, assignment_id: int, clock_out: datetime) -> Optional[TimeEntry]:
        """Close the open entry; None when there was none."""

        raise NotImplementedError

    def mark_no_show(self, *, assignment_id: int) -> bool:
        """NO_SHOW where status is non-terminal and the worker has no time entries at all."""

        raise NotImplementedError

    def end_assignment(self, *, assignment_id: int, ended_at: datetime) -> Optional[ShiftEndResult]:
        """SHIFT_ENDED plus closing any open entry, in one transaction.

        None when the assignment was already terminal.
        """

        raise NotImplementedError
