from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import ShiftStatus, TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, in_clause
from .model import Timesheet
from .repository import TimesheetRepository

_COLUMNS = """
    timesheet_id, shift_id, status,
    submitted_by, submitted_at,
    supervisor_approved_by, supervisor_approved_at, supervisor_notes,
    manager_approved_by, manager_approved_at, manager_notes,
    rejected_by, rejected_at, rejection_reason
"""


def _opt_int(v) -> Optional[int]:
    return int(v) if v is not None else None


def _to_timesheet(r: Dict[str, Any]) -> Timesheet:
    return Timesheet(
        timesheet_id=int(r["timesheet_id"]),
        shift_id=int(r["shift_id"]),
        status=TimesheetStatus(r["status"]),
        submitted_by=_opt_int(r.get("submitted_by")),
        submitted_at=r.get("submitted_at"),
        supervisor_approved_by=_opt_int(r.get("supervisor_approved_by")),
        supervisor_approved_at=r.get("supervisor_approved_at"),
        supervisor_notes=r.get("supervisor_notes"),
        manager_approved_by=_opt_int(r.get("manager_approved_by")),
        manager_approved_at=r.get("manager_approved_at"),
        manager_notes=r.get("manager_notes"),
        rejected_by=_opt_int(r.get("rejected_by")),
        rejected_at=r.get("rejected_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE timesheet_id=%s", (int(timesheet_id),))
            r = fetchone(cur)
            return _to_timesheet(r) if r else None

    def get_by_shift(self, shift_id: int) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_timesheet(r) if r else None

    def ensure_draft(self, shift_id: int) -> Timesheet:
        with db_cursor(self._conn_factory) as (_, cur):
            # shift_id is unique: a concurrent creator just makes this a no-op.
            cur.execute(
                """
                INSERT INTO timesheets (shift_id, status)
                VALUES (%s, %s)
                ON DUPLICATE KEY UPDATE timesheet_id=timesheet_id
                """,
                (int(shift_id), TimesheetStatus.DRAFT.value),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM timesheets WHERE shift_id=%s", (int(shift_id),))
            return _to_timesheet(fetchone(cur))

    def submit(self, *, timesheet_id: int, submitted_by: int, submitted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timesheets t
                SET t.status=%s, t.submitted_by=%s, t.submitted_at=%s
                WHERE t.timesheet_id=%s AND t.status=%s
                  AND NOT EXISTS (
                      SELECT 1
                      FROM time_entries te
                      JOIN assignments a ON a.assignment_id = te.assignment_id
                      WHERE a.shift_id = t.shift_id AND te.is_active = 1
                  )
                """,
                (
                    TimesheetStatus.PENDING_SUPERVISOR_APPROVAL.value,
                    int(submitted_by),
                    submitted_at,
                    int(timesheet_id),
                    TimesheetStatus.DRAFT.value,
                ),
            )
            return cur.rowcount > 0

    def approve_supervisor(
        self, *, timesheet_id: int, approved_by: int, approved_at: datetime, notes: Optional[str]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timesheets
                SET status=%s, supervisor_approved_by=%s, supervisor_approved_at=%s, supervisor_notes=%s
                WHERE timesheet_id=%s AND status=%s
                """,
                (
                    TimesheetStatus.PENDING_MANAGER_APPROVAL.value,
                    int(approved_by),
                    approved_at,
                    notes,
                    int(timesheet_id),
                    TimesheetStatus.PENDING_SUPERVISOR_APPROVAL.value,
                ),
            )
            return cur.rowcount > 0

    def finalize(self, *, timesheet_id: int, approved_by: int, approved_at: datetime, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE timesheets
                SET status=%s, manager_approved_by=%s, manager_approved_at=%s, manager_notes=%s
                WHERE timesheet_id=%s AND status=%s
                """,
                (
                    TimesheetStatus.COMPLETED.value,
                    int(approved_by),
                    approved_at,
                    notes,
                    int(timesheet_id),
                    TimesheetStatus.PENDING_MANAGER_APPROVAL.value,
                ),
            )
            if cur.rowcount == 0:
                return False

            cur.execute(
                """
                UPDATE shifts s
                JOIN timesheets t ON t.shift_id = s.shift_id
                SET s.status=%s
                WHERE t.timesheet_id=%s
                """,
                (ShiftStatus.COMPLETED.value, int(timesheet_id)),
            )
            return True

    def reject(self, *, timesheet_id: int, rejected_by: int, rejected_at: datetime, reason: str) -> bool:
        pending = (
            TimesheetStatus.PENDING_SUPERVISOR_APPROVAL.value,
            TimesheetStatus.PENDING_MANAGER_APPROVAL.value,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE timesheets
                SET status=%s, rejected_by=%s, rejected_at=%s, rejection_reason=%s
                WHERE timesheet_id=%s AND status IN ({in_clause(pending)})
                """,
                (
                    TimesheetStatus.REJECTED.value,
                    int(rejected_by),
                    rejected_at,
                    reason,
                    int(timesheet_id),
                    *pending,
                ),
            )
            return cur.rowcount > 0
