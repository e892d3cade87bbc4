from __future__ import annotations

from datetime import datetime
from typing import Any, Collection, Dict, Optional, Sequence

import mysql.connector

from ..core.constants import CREW_CHIEF_ROLE_CODE
from ..core.enums import AssignmentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import Assignment, ShiftEndResult, TimeEntry
from .repository import AssignmentRepository

NON_TERMINAL = tuple(s.value for s in AssignmentStatus if not s.is_terminal)

_ASSIGNMENT_COLUMNS = "assignment_id, shift_id, user_id, role_code, status"
_ENTRY_COLUMNS = "time_entry_id, assignment_id, entry_number, clock_in, clock_out, is_active"


def _to_assignment(r: Dict[str, Any]) -> Assignment:
    return Assignment(
        assignment_id=int(r["assignment_id"]),
        shift_id=int(r["shift_id"]),
        user_id=int(r["user_id"]),
        status=AssignmentStatus(r["status"]),
        role_code=r["role_code"],
    )


def _to_entry(r: Dict[str, Any]) -> TimeEntry:
    return TimeEntry(
        time_entry_id=int(r["time_entry_id"]),
        assignment_id=int(r["assignment_id"]),
        entry_number=int(r["entry_number"]),
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        is_active=bool(r["is_active"]),
    )


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Reads --------
    def get_by_id(self, assignment_id: int) -> Optional[Assignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ASSIGNMENT_COLUMNS} FROM assignments WHERE assignment_id=%s",
                (int(assignment_id),),
            )
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def list_for_shift(
        self,
        shift_id: int,
        *,
        exclude_statuses: Collection[AssignmentStatus] = (),
    ) -> Sequence[Assignment]:
        clauses = ["shift_id=%s"]
        params: list[object] = [int(shift_id)]
        if exclude_statuses:
            excluded = [s.value for s in exclude_statuses]
            clauses.append(f"status NOT IN ({in_clause(excluded)})")
            params.extend(excluded)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM assignments
                WHERE {" AND ".join(clauses)}
                ORDER BY assignment_id
                """,
                tuple(params),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def is_crew_chief_for_shift(self, *, user_id: int, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found
                FROM assignments
                WHERE shift_id=%s AND user_id=%s AND role_code=%s
                LIMIT 1
                """,
                (int(shift_id), int(user_id), CREW_CHIEF_ROLE_CODE),
            )
            return fetchone(cur) is not None

    def list_entries(self, assignment_id: int) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM time_entries
                WHERE assignment_id=%s
                ORDER BY entry_number
                """,
                (int(assignment_id),),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def get_open_entry(self, assignment_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM time_entries WHERE assignment_id=%s AND is_active=1",
                (int(assignment_id),),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def count_open_entries_for_shift(self, shift_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS open_entries
                FROM time_entries te
                JOIN assignments a ON a.assignment_id = te.assignment_id
                WHERE a.shift_id=%s AND te.is_active=1
                """,
                (int(shift_id),),
            )
            r = fetchone(cur)
            return int(r["open_entries"]) if r else 0

    # -------- Conditional writes --------
    def open_entry(self, *, assignment_id: int, clock_in: datetime, max_entries: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (conn, cur):
            # Also takes the row lock that serializes clock-ins on this assignment.
            cur.execute(
                f"""
                UPDATE assignments SET status=%s
                WHERE assignment_id=%s AND status IN ({in_clause(NON_TERMINAL)})
                """,
                (AssignmentStatus.ACTIVE.value, int(assignment_id), *NON_TERMINAL),
            )
            if cur.rowcount == 0:
                conn.rollback()
                return None

            cur.execute(
                """
                SELECT COUNT(*) AS entries,
                       COALESCE(MAX(entry_number), 0) AS last_number,
                       COALESCE(SUM(is_active), 0) AS open_entries
                FROM time_entries
                WHERE assignment_id=%s
                """,
                (int(assignment_id),),
            )
            stats = fetchone(cur) or {}
            if int(stats.get("open_entries") or 0) > 0 or int(stats.get("entries") or 0) >= int(max_entries):
                conn.rollback()
                return None

            entry_number = int(stats.get("last_number") or 0) + 1
            try:
                cur.execute(
                    """
                    INSERT INTO time_entries(assignment_id, entry_number, clock_in, is_active)
                    VALUES(%s,%s,%s,1)
                    """,
                    (int(assignment_id), entry_number, clock_in),
                )
            except mysql.connector.IntegrityError as e:
                if not is_duplicate_key(e):
                    raise
                conn.rollback()
                return None

            return TimeEntry(
                time_entry_id=int(cur.lastrowid),
                assignment_id=int(assignment_id),
                entry_number=entry_number,
                clock_in=clock_in,
                clock_out=None,
                is_active=True,
            )

    def close_open_entry(self, *, assignment_id: int, clock_out: datetime) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._close_open(cur, int(assignment_id), clock_out)

    def mark_no_show(self, *, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE assignments SET status=%s
                WHERE assignment_id=%s
                  AND status IN ({in_clause(NON_TERMINAL)})
                  AND NOT EXISTS (
                      SELECT 1 FROM time_entries te
                      WHERE te.assignment_id=%s
                  )
                """,
                (AssignmentStatus.NO_SHOW.value, int(assignment_id), *NON_TERMINAL, int(assignment_id)),
            )
            return cur.rowcount > 0

    def end_assignment(self, *, assignment_id: int, ended_at: datetime) -> Optional[ShiftEndResult]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE assignments SET status=%s
                WHERE assignment_id=%s AND status IN ({in_clause(NON_TERMINAL)})
                """,
                (AssignmentStatus.SHIFT_ENDED.value, int(assignment_id), *NON_TERMINAL),
            )
            if cur.rowcount == 0:
                return None
            closed = self._close_open(cur, int(assignment_id), ended_at)
            return ShiftEndResult(closed_entry=closed)

    @staticmethod
    def _close_open(cur, assignment_id: int, clock_out: datetime) -> Optional[TimeEntry]:
        cur.execute(
            f"""
            SELECT {_ENTRY_COLUMNS}
            FROM time_entries
            WHERE assignment_id=%s AND is_active=1
            FOR UPDATE
            """,
            (assignment_id,),
        )
        r = fetchone(cur)
        if not r:
            return None

        cur.execute(
            """
            UPDATE time_entries SET clock_out=%s, is_active=0
            WHERE time_entry_id=%s AND is_active=1
            """,
            (clock_out, int(r["time_entry_id"])),
        )
        if cur.rowcount == 0:
            return None

        opened = _to_entry(r)
        return TimeEntry(
            time_entry_id=opened.time_entry_id,
            assignment_id=opened.assignment_id,
            entry_number=opened.entry_number,
            clock_in=opened.clock_in,
            clock_out=clock_out,
            is_active=False,
        )
