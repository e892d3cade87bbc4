from __future__ import annotations

from typing import Optional

from ..core.enums import ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Shift
from .repository import ShiftRepository


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_id, title, company_id, starts_at, ends_at, status
                FROM shifts
                WHERE shift_id=%s
                """,
                (int(shift_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Shift(
                shift_id=int(r["shift_id"]),
                title=r["title"],
                company_id=int(r["company_id"]) if r.get("company_id") is not None else None,
                starts_at=r["starts_at"],
                ends_at=r["ends_at"],
                status=ShiftStatus(r["status"]),
            )
