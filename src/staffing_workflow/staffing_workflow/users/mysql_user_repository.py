from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, full_name, username, password_hash, role, company_id, is_active"


def _to_user(r: Dict[str, Any]) -> User:
    return User(
        user_id=int(r["user_id"]),
        full_name=r["full_name"],
        username=r["username"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        company_id=int(r["company_id"]) if r.get("company_id") is not None else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            r = fetchone(cur)
            return _to_user(r) if r else None
