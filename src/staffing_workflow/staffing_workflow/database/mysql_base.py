from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import TransientStorageError
from .connection import DatabaseConnection

TRANSIENT_ERRNOS = frozenset(
    {
        errorcode.ER_LOCK_WAIT_TIMEOUT,
        errorcode.ER_LOCK_DEADLOCK,
        errorcode.CR_SERVER_GONE_ERROR,
        errorcode.CR_SERVER_LOST,
        errorcode.CR_CONN_HOST_ERROR,
    }
)


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (mysql.connector.errors.OperationalError, mysql.connector.errors.InterfaceError)):
        return True
    if isinstance(exc, mysql.connector.errors.PoolError):
        return True
    return getattr(exc, "errno", None) in TRANSIENT_ERRNOS


def is_duplicate_key(exc: BaseException) -> bool:
    return isinstance(exc, mysql.connector.errors.IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One transaction: commit on normal exit, rollback on error.

    Timeouts and dropped connections are re-raised as ``TransientStorageError``
    so callers can tell a retryable failure from a business-rule failure.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise TransientStorageError(f"Database unavailable: {e.msg}") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        _safe_rollback(conn)
        if is_transient(e):
            raise TransientStorageError(f"Storage operation failed: {e.msg}") from e
        raise
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        # The connection is already gone; the server discards the transaction.
        pass


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholder list for ``IN (...)``: ``%s,%s,%s``."""

    return ",".join(["%s"] * len(values))
