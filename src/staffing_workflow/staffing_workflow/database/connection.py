from __future__ import annotations

from dataclasses import dataclass

import mysql.connector
from mysql.connector.constants import ClientFlag

from ..core.constants import DEFAULT_DB_TIMEOUT_SECONDS


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = DEFAULT_DB_TIMEOUT_SECONDS


class DatabaseConnection:
    """DB connection factory for one configured database.

    Note: We create short-lived connections per operation, one per request
    thread. ``FOUND_ROWS`` makes ``cursor.rowcount`` report matched rows, which
    the conditional status updates rely on.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connection_timeout),
            client_flags=[ClientFlag.FOUND_ROWS],
        )
