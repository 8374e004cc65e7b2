from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import mysql.connector

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation, except inside
    ``transaction()`` where one connection is shared by every repository call.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._active: ContextVar[Any] = ContextVar(f"active_conn_{id(self)}", default=None)

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
        )

    @property
    def active_connection(self):
        """Connection bound by an enclosing ``transaction()``, if any."""

        return self._active.get()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._active.get() is not None:
            # Nested block joins the outer transaction.
            yield
            return

        conn = self.connect()
        token = self._active.set(conn)
        try:
            conn.start_transaction()
            yield
            conn.commit()
        except Exception:
            logger.warning("Rolling back transaction", exc_info=True)
            conn.rollback()
            raise
        finally:
            self._active.reset(token)
            conn.close()
