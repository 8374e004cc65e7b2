from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ValidationError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``.

    Inside ``conn_factory.transaction()`` the shared connection is reused and
    commit/rollback is left to the transaction owner.
    """

    shared = conn_factory.active_connection
    if shared is not None:
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def unique_violation(message: str):
    """Turn a duplicate-key error from the wrapped statement into ValidationError."""

    try:
        yield
    except mysql.connector.IntegrityError as exc:
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise ValidationError(message) from exc
        raise


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_bool(value: Any) -> bool:
    """MySQL TINYINT(1) comes back as int; be tolerant of None/str too."""

    if value is None:
        return False
    if isinstance(value, (bytes, str)):
        return str(value.decode() if isinstance(value, bytes) else value).strip() not in {"", "0", "false"}
    return bool(value)


def dump_json(value: Optional[dict]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, default=str)


def load_json(value: Any) -> Optional[dict]:
    if value is None or value == "":
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def build_set_clause(changes: Dict[str, Any], allowed: Dict[str, str]) -> tuple[str, list]:
    """Map domain field names to columns for an UPDATE ... SET clause."""

    parts: list[str] = []
    params: list[Any] = []
    for field_name, value in changes.items():
        column = allowed.get(field_name)
        if column is None:
            raise KeyError(field_name)
        parts.append(f"{column}=%s")
        params.append(value.value if hasattr(value, "value") else value)
    return ", ".join(parts), params
