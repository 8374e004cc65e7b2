from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import RegistrationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import RegistrationRequest
from .repository import RegistrationRepository

_COLUMNS = "request_id, email, full_name, password_hash, role, status, created_at, updated_at"


def _request(row: dict) -> RegistrationRequest:
    return RegistrationRequest(
        request_id=int(row["request_id"]),
        email=row["email"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=row["role"],
        status=RegistrationStatus(row["status"]),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLRegistrationRepository(RegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[RegistrationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM registration_requests WHERE request_id=%s", (int(request_id),))
            row = fetchone(cur)
            return _request(row) if row else None

    def get_pending_by_email(self, email: str) -> Optional[RegistrationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM registration_requests WHERE email=%s AND status=%s LIMIT 1",
                (email, RegistrationStatus.PENDING.value),
            )
            row = fetchone(cur)
            return _request(row) if row else None

    def list_requests(self, *, status: Optional[RegistrationStatus] = None) -> Sequence[RegistrationRequest]:
        sql = f"SELECT {_COLUMNS} FROM registration_requests"
        params: tuple = ()
        if status is not None:
            sql += " WHERE status=%s"
            params = (RegistrationStatus(status).value,)
        sql += " ORDER BY created_at DESC, request_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_request(r) for r in fetchall(cur)]

    def create_request(self, *, email: str, full_name: str, password_hash: str, role: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO registration_requests(email, full_name, password_hash, role) VALUES(%s,%s,%s,%s)",
                (email, full_name, password_hash, role),
            )
            return int(cur.lastrowid)

    def set_status(self, request_id: int, status: RegistrationStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE registration_requests SET status=%s WHERE request_id=%s AND status=%s",
                (RegistrationStatus(status).value, int(request_id), RegistrationStatus.PENDING.value),
            )
            return cur.rowcount > 0
