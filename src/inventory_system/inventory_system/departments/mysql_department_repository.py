from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_violation
from .model import Department
from .repository import DepartmentRepository


def _department(row: dict) -> Department:
    return Department(department_id=int(row["department_id"]), name=row["name"], created_at=row.get("created_at"))


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT department_id, name, created_at FROM departments ORDER BY name")
            return [_department(r) for r in fetchall(cur)]

    def get_by_id(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT department_id, name, created_at FROM departments WHERE department_id=%s",
                (int(department_id),),
            )
            row = fetchone(cur)
            return _department(row) if row else None

    def get_by_name(self, name: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT department_id, name, created_at FROM departments WHERE name=%s", (name,))
            row = fetchone(cur)
            return _department(row) if row else None

    def create_department(self, *, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur), unique_violation(f"Department '{name}' already exists"):
            cur.execute("INSERT INTO departments(name) VALUES(%s)", (name,))
            return int(cur.lastrowid)
