from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, build_set_clause, db_cursor, fetchall, fetchone
from .model import EDITABLE_FIELDS, Employee, EmployeeDraft
from .repository import EmployeeRepository

# Domain field names match column names one to one.
_COLUMNS = ", ".join(f.name for f in fields(Employee))
_DRAFT_COLUMNS = [f.name for f in fields(EmployeeDraft)]


def _employee(row: dict) -> Employee:
    data = {f.name: row.get(f.name) for f in fields(Employee)}
    data["employee_id"] = int(row["employee_id"])
    data["is_archived"] = as_bool(row.get("is_archived"))
    return Employee(**data)


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _employee(row) if row else None

    def lock_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s FOR UPDATE", (int(employee_id),))
            row = fetchone(cur)
            return _employee(row) if row else None

    def list_employees(self, *, archived: bool, department_id: Optional[int] = None) -> Sequence[Employee]:
        clauses = ["is_archived=%s"]
        params: list[object] = [int(archived)]
        if department_id is not None:
            clauses.append("department_id=%s")
            params.append(int(department_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {' AND '.join(clauses)} ORDER BY full_name",
                tuple(params),
            )
            return [_employee(r) for r in fetchall(cur)]

    def create_employee(self, draft: EmployeeDraft) -> int:
        values = asdict(draft)
        placeholders = ",".join(["%s"] * len(_DRAFT_COLUMNS))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO employees({', '.join(_DRAFT_COLUMNS)}) VALUES({placeholders})",
                tuple(values[c] for c in _DRAFT_COLUMNS),
            )
            return int(cur.lastrowid)

    def update_employee(self, employee_id: int, changes: Mapping[str, Any]) -> bool:
        if not changes:
            return self.get_by_id(employee_id) is not None
        set_clause, params = build_set_clause(dict(changes), {name: name for name in EDITABLE_FIELDS})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE employees SET {set_clause} WHERE employee_id=%s", tuple(params + [int(employee_id)]))
            return cur.rowcount > 0

    def set_archived(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET is_archived=1 WHERE employee_id=%s AND is_archived=0",
                (int(employee_id),),
            )
            return cur.rowcount > 0

    def delete_by_id(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
