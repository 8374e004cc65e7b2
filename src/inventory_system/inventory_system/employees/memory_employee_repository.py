from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Mapping, Optional, Sequence

from ..database.memory import MemoryStore
from .model import EDITABLE_FIELDS, Employee, EmployeeDraft
from .repository import EmployeeRepository


class MemoryEmployeeRepository(EmployeeRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, Employee]:
        return self._store.table("employees")

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._rows().get(int(employee_id))

    def lock_by_id(self, employee_id: int) -> Optional[Employee]:
        # The store transaction already serialises writers.
        return self._rows().get(int(employee_id))

    def list_employees(self, *, archived: bool, department_id: Optional[int] = None) -> Sequence[Employee]:
        rows = [
            e
            for e in self._rows().values()
            if e.is_archived == archived and (department_id is None or e.department_id == int(department_id))
        ]
        return sorted(rows, key=lambda e: e.full_name)

    def create_employee(self, draft: EmployeeDraft) -> int:
        eid = self._store.next_id("employees")
        self._rows()[eid] = Employee(employee_id=eid, created_at=self._store.now(), **asdict(draft))
        return eid

    def update_employee(self, employee_id: int, changes: Mapping[str, Any]) -> bool:
        employee = self.get_by_id(employee_id)
        if not employee:
            return False
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise KeyError(sorted(unknown)[0])
        self._rows()[employee.employee_id] = replace(employee, **dict(changes))
        return True

    def set_archived(self, employee_id: int) -> bool:
        employee = self.get_by_id(employee_id)
        if not employee or employee.is_archived:
            return False
        self._rows()[employee.employee_id] = replace(employee, is_archived=True)
        return True

    def delete_by_id(self, employee_id: int) -> bool:
        eid = int(employee_id)
        # Mirrors the equipment.employee_id foreign key.
        if any(item.employee_id == eid for item in self._store.table("equipment").values()):
            raise RuntimeError(f"employee {eid} still holds equipment")
        return self._rows().pop(eid, None) is not None
