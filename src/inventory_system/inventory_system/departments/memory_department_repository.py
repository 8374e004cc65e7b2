from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from ..database.memory import MemoryStore
from .model import Department
from .repository import DepartmentRepository


class MemoryDepartmentRepository(DepartmentRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, Department]:
        return self._store.table("departments")

    def list_all(self) -> Sequence[Department]:
        return sorted(self._rows().values(), key=lambda d: d.name)

    def get_by_id(self, department_id: int) -> Optional[Department]:
        return self._rows().get(int(department_id))

    def get_by_name(self, name: str) -> Optional[Department]:
        return next((d for d in self._rows().values() if d.name == name), None)

    def create_department(self, *, name: str) -> int:
        if self.get_by_name(name):
            raise ValidationError(f"Department '{name}' already exists")
        did = self._store.next_id("departments")
        self._rows()[did] = Department(department_id=did, name=name, created_at=self._store.now())
        return did
