from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Employee, EmployeeDraft


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def lock_by_id(self, employee_id: int) -> Optional[Employee]:
        """Read the employee and hold its row until the enclosing transaction ends."""

        raise NotImplementedError

    def list_employees(self, *, archived: bool, department_id: Optional[int] = None) -> Sequence[Employee]:
        raise NotImplementedError

    def create_employee(self, draft: EmployeeDraft) -> int:
        raise NotImplementedError

    def update_employee(self, employee_id: int, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def set_archived(self, employee_id: int) -> bool:
        """Flip ``is_archived`` to true; False if already archived or missing."""

        raise NotImplementedError

    def delete_by_id(self, employee_id: int) -> bool:
        raise NotImplementedError
