from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple

from ..audit.recorder import AuditRecorder
from ..common.serialization import snapshot
from ..common.validators import require_non_empty
from ..core.enums import AuditAction, EntityType
from ..core.exceptions import ValidationError
from ..database.unit_of_work import UnitOfWork
from ..employees.model import EmployeeCard
from ..employees.repository import EmployeeRepository
from ..equipment.repository import EquipmentRepository
from ..rbac.authorizer import Authorizer
from ..rbac.model import Actor
from .model import Department
from .repository import DepartmentRepository


@dataclass(frozen=True)
class DepartmentRoster:
    department: Department
    employees: Tuple[EmployeeCard, ...] = field(default_factory=tuple)


class DepartmentService:
    def __init__(
        self,
        departments: DepartmentRepository,
        employees: EmployeeRepository,
        equipment: EquipmentRepository,
        audit: AuditRecorder,
        authorizer: Authorizer,
        uow: UnitOfWork,
    ):
        self._departments = departments
        self._employees = employees
        self._equipment = equipment
        self._audit = audit
        self._authorizer = authorizer
        self._uow = uow

    def list_all(self) -> Sequence[Department]:
        return self._departments.list_all()

    def list_with_employees(self) -> list[DepartmentRoster]:
        """Departments with their active employees and what each one holds."""

        rosters = []
        for department in self._departments.list_all():
            cards = tuple(
                EmployeeCard(
                    employee=e,
                    equipment=tuple(self._equipment.list_by_employee(e.employee_id)),
                    department=department,
                )
                for e in self._employees.list_employees(archived=False, department_id=department.department_id)
            )
            rosters.append(DepartmentRoster(department=department, employees=cards))
        return rosters

    def create_department(self, *, actor: Actor, name: str) -> Department:
        self._authorizer.require(actor, "departments.manage")

        name = require_non_empty(name, "Department name")
        if self._departments.get_by_name(name):
            raise ValidationError(f"Department '{name}' already exists")

        with self._uow.transaction():
            department_id = self._departments.create_department(name=name)
            department = self._departments.get_by_id(department_id)
            self._audit.record(
                action=AuditAction.CREATE,
                entity_type=EntityType.DEPARTMENT,
                entity_id=department_id,
                actor_user_id=actor.user_id,
                description=f"Created department {name}",
                new_value=snapshot(department),
            )
        return department
