from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Mapping, Optional, Sequence

from ..audit.recorder import AuditRecorder
from ..common.serialization import snapshot
from ..common.validators import optional_text, parse_int, require_non_empty
from ..core.enums import AuditAction, EntityType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..departments.repository import DepartmentRepository
from ..equipment.service import EquipmentService
from ..notifications.service import NotificationService
from ..rbac.authorizer import Authorizer
from ..rbac.model import Actor
from .model import BASIC_FIELDS, DOCUMENT_FIELDS, EDITABLE_FIELDS, Employee, EmployeeCard, EmployeeDraft
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("full_name", "position", "grade")


class EmployeeService:
    """Use case: employee roster, Active -> Archived lifecycle."""

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        equipment: EquipmentService,
        audit: AuditRecorder,
        notifications: NotificationService,
        authorizer: Authorizer,
        uow: UnitOfWork,
    ):
        self._employees = employees
        self._departments = departments
        self._equipment = equipment
        self._audit = audit
        self._notifications = notifications
        self._authorizer = authorizer
        self._uow = uow

    # -------- reads --------
    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get_card(self, employee_id: int) -> EmployeeCard:
        employee = self.get(employee_id)
        department = None
        if employee.department_id is not None:
            department = self._departments.get_by_id(employee.department_id)
        equipment = () if employee.is_archived else tuple(self._equipment.list_by_employee(employee.employee_id))
        return EmployeeCard(employee=employee, equipment=equipment, department=department)

    def list_active(self, department_id: Optional[int] = None) -> Sequence[Employee]:
        return self._employees.list_employees(archived=False, department_id=department_id)

    def list_archived(self) -> Sequence[Employee]:
        return self._employees.list_employees(archived=True)

    # -------- helpers --------
    def _clean(self, key: str, value: Any) -> Any:
        if key in REQUIRED_FIELDS:
            return require_non_empty(value, key.replace("_", " ").capitalize())
        if key == "department_id":
            if value in (None, ""):
                return None
            department_id = parse_int(value, "Department id")
            if not self._departments.get_by_id(department_id):
                raise NotFoundError("Department not found")
            return department_id
        return optional_text(value)

    def _notify(self, actor: Actor, *, title: str, message: str, kind: str, employee_id: int) -> None:
        self._notifications.notify_others(
            actor_user_id=actor.user_id, title=title, message=message, kind=kind, related_id=employee_id
        )

    # -------- mutations --------
    def create_employee(self, *, actor: Actor, draft: EmployeeDraft) -> Employee:
        self._authorizer.require(actor, "employees.create")

        values = asdict(draft)
        if not self._authorizer.authorize(actor.role, "documents.view"):
            values.update(dict.fromkeys(DOCUMENT_FIELDS))
        clean = {key: self._clean(key, value) for key, value in values.items()}
        with self._uow.transaction():
            employee_id = self._employees.create_employee(EmployeeDraft(**clean))
            employee = self.get(employee_id)
            self._audit.record(
                action=AuditAction.CREATE,
                entity_type=EntityType.EMPLOYEE,
                entity_id=employee_id,
                actor_user_id=actor.user_id,
                description=f"Added employee {employee.full_name}",
                new_value=snapshot(employee),
            )
            self._notify(
                actor,
                title="New employee",
                message=f"Added employee: {employee.full_name}",
                kind="employee_create",
                employee_id=employee_id,
            )
        logger.info("Employee %s created by user %s", employee_id, actor.user_id)
        return employee

    def update_employee(self, *, actor: Actor, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        """Edit basic fields; personal/document fields need ``documents.view`` too.

        Document fields sent without that permission are dropped, not rejected.
        """

        self._authorizer.require(actor, "employees.edit")

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown or read-only employee field(s): {', '.join(sorted(unknown))}")

        allowed = set(BASIC_FIELDS)
        if self._authorizer.authorize(actor.role, "documents.view"):
            allowed |= DOCUMENT_FIELDS
        clean = {key: self._clean(key, value) for key, value in changes.items() if key in allowed}

        old = self.get(employee_id)
        if old.is_archived:
            raise ConflictError("Archived employees cannot be edited")
        if not clean:
            return old

        with self._uow.transaction():
            self._employees.update_employee(old.employee_id, clean)
            new = self.get(old.employee_id)
            self._audit.record(
                action=AuditAction.UPDATE,
                entity_type=EntityType.EMPLOYEE,
                entity_id=old.employee_id,
                actor_user_id=actor.user_id,
                description=f"Updated employee {new.full_name}",
                old_value=snapshot(old, *sorted(clean)),
                new_value=snapshot(new, *sorted(clean)),
            )
            self._notify(
                actor,
                title="Employee changed",
                message=f"Updated employee: {new.full_name}",
                kind="employee_update",
                employee_id=old.employee_id,
            )
        return new

    def archive_employee(self, *, actor: Actor, employee_id: int) -> Employee:
        """Archive an employee and return all their equipment to the warehouse.

        The cascade and the archive flag commit together or not at all.
        Archiving an archived employee returns it unchanged.
        """

        self._authorizer.require(actor, "employees.archive")

        employee = self.get(employee_id)
        if employee.is_archived:
            return employee

        with self._uow.transaction():
            # Assignments to this employee wait on the row until the cascade commits.
            locked = self._employees.lock_by_id(employee.employee_id)
            if not locked:
                raise NotFoundError("Employee not found")
            if locked.is_archived:
                raise ConflictError("Employee was archived concurrently")
            released = self._equipment.release_employee_equipment(actor=actor, employee_id=employee.employee_id)
            if not self._employees.set_archived(employee.employee_id):
                raise ConflictError("Employee was archived concurrently")
            self._audit.record(
                action=AuditAction.ARCHIVE,
                entity_type=EntityType.EMPLOYEE,
                entity_id=employee.employee_id,
                actor_user_id=actor.user_id,
                description=f"Archived employee {employee.full_name}",
                old_value={"is_archived": False},
                new_value={"is_archived": True, "released_equipment": [e.equipment_id for e in released]},
            )
        logger.info(
            "Employee %s archived by user %s, %d item(s) returned to warehouse",
            employee.employee_id,
            actor.user_id,
            len(released),
        )

        self._notify(
            actor,
            title="Employee archived",
            message=f"Archived employee: {employee.full_name}",
            kind="employee_archive",
            employee_id=employee.employee_id,
        )
        return self.get(employee.employee_id)

    def delete_employee(self, *, actor: Actor, employee_id: int) -> None:
        self._authorizer.require(actor, "employees.edit")

        employee = self.get(employee_id)
        if employee.is_archived:
            raise ConflictError("Archived employees cannot be deleted")

        with self._uow.transaction():
            if not self._employees.lock_by_id(employee.employee_id):
                raise NotFoundError("Employee not found")
            self._equipment.release_employee_equipment(actor=actor, employee_id=employee.employee_id)
            if not self._employees.delete_by_id(employee.employee_id):
                raise NotFoundError("Employee not found")
            self._audit.record(
                action=AuditAction.DELETE,
                entity_type=EntityType.EMPLOYEE,
                entity_id=employee.employee_id,
                actor_user_id=actor.user_id,
                description=f"Deleted employee {employee.full_name}",
                old_value=snapshot(employee),
            )
        logger.info("Employee %s deleted by user %s", employee.employee_id, actor.user_id)
