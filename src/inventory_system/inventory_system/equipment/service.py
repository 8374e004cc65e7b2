from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..audit.recorder import AuditRecorder
from ..common.serialization import snapshot
from ..common.validators import optional_text, parse_cost, parse_int, require_non_empty
from ..core.enums import AuditAction, EntityType, EquipmentCategory
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..employees.repository import EmployeeRepository
from ..notifications.service import NotificationService
from ..rbac.authorizer import Authorizer
from ..rbac.model import Actor
from . import lifecycle
from .model import DETAIL_FIELDS, LIFECYCLE_FIELDS, Equipment, EquipmentDraft
from .repository import EquipmentRepository

logger = logging.getLogger(__name__)

MANAGE_EQUIPMENT = "equipment.manage"


def _category(value: Any) -> EquipmentCategory:
    if isinstance(value, EquipmentCategory):
        return value
    try:
        return EquipmentCategory(value)
    except ValueError:
        try:
            return EquipmentCategory[str(value).upper()]
        except KeyError:
            raise ValidationError(f"Unknown equipment category '{value}'")


class EquipmentService:
    """Equipment catalogue and lifecycle: Assigned / Warehouse / Decommissioned."""

    def __init__(
        self,
        equipment: EquipmentRepository,
        employees: EmployeeRepository,
        audit: AuditRecorder,
        notifications: NotificationService,
        authorizer: Authorizer,
        uow: UnitOfWork,
    ):
        self._equipment = equipment
        self._employees = employees
        self._audit = audit
        self._notifications = notifications
        self._authorizer = authorizer
        self._uow = uow

    # -------- reads --------
    def get(self, equipment_id: int) -> Equipment:
        item = self._equipment.get_by_id(int(equipment_id))
        if not item:
            raise NotFoundError("Equipment not found")
        return item

    def list_all(self) -> Sequence[Equipment]:
        return self._equipment.list_all()

    def list_by_employee(self, employee_id: int) -> Sequence[Equipment]:
        return self._equipment.list_by_employee(int(employee_id))

    def list_warehouse(self) -> Sequence[Equipment]:
        return self._equipment.list_warehouse()

    def list_decommissioned(self) -> Sequence[Equipment]:
        return self._equipment.list_decommissioned()

    # -------- helpers --------
    def _active_employee(self, employee_id: Any, *, lock: bool = False):
        employee_id = parse_int(employee_id, "Employee id")
        if lock:
            employee = self._employees.lock_by_id(employee_id)
        else:
            employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if employee.is_archived:
            raise ConflictError(f"Employee {employee.full_name} is archived")
        return employee

    def _apply(self, *, actor: Actor, old: Equipment, new: Equipment, action: AuditAction, description: str) -> Equipment:
        """Persist a lifecycle transition and audit it; no-ops are skipped.

        The write only lands if the row still matches ``old``. A new holder is
        re-checked under a row lock so an archive cannot slip in between.
        """

        if (old.employee_id, old.is_decommissioned) == (new.employee_id, new.is_decommissioned):
            return old
        with self._uow.transaction():
            if new.employee_id is not None:
                self._active_employee(new.employee_id, lock=True)
            if not self._equipment.set_placement(
                old.equipment_id,
                employee_id=new.employee_id,
                is_decommissioned=new.is_decommissioned,
                expected_employee_id=old.employee_id,
            ):
                if self._equipment.get_by_id(old.equipment_id) is None:
                    raise NotFoundError("Equipment not found")
                raise ConflictError(f"Equipment {old.inventory_number} was changed by another request")
            self._audit.record(
                action=action,
                entity_type=EntityType.EQUIPMENT,
                entity_id=old.equipment_id,
                actor_user_id=actor.user_id,
                description=description,
                old_value=snapshot(old, *LIFECYCLE_FIELDS),
                new_value=snapshot(new, *LIFECYCLE_FIELDS),
            )
        logger.info(
            "Equipment %s: %s -> %s (user %s)", old.inventory_number, old.state.value, new.state.value, actor.user_id
        )
        return self.get(old.equipment_id)

    # -------- catalogue --------
    def create_equipment(self, *, actor: Actor, draft: EquipmentDraft) -> Equipment:
        self._authorizer.require(actor, MANAGE_EQUIPMENT)

        draft = EquipmentDraft(
            name=require_non_empty(draft.name, "Name"),
            inventory_number=require_non_empty(draft.inventory_number, "Inventory number"),
            category=_category(draft.category),
            characteristics=optional_text(draft.characteristics),
            cost=parse_cost(draft.cost),
            employee_id=None if draft.employee_id is None else parse_int(draft.employee_id, "Employee id"),
        )
        if self._equipment.get_by_inventory_number(draft.inventory_number):
            raise ValidationError(f"Inventory number {draft.inventory_number} is already in use")
        if draft.employee_id is not None:
            self._active_employee(draft.employee_id)

        with self._uow.transaction():
            if draft.employee_id is not None:
                self._active_employee(draft.employee_id, lock=True)
            equipment_id = self._equipment.create_equipment(draft)
            item = self.get(equipment_id)
            self._audit.record(
                action=AuditAction.CREATE,
                entity_type=EntityType.EQUIPMENT,
                entity_id=equipment_id,
                actor_user_id=actor.user_id,
                description=f"Added equipment {item.name} ({item.inventory_number})",
                new_value=snapshot(item),
            )
            self._notifications.notify_others(
                actor_user_id=actor.user_id,
                title="New equipment",
                message=f"Added equipment: {item.name}",
                kind="equipment_create",
                related_id=equipment_id,
            )
        return item

    def update_equipment(self, *, actor: Actor, equipment_id: int, changes: Mapping[str, Any]) -> Equipment:
        self._authorizer.require(actor, MANAGE_EQUIPMENT)

        lifecycle_keys = set(changes) & set(LIFECYCLE_FIELDS)
        if lifecycle_keys:
            raise ValidationError("Use assign, return or decommission to change where equipment is")
        unknown = set(changes) - DETAIL_FIELDS
        if unknown:
            raise ValidationError(f"Unknown equipment field(s): {', '.join(sorted(unknown))}")

        old = self.get(equipment_id)
        clean: dict[str, Any] = {}
        for key, value in changes.items():
            if key in ("name", "inventory_number"):
                clean[key] = require_non_empty(value, key.replace("_", " ").capitalize())
            elif key == "category":
                clean[key] = _category(value)
            elif key == "cost":
                clean[key] = parse_cost(value)
            else:
                clean[key] = optional_text(value)

        number = clean.get("inventory_number")
        if number and number != old.inventory_number:
            other = self._equipment.get_by_inventory_number(number)
            if other and other.equipment_id != old.equipment_id:
                raise ValidationError(f"Inventory number {number} is already in use")

        with self._uow.transaction():
            self._equipment.update_details(old.equipment_id, clean)
            new = self.get(old.equipment_id)
            self._audit.record(
                action=AuditAction.UPDATE,
                entity_type=EntityType.EQUIPMENT,
                entity_id=old.equipment_id,
                actor_user_id=actor.user_id,
                description=f"Updated equipment {new.name} ({new.inventory_number})",
                old_value=snapshot(old),
                new_value=snapshot(new),
            )
            self._notifications.notify_others(
                actor_user_id=actor.user_id,
                title="Equipment changed",
                message=f"Updated equipment: {new.name}",
                kind="equipment_update",
                related_id=old.equipment_id,
            )
        return new

    def delete_equipment(self, *, actor: Actor, equipment_id: int) -> None:
        """Hard delete in any state; unlike decommissioning it leaves no record."""

        self._authorizer.require(actor, MANAGE_EQUIPMENT)

        item = self.get(equipment_id)
        with self._uow.transaction():
            if not self._equipment.delete_by_id(item.equipment_id):
                raise NotFoundError("Equipment not found")
            self._audit.record(
                action=AuditAction.DELETE,
                entity_type=EntityType.EQUIPMENT,
                entity_id=item.equipment_id,
                actor_user_id=actor.user_id,
                description=f"Deleted equipment {item.name} ({item.inventory_number})",
                old_value=snapshot(item),
            )

    # -------- lifecycle --------
    def assign_to(self, *, actor: Actor, equipment_id: int, employee_id: int) -> Equipment:
        self._authorizer.require(actor, MANAGE_EQUIPMENT)

        item = self.get(equipment_id)
        new = lifecycle.assign(item, parse_int(employee_id, "Employee id"))
        if new is item:
            return item
        employee = self._active_employee(employee_id)
        return self._apply(
            actor=actor,
            old=item,
            new=new,
            action=AuditAction.ASSIGN,
            description=f"Assigned {item.name} ({item.inventory_number}) to {employee.full_name}",
        )

    def return_to_warehouse(self, *, actor: Actor, equipment_id: int) -> Equipment:
        self._authorizer.require(actor, MANAGE_EQUIPMENT)
        return self._return(actor=actor, item=self.get(equipment_id))

    def _return(self, *, actor: Actor, item: Equipment) -> Equipment:
        return self._apply(
            actor=actor,
            old=item,
            new=lifecycle.return_to_warehouse(item),
            action=AuditAction.RETURN_TO_WAREHOUSE,
            description=f"Returned {item.name} ({item.inventory_number}) to the warehouse",
        )

    def decommission(self, *, actor: Actor, equipment_id: int) -> Equipment:
        self._authorizer.require(actor, MANAGE_EQUIPMENT)

        item = self.get(equipment_id)
        return self._apply(
            actor=actor,
            old=item,
            new=lifecycle.decommission(item),
            action=AuditAction.DECOMMISSION,
            description=f"Decommissioned {item.name} ({item.inventory_number})",
        )

    def release_employee_equipment(self, *, actor: Actor, employee_id: int) -> list[Equipment]:
        """Return everything held by an employee to the warehouse.

        Used by the employee lifecycle; the caller has already authorized
        ``actor`` and owns the surrounding transaction.
        """

        released: list[Equipment] = []
        for item in self._equipment.list_by_employee(int(employee_id)):
            released.append(self._return(actor=actor, item=item))
        return released
