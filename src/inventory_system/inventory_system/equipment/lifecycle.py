"""Equipment state transitions.

States: ASSIGNED(employee), WAREHOUSE, DECOMMISSIONED (terminal). Each function
returns the record after the transition; an unchanged record means no-op.
"""

from __future__ import annotations

from dataclasses import replace

from ..core.enums import EquipmentState
from ..core.exceptions import ConflictError
from .model import Equipment


def check_invariant(item: Equipment) -> Equipment:
    if item.is_decommissioned and item.employee_id is not None:
        raise ConflictError(f"Equipment {item.inventory_number} is decommissioned but still assigned")
    return item


def assign(item: Equipment, employee_id: int) -> Equipment:
    if item.state is EquipmentState.DECOMMISSIONED:
        raise ConflictError(f"Equipment {item.inventory_number} is decommissioned and cannot be assigned")
    if item.employee_id == employee_id:
        return item
    return check_invariant(replace(item, employee_id=employee_id))


def return_to_warehouse(item: Equipment) -> Equipment:
    if item.state is EquipmentState.DECOMMISSIONED:
        raise ConflictError(f"Equipment {item.inventory_number} is decommissioned")
    if item.state is EquipmentState.WAREHOUSE:
        return item
    return check_invariant(replace(item, employee_id=None))


def decommission(item: Equipment) -> Equipment:
    if item.state is EquipmentState.DECOMMISSIONED:
        return item
    return check_invariant(replace(item, employee_id=None, is_decommissioned=True))
