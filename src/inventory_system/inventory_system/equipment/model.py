from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import EquipmentCategory, EquipmentState

DETAIL_FIELDS = frozenset({"name", "inventory_number", "characteristics", "cost", "category"})
LIFECYCLE_FIELDS = ("employee_id", "is_decommissioned")


@dataclass(frozen=True)
class Equipment:
    equipment_id: int
    name: str
    inventory_number: str
    category: EquipmentCategory = EquipmentCategory.TECHNIKA
    characteristics: Optional[str] = None
    cost: Optional[Decimal] = None
    employee_id: Optional[int] = None
    is_decommissioned: bool = False
    created_at: Optional[datetime] = None

    @property
    def state(self) -> EquipmentState:
        if self.is_decommissioned:
            return EquipmentState.DECOMMISSIONED
        if self.employee_id is not None:
            return EquipmentState.ASSIGNED
        return EquipmentState.WAREHOUSE


@dataclass(frozen=True)
class EquipmentDraft:
    """Input for creating an item; ``employee_id`` None puts it in the warehouse."""

    name: str
    inventory_number: str
    category: EquipmentCategory = EquipmentCategory.TECHNIKA
    characteristics: Optional[str] = None
    cost: Optional[Decimal] = None
    employee_id: Optional[int] = None
