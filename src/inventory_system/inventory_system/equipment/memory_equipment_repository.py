from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import ValidationError
from ..database.memory import MemoryStore
from .model import DETAIL_FIELDS, Equipment, EquipmentDraft
from .repository import EquipmentRepository


class MemoryEquipmentRepository(EquipmentRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, Equipment]:
        return self._store.table("equipment")

    def _sorted(self, items) -> list[Equipment]:
        return sorted(items, key=lambda e: e.inventory_number)

    def get_by_id(self, equipment_id: int) -> Optional[Equipment]:
        return self._rows().get(int(equipment_id))

    def _by_number(self, inventory_number: str) -> Optional[Equipment]:
        return next((e for e in self._rows().values() if e.inventory_number == inventory_number), None)

    def get_by_inventory_number(self, inventory_number: str) -> Optional[Equipment]:
        return self._by_number(inventory_number)

    def list_all(self) -> Sequence[Equipment]:
        return self._sorted(self._rows().values())

    def list_by_employee(self, employee_id: int) -> Sequence[Equipment]:
        return self._sorted(e for e in self._rows().values() if e.employee_id == int(employee_id))

    def list_warehouse(self) -> Sequence[Equipment]:
        return self._sorted(e for e in self._rows().values() if e.employee_id is None and not e.is_decommissioned)

    def list_decommissioned(self) -> Sequence[Equipment]:
        return self._sorted(e for e in self._rows().values() if e.is_decommissioned)

    def create_equipment(self, draft: EquipmentDraft) -> int:
        if self._by_number(draft.inventory_number):
            raise ValidationError(f"Inventory number {draft.inventory_number} is already in use")
        eid = self._store.next_id("equipment")
        self._rows()[eid] = Equipment(equipment_id=eid, created_at=self._store.now(), **asdict(draft))
        return eid

    def update_details(self, equipment_id: int, changes: Mapping[str, Any]) -> bool:
        item = self.get_by_id(equipment_id)
        if not item:
            return False
        unknown = set(changes) - DETAIL_FIELDS
        if unknown:
            raise KeyError(sorted(unknown)[0])
        number = changes.get("inventory_number")
        other = self._by_number(number) if number else None
        if other and other.equipment_id != item.equipment_id:
            raise ValidationError(f"Inventory number {number} is already in use")
        self._rows()[item.equipment_id] = replace(item, **dict(changes))
        return True

    def set_placement(
        self,
        equipment_id: int,
        *,
        employee_id: Optional[int],
        is_decommissioned: bool,
        expected_employee_id: Optional[int],
    ) -> bool:
        item = self.get_by_id(equipment_id)
        if not item or item.is_decommissioned or item.employee_id != expected_employee_id:
            return False
        self._rows()[item.equipment_id] = replace(item, employee_id=employee_id, is_decommissioned=is_decommissioned)
        return True

    def delete_by_id(self, equipment_id: int) -> bool:
        return self._rows().pop(int(equipment_id), None) is not None
