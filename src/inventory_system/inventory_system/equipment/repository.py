from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Equipment, EquipmentDraft


class EquipmentRepository(Protocol):
    def get_by_id(self, equipment_id: int) -> Optional[Equipment]:
        raise NotImplementedError

    def get_by_inventory_number(self, inventory_number: str) -> Optional[Equipment]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Equipment]:
        raise NotImplementedError

    def list_by_employee(self, employee_id: int) -> Sequence[Equipment]:
        raise NotImplementedError

    def list_warehouse(self) -> Sequence[Equipment]:
        """employee_id IS NULL and not decommissioned."""

        raise NotImplementedError

    def list_decommissioned(self) -> Sequence[Equipment]:
        raise NotImplementedError

    def create_equipment(self, draft: EquipmentDraft) -> int:
        raise NotImplementedError

    def update_details(self, equipment_id: int, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def set_placement(
        self,
        equipment_id: int,
        *,
        employee_id: Optional[int],
        is_decommissioned: bool,
        expected_employee_id: Optional[int],
    ) -> bool:
        """Persist the lifecycle fields in one compare-and-set statement.

        Only a live item still held by ``expected_employee_id`` (None for the
        warehouse) is updated; False means the row is missing or has moved.
        """

        raise NotImplementedError

    def delete_by_id(self, equipment_id: int) -> bool:
        raise NotImplementedError
