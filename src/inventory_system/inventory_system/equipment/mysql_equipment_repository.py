from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import EquipmentCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, build_set_clause, db_cursor, fetchall, fetchone, unique_violation
from .model import DETAIL_FIELDS, Equipment, EquipmentDraft
from .repository import EquipmentRepository

_COLUMNS = (
    "equipment_id, name, inventory_number, category, characteristics, cost, "
    "employee_id, is_decommissioned, created_at"
)


def _equipment(row: dict) -> Equipment:
    cost = row.get("cost")
    return Equipment(
        equipment_id=int(row["equipment_id"]),
        name=row["name"],
        inventory_number=row["inventory_number"],
        category=EquipmentCategory(row["category"]),
        characteristics=row.get("characteristics"),
        cost=Decimal(cost) if cost is not None else None,
        employee_id=row.get("employee_id"),
        is_decommissioned=as_bool(row.get("is_decommissioned")),
        created_at=row.get("created_at"),
    )


class MySQLEquipmentRepository(EquipmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str = "1=1", params: tuple = ()) -> list[Equipment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM equipment WHERE {where} ORDER BY inventory_number", params)
            return [_equipment(r) for r in fetchall(cur)]

    def get_by_id(self, equipment_id: int) -> Optional[Equipment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM equipment WHERE equipment_id=%s", (int(equipment_id),))
            row = fetchone(cur)
            return _equipment(row) if row else None

    def get_by_inventory_number(self, inventory_number: str) -> Optional[Equipment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM equipment WHERE inventory_number=%s", (inventory_number,))
            row = fetchone(cur)
            return _equipment(row) if row else None

    def list_all(self) -> Sequence[Equipment]:
        return self._select()

    def list_by_employee(self, employee_id: int) -> Sequence[Equipment]:
        return self._select("employee_id=%s", (int(employee_id),))

    def list_warehouse(self) -> Sequence[Equipment]:
        return self._select("employee_id IS NULL AND is_decommissioned=0")

    def list_decommissioned(self) -> Sequence[Equipment]:
        return self._select("is_decommissioned=1")

    def create_equipment(self, draft: EquipmentDraft) -> int:
        message = f"Inventory number {draft.inventory_number} is already in use"
        with db_cursor(self._conn_factory) as (_, cur), unique_violation(message):
            cur.execute(
                """
                INSERT INTO equipment(name, inventory_number, category, characteristics, cost, employee_id, is_decommissioned)
                VALUES(%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    draft.name,
                    draft.inventory_number,
                    draft.category.value,
                    draft.characteristics,
                    draft.cost,
                    draft.employee_id,
                ),
            )
            return int(cur.lastrowid)

    def update_details(self, equipment_id: int, changes: Mapping[str, Any]) -> bool:
        if not changes:
            return self.get_by_id(equipment_id) is not None
        set_clause, params = build_set_clause(dict(changes), {name: name for name in DETAIL_FIELDS})
        message = f"Inventory number {changes.get('inventory_number')} is already in use"
        with db_cursor(self._conn_factory) as (_, cur), unique_violation(message):
            cur.execute(f"UPDATE equipment SET {set_clause} WHERE equipment_id=%s", tuple(params + [int(equipment_id)]))
            return cur.rowcount > 0

    def set_placement(
        self,
        equipment_id: int,
        *,
        employee_id: Optional[int],
        is_decommissioned: bool,
        expected_employee_id: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE equipment SET employee_id=%s, is_decommissioned=%s
                WHERE equipment_id=%s AND is_decommissioned=0 AND employee_id <=> %s
                """,
                (employee_id, int(is_decommissioned), int(equipment_id), expected_employee_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, equipment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM equipment WHERE equipment_id=%s", (int(equipment_id),))
            return cur.rowcount > 0
