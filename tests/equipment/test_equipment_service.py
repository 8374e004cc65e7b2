from __future__ import annotations

from decimal import Decimal

import pytest

from src.inventory_system.inventory_system.audit.model import AuditFilter
from src.inventory_system.inventory_system.core.enums import AuditAction, EntityType, EquipmentCategory
from src.inventory_system.inventory_system.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def _audit(container, equipment_id: int):
    return container.audit.list(AuditFilter(entity_type=EntityType.EQUIPMENT, entity_id=equipment_id))


def test_create_in_warehouse_or_assigned(container, make_employee, make_equipment):
    employee = make_employee()
    stored = make_equipment("Chair", category=EquipmentCategory.FURNITURE, cost="1 200,50")
    held = make_equipment("Laptop", employee_id=employee.employee_id)

    assert stored.employee_id is None
    assert stored.cost == Decimal("1200.50")
    assert stored.category is EquipmentCategory.FURNITURE
    assert held.employee_id == employee.employee_id

    created = _audit(container, stored.equipment_id)[0]
    assert created.action is AuditAction.CREATE
    assert created.old_value is None
    assert created.new_value["inventory_number"] == stored.inventory_number


def test_create_validation(container, make_employee, make_equipment):
    make_equipment(inventory_number="INV-X")
    with pytest.raises(ValidationError):
        make_equipment(inventory_number="INV-X")
    with pytest.raises(ValidationError):
        make_equipment(name="")
    with pytest.raises(ValidationError):
        make_equipment(cost="-5")
    with pytest.raises(ValidationError):
        make_equipment(category="Vehicles")
    with pytest.raises(NotFoundError):
        make_equipment(employee_id=404)


def test_assign_writes_lifecycle_snapshots(container, admin, make_employee, make_equipment):
    employee = make_employee()
    item = make_equipment()

    assigned = container.equipment_service.assign_to(
        actor=admin, equipment_id=item.equipment_id, employee_id=employee.employee_id
    )

    assert assigned.employee_id == employee.employee_id
    entry = _audit(container, item.equipment_id)[0]
    assert entry.action is AuditAction.ASSIGN
    assert entry.old_value == {"employee_id": None, "is_decommissioned": False}
    assert entry.new_value == {"employee_id": employee.employee_id, "is_decommissioned": False}
    assert entry.user_id == admin.user_id


def test_noop_transitions_write_no_audit(container, admin, make_employee, make_equipment):
    employee = make_employee()
    item = make_equipment(employee_id=employee.employee_id)
    before = len(_audit(container, item.equipment_id))

    container.equipment_service.assign_to(actor=admin, equipment_id=item.equipment_id, employee_id=employee.employee_id)
    container.equipment_service.return_to_warehouse(actor=admin, equipment_id=item.equipment_id)
    container.equipment_service.return_to_warehouse(actor=admin, equipment_id=item.equipment_id)

    assert len(_audit(container, item.equipment_id)) == before + 1


def test_decommission_assigned_item_then_assign_fails(container, admin, make_employee, make_equipment):
    p2 = make_employee("P2")
    p3 = make_employee("P3")
    e2 = make_equipment(employee_id=p2.employee_id)

    retired = container.equipment_service.decommission(actor=admin, equipment_id=e2.equipment_id)

    assert retired.is_decommissioned is True
    assert retired.employee_id is None
    with pytest.raises(ConflictError):
        container.equipment_service.assign_to(actor=admin, equipment_id=e2.equipment_id, employee_id=p3.employee_id)
    with pytest.raises(ConflictError):
        container.equipment_service.return_to_warehouse(actor=admin, equipment_id=e2.equipment_id)
    assert [e.equipment_id for e in container.equipment_service.list_decommissioned()] == [e2.equipment_id]


def test_assign_to_missing_or_archived_employee(container, admin, make_employee, make_equipment):
    gone = make_employee("Gone")
    container.employee_service.archive_employee(actor=admin, employee_id=gone.employee_id)
    item = make_equipment()

    with pytest.raises(NotFoundError):
        container.equipment_service.assign_to(actor=admin, equipment_id=item.equipment_id, employee_id=999)
    with pytest.raises(ConflictError):
        container.equipment_service.assign_to(actor=admin, equipment_id=item.equipment_id, employee_id=gone.employee_id)
    assert container.equipment_service.get(item.equipment_id).employee_id is None


def test_update_rejects_lifecycle_fields(container, admin, make_equipment):
    item = make_equipment()
    with pytest.raises(ValidationError):
        container.equipment_service.update_equipment(
            actor=admin, equipment_id=item.equipment_id, changes={"employee_id": 1}
        )
    with pytest.raises(ValidationError):
        container.equipment_service.update_equipment(
            actor=admin, equipment_id=item.equipment_id, changes={"is_decommissioned": True}
        )

    updated = container.equipment_service.update_equipment(
        actor=admin, equipment_id=item.equipment_id, changes={"name": "Laptop Pro", "characteristics": "16GB"}
    )
    assert updated.name == "Laptop Pro"
    assert _audit(container, item.equipment_id)[0].action is AuditAction.UPDATE


def test_delete_twice_raises_not_found(container, admin, make_equipment):
    item = make_equipment()
    container.equipment_service.delete_equipment(actor=admin, equipment_id=item.equipment_id)

    with pytest.raises(NotFoundError):
        container.equipment_service.delete_equipment(actor=admin, equipment_id=item.equipment_id)
    entry = _audit(container, item.equipment_id)[0]
    assert entry.action is AuditAction.DELETE
    assert entry.new_value is None


def test_warehouse_listing(container, admin, make_employee, make_equipment):
    employee = make_employee()
    free = make_equipment()
    make_equipment(employee_id=employee.employee_id)
    retired = make_equipment()
    container.equipment_service.decommission(actor=admin, equipment_id=retired.equipment_id)

    assert [e.equipment_id for e in container.equipment_service.list_warehouse()] == [free.equipment_id]


def test_mutations_need_equipment_manage(container, make_actor, make_equipment):
    accountant = make_actor("accountant")
    item = make_equipment()
    with pytest.raises(AuthorizationError):
        container.equipment_service.decommission(actor=accountant, equipment_id=item.equipment_id)

    manager = make_actor("office-manager")
    assert container.equipment_service.decommission(actor=manager, equipment_id=item.equipment_id).is_decommissioned


def test_invariant_holds_after_every_transition(container, admin, make_employee, make_equipment):
    a = make_employee("A")
    b = make_employee("B")
    items = [make_equipment(employee_id=a.employee_id) for _ in range(3)]
    svc = container.equipment_service

    svc.assign_to(actor=admin, equipment_id=items[0].equipment_id, employee_id=b.employee_id)
    svc.decommission(actor=admin, equipment_id=items[1].equipment_id)
    svc.return_to_warehouse(actor=admin, equipment_id=items[2].equipment_id)
    svc.decommission(actor=admin, equipment_id=items[2].equipment_id)

    for item in svc.list_all():
        assert not (item.is_decommissioned and item.employee_id is not None)


def test_stale_assign_cannot_revive_decommissioned_item(container, admin, make_employee, make_equipment, monkeypatch):
    employee = make_employee()
    item = make_equipment()
    repo = container.equipment_repo
    real_get = repo.get_by_id
    interleaved = []

    def read_then_decommission(equipment_id):
        found = real_get(equipment_id)
        if not interleaved:
            interleaved.append(equipment_id)
            container.equipment_service.decommission(actor=admin, equipment_id=equipment_id)
        return found

    monkeypatch.setattr(repo, "get_by_id", read_then_decommission)
    with pytest.raises(ConflictError):
        container.equipment_service.assign_to(
            actor=admin, equipment_id=item.equipment_id, employee_id=employee.employee_id
        )
    monkeypatch.undo()

    final = container.equipment_service.get(item.equipment_id)
    assert final.is_decommissioned
    assert final.employee_id is None
    assert [e.action for e in _audit(container, item.equipment_id)] == [AuditAction.DECOMMISSION, AuditAction.CREATE]


def test_assign_rechecks_employee_under_lock(container, admin, make_employee, make_equipment, monkeypatch):
    employee = make_employee()
    item = make_equipment()
    container.employee_service.archive_employee(actor=admin, employee_id=employee.employee_id)

    # Plain reads still see the employee as active; the locked read does not.
    monkeypatch.setattr(container.employees_repo, "get_by_id", lambda employee_id: employee)
    with pytest.raises(ConflictError):
        container.equipment_service.assign_to(
            actor=admin, equipment_id=item.equipment_id, employee_id=employee.employee_id
        )

    assert container.equipment_repo.get_by_id(item.equipment_id).employee_id is None


def test_set_placement_only_moves_expected_row(container, make_employee, make_equipment):
    first = make_employee("First")
    second = make_employee("Second")
    item = make_equipment(employee_id=first.employee_id)
    repo = container.equipment_repo

    assert not repo.set_placement(
        item.equipment_id, employee_id=None, is_decommissioned=False, expected_employee_id=second.employee_id
    )
    assert repo.set_placement(
        item.equipment_id, employee_id=second.employee_id, is_decommissioned=False, expected_employee_id=first.employee_id
    )
    assert repo.set_placement(item.equipment_id, employee_id=None, is_decommissioned=True, expected_employee_id=second.employee_id)
    assert not repo.set_placement(item.equipment_id, employee_id=None, is_decommissioned=False, expected_employee_id=None)
    assert repo.get_by_id(item.equipment_id).is_decommissioned


def test_duplicate_inventory_number_from_storage_is_validation_error(container, make_equipment, monkeypatch):
    make_equipment(inventory_number="INV-RACE")
    # Another request took the number after the service's own check.
    monkeypatch.setattr(container.equipment_repo, "get_by_inventory_number", lambda number: None)

    with pytest.raises(ValidationError):
        make_equipment(inventory_number="INV-RACE")
    assert len(container.equipment_service.list_all()) == 1
