from __future__ import annotations

import logging

import pytest

from src.inventory_system.inventory_system.audit.model import AuditFilter
from src.inventory_system.inventory_system.audit.recorder import AuditRecorder
from src.inventory_system.inventory_system.core.enums import AuditAction, EntityType
from src.inventory_system.inventory_system.core.exceptions import ValidationError


class FailingAuditRepo:
    def add(self, **kwargs) -> int:
        raise RuntimeError("audit table is read-only")

    def list(self, audit_filter):
        return []


def test_entries_are_newest_first_and_filterable(container, admin, make_employee, make_equipment):
    p1 = make_employee("P1")
    item = make_equipment(employee_id=p1.employee_id)
    container.equipment_service.return_to_warehouse(actor=admin, equipment_id=item.equipment_id)

    entries = container.audit.list()
    assert [e.entry_id for e in entries] == sorted((e.entry_id for e in entries), reverse=True)

    only_equipment = container.audit.list(AuditFilter(entity_type=EntityType.EQUIPMENT))
    assert {e.entity_type for e in only_equipment} == {EntityType.EQUIPMENT}
    assert [e.action for e in only_equipment] == [AuditAction.RETURN_TO_WAREHOUSE, AuditAction.CREATE]

    by_action = container.audit.list(AuditFilter(action=AuditAction.RETURN_TO_WAREHOUSE))
    assert len(by_action) == 1
    assert container.audit.list(AuditFilter(limit=1)) == entries[:1]


def test_limit_is_bounded(container):
    with pytest.raises(ValidationError):
        container.audit.list(AuditFilter(limit=0))
    with pytest.raises(ValidationError):
        container.audit.list(AuditFilter(limit=100000))


def test_failed_write_is_logged_not_raised(caplog):
    recorder = AuditRecorder(FailingAuditRepo())

    with caplog.at_level(logging.ERROR):
        result = recorder.record(
            action=AuditAction.CREATE,
            entity_type=EntityType.ROLE,
            entity_id=1,
            actor_user_id=1,
            description="Created role R1",
        )

    assert result is None
    assert "Audit write failed" in caplog.text


def test_business_operation_survives_audit_failure(container, admin, make_equipment, monkeypatch):
    item = make_equipment()

    def broken_add(**kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(container.audit_repo, "add", broken_add)

    retired = container.equipment_service.decommission(actor=admin, equipment_id=item.equipment_id)

    assert retired.is_decommissioned
    assert container.equipment_service.get(item.equipment_id).is_decommissioned


def test_recorded_snapshots_are_copies(container):
    old = {"employee_id": 1}
    container.audit.record(
        action=AuditAction.UPDATE,
        entity_type=EntityType.EQUIPMENT,
        entity_id=5,
        actor_user_id=None,
        description="manual",
        old_value=old,
    )
    old["employee_id"] = 2

    assert container.audit.list()[0].old_value == {"employee_id": 1}
