from __future__ import annotations

import pytest

from src.inventory_system.inventory_system.audit.model import AuditFilter
from src.inventory_system.inventory_system.core.enums import AuditAction, EntityType
from src.inventory_system.inventory_system.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def _perm_id(container, name: str) -> int:
    return container.permissions_repo.get_by_name(name).permission_id


def _role_audit(container, role_id: int):
    return container.audit.list(AuditFilter(entity_type=EntityType.ROLE, entity_id=role_id))


def test_new_role_denied_until_permission_granted(container, admin):
    role = container.role_service.create_role(actor=admin, name="R1", display_name="Role one")

    assert not role.is_system_role and not role.is_super_role
    assert container.authorizer.authorize("R1", "employees.view") is False

    changed = container.role_service.grant_permission(
        actor=admin, role_id=role.role_id, permission_id=_perm_id(container, "employees.view")
    )

    assert changed is True
    assert container.authorizer.authorize("R1", "employees.view") is True


def test_duplicate_or_empty_role_name_rejected(container, admin):
    container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    with pytest.raises(ValidationError):
        container.role_service.create_role(actor=admin, name="R1", display_name="Again")
    with pytest.raises(ValidationError):
        container.role_service.create_role(actor=admin, name="  ", display_name="Blank")
    with pytest.raises(ValidationError):
        container.role_service.create_role(actor=admin, name="R2", display_name="")


def test_double_grant_is_idempotent_and_audited_once(container, admin):
    role = container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    perm_id = _perm_id(container, "equipment.view")

    assert container.role_service.grant_permission(actor=admin, role_id=role.role_id, permission_id=perm_id)
    assert not container.role_service.grant_permission(actor=admin, role_id=role.role_id, permission_id=perm_id)

    assert [p.name for p in container.role_service.get_role(role.role_id).permissions] == ["equipment.view"]
    grants = [e for e in _role_audit(container, role.role_id) if e.action is AuditAction.GRANT_PERMISSION]
    assert len(grants) == 1


def test_revoke_missing_grant_is_noop(container, admin):
    role = container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    perm_id = _perm_id(container, "equipment.view")

    assert container.role_service.revoke_permission(actor=admin, role_id=role.role_id, permission_id=perm_id) is False
    container.role_service.grant_permission(actor=admin, role_id=role.role_id, permission_id=perm_id)
    assert container.role_service.revoke_permission(actor=admin, role_id=role.role_id, permission_id=perm_id) is True
    assert container.authorizer.authorize("R1", "equipment.view") is False


def test_grant_unknown_permission_or_role(container, admin):
    role = container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    with pytest.raises(NotFoundError):
        container.role_service.grant_permission(actor=admin, role_id=role.role_id, permission_id=999)
    with pytest.raises(NotFoundError):
        container.role_service.grant_permission(actor=admin, role_id=999, permission_id=_perm_id(container, "users.view"))


def test_system_role_cannot_be_deleted_and_keeps_grants(container, admin):
    role = container.roles_repo.get_by_name("accountant")
    before = container.role_service.get_role(role.role_id).permission_names

    with pytest.raises(ConflictError):
        container.role_service.delete_role(actor=admin, role_id=role.role_id)

    assert container.roles_repo.get_by_name("accountant") is not None
    assert container.role_service.get_role(role.role_id).permission_names == before


def test_system_role_permissions_remain_editable(container, admin):
    role = container.roles_repo.get_by_name("office-manager")
    container.role_service.revoke_permission(
        actor=admin, role_id=role.role_id, permission_id=_perm_id(container, "equipment.warehouse")
    )
    assert container.authorizer.authorize("office-manager", "equipment.warehouse") is False


def test_role_in_use_cannot_be_deleted(container, admin, make_actor):
    role = container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    make_actor("R1")

    with pytest.raises(ConflictError):
        container.role_service.delete_role(actor=admin, role_id=role.role_id)


def test_delete_role_removes_grants_not_permissions(container, admin):
    role = container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    perm_id = _perm_id(container, "equipment.view")
    container.role_service.grant_permission(actor=admin, role_id=role.role_id, permission_id=perm_id)

    container.role_service.delete_role(actor=admin, role_id=role.role_id)

    assert container.roles_repo.get_by_id(role.role_id) is None
    assert container.permissions_repo.get_by_id(perm_id) is not None
    assert container.roles_repo.list_permissions(role.role_id) == []
    deleted = _role_audit(container, role.role_id)[0]
    assert deleted.action is AuditAction.DELETE
    assert deleted.old_value["permissions"] == ["equipment.view"]
    assert deleted.new_value is None

    with pytest.raises(NotFoundError):
        container.role_service.delete_role(actor=admin, role_id=role.role_id)


def test_update_role_changes_display_fields_only(container, admin):
    role = container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    updated = container.role_service.update_role(
        actor=admin, role_id=role.role_id, display_name="Renamed", description="desc"
    )
    assert updated.name == "R1"
    assert updated.display_name == "Renamed"
    assert updated.description == "desc"


def test_role_mutations_need_roles_manage(container, make_actor):
    sysadmin = make_actor("sysadmin")
    with pytest.raises(AuthorizationError):
        container.role_service.create_role(actor=sysadmin, name="R1", display_name="Role one")


def test_permissions_grouped_by_category(container):
    grouped = container.role_service.list_permissions()
    assert list(grouped) == sorted(grouped)
    assert [p.name for p in grouped["departments"]] == ["departments.manage", "departments.view"]
    assert "audit.view" in [p.name for p in grouped["audit"]]


def test_seed_defaults_is_idempotent(container, admin):
    role = container.roles_repo.get_by_name("office-manager")
    container.role_service.revoke_permission(
        actor=admin, role_id=role.role_id, permission_id=_perm_id(container, "equipment.view")
    )
    roles_before = len(container.role_service.list_roles())

    container.role_service.seed_defaults()

    assert len(container.role_service.list_roles()) == roles_before
    assert container.authorizer.authorize("office-manager", "equipment.view") is False


def test_duplicate_role_from_storage_is_validation_error(container, admin, monkeypatch):
    container.role_service.create_role(actor=admin, name="R1", display_name="Role one")
    # Another request created the same name after the service's own check.
    monkeypatch.setattr(container.roles_repo, "get_by_name", lambda name: None)

    with pytest.raises(ValidationError):
        container.role_service.create_role(actor=admin, name="R1", display_name="Again")
    monkeypatch.undo()
    assert container.roles_repo.get_by_name("R1").display_name == "Role one"
