from __future__ import annotations

import pytest

from src.inventory_system.inventory_system.core.exceptions import AuthorizationError
from src.inventory_system.inventory_system.rbac.authorizer import role_has_permission
from src.inventory_system.inventory_system.rbac.catalog import all_permission_names
from src.inventory_system.inventory_system.rbac.model import Actor, Permission, Role, RoleWithPermissions


@pytest.mark.parametrize("permission", ["employees.view", "roles.manage", "no.such.permission", ""])
def test_admin_is_allowed_everything_including_unknown_permissions(container, permission):
    assert container.authorizer.authorize("admin", permission) is True


def test_unknown_or_empty_role_is_denied(container):
    assert container.authorizer.authorize("ghost", "employees.view") is False
    assert container.authorizer.authorize("", "employees.view") is False
    assert container.authorizer.authorize(None, "employees.view") is False


def test_system_roles_get_their_default_grants(container):
    authorize = container.authorizer.authorize
    assert authorize("accountant", "documents.view")
    assert not authorize("accountant", "equipment.manage")
    assert authorize("sysadmin", "equipment.manage")
    assert authorize("sysadmin", "employees.create")
    assert not authorize("sysadmin", "employees.archive")
    assert authorize("office-manager", "equipment.warehouse")
    assert not authorize("office-manager", "departments.view")


def test_require_raises_for_missing_permission(container):
    with pytest.raises(AuthorizationError):
        container.authorizer.require(Actor(user_id=5, role="office-manager"), "users.manage")
    with pytest.raises(AuthorizationError):
        container.authorizer.require(None, "users.manage")


def test_permissions_for_super_role_lists_whole_catalog(container):
    assert container.authorizer.permissions_for("admin") == sorted(all_permission_names())
    assert container.authorizer.permissions_for("nobody") == []


def test_super_flag_not_name_decides():
    role = Role(role_id=9, name="root", display_name="Root", is_super_role=True)
    assert role_has_permission(RoleWithPermissions(role=role), "anything")

    plain = Role(role_id=10, name="admin", display_name="Not really admin")
    perm = Permission(permission_id=1, name="employees.view", category="employees", display_name="View")
    with_grant = RoleWithPermissions(role=plain, permissions=(perm,))
    assert role_has_permission(with_grant, "employees.view")
    assert not role_has_permission(with_grant, "employees.edit")
