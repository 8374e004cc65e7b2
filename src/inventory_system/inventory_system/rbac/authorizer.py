from __future__ import annotations

from typing import Optional

from ..core.exceptions import AuthorizationError
from .catalog import all_permission_names
from .model import Actor, RoleWithPermissions
from .repository import RoleRepository


def role_has_permission(role: RoleWithPermissions, permission_name: str) -> bool:
    if role.role.is_super_role:
        return True
    return permission_name in role.permission_names


class Authorizer:
    """Allow/deny decisions for a role name and a permission atom.

    Read-only: safe to call any number of times per request.
    """

    def __init__(self, roles: RoleRepository):
        self._roles = roles

    def _load(self, role_name: Optional[str]) -> Optional[RoleWithPermissions]:
        if not role_name:
            return None
        role = self._roles.get_by_name(role_name)
        if role is None:
            return None
        if role.is_super_role:
            return RoleWithPermissions(role=role)
        return RoleWithPermissions(role=role, permissions=tuple(self._roles.list_permissions(role.role_id)))

    def authorize(self, role_name: Optional[str], permission_name: str) -> bool:
        role = self._load(role_name)
        if role is None:
            # Unknown role: fail closed.
            return False
        return role_has_permission(role, permission_name)

    def require(self, actor: Optional[Actor], permission_name: str) -> None:
        if actor is None or not self.authorize(actor.role, permission_name):
            raise AuthorizationError(f"Permission '{permission_name}' is required")

    def permissions_for(self, role_name: Optional[str]) -> list[str]:
        role = self._load(role_name)
        if role is None:
            return []
        if role.role.is_super_role:
            return sorted(set(all_permission_names()) | set(role.permission_names))
        return sorted(role.permission_names)
