from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, List, Sequence

from ..audit.recorder import AuditRecorder
from ..common.serialization import snapshot
from ..common.validators import optional_text, require_non_empty
from ..core.enums import AuditAction, EntityType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..users.repository import UserRepository
from .authorizer import Authorizer, role_has_permission
from .catalog import BASE_PERMISSIONS, BASE_ROLES
from .model import Actor, Permission, Role, RoleWithPermissions
from .repository import PermissionRepository, RoleRepository

logger = logging.getLogger(__name__)

MANAGE_ROLES = "roles.manage"


class RoleService:
    """Use case: administer roles and their permission grants."""

    def __init__(
        self,
        roles: RoleRepository,
        permissions: PermissionRepository,
        users: UserRepository,
        audit: AuditRecorder,
        authorizer: Authorizer,
        uow: UnitOfWork,
    ):
        self._roles = roles
        self._permissions = permissions
        self._users = users
        self._audit = audit
        self._authorizer = authorizer
        self._uow = uow

    # -------- reads --------
    def list_permissions(self) -> Dict[str, List[Permission]]:
        grouped: Dict[str, List[Permission]] = OrderedDict()
        for perm in sorted(self._permissions.list_all(), key=lambda p: (p.category, p.name)):
            grouped.setdefault(perm.category, []).append(perm)
        return grouped

    def list_roles(self) -> Sequence[Role]:
        return self._roles.list_all()

    def get_role(self, role_id: int) -> RoleWithPermissions:
        role = self._roles.get_by_id(int(role_id))
        if not role:
            raise NotFoundError("Role not found")
        return RoleWithPermissions(role=role, permissions=tuple(self._roles.list_permissions(role.role_id)))

    def role_has_permission(self, role: RoleWithPermissions, permission_name: str) -> bool:
        return role_has_permission(role, permission_name)

    # -------- mutations --------
    def create_role(self, *, actor: Actor, name: str, display_name: str, description: str = "") -> Role:
        self._authorizer.require(actor, MANAGE_ROLES)

        name = require_non_empty(name, "Role name")
        display_name = require_non_empty(display_name, "Display name")
        if self._roles.get_by_name(name):
            raise ValidationError(f"Role '{name}' already exists")

        with self._uow.transaction():
            role_id = self._roles.create_role(name=name, display_name=display_name, description=optional_text(description))
            role = self._roles.get_by_id(role_id)
            self._audit.record(
                action=AuditAction.CREATE,
                entity_type=EntityType.ROLE,
                entity_id=role_id,
                actor_user_id=actor.user_id,
                description=f"Created role {name}",
                new_value=snapshot(role),
            )
        logger.info("Role %s created by user %s", name, actor.user_id)
        return role

    def update_role(self, *, actor: Actor, role_id: int, display_name: str, description: str = "") -> Role:
        self._authorizer.require(actor, MANAGE_ROLES)

        old = self._roles.get_by_id(int(role_id))
        if not old:
            raise NotFoundError("Role not found")
        display_name = require_non_empty(display_name, "Display name")

        with self._uow.transaction():
            self._roles.update_role(old.role_id, display_name=display_name, description=optional_text(description))
            new = self._roles.get_by_id(old.role_id)
            self._audit.record(
                action=AuditAction.UPDATE,
                entity_type=EntityType.ROLE,
                entity_id=old.role_id,
                actor_user_id=actor.user_id,
                description=f"Updated role {old.name}",
                old_value=snapshot(old, "display_name", "description"),
                new_value=snapshot(new, "display_name", "description"),
            )
        return new

    def delete_role(self, *, actor: Actor, role_id: int) -> None:
        self._authorizer.require(actor, MANAGE_ROLES)

        role = self.get_role(role_id)
        if role.role.is_system_role:
            raise ConflictError("System roles cannot be deleted")
        holders = self._users.count_by_role(role.role.name)
        if holders:
            raise ConflictError(f"Role is still assigned to {holders} user(s)")

        with self._uow.transaction():
            if not self._roles.delete_role(role.role.role_id):
                raise NotFoundError("Role not found")
            old_value = snapshot(role.role)
            old_value["permissions"] = sorted(role.permission_names)
            self._audit.record(
                action=AuditAction.DELETE,
                entity_type=EntityType.ROLE,
                entity_id=role.role.role_id,
                actor_user_id=actor.user_id,
                description=f"Deleted role {role.role.name}",
                old_value=old_value,
            )
        logger.info("Role %s deleted by user %s", role.role.name, actor.user_id)

    def _resolve(self, role_id: int, permission_id: int) -> tuple[Role, Permission]:
        role = self._roles.get_by_id(int(role_id))
        if not role:
            raise NotFoundError("Role not found")
        permission = self._permissions.get_by_id(int(permission_id))
        if not permission:
            raise NotFoundError("Permission not found")
        return role, permission

    def grant_permission(self, *, actor: Actor, role_id: int, permission_id: int) -> bool:
        """Idempotent; returns True only when a new grant was created."""

        self._authorizer.require(actor, MANAGE_ROLES)
        role, permission = self._resolve(role_id, permission_id)

        with self._uow.transaction():
            if not self._roles.add_grant(role.role_id, permission.permission_id):
                return False
            self._audit.record(
                action=AuditAction.GRANT_PERMISSION,
                entity_type=EntityType.ROLE,
                entity_id=role.role_id,
                actor_user_id=actor.user_id,
                description=f"Granted {permission.name} to role {role.name}",
                new_value={"permission": permission.name},
            )
        return True

    def revoke_permission(self, *, actor: Actor, role_id: int, permission_id: int) -> bool:
        """Idempotent; returns True only when an existing grant was removed."""

        self._authorizer.require(actor, MANAGE_ROLES)
        role, permission = self._resolve(role_id, permission_id)

        with self._uow.transaction():
            if not self._roles.remove_grant(role.role_id, permission.permission_id):
                return False
            self._audit.record(
                action=AuditAction.REVOKE_PERMISSION,
                entity_type=EntityType.ROLE,
                entity_id=role.role_id,
                actor_user_id=actor.user_id,
                description=f"Revoked {permission.name} from role {role.name}",
                old_value={"permission": permission.name},
            )
        return True

    # -------- seeding --------
    def seed_defaults(self) -> None:
        """Create missing catalog permissions and system roles.

        Existing roles keep whatever grants an administrator has edited; default
        grants are only applied to roles created by this call.
        """

        with self._uow.transaction():
            for spec in BASE_PERMISSIONS:
                if not self._permissions.get_by_name(spec.name):
                    self._permissions.create_permission(
                        name=spec.name,
                        category=spec.category,
                        display_name=spec.display_name,
                        description=spec.description,
                    )

            by_name = {p.name: p for p in self._permissions.list_all()}
            for spec in BASE_ROLES:
                if self._roles.get_by_name(spec.name):
                    continue
                role_id = self._roles.create_role(
                    name=spec.name,
                    display_name=spec.display_name,
                    description=spec.description,
                    is_system_role=True,
                    is_super_role=spec.is_super_role,
                )
                for perm_spec in BASE_PERMISSIONS:
                    if spec.grants and spec.grants(perm_spec):
                        self._roles.add_grant(role_id, by_name[perm_spec.name].permission_id)
                logger.info("Seeded system role %s", spec.name)
