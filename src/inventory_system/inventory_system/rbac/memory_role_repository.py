from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from ..database.memory import MemoryStore
from .model import Permission, Role
from .repository import PermissionRepository, RoleRepository


class MemoryPermissionRepository(PermissionRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, Permission]:
        return self._store.table("permissions")

    def list_all(self) -> Sequence[Permission]:
        return sorted(self._rows().values(), key=lambda p: (p.category, p.name))

    def get_by_id(self, permission_id: int) -> Optional[Permission]:
        return self._rows().get(int(permission_id))

    def get_by_name(self, name: str) -> Optional[Permission]:
        return next((p for p in self._rows().values() if p.name == name), None)

    def create_permission(self, *, name: str, category: str, display_name: str, description: Optional[str]) -> int:
        if self.get_by_name(name):
            raise ValidationError(f"Permission '{name}' already exists")
        pid = self._store.next_id("permissions")
        self._rows()[pid] = Permission(
            permission_id=pid,
            name=name,
            category=category,
            display_name=display_name,
            description=description,
        )
        return pid


class MemoryRoleRepository(RoleRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, Role]:
        return self._store.table("roles")

    def list_all(self) -> Sequence[Role]:
        return sorted(self._rows().values(), key=lambda r: (not r.is_system_role, r.name))

    def get_by_id(self, role_id: int) -> Optional[Role]:
        return self._rows().get(int(role_id))

    def get_by_name(self, name: str) -> Optional[Role]:
        return next((r for r in self._rows().values() if r.name == name), None)

    def create_role(
        self,
        *,
        name: str,
        display_name: str,
        description: Optional[str],
        is_system_role: bool = False,
        is_super_role: bool = False,
    ) -> int:
        if any(r.name == name for r in self._rows().values()):
            raise ValidationError(f"Role '{name}' already exists")
        rid = self._store.next_id("roles")
        self._rows()[rid] = Role(
            role_id=rid,
            name=name,
            display_name=display_name,
            description=description,
            is_system_role=is_system_role,
            is_super_role=is_super_role,
            created_at=self._store.now(),
        )
        return rid

    def update_role(self, role_id: int, *, display_name: str, description: Optional[str]) -> bool:
        role = self.get_by_id(role_id)
        if not role:
            return False
        self._rows()[role.role_id] = replace(role, display_name=display_name, description=description)
        return True

    def delete_role(self, role_id: int) -> bool:
        role_id = int(role_id)
        self._store.role_permissions = {g for g in self._store.role_permissions if g[0] != role_id}
        return self._rows().pop(role_id, None) is not None

    def list_permissions(self, role_id: int) -> Sequence[Permission]:
        permissions = self._store.table("permissions")
        granted = [permissions[pid] for rid, pid in self._store.role_permissions if rid == int(role_id) and pid in permissions]
        return sorted(granted, key=lambda p: (p.category, p.name))

    def add_grant(self, role_id: int, permission_id: int) -> bool:
        key = (int(role_id), int(permission_id))
        if key in self._store.role_permissions:
            return False
        self._store.role_permissions.add(key)
        return True

    def remove_grant(self, role_id: int, permission_id: int) -> bool:
        key = (int(role_id), int(permission_id))
        if key not in self._store.role_permissions:
            return False
        self._store.role_permissions.discard(key)
        return True
