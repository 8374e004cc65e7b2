from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Permission, Role


class PermissionRepository(Protocol):
    def list_all(self) -> Sequence[Permission]:
        raise NotImplementedError

    def get_by_id(self, permission_id: int) -> Optional[Permission]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Permission]:
        raise NotImplementedError

    def create_permission(self, *, name: str, category: str, display_name: str, description: Optional[str]) -> int:
        raise NotImplementedError


class RoleRepository(Protocol):
    """Roles plus the role_permissions join table."""

    def list_all(self) -> Sequence[Role]:
        raise NotImplementedError

    def get_by_id(self, role_id: int) -> Optional[Role]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Role]:
        raise NotImplementedError

    def create_role(
        self,
        *,
        name: str,
        display_name: str,
        description: Optional[str],
        is_system_role: bool = False,
        is_super_role: bool = False,
    ) -> int:
        raise NotImplementedError

    def update_role(self, role_id: int, *, display_name: str, description: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_role(self, role_id: int) -> bool:
        """Delete the role together with its grants."""

        raise NotImplementedError

    def list_permissions(self, role_id: int) -> Sequence[Permission]:
        raise NotImplementedError

    def add_grant(self, role_id: int, permission_id: int) -> bool:
        """Return False if the grant already existed."""

        raise NotImplementedError

    def remove_grant(self, role_id: int, permission_id: int) -> bool:
        """Return False if there was nothing to remove."""

        raise NotImplementedError
