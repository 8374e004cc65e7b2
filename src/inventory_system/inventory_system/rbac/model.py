from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class Permission:
    permission_id: int
    name: str
    category: str
    display_name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Role:
    role_id: int
    name: str
    display_name: str
    description: Optional[str] = None
    is_system_role: bool = False
    # Capability flag: a super role passes every authorization check.
    is_super_role: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class RoleWithPermissions:
    role: Role
    permissions: Tuple[Permission, ...] = ()

    @property
    def permission_names(self) -> FrozenSet[str]:
        return frozenset(p.name for p in self.permissions)


@dataclass(frozen=True)
class Actor:
    """Who is calling a service: the logged-in user and their role name."""

    user_id: int
    role: str
