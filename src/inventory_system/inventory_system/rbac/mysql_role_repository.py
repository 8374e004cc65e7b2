from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, unique_violation
from .model import Permission, Role
from .repository import PermissionRepository, RoleRepository

_ROLE_COLUMNS = "role_id, name, display_name, description, is_system_role, is_super_role, created_at"
_PERMISSION_COLUMNS = "permission_id, name, category, display_name, description"


def _role(row: dict) -> Role:
    return Role(
        role_id=int(row["role_id"]),
        name=row["name"],
        display_name=row["display_name"],
        description=row.get("description"),
        is_system_role=as_bool(row.get("is_system_role")),
        is_super_role=as_bool(row.get("is_super_role")),
        created_at=row.get("created_at"),
    )


def _permission(row: dict) -> Permission:
    return Permission(
        permission_id=int(row["permission_id"]),
        name=row["name"],
        category=row["category"],
        display_name=row["display_name"],
        description=row.get("description"),
    )


class MySQLPermissionRepository(PermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Permission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PERMISSION_COLUMNS} FROM permissions ORDER BY category, name")
            return [_permission(r) for r in fetchall(cur)]

    def get_by_id(self, permission_id: int) -> Optional[Permission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PERMISSION_COLUMNS} FROM permissions WHERE permission_id=%s", (int(permission_id),))
            row = fetchone(cur)
            return _permission(row) if row else None

    def get_by_name(self, name: str) -> Optional[Permission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PERMISSION_COLUMNS} FROM permissions WHERE name=%s", (name,))
            row = fetchone(cur)
            return _permission(row) if row else None

    def create_permission(self, *, name: str, category: str, display_name: str, description: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur), unique_violation(f"Permission '{name}' already exists"):
            cur.execute(
                "INSERT INTO permissions(name, category, display_name, description) VALUES(%s,%s,%s,%s)",
                (name, category, display_name, description),
            )
            return int(cur.lastrowid)


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROLE_COLUMNS} FROM roles ORDER BY is_system_role DESC, name")
            return [_role(r) for r in fetchall(cur)]

    def get_by_id(self, role_id: int) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROLE_COLUMNS} FROM roles WHERE role_id=%s", (int(role_id),))
            row = fetchone(cur)
            return _role(row) if row else None

    def get_by_name(self, name: str) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROLE_COLUMNS} FROM roles WHERE name=%s", (name,))
            row = fetchone(cur)
            return _role(row) if row else None

    def create_role(
        self,
        *,
        name: str,
        display_name: str,
        description: Optional[str],
        is_system_role: bool = False,
        is_super_role: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur), unique_violation(f"Role '{name}' already exists"):
            cur.execute(
                """
                INSERT INTO roles(name, display_name, description, is_system_role, is_super_role)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (name, display_name, description, int(is_system_role), int(is_super_role)),
            )
            return int(cur.lastrowid)

    def update_role(self, role_id: int, *, display_name: str, description: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE roles SET display_name=%s, description=%s WHERE role_id=%s",
                (display_name, description, int(role_id)),
            )
            return cur.rowcount > 0

    def delete_role(self, role_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM role_permissions WHERE role_id=%s", (int(role_id),))
            cur.execute("DELETE FROM roles WHERE role_id=%s", (int(role_id),))
            return cur.rowcount > 0

    def list_permissions(self, role_id: int) -> Sequence[Permission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.permission_id, p.name, p.category, p.display_name, p.description
                FROM role_permissions rp
                JOIN permissions p ON p.permission_id = rp.permission_id
                WHERE rp.role_id=%s
                ORDER BY p.category, p.name
                """,
                (int(role_id),),
            )
            return [_permission(r) for r in fetchall(cur)]

    def add_grant(self, role_id: int, permission_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO role_permissions(role_id, permission_id) VALUES(%s,%s)",
                (int(role_id), int(permission_id)),
            )
            return cur.rowcount > 0

    def remove_grant(self, role_id: int, permission_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM role_permissions WHERE role_id=%s AND permission_id=%s",
                (int(role_id), int(permission_id)),
            )
            return cur.rowcount > 0
