"""Built-in permission atoms and system roles.

Seeded idempotently by ``RoleService.seed_defaults``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class PermissionSpec:
    name: str
    category: str
    display_name: str
    description: str


@dataclass(frozen=True)
class RoleSpec:
    name: str
    display_name: str
    description: str
    is_super_role: bool = False
    grants: Optional[Callable[[PermissionSpec], bool]] = None


BASE_PERMISSIONS: Sequence[PermissionSpec] = (
    PermissionSpec("employees.view", "employees", "View employees", "View the employee list and cards"),
    PermissionSpec("employees.create", "employees", "Create employees", "Add new employees"),
    PermissionSpec("employees.edit", "employees", "Edit employees", "Edit and delete employee records"),
    PermissionSpec("employees.archive", "employees", "Archive employees", "Dismiss and archive employees"),
    PermissionSpec("employees.view_archive", "employees", "View archive", "Access the archive of dismissed employees"),
    PermissionSpec("departments.view", "departments", "View departments", "View the department structure"),
    PermissionSpec("departments.manage", "departments", "Manage departments", "Create and edit departments"),
    PermissionSpec("equipment.view", "equipment", "View equipment", "View the equipment list"),
    PermissionSpec("equipment.manage", "equipment", "Manage equipment", "Add, edit, assign, decommission and delete equipment"),
    PermissionSpec("equipment.warehouse", "equipment", "Manage warehouse", "Access unassigned warehouse equipment"),
    PermissionSpec("users.view", "users", "View users", "View system user accounts"),
    PermissionSpec("users.manage", "users", "Manage users", "Create, edit, delete users and decide registration requests"),
    PermissionSpec("roles.manage", "roles", "Manage roles", "Create roles and edit their permissions"),
    PermissionSpec("documents.view", "documents", "View documents", "Access passport data and personal documents"),
    PermissionSpec("documents.print", "documents", "Print documents", "Generate and print documents"),
    PermissionSpec("reports.export", "reports", "Export reports", "Export data to spreadsheets"),
    PermissionSpec("reports.import", "reports", "Import data", "Import data from spreadsheets"),
    PermissionSpec("audit.view", "audit", "View audit log", "Browse the audit trail of changes"),
)


BASE_ROLES: Sequence[RoleSpec] = (
    RoleSpec(
        ADMIN_ROLE,
        "Administrator",
        "Full access to every function",
        is_super_role=True,
        grants=lambda p: True,
    ),
    RoleSpec(
        "accountant",
        "Accountant",
        "Employee data and documents",
        grants=lambda p: p.category in {"employees", "documents", "reports"},
    ),
    RoleSpec(
        "sysadmin",
        "System administrator",
        "Equipment and technical matters",
        grants=lambda p: p.category in {"equipment", "departments"} or p.name == "employees.create",
    ),
    RoleSpec(
        "office-manager",
        "Office manager",
        "Equipment and warehouse",
        grants=lambda p: p.category == "equipment",
    ),
)


def all_permission_names() -> list[str]:
    return [p.name for p in BASE_PERMISSIONS]
