from __future__ import annotations

from enum import Enum


class EquipmentCategory(str, Enum):
    """Equipment category as stored in the database."""

    TECHNIKA = "Техника"
    FURNITURE = "Мебель"


class EquipmentState(str, Enum):
    """Lifecycle state derived from (employee_id, is_decommissioned)."""

    ASSIGNED = "assigned"
    WAREHOUSE = "warehouse"
    DECOMMISSIONED = "decommissioned"


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ARCHIVE = "archive"
    ASSIGN = "assign"
    RETURN_TO_WAREHOUSE = "return_to_warehouse"
    DECOMMISSION = "decommission"
    GRANT_PERMISSION = "grant_permission"
    REVOKE_PERMISSION = "revoke_permission"
    CHANGE_ROLE = "change_role"
    CHANGE_PASSWORD = "change_password"
    APPROVE = "approve"
    REJECT = "reject"


class EntityType(str, Enum):
    ROLE = "role"
    USER = "user"
    DEPARTMENT = "department"
    EMPLOYEE = "employee"
    EQUIPMENT = "equipment"
    REGISTRATION_REQUEST = "registration_request"
