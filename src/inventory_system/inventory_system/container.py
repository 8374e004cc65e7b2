from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .audit.memory_audit_repository import MemoryAuditRepository
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.recorder import AuditRecorder
from .audit.repository import AuditRepository
from .database.connection import DBConfig, DatabaseConnection
from .database.memory import MemoryStore
from .database.unit_of_work import UnitOfWork
from .departments.memory_department_repository import MemoryDepartmentRepository
from .departments.mysql_department_repository import MySQLDepartmentRepository
from .departments.repository import DepartmentRepository
from .departments.service import DepartmentService
from .employees.memory_employee_repository import MemoryEmployeeRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService
from .equipment.memory_equipment_repository import MemoryEquipmentRepository
from .equipment.mysql_equipment_repository import MySQLEquipmentRepository
from .equipment.repository import EquipmentRepository
from .equipment.service import EquipmentService
from .notifications.memory_notification_repository import MemoryNotificationRepository
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .rbac.authorizer import Authorizer
from .rbac.memory_role_repository import MemoryPermissionRepository, MemoryRoleRepository
from .rbac.mysql_role_repository import MySQLPermissionRepository, MySQLRoleRepository
from .rbac.repository import PermissionRepository, RoleRepository
from .rbac.service import RoleService
from .registrations.memory_registration_repository import MemoryRegistrationRepository
from .registrations.mysql_registration_repository import MySQLRegistrationRepository
from .registrations.repository import RegistrationRepository
from .registrations.service import RegistrationService
from .users.memory_user_repository import MemoryUserRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    uow: UnitOfWork

    users_repo: UserRepository
    roles_repo: RoleRepository
    permissions_repo: PermissionRepository
    departments_repo: DepartmentRepository
    employees_repo: EmployeeRepository
    equipment_repo: EquipmentRepository
    audit_repo: AuditRepository
    notifications_repo: NotificationRepository
    registrations_repo: RegistrationRepository

    authorizer: Authorizer
    audit: AuditRecorder
    auth_service: AuthService
    user_service: UserService
    role_service: RoleService
    department_service: DepartmentService
    equipment_service: EquipmentService
    employee_service: EmployeeService
    notification_service: NotificationService
    registration_service: RegistrationService

    store: Optional[MemoryStore] = None


def _wire(
    *,
    uow: UnitOfWork,
    users_repo,
    roles_repo,
    permissions_repo,
    departments_repo,
    employees_repo,
    equipment_repo,
    audit_repo,
    notifications_repo,
    registrations_repo,
    store: Optional[MemoryStore] = None,
) -> Container:
    authorizer = Authorizer(roles_repo)
    audit = AuditRecorder(audit_repo)
    notification_service = NotificationService(notifications_repo, users_repo, uow)

    user_service = UserService(users_repo, roles_repo, audit, authorizer, uow)
    equipment_service = EquipmentService(equipment_repo, employees_repo, audit, notification_service, authorizer, uow)

    return Container(
        uow=uow,
        users_repo=users_repo,
        roles_repo=roles_repo,
        permissions_repo=permissions_repo,
        departments_repo=departments_repo,
        employees_repo=employees_repo,
        equipment_repo=equipment_repo,
        audit_repo=audit_repo,
        notifications_repo=notifications_repo,
        registrations_repo=registrations_repo,
        authorizer=authorizer,
        audit=audit,
        auth_service=AuthService(users_repo),
        user_service=user_service,
        role_service=RoleService(roles_repo, permissions_repo, users_repo, audit, authorizer, uow),
        department_service=DepartmentService(departments_repo, employees_repo, equipment_repo, audit, authorizer, uow),
        equipment_service=equipment_service,
        employee_service=EmployeeService(
            employees_repo, departments_repo, equipment_service, audit, notification_service, authorizer, uow
        ),
        notification_service=notification_service,
        registration_service=RegistrationService(
            registrations_repo, users_repo, roles_repo, user_service, audit, authorizer, uow
        ),
        store=store,
    )


def build_container(*, db_config: dict) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return _wire(
        uow=conn,
        users_repo=MySQLUserRepository(conn),
        roles_repo=MySQLRoleRepository(conn),
        permissions_repo=MySQLPermissionRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        equipment_repo=MySQLEquipmentRepository(conn),
        audit_repo=MySQLAuditRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        registrations_repo=MySQLRegistrationRepository(conn),
    )


def build_memory_container(store: Optional[MemoryStore] = None) -> Container:
    """Same wiring over the in-process arena (tests, local demo)."""

    store = store or MemoryStore()
    return _wire(
        uow=store,
        users_repo=MemoryUserRepository(store),
        roles_repo=MemoryRoleRepository(store),
        permissions_repo=MemoryPermissionRepository(store),
        departments_repo=MemoryDepartmentRepository(store),
        employees_repo=MemoryEmployeeRepository(store),
        equipment_repo=MemoryEquipmentRepository(store),
        audit_repo=MemoryAuditRepository(store),
        notifications_repo=MemoryNotificationRepository(store),
        registrations_repo=MemoryRegistrationRepository(store),
        store=store,
    )
