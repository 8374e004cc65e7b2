"""Example: drive the service layer directly, without Flask.

Uses the in-memory storage so it runs without a database.
"""

from src.inventory_system.inventory_system.container import build_memory_container
from src.inventory_system.inventory_system.employees.model import EmployeeDraft
from src.inventory_system.inventory_system.equipment.model import EquipmentDraft
from src.inventory_system.inventory_system.main import seed
from src.inventory_system.inventory_system.rbac.model import Actor


def main():
    container = build_memory_container()
    seed(container, admin_email="admin@example.com", admin_password="admin123")
    admin = container.users_repo.get_by_email("admin@example.com")
    actor = Actor(user_id=admin.user_id, role=admin.role)

    employee = container.employee_service.create_employee(
        actor=actor, draft=EmployeeDraft(full_name="Ivan Petrov", position="Engineer", grade="2")
    )
    laptop = container.equipment_service.create_equipment(
        actor=actor, draft=EquipmentDraft(name="Laptop", inventory_number="INV-001", employee_id=employee.employee_id)
    )
    container.employee_service.archive_employee(actor=actor, employee_id=employee.employee_id)

    print(container.equipment_service.get(laptop.equipment_id).state.value)
    for entry in container.audit.list():
        print(entry.created_at, entry.action.value, entry.description)


if __name__ == "__main__":
    main()
