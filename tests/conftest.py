from __future__ import annotations

from datetime import datetime, timedelta
from itertools import count

import pytest

from src.inventory_system.inventory_system.container import build_memory_container
from src.inventory_system.inventory_system.database.memory import MemoryStore
from src.inventory_system.inventory_system.employees.model import EmployeeDraft
from src.inventory_system.inventory_system.equipment.model import EquipmentDraft
from src.inventory_system.inventory_system.main import seed
from src.inventory_system.inventory_system.rbac.model import Actor

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"


class TickingClock:
    """Each call is one second later, so newest-first ordering is deterministic."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, 0)):
        self._ticks = count()
        self._start = start

    def __call__(self) -> datetime:
        return self._start + timedelta(seconds=next(self._ticks))


@pytest.fixture
def container():
    c = build_memory_container(MemoryStore(clock=TickingClock()))
    seed(c, admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD)
    return c


@pytest.fixture
def admin(container) -> Actor:
    user = container.users_repo.get_by_email(ADMIN_EMAIL)
    return Actor(user_id=user.user_id, role=user.role)


@pytest.fixture
def make_actor(container, admin):
    """Create a user with ``role`` and return them as an Actor."""

    emails = count(1)

    def _make(role: str) -> Actor:
        user = container.user_service.create_user(
            actor=admin,
            email=f"user{next(emails)}@example.com",
            password="secret1",
            full_name=f"User with {role}",
            role=role,
        )
        return Actor(user_id=user.user_id, role=user.role)

    return _make


@pytest.fixture
def make_employee(container, admin):
    def _make(full_name: str = "Ivan Petrov", **extra):
        draft = EmployeeDraft(full_name=full_name, position="Engineer", grade="2", **extra)
        return container.employee_service.create_employee(actor=admin, draft=draft)

    return _make


@pytest.fixture
def make_equipment(container, admin):
    numbers = count(1)

    def _make(name: str = "Laptop", employee_id=None, **extra):
        draft = EquipmentDraft(
            name=name, inventory_number=extra.pop("inventory_number", f"INV-{next(numbers):04d}"), employee_id=employee_id, **extra
        )
        return container.equipment_service.create_equipment(actor=admin, draft=draft)

    return _make
