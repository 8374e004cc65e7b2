from __future__ import annotations

import pytest

from src.inventory_system.inventory_system.core.exceptions import AuthorizationError, ValidationError


def test_create_department_unique_name(container, admin):
    container.department_service.create_department(actor=admin, name="IT")
    with pytest.raises(ValidationError):
        container.department_service.create_department(actor=admin, name="IT")
    with pytest.raises(ValidationError):
        container.department_service.create_department(actor=admin, name=" ")


def test_create_department_needs_permission(container, make_actor):
    with pytest.raises(AuthorizationError):
        container.department_service.create_department(actor=make_actor("accountant"), name="HR")


def test_roster_lists_active_employees_with_equipment(container, admin, make_employee, make_equipment):
    it = container.department_service.create_department(actor=admin, name="IT")
    hr = container.department_service.create_department(actor=admin, name="HR")
    dev = make_employee("Dev", department_id=it.department_id)
    gone = make_employee("Gone", department_id=it.department_id)
    make_equipment(employee_id=dev.employee_id)
    container.employee_service.archive_employee(actor=admin, employee_id=gone.employee_id)

    rosters = {r.department.name: r for r in container.department_service.list_with_employees()}

    assert rosters["HR"].department == hr
    assert rosters["HR"].employees == ()
    assert [c.employee.full_name for c in rosters["IT"].employees] == ["Dev"]
    assert len(rosters["IT"].employees[0].equipment) == 1
