from __future__ import annotations

from dataclasses import fields

from flask import Flask, g

from ..common.serialization import to_dict, to_plain
from ..common.web import json_body, json_response, make_guards, query_int
from ..container import Container
from ..rbac.model import Actor
from .model import DOCUMENT_FIELDS, Employee, EmployeeCard, EmployeeDraft


def employee_payload(container: Container, actor: Actor, employee: Employee) -> dict:
    """Personal/document fields are only shown to holders of documents.view."""

    if container.authorizer.authorize(actor.role, "documents.view"):
        return to_dict(employee)
    return to_dict(employee, exclude=DOCUMENT_FIELDS)


def card_payload(container: Container, actor: Actor, card: EmployeeCard) -> dict:
    data = employee_payload(container, actor, card.employee)
    data["equipment"] = [to_plain(e) for e in card.equipment]
    data["department"] = to_plain(card.department)
    return data


def _draft(data: dict) -> EmployeeDraft:
    values = {f.name: data.get(f.name) for f in fields(EmployeeDraft)}
    for required in ("full_name", "position", "grade"):
        values[required] = values[required] or ""
    return EmployeeDraft(**values)


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container)

    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    @permission_required("employees.view")
    def list_employees():
        employees = container.employee_service.list_active(department_id=query_int("department_id"))
        return json_response([employee_payload(container, g.actor, e) for e in employees])

    @app.route("/api/employees/archived", methods=["GET"], endpoint="list_archived_employees")
    @permission_required("employees.view_archive")
    def list_archived_employees():
        employees = container.employee_service.list_archived()
        return json_response([employee_payload(container, g.actor, e) for e in employees])

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="get_employee")
    @permission_required("employees.view")
    def get_employee(employee_id: int):
        card = container.employee_service.get_card(employee_id)
        return json_response(card_payload(container, g.actor, card))

    @app.route("/api/employees", methods=["POST"], endpoint="create_employee")
    @permission_required("employees.create")
    def create_employee():
        employee = container.employee_service.create_employee(actor=g.actor, draft=_draft(json_body()))
        return json_response(employee_payload(container, g.actor, employee), 201)

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="update_employee")
    @permission_required("employees.edit")
    def update_employee(employee_id: int):
        employee = container.employee_service.update_employee(
            actor=g.actor, employee_id=employee_id, changes=json_body()
        )
        return json_response(employee_payload(container, g.actor, employee))

    @app.route("/api/employees/<int:employee_id>/archive", methods=["POST"], endpoint="archive_employee")
    @permission_required("employees.archive")
    def archive_employee(employee_id: int):
        employee = container.employee_service.archive_employee(actor=g.actor, employee_id=employee_id)
        return json_response(employee_payload(container, g.actor, employee))

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="delete_employee")
    @permission_required("employees.edit")
    def delete_employee(employee_id: int):
        container.employee_service.delete_employee(actor=g.actor, employee_id=employee_id)
        return json_response({"message": "Employee deleted"})
