from __future__ import annotations

from flask import Flask, g

from ..common.web import json_body, json_response, make_guards
from ..container import Container
from ..employees.controller import card_payload


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container)

    @app.route("/api/departments", methods=["GET"], endpoint="list_departments")
    @permission_required("departments.view")
    def list_departments():
        payload = []
        for roster in container.department_service.list_with_employees():
            payload.append(
                {
                    "department_id": roster.department.department_id,
                    "name": roster.department.name,
                    "employees": [card_payload(container, g.actor, card) for card in roster.employees],
                }
            )
        return json_response(payload)

    @app.route("/api/departments", methods=["POST"], endpoint="create_department")
    @permission_required("departments.manage")
    def create_department():
        department = container.department_service.create_department(actor=g.actor, name=json_body().get("name", ""))
        return json_response(department, 201)
