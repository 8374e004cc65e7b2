from __future__ import annotations

from flask import Flask, g

from ..common.serialization import to_plain
from ..common.web import json_body, json_response, make_guards, query_int
from ..container import Container
from ..core.enums import EquipmentCategory
from .model import Equipment, EquipmentDraft


def equipment_payload(item: Equipment) -> dict:
    data = to_plain(item)
    data["state"] = item.state.value
    return data


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container)

    @app.route("/api/equipment", methods=["GET"], endpoint="list_equipment")
    @permission_required("equipment.view")
    def list_equipment():
        employee_id = query_int("employee_id")
        if employee_id is not None:
            items = container.equipment_service.list_by_employee(employee_id)
        else:
            items = container.equipment_service.list_all()
        return json_response([equipment_payload(e) for e in items])

    @app.route("/api/equipment/<int:equipment_id>", methods=["GET"], endpoint="get_equipment")
    @permission_required("equipment.view")
    def get_equipment(equipment_id: int):
        return json_response(equipment_payload(container.equipment_service.get(equipment_id)))

    @app.route("/api/warehouse/equipment", methods=["GET"], endpoint="warehouse_equipment")
    @permission_required("equipment.warehouse")
    def warehouse_equipment():
        return json_response([equipment_payload(e) for e in container.equipment_service.list_warehouse()])

    @app.route("/api/decommissioned/equipment", methods=["GET"], endpoint="decommissioned_equipment")
    @permission_required("equipment.view")
    def decommissioned_equipment():
        return json_response([equipment_payload(e) for e in container.equipment_service.list_decommissioned()])

    @app.route("/api/equipment", methods=["POST"], endpoint="create_equipment")
    @permission_required("equipment.manage")
    def create_equipment():
        data = json_body()
        draft = EquipmentDraft(
            name=data.get("name") or "",
            inventory_number=data.get("inventory_number") or "",
            category=data.get("category") or EquipmentCategory.TECHNIKA,
            characteristics=data.get("characteristics"),
            cost=data.get("cost"),
            employee_id=data.get("employee_id"),
        )
        item = container.equipment_service.create_equipment(actor=g.actor, draft=draft)
        return json_response(equipment_payload(item), 201)

    @app.route("/api/equipment/<int:equipment_id>", methods=["PUT"], endpoint="update_equipment")
    @permission_required("equipment.manage")
    def update_equipment(equipment_id: int):
        item = container.equipment_service.update_equipment(
            actor=g.actor, equipment_id=equipment_id, changes=json_body()
        )
        return json_response(equipment_payload(item))

    @app.route("/api/equipment/<int:equipment_id>", methods=["DELETE"], endpoint="delete_equipment")
    @permission_required("equipment.manage")
    def delete_equipment(equipment_id: int):
        container.equipment_service.delete_equipment(actor=g.actor, equipment_id=equipment_id)
        return json_response({"message": "Equipment deleted"})

    @app.route("/api/equipment/<int:equipment_id>/assign", methods=["POST"], endpoint="assign_equipment")
    @permission_required("equipment.manage")
    def assign_equipment(equipment_id: int):
        item = container.equipment_service.assign_to(
            actor=g.actor, equipment_id=equipment_id, employee_id=json_body().get("employee_id")
        )
        return json_response(equipment_payload(item))

    @app.route("/api/equipment/<int:equipment_id>/return", methods=["POST"], endpoint="return_equipment")
    @permission_required("equipment.manage")
    def return_equipment(equipment_id: int):
        item = container.equipment_service.return_to_warehouse(actor=g.actor, equipment_id=equipment_id)
        return json_response(equipment_payload(item))

    @app.route("/api/equipment/<int:equipment_id>/decommission", methods=["POST"], endpoint="decommission_equipment")
    @permission_required("equipment.manage")
    def decommission_equipment(equipment_id: int):
        item = container.equipment_service.decommission(actor=g.actor, equipment_id=equipment_id)
        return json_response(equipment_payload(item))
