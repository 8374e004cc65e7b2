from __future__ import annotations

from flask import Flask, g

from ..common.serialization import to_plain
from ..common.web import json_body, json_response, make_guards
from ..container import Container
from .model import RoleWithPermissions


def _role_payload(role: RoleWithPermissions) -> dict:
    data = to_plain(role.role)
    data["permissions"] = [to_plain(p) for p in sorted(role.permissions, key=lambda p: p.name)]
    return data


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container)

    @app.route("/api/permissions", methods=["GET"], endpoint="list_permissions")
    @permission_required("roles.manage")
    def list_permissions():
        return json_response(container.role_service.list_permissions())

    @app.route("/api/roles", methods=["GET"], endpoint="list_roles")
    @permission_required("roles.manage")
    def list_roles():
        return json_response(container.role_service.list_roles())

    @app.route("/api/roles/<int:role_id>", methods=["GET"], endpoint="get_role")
    @permission_required("roles.manage")
    def get_role(role_id: int):
        return json_response(_role_payload(container.role_service.get_role(role_id)))

    @app.route("/api/roles", methods=["POST"], endpoint="create_role")
    @permission_required("roles.manage")
    def create_role():
        data = json_body()
        role = container.role_service.create_role(
            actor=g.actor,
            name=data.get("name", ""),
            display_name=data.get("display_name", ""),
            description=data.get("description", ""),
        )
        return json_response(role, 201)

    @app.route("/api/roles/<int:role_id>", methods=["PUT"], endpoint="update_role")
    @permission_required("roles.manage")
    def update_role(role_id: int):
        data = json_body()
        role = container.role_service.update_role(
            actor=g.actor,
            role_id=role_id,
            display_name=data.get("display_name", ""),
            description=data.get("description", ""),
        )
        return json_response(role)

    @app.route("/api/roles/<int:role_id>", methods=["DELETE"], endpoint="delete_role")
    @permission_required("roles.manage")
    def delete_role(role_id: int):
        container.role_service.delete_role(actor=g.actor, role_id=role_id)
        return json_response({"message": "Role deleted"})

    @app.route("/api/roles/<int:role_id>/permissions/<int:permission_id>", methods=["POST"], endpoint="grant_permission")
    @permission_required("roles.manage")
    def grant_permission(role_id: int, permission_id: int):
        changed = container.role_service.grant_permission(actor=g.actor, role_id=role_id, permission_id=permission_id)
        return json_response({"changed": changed})

    @app.route("/api/roles/<int:role_id>/permissions/<int:permission_id>", methods=["DELETE"], endpoint="revoke_permission")
    @permission_required("roles.manage")
    def revoke_permission(role_id: int, permission_id: int):
        changed = container.role_service.revoke_permission(actor=g.actor, role_id=role_id, permission_id=permission_id)
        return json_response({"changed": changed})
