from __future__ import annotations

import logging

from flask import Flask, g, session

from ..common.serialization import to_dict
from ..common.web import json_body, json_response, make_guards
from ..container import Container
from .model import User

logger = logging.getLogger(__name__)


def user_payload(user: User, permissions=()) -> dict:
    data = to_dict(user, exclude=("password_hash",))
    if permissions:
        data["permissions"] = sorted(permissions)
    return data


def register(app: Flask, container: Container) -> None:
    login_required, permission_required = make_guards(container)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember", True))
        session["user_id"] = user.user_id

        logger.info("User %s signed in", user.user_id)
        return json_response(user_payload(user, container.authorizer.permissions_for(user.role)))

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return json_response({"message": "Signed out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        user = container.user_service.get_user(g.actor.user_id)
        return json_response(user_payload(user, container.authorizer.permissions_for(user.role)))

    @app.route("/api/auth/register", methods=["POST"], endpoint="register")
    def register_request():
        data = json_body()
        req = container.registration_service.submit(
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("full_name", ""),
            role=data.get("role") or "",
        )
        return json_response(to_dict(req, exclude=("password_hash",)), 201)

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @permission_required("users.view")
    def list_users():
        return json_response([user_payload(u) for u in container.user_service.list_users()])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @permission_required("users.manage")
    def create_user():
        data = json_body()
        user = container.user_service.create_user(
            actor=g.actor,
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("full_name", ""),
            role=data.get("role", ""),
        )
        return json_response(user_payload(user), 201)

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="change_user_role")
    @permission_required("users.manage")
    def change_user_role(user_id: int):
        user = container.user_service.change_role(actor=g.actor, user_id=user_id, role=json_body().get("role", ""))
        return json_response(user_payload(user))

    @app.route("/api/users/<int:user_id>/password", methods=["PUT"], endpoint="change_user_password")
    @permission_required("users.manage")
    def change_user_password(user_id: int):
        container.user_service.change_password(
            actor=g.actor, user_id=user_id, new_password=json_body().get("password", "")
        )
        return json_response({"message": "Password changed"})

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @permission_required("users.manage")
    def delete_user(user_id: int):
        container.user_service.delete_user(actor=g.actor, user_id=user_id)
        return json_response({"message": "User deleted"})
