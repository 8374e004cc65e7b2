from __future__ import annotations

from flask import Flask, g, request

from ..common.serialization import to_dict
from ..common.web import json_response, make_guards
from ..container import Container
from ..users.controller import user_payload


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container)

    @app.route("/api/registration-requests", methods=["GET"], endpoint="list_registration_requests")
    @permission_required("users.manage")
    def list_registration_requests():
        requests = container.registration_service.list_requests(request.args.get("status") or None)
        return json_response([to_dict(r, exclude=("password_hash",)) for r in requests])

    @app.route("/api/registration-requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_registration")
    @permission_required("users.manage")
    def approve_registration(request_id: int):
        user = container.registration_service.approve(actor=g.actor, request_id=request_id)
        return json_response(user_payload(user), 201)

    @app.route("/api/registration-requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_registration")
    @permission_required("users.manage")
    def reject_registration(request_id: int):
        req = container.registration_service.reject(actor=g.actor, request_id=request_id)
        return json_response(to_dict(req, exclude=("password_hash",)))
