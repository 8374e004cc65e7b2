from __future__ import annotations

from flask import Flask, g, request

from ..common.web import json_response, make_guards
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required, _ = make_guards(container)

    @app.route("/api/notifications", methods=["GET"], endpoint="list_notifications")
    @login_required
    def list_notifications():
        unread_only = request.args.get("unread") in {"1", "true"}
        return json_response(container.notification_service.list_for_user(g.actor.user_id, unread_only=unread_only))

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="unread_notifications")
    @login_required
    def unread_notifications():
        return json_response({"count": container.notification_service.unread_count(g.actor.user_id)})

    @app.route("/api/notifications/<int:notification_id>/read", methods=["PUT"], endpoint="read_notification")
    @login_required
    def read_notification(notification_id: int):
        container.notification_service.mark_read(notification_id=notification_id, user_id=g.actor.user_id)
        return json_response({"message": "Marked as read"})

    @app.route("/api/notifications/mark-all-read", methods=["PUT"], endpoint="read_all_notifications")
    @login_required
    def read_all_notifications():
        count = container.notification_service.mark_all_read(user_id=g.actor.user_id)
        return json_response({"updated": count})
