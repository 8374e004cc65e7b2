from __future__ import annotations

from flask import Flask, request

from ..common.web import json_response, make_guards, query_int
from ..container import Container
from ..core.constants import DEFAULT_AUDIT_LIMIT
from ..core.enums import AuditAction, EntityType
from ..core.exceptions import ValidationError
from .model import AuditFilter


def _enum_arg(enum_cls, name: str):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationError(f"Unknown {name} '{raw}'")


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container)

    @app.route("/api/audit-logs", methods=["GET"], endpoint="list_audit_logs")
    @permission_required("audit.view")
    def list_audit_logs():
        audit_filter = AuditFilter(
            entity_type=_enum_arg(EntityType, "entity_type"),
            entity_id=query_int("entity_id"),
            user_id=query_int("user_id"),
            action=_enum_arg(AuditAction, "action"),
            limit=query_int("limit") or DEFAULT_AUDIT_LIMIT,
        )
        return json_response(container.audit.list(audit_filter))
