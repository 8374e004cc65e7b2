from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import g, jsonify, request, session

from ..core.exceptions import AuthenticationError, ValidationError
from ..rbac.model import Actor
from .serialization import to_plain


def json_response(value: Any, status: int = 200):
    return jsonify(to_plain(value)), status


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def current_actor(container) -> Actor:
    """Resolve the signed-in user; the role is re-read so role changes apply immediately."""

    user_id = session.get("user_id")
    if user_id is None:
        raise AuthenticationError("Not signed in")
    user = container.users_repo.get_by_id(int(user_id))
    if not user:
        session.clear()
        raise AuthenticationError("Not signed in")
    return Actor(user_id=user.user_id, role=user.role)


def make_guards(container) -> tuple[Callable, Callable]:
    """Return ``(login_required, permission_required)`` bound to ``container``.

    Both put the resolved Actor on ``flask.g.actor``.
    """

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.actor = current_actor(container)
            return view(*args, **kwargs)

        return wrapper

    def permission_required(permission: str, *more: str):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                g.actor = current_actor(container)
                for name in (permission, *more):
                    container.authorizer.require(g.actor, name)
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return login_required, permission_required


def query_int(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer")
