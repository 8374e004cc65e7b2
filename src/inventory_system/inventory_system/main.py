from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .audit.controller import register as register_audit
from .container import Container, build_container, build_memory_container
from .core.constants import DEFAULT_SESSION_DAYS
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_schema, list_tables
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .equipment.controller import register as register_equipment
from .notifications.controller import register as register_notifications
from .rbac.controller import register as register_rbac
from .registrations.controller import register as register_registrations
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for exc_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, exc_type):
                return jsonify({"message": str(exc)}), status
        return jsonify({"message": str(exc)}), 400

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"message": exc.description}), exc.code
        logger.exception("Unhandled error")
        if app.config.get("DEBUG"):
            return jsonify({"message": f"Internal server error: {exc}"}), 500
        return jsonify({"message": "Internal server error"}), 500


def seed(container: Container, *, admin_email: str = "", admin_password: str = "") -> None:
    """Idempotent: permission catalog, system roles and the first administrator."""

    container.role_service.seed_defaults()
    if admin_email and admin_password:
        container.user_service.ensure_admin(email=admin_email, password=admin_password)
    else:
        logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD not set, no administrator seeded")


def create_app(settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
    app.json.ensure_ascii = False

    backend = getattr(settings, "STORAGE_BACKEND", "mysql")
    db_config = getattr(settings, "DB_CONFIG")
    if backend == "memory":
        container = build_memory_container()
        logger.info("settings=%s storage=memory", settings_module)
    elif backend == "mysql":
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config)
    else:
        raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}'")

    if getattr(settings, "AUTO_SEED_DB", False):
        seed(
            container,
            admin_email=getattr(settings, "ADMIN_EMAIL", ""),
            admin_password=getattr(settings, "ADMIN_PASSWORD", ""),
        )

    app.extensions["container"] = container
    _register_error_handlers(app)

    register_users(app, container)
    register_registrations(app, container)
    register_rbac(app, container)
    register_departments(app, container)
    register_employees(app, container)
    register_equipment(app, container)
    register_notifications(app, container)
    register_audit(app, container)

    return app
