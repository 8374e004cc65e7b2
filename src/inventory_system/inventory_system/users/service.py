from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..audit.recorder import AuditRecorder
from ..common.serialization import snapshot
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import AuditAction, EntityType
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..rbac.authorizer import Authorizer
from ..rbac.catalog import ADMIN_ROLE
from ..rbac.model import Actor
from ..rbac.repository import RoleRepository
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

MANAGE_USERS = "users.manage"


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> User:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return user


class UserService:
    """Use case: manage user accounts (admin)."""

    def __init__(
        self,
        users: UserRepository,
        roles: RoleRepository,
        audit: AuditRecorder,
        authorizer: Authorizer,
        uow: UnitOfWork,
    ):
        self._users = users
        self._roles = roles
        self._audit = audit
        self._authorizer = authorizer
        self._uow = uow

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _require_role(self, role: str) -> str:
        role = require_non_empty(role, "Role")
        if not self._roles.get_by_name(role):
            raise ValidationError(f"Unknown role '{role}'")
        return role

    def create_user(self, *, actor: Actor, email: str, password: str, full_name: str, role: str) -> User:
        self._authorizer.require(actor, MANAGE_USERS)
        return self._create(
            actor_user_id=actor.user_id,
            email=email,
            password_hash=generate_password_hash(require_min_length(password, "Password", MIN_PASSWORD_LENGTH)),
            full_name=full_name,
            role=role,
        )

    def _create(self, *, actor_user_id: Optional[int], email: str, password_hash: str, full_name: str, role: str) -> User:
        email = require_email(email)
        full_name = require_non_empty(full_name, "Full name")
        role = self._require_role(role)
        if self._users.get_by_email(email):
            raise ValidationError("A user with this email already exists")

        with self._uow.transaction():
            user_id = self._users.create_user(email=email, full_name=full_name, password_hash=password_hash, role=role)
            user = self._users.get_by_id(user_id)
            self._audit.record(
                action=AuditAction.CREATE,
                entity_type=EntityType.USER,
                entity_id=user_id,
                actor_user_id=actor_user_id,
                description=f"Created user {email}",
                new_value=snapshot(user, "email", "full_name", "role"),
            )
        return user

    def create_from_registration(self, *, actor: Actor, email: str, password_hash: str, full_name: str, role: str) -> User:
        """Create an account from an approved request; the caller has authorized ``actor``."""

        return self._create(
            actor_user_id=actor.user_id, email=email, password_hash=password_hash, full_name=full_name, role=role
        )

    def change_role(self, *, actor: Actor, user_id: int, role: str) -> User:
        self._authorizer.require(actor, MANAGE_USERS)

        user = self.get_user(user_id)
        role = self._require_role(role)
        if user.role == role:
            return user

        with self._uow.transaction():
            self._users.update_role(user.user_id, role=role)
            self._audit.record(
                action=AuditAction.CHANGE_ROLE,
                entity_type=EntityType.USER,
                entity_id=user.user_id,
                actor_user_id=actor.user_id,
                description=f"Changed role of {user.email} to {role}",
                old_value={"role": user.role},
                new_value={"role": role},
            )
        logger.info("User %s role %s -> %s", user.user_id, user.role, role)
        return self.get_user(user.user_id)

    def change_password(self, *, actor: Actor, user_id: int, new_password: str) -> User:
        self._authorizer.require(actor, MANAGE_USERS)

        user = self.get_user(user_id)
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        with self._uow.transaction():
            self._users.update_password_hash(user.user_id, password_hash=generate_password_hash(new_password))
            self._audit.record(
                action=AuditAction.CHANGE_PASSWORD,
                entity_type=EntityType.USER,
                entity_id=user.user_id,
                actor_user_id=actor.user_id,
                description=f"Changed password of {user.email}",
            )
        return self.get_user(user.user_id)

    def delete_user(self, *, actor: Actor, user_id: int) -> None:
        self._authorizer.require(actor, MANAGE_USERS)

        if int(user_id) == actor.user_id:
            raise ValidationError("You cannot delete your own account")
        user = self.get_user(user_id)

        with self._uow.transaction():
            if not self._users.delete_by_id(user.user_id):
                raise NotFoundError("User not found")
            self._audit.record(
                action=AuditAction.DELETE,
                entity_type=EntityType.USER,
                entity_id=user.user_id,
                actor_user_id=actor.user_id,
                description=f"Deleted user {user.email}",
                old_value=snapshot(user, "email", "full_name", "role"),
            )

    def ensure_admin(self, *, email: str, password: str, full_name: str = "System administrator") -> User:
        """Seed the first administrator account if it does not exist yet."""

        existing = self._users.get_by_email(require_email(email))
        if existing:
            return existing
        user = self._create(
            actor_user_id=None,
            email=email,
            password_hash=generate_password_hash(require_min_length(password, "Password", MIN_PASSWORD_LENGTH)),
            full_name=full_name,
            role=ADMIN_ROLE,
        )
        logger.info("Seeded administrator account %s", user.email)
        return user
