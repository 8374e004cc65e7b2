from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from ..audit.recorder import AuditRecorder
from ..common.serialization import snapshot
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import DEFAULT_REGISTRATION_ROLE, MIN_PASSWORD_LENGTH
from ..core.enums import AuditAction, EntityType, RegistrationStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..rbac.authorizer import Authorizer
from ..rbac.model import Actor
from ..rbac.repository import RoleRepository
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import MANAGE_USERS, UserService
from .model import RegistrationRequest
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)

_AUDIT_FIELDS = ("email", "full_name", "role", "status")


class RegistrationService:
    """Use case: self-service sign-up, decided once by an administrator."""

    def __init__(
        self,
        requests: RegistrationRepository,
        users: UserRepository,
        roles: RoleRepository,
        user_service: UserService,
        audit: AuditRecorder,
        authorizer: Authorizer,
        uow: UnitOfWork,
    ):
        self._requests = requests
        self._users = users
        self._roles = roles
        self._user_service = user_service
        self._audit = audit
        self._authorizer = authorizer
        self._uow = uow

    def submit(self, *, email: str, password: str, full_name: str, role: str = DEFAULT_REGISTRATION_ROLE) -> RegistrationRequest:
        email = require_email(email)
        full_name = require_non_empty(full_name, "Full name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = require_non_empty(role or DEFAULT_REGISTRATION_ROLE, "Role")

        role_obj = self._roles.get_by_name(role)
        if not role_obj:
            raise ValidationError(f"Unknown role '{role}'")
        if role_obj.is_super_role:
            raise ValidationError("This role cannot be requested")
        if self._users.get_by_email(email):
            raise ValidationError("A user with this email already exists")
        if self._requests.get_pending_by_email(email):
            raise ValidationError("A request for this email is already pending")

        with self._uow.transaction():
            request_id = self._requests.create_request(
                email=email, full_name=full_name, password_hash=generate_password_hash(password), role=role
            )
            request = self._requests.get_by_id(request_id)
            self._audit.record(
                action=AuditAction.CREATE,
                entity_type=EntityType.REGISTRATION_REQUEST,
                entity_id=request_id,
                actor_user_id=None,
                description=f"Registration requested for {email}",
                new_value=snapshot(request, *_AUDIT_FIELDS),
            )
        logger.info("Registration request %s submitted for %s", request_id, email)
        return request

    def list_requests(self, status: Optional[RegistrationStatus] = None) -> Sequence[RegistrationRequest]:
        if status is not None:
            try:
                status = RegistrationStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status '{status}'")
        return self._requests.list_requests(status=status)

    def _pending(self, request_id: int) -> RegistrationRequest:
        request = self._requests.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Registration request not found")
        if not request.is_pending:
            raise ConflictError(f"Request already {request.status.value}")
        return request

    def _decide(self, *, actor: Actor, request: RegistrationRequest, status: RegistrationStatus) -> None:
        if not self._requests.set_status(request.request_id, status):
            raise ConflictError("Request was already decided")
        self._audit.record(
            action=AuditAction.APPROVE if status is RegistrationStatus.APPROVED else AuditAction.REJECT,
            entity_type=EntityType.REGISTRATION_REQUEST,
            entity_id=request.request_id,
            actor_user_id=actor.user_id,
            description=f"Registration of {request.email} {status.value}",
            old_value={"status": request.status.value},
            new_value={"status": status.value},
        )

    def approve(self, *, actor: Actor, request_id: int) -> User:
        """Create the account from the stored hash and close the request."""

        self._authorizer.require(actor, MANAGE_USERS)
        request = self._pending(request_id)

        with self._uow.transaction():
            user = self._user_service.create_from_registration(
                actor=actor,
                email=request.email,
                password_hash=request.password_hash,
                full_name=request.full_name,
                role=request.role,
            )
            self._decide(actor=actor, request=request, status=RegistrationStatus.APPROVED)
        logger.info("Registration request %s approved by user %s", request.request_id, actor.user_id)
        return user

    def reject(self, *, actor: Actor, request_id: int) -> RegistrationRequest:
        self._authorizer.require(actor, MANAGE_USERS)
        request = self._pending(request_id)

        with self._uow.transaction():
            self._decide(actor=actor, request=request, status=RegistrationStatus.REJECTED)
        return self._requests.get_by_id(request.request_id)
