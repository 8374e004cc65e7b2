from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RegistrationStatus
from .model import RegistrationRequest


class RegistrationRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[RegistrationRequest]:
        raise NotImplementedError

    def get_pending_by_email(self, email: str) -> Optional[RegistrationRequest]:
        raise NotImplementedError

    def list_requests(self, *, status: Optional[RegistrationStatus] = None) -> Sequence[RegistrationRequest]:
        """Newest first."""

        raise NotImplementedError

    def create_request(self, *, email: str, full_name: str, password_hash: str, role: str) -> int:
        raise NotImplementedError

    def set_status(self, request_id: int, status: RegistrationStatus) -> bool:
        """Move a pending request to ``status``; False if it was not pending."""

        raise NotImplementedError
