from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..core.enums import RegistrationStatus
from ..database.memory import MemoryStore
from .model import RegistrationRequest
from .repository import RegistrationRepository


class MemoryRegistrationRepository(RegistrationRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, RegistrationRequest]:
        return self._store.table("registration_requests")

    def get_by_id(self, request_id: int) -> Optional[RegistrationRequest]:
        return self._rows().get(int(request_id))

    def get_pending_by_email(self, email: str) -> Optional[RegistrationRequest]:
        return next((r for r in self._rows().values() if r.email == email and r.is_pending), None)

    def list_requests(self, *, status: Optional[RegistrationStatus] = None) -> Sequence[RegistrationRequest]:
        rows = [r for r in self._rows().values() if status is None or r.status is RegistrationStatus(status)]
        return sorted(rows, key=lambda r: (r.created_at, r.request_id), reverse=True)

    def create_request(self, *, email: str, full_name: str, password_hash: str, role: str) -> int:
        rid = self._store.next_id("registration_requests")
        now = self._store.now()
        self._rows()[rid] = RegistrationRequest(
            request_id=rid,
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            created_at=now,
            updated_at=now,
        )
        return rid

    def set_status(self, request_id: int, status: RegistrationStatus) -> bool:
        request = self.get_by_id(request_id)
        if not request or not request.is_pending:
            return False
        self._rows()[request.request_id] = replace(
            request, status=RegistrationStatus(status), updated_at=self._store.now()
        )
        return True
