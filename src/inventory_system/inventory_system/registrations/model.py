from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RegistrationStatus


@dataclass(frozen=True)
class RegistrationRequest:
    request_id: int
    email: str
    full_name: str
    password_hash: str
    role: str
    status: RegistrationStatus = RegistrationStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status is RegistrationStatus.PENDING
