from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Domain entity: system user account.

    Note: plain data object (no DB access code). ``role`` is a role name.
    """

    user_id: int
    email: str
    full_name: str
    password_hash: str
    role: str
    created_at: Optional[datetime] = None
