from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from ..database.memory import MemoryStore
from .model import User
from .repository import UserRepository


class MemoryUserRepository(UserRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, User]:
        return self._store.table("users")

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._rows().get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._rows().values() if u.email == email), None)

    def list_all(self) -> Sequence[User]:
        return sorted(self._rows().values(), key=lambda u: u.user_id)

    def create_user(self, *, email: str, full_name: str, password_hash: str, role: str) -> int:
        if self.get_by_email(email):
            raise ValidationError(f"User {email} already exists")
        uid = self._store.next_id("users")
        self._rows()[uid] = User(
            user_id=uid,
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            created_at=self._store.now(),
        )
        return uid

    def _update(self, user_id: int, **changes) -> bool:
        user = self.get_by_id(user_id)
        if not user:
            return False
        self._rows()[user.user_id] = replace(user, **changes)
        return True

    def update_role(self, user_id: int, *, role: str) -> bool:
        return self._update(user_id, role=role)

    def update_password_hash(self, user_id: int, *, password_hash: str) -> bool:
        return self._update(user_id, password_hash=password_hash)

    def delete_by_id(self, user_id: int) -> bool:
        uid = int(user_id)
        # Mirrors ON DELETE CASCADE on notifications.user_id.
        notes = self._store.table("notifications")
        for nid in [n.notification_id for n in notes.values() if n.user_id == uid]:
            del notes[nid]
        return self._rows().pop(uid, None) is not None

    def count_by_role(self, role: str) -> int:
        return sum(1 for u in self._rows().values() if u.role == role)
