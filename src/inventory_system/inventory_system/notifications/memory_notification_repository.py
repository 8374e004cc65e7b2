from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..database.memory import MemoryStore
from .model import Notification
from .repository import NotificationRepository


class MemoryNotificationRepository(NotificationRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

    def _rows(self) -> dict[int, Notification]:
        return self._store.table("notifications")

    def create(self, *, user_id: int, title: str, message: str, kind: str, related_id: Optional[int]) -> int:
        nid = self._store.next_id("notifications")
        self._rows()[nid] = Notification(
            notification_id=nid,
            user_id=int(user_id),
            title=title,
            message=message,
            kind=kind,
            related_id=related_id,
            created_at=self._store.now(),
        )
        return nid

    def list_for_user(self, user_id: int, *, unread_only: bool = False) -> Sequence[Notification]:
        rows = [n for n in self._rows().values() if n.user_id == int(user_id) and not (unread_only and n.is_read)]
        return sorted(rows, key=lambda n: (n.created_at, n.notification_id), reverse=True)

    def count_unread(self, user_id: int) -> int:
        return len(self.list_for_user(user_id, unread_only=True))

    def mark_read(self, notification_id: int, *, user_id: int) -> bool:
        note = self._rows().get(int(notification_id))
        if not note or note.user_id != int(user_id):
            return False
        self._rows()[note.notification_id] = replace(note, is_read=True)
        return True

    def mark_all_read(self, user_id: int) -> int:
        unread = self.list_for_user(user_id, unread_only=True)
        for note in unread:
            self._rows()[note.notification_id] = replace(note, is_read=True)
        return len(unread)
