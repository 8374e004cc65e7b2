from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import NotFoundError
from ..database.unit_of_work import UnitOfWork
from ..users.repository import UserRepository
from .model import Notification
from .repository import NotificationRepository


class NotificationService:
    def __init__(self, notifications: NotificationRepository, users: UserRepository, uow: UnitOfWork):
        self._notifications = notifications
        self._users = users
        self._uow = uow

    def notify_others(
        self,
        *,
        actor_user_id: Optional[int],
        title: str,
        message: str,
        kind: str,
        related_id: Optional[int] = None,
    ) -> int:
        """Notify every user except the one who made the change."""

        count = 0
        with self._uow.transaction():
            for user in self._users.list_all():
                if user.user_id == actor_user_id:
                    continue
                self._notifications.create(
                    user_id=user.user_id, title=title, message=message, kind=kind, related_id=related_id
                )
                count += 1
        return count

    def list_for_user(self, user_id: int, *, unread_only: bool = False) -> Sequence[Notification]:
        return self._notifications.list_for_user(int(user_id), unread_only=unread_only)

    def unread_count(self, user_id: int) -> int:
        return self._notifications.count_unread(int(user_id))

    def mark_read(self, *, notification_id: int, user_id: int) -> None:
        with self._uow.transaction():
            if not self._notifications.mark_read(int(notification_id), user_id=int(user_id)):
                raise NotFoundError("Notification not found")

    def mark_all_read(self, *, user_id: int) -> int:
        with self._uow.transaction():
            return self._notifications.mark_all_read(int(user_id))
