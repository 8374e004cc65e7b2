from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AuditAction, EntityType
from .model import AuditFilter, AuditLogEntry


class AuditRepository(Protocol):
    """Append-only: there is deliberately no update or delete."""

    def add(
        self,
        *,
        action: AuditAction,
        entity_type: EntityType,
        entity_id: int,
        user_id: Optional[int],
        description: str,
        old_value: Optional[dict],
        new_value: Optional[dict],
    ) -> int:
        raise NotImplementedError

    def list(self, audit_filter: AuditFilter) -> Sequence[AuditLogEntry]:
        """Newest first."""

        raise NotImplementedError
