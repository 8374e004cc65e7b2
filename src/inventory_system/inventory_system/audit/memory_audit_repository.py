from __future__ import annotations

import copy
from typing import Optional, Sequence

from ..core.enums import AuditAction, EntityType
from ..database.memory import MemoryStore
from .model import AuditFilter, AuditLogEntry
from .repository import AuditRepository


class MemoryAuditRepository(AuditRepository):
    def __init__(self, store: MemoryStore):
        self._store = store

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
        entry_id = self._store.next_id("audit_log")
        self._store.table("audit_log")[entry_id] = AuditLogEntry(
            entry_id=entry_id,
            action=action,
            entity_type=entity_type,
            entity_id=int(entity_id),
            user_id=user_id,
            description=description,
            old_value=copy.deepcopy(old_value),
            new_value=copy.deepcopy(new_value),
            created_at=self._store.now(),
        )
        return entry_id

    def list(self, audit_filter: AuditFilter) -> Sequence[AuditLogEntry]:
        f = audit_filter
        rows = [
            e
            for e in self._store.table("audit_log").values()
            if (f.entity_type is None or e.entity_type == f.entity_type)
            and (f.entity_id is None or e.entity_id == int(f.entity_id))
            and (f.user_id is None or e.user_id == int(f.user_id))
            and (f.action is None or e.action == f.action)
        ]
        rows.sort(key=lambda e: (e.created_at, e.entry_id), reverse=True)
        return rows[: int(f.limit)]
