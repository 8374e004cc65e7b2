from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.constants import MAX_AUDIT_LIMIT
from ..core.enums import AuditAction, EntityType
from ..core.exceptions import ValidationError
from .model import AuditFilter, AuditLogEntry
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Appends audit entries for every mutating action.

    A failing audit write is logged and swallowed: the business operation that
    triggered it still completes.
    """

    def __init__(self, repo: AuditRepository):
        self._repo = repo

    def record(
        self,
        *,
        action: AuditAction,
        entity_type: EntityType,
        entity_id: int,
        actor_user_id: Optional[int],
        description: str,
        old_value: Optional[dict] = None,
        new_value: Optional[dict] = None,
    ) -> Optional[int]:
        try:
            return self._repo.add(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=actor_user_id,
                description=description,
                old_value=old_value,
                new_value=new_value,
            )
        except Exception:
            logger.exception(
                "Audit write failed: %s %s#%s by user %s", action.value, entity_type.value, entity_id, actor_user_id
            )
            return None

    def list(self, audit_filter: Optional[AuditFilter] = None) -> Sequence[AuditLogEntry]:
        audit_filter = audit_filter or AuditFilter()
        if audit_filter.limit < 1 or audit_filter.limit > MAX_AUDIT_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {MAX_AUDIT_LIMIT}")
        return self._repo.list(audit_filter)
