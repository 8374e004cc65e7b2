from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_AUDIT_LIMIT
from ..core.enums import AuditAction, EntityType


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable record of one mutating action."""

    entry_id: int
    action: AuditAction
    entity_type: EntityType
    entity_id: int
    user_id: Optional[int]
    description: str
    old_value: Optional[dict]
    new_value: Optional[dict]
    created_at: datetime


@dataclass(frozen=True)
class AuditFilter:
    entity_type: Optional[EntityType] = None
    entity_id: Optional[int] = None
    user_id: Optional[int] = None
    action: Optional[AuditAction] = None
    limit: int = DEFAULT_AUDIT_LIMIT
