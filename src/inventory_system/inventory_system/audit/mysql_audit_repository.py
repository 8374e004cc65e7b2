from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AuditAction, EntityType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json
from .model import AuditFilter, AuditLogEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_log(action, entity_type, entity_id, user_id, description, old_values, new_values)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    action.value,
                    entity_type.value,
                    int(entity_id),
                    user_id,
                    description,
                    dump_json(old_value),
                    dump_json(new_value),
                ),
            )
            return int(cur.lastrowid)

    def list(self, audit_filter: AuditFilter) -> Sequence[AuditLogEntry]:
        clauses = ["1=1"]
        params: list[object] = []

        if audit_filter.entity_type is not None:
            clauses.append("entity_type=%s")
            params.append(audit_filter.entity_type.value)
        if audit_filter.entity_id is not None:
            clauses.append("entity_id=%s")
            params.append(int(audit_filter.entity_id))
        if audit_filter.user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(audit_filter.user_id))
        if audit_filter.action is not None:
            clauses.append("action=%s")
            params.append(audit_filter.action.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT entry_id, action, entity_type, entity_id, user_id, description,
                       old_values, new_values, created_at
                FROM audit_log
                WHERE {where}
                ORDER BY created_at DESC, entry_id DESC
                LIMIT %s
                """,
                tuple(params + [int(audit_filter.limit)]),
            )
            return [
                AuditLogEntry(
                    entry_id=int(r["entry_id"]),
                    action=AuditAction(r["action"]),
                    entity_type=EntityType(r["entity_type"]),
                    entity_id=int(r["entity_id"]),
                    user_id=r.get("user_id"),
                    description=r["description"],
                    old_value=load_json(r.get("old_values")),
                    new_value=load_json(r.get("new_values")),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
