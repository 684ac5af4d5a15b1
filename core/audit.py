"""
Audit trail for menu changes.

Every restaurant, category and dish mutation lands in audit_log, attributed
to the owner who made it. Rows are append-only and outlive the entities they
describe, so a deleted restaurant keeps its history.
"""

from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from psycopg2.extras import Json
from pydantic import BaseModel

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc
from utils.user_context import get_current_user_id


class AuditAction(Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None
) -> dict[str, dict[str, Any]]:
    """
    Field-level diff between two entity states.

    Returns {field: {"old": ..., "new": ...}} for every field that differs,
    skipping updated_at unless exclude_fields says otherwise.
    """
    exclude = exclude_fields or {"updated_at"}
    return {
        key: {"old": old.get(key), "new": new.get(key)}
        for key in sorted(set(old) | set(new))
        if key not in exclude and old.get(key) != new.get(key)
    }


class AuditLogger:
    """
    Writes audit_log rows for the current owner.

    Usage:
        audit.record_created("restaurant", restaurant)
        audit.record_updated("dish", before, after)
        audit.record_deleted("category", category)
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def log_change(
        self,
        entity_type: str,
        entity_id: UUID,
        action: AuditAction,
        changes: dict[str, Any],
        user_id: UUID | None = None
    ) -> None:
        """
        Insert one audit row. user_id defaults to the identity context.

        Raises:
            RuntimeError: If no user_id is given and no identity is bound
        """
        if user_id is None:
            user_id = get_current_user_id()

        self.postgres.execute(
            """
            INSERT INTO audit_log (id, user_id, entity_type, entity_id, action, changes, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            """,
            (uuid4(), user_id, entity_type, entity_id, action.value, Json(changes), now_utc())
        )

    def record_created(self, entity_type: str, entity: BaseModel) -> None:
        self.log_change(
            entity_type, entity.id, AuditAction.CREATE,
            {"created": entity.model_dump(mode="json")}
        )

    def record_updated(self, entity_type: str, before: BaseModel, after: BaseModel) -> dict[str, Any]:
        """Log the field diff. Nothing is written when nothing changed."""
        changes = compute_changes(before.model_dump(mode="json"), after.model_dump(mode="json"))
        if changes:
            self.log_change(entity_type, after.id, AuditAction.UPDATE, changes)
        return changes

    def record_deleted(self, entity_type: str, entity: BaseModel) -> None:
        self.log_change(
            entity_type, entity.id, AuditAction.DELETE,
            {"deleted": entity.model_dump(mode="json")}
        )
