"""Compliance trail: log an action and keep it as an ``audit_events`` row."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from hyr_admin.models.entities import AuditEvent
from hyr_admin.repositories.office_repository import OfficeRepository

logger = logging.getLogger(__name__)


def record_audit_event(
    db: Session,
    *,
    entity_name: str,
    entity_id: object,
    action_type: str,
    payload: dict[str, object] | None = None,
) -> AuditEvent:
    """Add an audit row to the current transaction. The caller commits."""

    event = AuditEvent(
        entity_name=entity_name,
        entity_id=str(entity_id),
        action_type=action_type,
        payload=payload or {},
        created_at=datetime.utcnow(),
    )
    OfficeRepository(db).add_audit_event(event)
    logger.info(
        "%s %s",
        entity_name,
        action_type,
        extra={"entity": entity_name, "entity_id": str(entity_id)},
    )
    return event


def serialize_audit_event(event: AuditEvent) -> dict[str, object]:
    return {
        "id": str(event.id),
        "entity_name": event.entity_name,
        "entity_id": event.entity_id,
        "action_type": event.action_type,
        "payload": event.payload,
        "created_at": event.created_at.isoformat(),
    }
