from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.models.audit_log import AuditLog


def _actor_email(admin: dict | None) -> str | None:
    if not admin:
        return None
    return str(admin.get("email") or "").strip().lower() or None


def _append_audit(db: Session, admin: dict, table_name: str, entity_id: str, action: str, diff: dict[str, Any]) -> None:
    db.add(
        AuditLog(
            actor_email=_actor_email(admin),
            entity=table_name,
            entity_id=str(entity_id),
            action=action,
            diff=diff,
        )
    )


def _changed_fields(before: dict[str, Any], after: dict[str, Any]) -> dict[str, Any]:
    return {
        key: {"from": before.get(key), "to": value}
        for key, value in after.items()
        if key != "updated_at" and before.get(key) != value
    }


def _integrity_error(detail: str = "Data constraint violated") -> ValidationError:
    return ValidationError(detail)
