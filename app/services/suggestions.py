from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Session

from app.core.deps import principal_role
from app.core.errors import Forbidden, NotFound, Unauthorized, ValidationError
from app.models.kit import GundamKit
from app.models.suggestion import Suggestion
from app.schemas.catalog import SuggestionCreate, SuggestionReview
from app.services.list_query import coerce_column_value
from app.services.result_shaper import row_to_dict

_LOG = logging.getLogger("app.suggestions")

REVIEWER_ROLES = {"admin", "moderator"}
SUGGESTION_STATUSES = {"pending", "approved", "rejected"}
# Kit columns a suggestion may change when it is approved.
KIT_EDITABLE_FIELDS = {
    "grade_id",
    "series_id",
    "mobile_suit_id",
    "limited_type_id",
    "product_code",
    "name_ko",
    "name_en",
    "name_ja",
    "price_jpy",
    "price_krw",
    "release_date",
    "release_type",
    "is_pbandai",
    "scale",
    "description",
    "box_art_url",
}


def _principal_uuid(principal: dict) -> uuid.UUID:
    try:
        return uuid.UUID(str(principal.get("sub") or ""))
    except ValueError:
        raise Unauthorized("Session has no user id")


def _parse_uuid_or_400(value: Any, field_name: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value or "").strip())
    except ValueError:
        raise ValidationError(f'Invalid UUID in field "{field_name}"', details={"field": field_name})


def list_suggestions(db: Session, principal: dict, status: str | None = None) -> list[dict[str, Any]]:
    q = db.query(Suggestion)
    if principal_role(principal) not in REVIEWER_ROLES:
        q = q.filter(Suggestion.user_id == _principal_uuid(principal))
    if status:
        if status not in SUGGESTION_STATUSES:
            raise ValidationError(f'Unknown suggestion status "{status}"')
        q = q.filter(Suggestion.status == status)
    rows = q.order_by(Suggestion.created_at.desc(), Suggestion.id.desc()).all()
    return [row_to_dict(row) for row in rows]


def create_suggestion(db: Session, principal: dict, payload: SuggestionCreate) -> dict[str, Any]:
    kit_id = None
    if payload.suggestion_type in {"edit", "delete"}:
        if not payload.kit_id:
            raise ValidationError("kit_id is required for edit and delete suggestions")
        kit_id = _parse_uuid_or_400(payload.kit_id, "kit_id")
        if db.get(GundamKit, kit_id) is None:
            raise NotFound("Kit not found")
    if payload.suggestion_type in {"edit", "new"}:
        unknown = sorted(set(payload.suggested_data) - KIT_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError("Unknown fields: " + ", ".join(unknown))
        if not payload.suggested_data:
            raise ValidationError("suggested_data must not be empty")

    row = Suggestion(
        kit_id=kit_id,
        user_id=_principal_uuid(principal),
        suggestion_type=payload.suggestion_type,
        current_data=payload.current_data,
        suggested_data=payload.suggested_data,
        reason=(payload.reason or "").strip() or None,
        status="pending",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row_to_dict(row)


def _kit_values(data: dict[str, Any]) -> dict[str, Any]:
    columns = {column.key: column for column in sa_inspect(GundamKit).columns}
    values: dict[str, Any] = {}
    for key, raw in data.items():
        if key not in KIT_EDITABLE_FIELDS:
            continue
        values[key] = None if raw is None else coerce_column_value(getattr(GundamKit, key), raw)
        if values[key] is None and not columns[key].nullable:
            raise ValidationError(f'Field "{key}" cannot be null')
    return values


def _apply_approved(db: Session, row: Suggestion) -> None:
    if row.suggestion_type == "new":
        values = _kit_values(row.suggested_data or {})
        if not values.get("name_ko"):
            raise ValidationError('Field "name_ko" is required for a new kit')
        db.add(GundamKit(**values))
        return
    kit = db.get(GundamKit, row.kit_id) if row.kit_id is not None else None
    if kit is None:
        raise NotFound("Kit not found")
    if row.suggestion_type == "delete":
        kit.status = "discontinued"
    else:
        for key, value in _kit_values(row.suggested_data or {}).items():
            setattr(kit, key, value)
    kit.updated_at = datetime.now(timezone.utc)
    db.add(kit)


def review_suggestion(db: Session, principal: dict, suggestion_id: str, payload: SuggestionReview) -> dict[str, Any]:
    if principal_role(principal) not in REVIEWER_ROLES:
        raise Forbidden("Only admins and moderators can review suggestions")
    row = db.get(Suggestion, _parse_uuid_or_400(suggestion_id, "id"))
    if row is None:
        raise NotFound("Suggestion not found")
    if row.status != "pending":
        raise ValidationError(f"Suggestion is already {row.status}")

    try:
        if payload.status == "approved":
            _apply_approved(db, row)
        row.status = payload.status
        row.reviewed_by = _principal_uuid(principal)
        row.reviewed_at = datetime.now(timezone.utc)
        row.review_comment = (payload.review_comment or "").strip() or None
        db.add(row)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    _LOG.info("suggestion %s %s by %s", row.id, row.status, principal.get("email"))
    return row_to_dict(row)
