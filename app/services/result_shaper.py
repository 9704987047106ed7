from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Sequence

from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Session

from app.models.grade import Grade
from app.models.kit import GundamKit
from app.models.kit_image import KitImage
from app.models.limited_type import LimitedType
from app.models.series import Series


def serialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: serialize_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_to_dict(row: Any, fields: Iterable[str] | None = None) -> dict[str, Any]:
    mapper = sa_inspect(type(row))
    keys = list(fields) if fields is not None else [column.key for column in mapper.columns]
    return {key: serialize_value(getattr(row, key)) for key in keys}


def pick_primary(rows: Sequence[Any]) -> Any | None:
    """First row flagged ``is_primary``, else the first row, else None.

    Works on ORM rows and plain dicts alike.
    """
    for row in rows:
        flag = row.get("is_primary") if isinstance(row, dict) else getattr(row, "is_primary", False)
        if flag:
            return row
    return rows[0] if rows else None


pick_primary_image = pick_primary


def grade_summary(grade: Grade | None) -> dict[str, Any] | None:
    if grade is None:
        return None
    return {"id": str(grade.id), "code": grade.code, "name": grade.name, "scale": grade.scale}


def series_summary(series: Series | None) -> dict[str, Any] | None:
    if series is None:
        return None
    return {"id": str(series.id), "name_ko": series.name_ko, "name_en": series.name_en}


def limited_type_summary(limited_type: LimitedType | None) -> dict[str, Any] | None:
    if limited_type is None:
        return None
    return {"id": str(limited_type.id), "code": limited_type.code, "name_ko": limited_type.name_ko}


def image_summary(image: KitImage) -> dict[str, Any]:
    return {
        "id": str(image.id),
        "image_url": image.image_url,
        "image_type": image.image_type,
        "sort_order": image.sort_order,
        "is_primary": bool(image.is_primary),
    }


def _load_by_id(db: Session, model, ids: set) -> dict:
    ids = {value for value in ids if value is not None}
    if not ids:
        return {}
    return {row.id: row for row in db.query(model).filter(model.id.in_(ids)).all()}


def load_images(db: Session, kit_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, list[KitImage]]:
    ids = {kit_id for kit_id in kit_ids if kit_id is not None}
    grouped: dict[uuid.UUID, list[KitImage]] = defaultdict(list)
    if not ids:
        return grouped
    rows = (
        db.query(KitImage)
        .filter(KitImage.kit_id.in_(ids))
        .order_by(KitImage.sort_order.asc(), KitImage.created_at.asc(), KitImage.id.asc())
        .all()
    )
    for row in rows:
        grouped[row.kit_id].append(row)
    return grouped


def shape_kit_rows(db: Session, kits: Sequence[GundamKit]) -> list[dict[str, Any]]:
    """Attach grade, series, limited type and images to each kit.

    Reference rows are loaded in one query per relation. A kit whose
    reference row is missing keeps its place with ``None`` in that slot.
    """
    grades = _load_by_id(db, Grade, {kit.grade_id for kit in kits})
    series = _load_by_id(db, Series, {kit.series_id for kit in kits})
    limited_types = _load_by_id(db, LimitedType, {kit.limited_type_id for kit in kits})
    images = load_images(db, [kit.id for kit in kits])

    shaped: list[dict[str, Any]] = []
    for kit in kits:
        grade = grades.get(kit.grade_id)
        kit_series = series.get(kit.series_id)
        kit_images = [image_summary(image) for image in images.get(kit.id, [])]
        primary = pick_primary_image(kit_images)
        record = row_to_dict(kit)
        record.update(
            {
                "grade": grade_summary(grade),
                "series": series_summary(kit_series),
                "limited_type": limited_type_summary(limited_types.get(kit.limited_type_id)),
                "images": kit_images,
                "primary_image": primary,
                "grade_code": grade.code if grade is not None else None,
                "grade_name": grade.name if grade is not None else None,
                "series_name": kit_series.name_ko if kit_series is not None else None,
                "primary_image_url": (primary or {}).get("image_url") or kit.box_art_url,
            }
        )
        shaped.append(record)
    return shaped
