from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationError
from app.services.list_query import coerce_column_value

from .resources import AdminResource, FieldSpec


def _invalid(field_name: str, reason: str) -> ValidationError:
    return ValidationError(f'Field "{field_name}" {reason}', details={"field": field_name})


def _clean_value(resource: AdminResource, spec: FieldSpec, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if spec.upper:
            value = value.upper()
    if spec.choices and value not in spec.choices:
        raise _invalid(spec.name, "must be one of: " + ", ".join(spec.choices))
    if spec.kind == "url" and not str(value).startswith(("http://", "https://", "/")):
        raise _invalid(spec.name, "must be an absolute URL or a site path")
    try:
        return coerce_column_value(getattr(resource.model, spec.name), value)
    except ValidationError:
        raise _invalid(spec.name, f"has an invalid {spec.kind} value")


def _sanitize_payload(resource: AdminResource, payload: dict[str, Any], *, is_update: bool) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    specs = resource.field_map
    editable = {name for name, spec in specs.items() if not (is_update and spec.create_only)}
    unknown_fields = sorted(set(payload.keys()) - editable)
    if unknown_fields:
        raise ValidationError("Unknown fields: " + ", ".join(unknown_fields), details={"fields": unknown_fields})

    columns = sa_inspect(resource.model).columns
    cleaned: dict[str, Any] = {}
    for key, raw in payload.items():
        spec = specs[key]
        value = _clean_value(resource, spec, raw)
        if value is None and (spec.required or not columns[key].nullable):
            raise _invalid(key, "cannot be empty")
        cleaned[key] = value

    if is_update:
        if not cleaned:
            raise ValidationError("No fields to update")
        return cleaned

    required_missing = sorted(spec.name for spec in resource.fields if spec.required and spec.name not in cleaned)
    if required_missing:
        raise ValidationError(
            "Missing required fields: " + ", ".join(required_missing),
            details={"fields": required_missing},
        )
    return cleaned


def _pk_value(model: type, row_id: str) -> Any:
    pk = sa_inspect(model).primary_key
    if len(pk) != 1:
        raise ValidationError("Only single primary key tables are supported")
    try:
        python_type = pk[0].type.python_type
    except NotImplementedError:
        python_type = str
    if python_type is uuid.UUID:
        try:
            return uuid.UUID(str(row_id))
        except ValueError:
            raise ValidationError("Invalid identifier")
    return str(row_id).strip().upper() if python_type is str else row_id


def _load_row_or_404(db: Session, model: type, row_id: str):
    entity = db.get(model, _pk_value(model, row_id))
    if entity is None:
        raise NotFound("Record not found")
    return entity
