from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ValidationError
from app.schemas.catalog import split_csv
from app.schemas.list_query import ListQuery
from app.services.list_query import run_list_query
from app.services.result_shaper import row_to_dict

from .audit import _append_audit, _changed_fields, _integrity_error
from .meta import _meta_resources_payload
from .payloads import _load_row_or_404, _pk_value, _sanitize_payload
from .resources import AdminResource, resolve_resource

_LOG = logging.getLogger("app.admin.crud")

RESERVED_PARAMS = {"search", "page", "limit", "sortBy", "sortOrder"}
RANGE_SUFFIXES = {"__min": "min", "__max": "max"}


def _positive_int(raw: Any, default: int, name: str) -> int:
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f'"{name}" must be an integer')
    if value < 1:
        raise ValidationError(f'"{name}" must be >= 1')
    return value


def _filters_from_params(params: Mapping[str, list[str]]) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    for key, raw_values in params.items():
        if key in RESERVED_PARAMS:
            continue
        bound = next((suffix for suffix in RANGE_SUFFIXES if key.endswith(suffix)), None)
        if bound is not None:
            field_name = key[: -len(bound)]
            current = filters.get(field_name)
            range_value = current if isinstance(current, dict) else {}
            range_value[RANGE_SUFFIXES[bound]] = raw_values[-1]
            filters[field_name] = range_value
            continue
        values: list[str] = []
        for raw in raw_values:
            values.extend(split_csv(raw))
        # A single value is an equality filter, several values a set filter.
        filters[key] = values[0] if len(values) == 1 else values
    return filters


def admin_list_query(resource: AdminResource, params: Mapping[str, list[str]]) -> ListQuery:
    def _first(name: str) -> str | None:
        values = params.get(name) or []
        return values[-1] if values else None

    sort_order = (_first("sortOrder") or "").strip().lower()
    if sort_order and sort_order not in {"asc", "desc"}:
        raise ValidationError('"sortOrder" must be asc or desc')
    page_size = min(_positive_int(_first("limit"), resource.page_size, "limit"), settings.ADMIN_MAX_PAGE_SIZE)
    return ListQuery(
        table_name=resource.table_name,
        search_term=_first("search") or "",
        searchable_fields=list(resource.search_fields),
        filters=_filters_from_params(params),
        sort_field=(_first("sortBy") or "").strip() or resource.default_sort,
        sort_descending=(sort_order == "desc") if sort_order else resource.default_descending,
        page=_positive_int(_first("page"), 1, "page"),
        page_size=page_size,
    )


def list_resources_meta_service(admin: dict) -> dict[str, Any]:
    return {"resources": _meta_resources_payload()}


def query_rows_service(resource_name: str, params: Mapping[str, list[str]], db: Session, admin: dict) -> dict[str, Any]:
    resource = resolve_resource(resource_name)
    query = admin_list_query(resource, params)
    result = run_list_query(
        db,
        resource.model,
        query,
        filterable_fields=resource.filterable_fields,
        sortable_fields=resource.sortable_fields,
    )
    return result.map(row_to_dict).to_envelope()


def get_row_service(resource_name: str, row_id: str, db: Session, admin: dict) -> dict[str, Any]:
    resource = resolve_resource(resource_name)
    return row_to_dict(_load_row_or_404(db, resource.model, row_id))


def create_row_service(resource_name: str, payload: dict[str, Any], db: Session, admin: dict) -> dict[str, Any]:
    resource = resolve_resource(resource_name)
    cleaned = _sanitize_payload(resource, payload, is_update=False)
    if resource.assigns_primary_key and db.get(resource.model, _pk_value(resource.model, cleaned["id"])) is not None:
        raise ValidationError(f'Record "{cleaned["id"]}" already exists')

    row = resource.model(**cleaned)
    try:
        db.add(row)
        db.flush()
        after = row_to_dict(row)
        _append_audit(db, admin, resource.table_name, after["id"], "CREATE", {"after": after})
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _integrity_error("Record violates a data constraint")
    db.refresh(row)
    _LOG.info("%s created %s id=%s", admin.get("email"), resource.slug, row.id)
    return row_to_dict(row)


def update_row_service(resource_name: str, row_id: str, payload: dict[str, Any], db: Session, admin: dict) -> dict[str, Any]:
    resource = resolve_resource(resource_name)
    row = _load_row_or_404(db, resource.model, row_id)
    cleaned = _sanitize_payload(resource, payload, is_update=True)
    before = row_to_dict(row)
    for key, value in cleaned.items():
        setattr(row, key, value)
    row.updated_at = datetime.now(timezone.utc)
    try:
        db.add(row)
        db.flush()
        after = row_to_dict(row)
        _append_audit(db, admin, resource.table_name, before["id"], "UPDATE", {"changes": _changed_fields(before, after)})
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _integrity_error("Record violates a data constraint")
    db.refresh(row)
    return row_to_dict(row)


def delete_row_service(resource_name: str, row_id: str, db: Session, admin: dict) -> dict[str, Any]:
    resource = resolve_resource(resource_name)
    row = _load_row_or_404(db, resource.model, row_id)
    before = row_to_dict(row)
    entity_id = str(before.get("id") or row_id)

    try:
        db.delete(row)
        _append_audit(db, admin, resource.table_name, entity_id, "DELETE", {"before": before})
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _integrity_error("Record cannot be deleted while other records reference it")

    _LOG.info("%s deleted %s id=%s", admin.get("email"), resource.slug, entity_id)
    return {"status": "deleted", "id": entity_id}
