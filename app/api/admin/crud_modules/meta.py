from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.sql.sqltypes import Boolean, Date, DateTime, Float, Integer, JSON, Numeric

from .resources import RESOURCES, SYSTEM_FIELDS, AdminResource


def _column_kind(column: Any) -> str:
    col_type = column.type
    if isinstance(col_type, Boolean):
        return "boolean"
    if isinstance(col_type, (Integer, Numeric, Float)):
        return "number"
    if isinstance(col_type, DateTime):
        return "datetime"
    if isinstance(col_type, Date):
        return "date"
    if isinstance(col_type, JSON):
        return "json"
    try:
        python_type = col_type.python_type
    except NotImplementedError:
        python_type = None
    if python_type is uuid.UUID:
        return "uuid"
    return "text"


def _resource_columns_meta(resource: AdminResource) -> list[dict[str, Any]]:
    specs = resource.field_map
    filterable = set(resource.filterable_fields)
    out: list[dict[str, Any]] = []
    for column in sa_inspect(resource.model).columns:
        spec = specs.get(column.key)
        item = {
            "name": column.key,
            "label": spec.label if spec is not None else column.key.replace("_", " ").capitalize(),
            "kind": spec.kind if spec is not None else _column_kind(column),
            "nullable": bool(column.nullable),
            "editable": spec is not None and column.key not in SYSTEM_FIELDS,
            "create_only": bool(spec.create_only) if spec is not None else False,
            "required_on_create": bool(spec.required) if spec is not None else False,
            "sortable": True,
            "filterable": column.key in filterable,
        }
        if spec is not None and spec.choices:
            item["choices"] = list(spec.choices)
        if spec is not None and spec.reference:
            item["reference"] = spec.reference
        out.append(item)
    return out


def _resource_meta(resource: AdminResource) -> dict[str, Any]:
    return {
        "slug": resource.slug,
        "table": resource.table_name,
        "label": resource.label,
        "search_fields": list(resource.search_fields),
        "filterable_fields": list(resource.filterable_fields),
        "default_sort": {"field": resource.default_sort, "dir": "desc" if resource.default_descending else "asc"},
        "page_size": resource.page_size,
        "columns": _resource_columns_meta(resource),
    }


def _meta_resources_payload() -> list[dict[str, Any]]:
    return [_resource_meta(resource) for resource in RESOURCES]
