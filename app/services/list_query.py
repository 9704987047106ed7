import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Sequence

from sqlalchemy import String, asc, cast, desc, or_
from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Query, Session

from app.core.errors import InvalidFilterField, ValidationError
from app.schemas.list_query import (
    EqualsClause,
    FilterClause,
    InClause,
    ListQuery,
    RangeClause,
    RangeValue,
    TextSearchClause,
)
from app.services.pager import PageResult, page_window

LIKE_ESCAPE = "\\"
_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "off"})


def _text(value: Any) -> str:
    return ("" if value is None else str(value)).strip()


def _is_plain_date(text: str) -> bool:
    return len(text) == 10 and "T" not in text and " " not in text


def _parse_iso_datetime(text: str) -> datetime:
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    word = _text(value).lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(word)


def _number_converter(python_type):
    def convert(value: Any):
        if isinstance(value, bool):
            raise TypeError("booleans are not numbers")
        if isinstance(value, python_type):
            return value
        if python_type is not Decimal and isinstance(value, (int, float)):
            return python_type(value)
        return python_type(_text(value))

    return convert


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = _text(value)
    # A full timestamp is accepted and truncated to its date.
    return date.fromisoformat(text) if _is_plain_date(text) else _parse_iso_datetime(text).date()


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = _text(value)
        parsed = datetime.combine(date.fromisoformat(text), time.min) if _is_plain_date(text) else _parse_iso_datetime(text)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


def _to_uuid(value: Any) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(_text(value))


# python type of the column -> (label used in error messages, converter)
_CONVERTERS = {
    bool: ("boolean", _to_bool),
    int: ("number", _number_converter(int)),
    float: ("number", _number_converter(float)),
    Decimal: ("number", _number_converter(Decimal)),
    date: ("date", _to_date),
    datetime: ("datetime", _to_datetime),
    uuid.UUID: ("uuid", _to_uuid),
}


def _column_python_type(column):
    try:
        return column.property.columns[0].type.python_type
    except (AttributeError, IndexError, NotImplementedError):
        return None


def coerce_column_value(column, value):
    """Convert a raw query-string or JSON value to the Python type of ``column``.

    Raises ValidationError naming the column when the value does not parse.
    Columns of unknown type get the value unchanged.
    """
    python_type = _column_python_type(column)
    if python_type is str:
        return value if isinstance(value, str) else str(value)
    if python_type not in _CONVERTERS:
        return value
    kind, convert = _CONVERTERS[python_type]
    try:
        return convert(value)
    except (ValueError, TypeError, InvalidOperation):
        raise ValidationError(f'Invalid filter value for field "{column.key}" ({kind})', details={"field": column.key})


def _is_date_literal(raw_value: Any) -> bool:
    if isinstance(raw_value, datetime):
        return False
    if isinstance(raw_value, date):
        return True
    return isinstance(raw_value, str) and _is_plain_date(raw_value.strip())


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def escape_like(term: str) -> str:
    return term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", LIKE_ESCAPE + "%").replace("_", LIKE_ESCAPE + "_")


def build_filter_clauses(query: ListQuery, filterable_fields: Iterable[str]) -> list[FilterClause]:
    """Translate a list query's filters and search term into clauses.

    Output is deterministic: filter keys in sorted order, then at most one
    text search clause. Empty values are dropped rather than turned into
    clauses that match nothing. A key outside ``filterable_fields`` raises
    ``InvalidFilterField``.
    """
    allowed = set(filterable_fields)
    clauses: list[FilterClause] = []
    for key in sorted(query.filters):
        if key not in allowed:
            raise InvalidFilterField(key, table=query.table_name)
        value = query.filters[key]
        if isinstance(value, RangeValue):
            if value.is_empty:
                continue
            clauses.append(RangeClause(field=key, min=value.min, max=value.max))
        elif isinstance(value, list):
            values = [item for item in value if not _is_absent(item)]
            if not values:
                continue
            clauses.append(InClause(field=key, values=values))
        elif _is_absent(value):
            continue
        else:
            clauses.append(EqualsClause(field=key, value=value))
    term = query.committed_search
    if term:
        clauses.append(TextSearchClause(fields=list(query.searchable_fields), term=term))
    return clauses


def _column_or_invalid(model, field_name: str):
    if field_name not in sa_inspect(model).columns.keys():
        raise InvalidFilterField(field_name, table=getattr(model, "__tablename__", None))
    return getattr(model, field_name)


def _search_expression(column):
    if _column_python_type(column) is str:
        return column
    return cast(column, String)


def _equals_criterion(col, raw_value):
    value = coerce_column_value(col, raw_value)
    if _column_python_type(col) is datetime and _is_date_literal(raw_value):
        return (col >= value) & (col < value + timedelta(days=1))
    return col == value


def apply_filter_clauses(q: Query, model, clauses: Sequence[FilterClause]) -> Query:
    for clause in clauses:
        if isinstance(clause, TextSearchClause):
            pattern = f"%{escape_like(clause.term)}%"
            columns = [_column_or_invalid(model, name) for name in clause.fields]
            q = q.filter(or_(*[_search_expression(col).ilike(pattern, escape=LIKE_ESCAPE) for col in columns]))
            continue
        col = _column_or_invalid(model, clause.field)
        if isinstance(clause, EqualsClause):
            q = q.filter(_equals_criterion(col, clause.value))
        elif isinstance(clause, InClause):
            q = q.filter(col.in_([coerce_column_value(col, item) for item in clause.values]))
        elif isinstance(clause, RangeClause):
            if clause.min is not None:
                q = q.filter(col >= coerce_column_value(col, clause.min))
            if clause.max is not None:
                q = q.filter(col <= coerce_column_value(col, clause.max))
    return q


def apply_sort(
    q: Query,
    model,
    sort_field: str | None,
    descending: bool,
    sortable_fields: Iterable[str] | None = None,
) -> Query:
    if sort_field:
        allowed = set(sortable_fields) if sortable_fields is not None else set(sa_inspect(model).columns.keys())
        if sort_field not in allowed or sort_field not in sa_inspect(model).columns.keys():
            raise ValidationError(f'Field "{sort_field}" cannot be sorted', details={"field": sort_field})
        col = getattr(model, sort_field)
        q = q.order_by(desc(col) if descending else asc(col))
    # Primary key tiebreaker keeps equal sort keys in a stable relative order.
    for pk in sa_inspect(model).primary_key:
        q = q.order_by(asc(getattr(model, pk.key)))
    return q


def run_list_query(
    db: Session,
    model,
    query: ListQuery,
    *,
    filterable_fields: Iterable[str],
    sortable_fields: Iterable[str] | None = None,
    base_criteria: Sequence[Any] = (),
    extra_clauses: Sequence[FilterClause] = (),
) -> PageResult:
    window = page_window(query.page, query.page_size)
    clauses = list(extra_clauses) + build_filter_clauses(query, filterable_fields)
    q = db.query(model)
    if base_criteria:
        q = q.filter(*base_criteria)
    q = apply_filter_clauses(q, model, clauses)
    total = q.count()
    rows = (
        apply_sort(q, model, query.sort_field, query.sort_descending, sortable_fields)
        .offset(window.offset)
        .limit(window.limit)
        .all()
    )
    return PageResult(rows=rows, total_count=total, page=query.page, page_size=query.page_size)
