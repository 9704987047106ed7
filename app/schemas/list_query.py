from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

Dir = Literal["asc", "desc"]


class RangeValue(BaseModel):
    min: Any = None
    max: Any = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_empty(self) -> bool:
        return self.min is None and self.max is None


class EqualsClause(BaseModel):
    kind: Literal["equals"] = "equals"
    field: str
    value: Any


class InClause(BaseModel):
    kind: Literal["in"] = "in"
    field: str
    values: List[Any] = Field(min_length=1)


class RangeClause(BaseModel):
    kind: Literal["range"] = "range"
    field: str
    min: Any = None
    max: Any = None


class TextSearchClause(BaseModel):
    kind: Literal["text_search"] = "text_search"
    fields: List[str] = Field(min_length=1)
    term: str


FilterClause = Annotated[
    Union[EqualsClause, InClause, RangeClause, TextSearchClause],
    Field(discriminator="kind"),
]


def _is_range_mapping(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and set(value.keys()) <= {"min", "max"}


class ListQuery(BaseModel):
    table_name: str
    search_term: str = ""
    searchable_fields: List[str] = []
    filters: Dict[str, Any] = {}
    sort_field: Optional[str] = None
    sort_descending: bool = True
    page: int = Field(1, ge=1)
    page_size: int = Field(20, gt=0)

    @field_validator("filters", mode="before")
    @classmethod
    def _normalize_filters(cls, value):
        if value is None:
            return {}
        normalized: dict[str, Any] = {}
        for key, raw in dict(value).items():
            if _is_range_mapping(raw):
                normalized[key] = RangeValue(**raw)
            elif isinstance(raw, (set, frozenset, tuple)):
                normalized[key] = sorted(raw, key=str) if isinstance(raw, (set, frozenset)) else list(raw)
            else:
                normalized[key] = raw
        return normalized

    @field_validator("search_term", mode="before")
    @classmethod
    def _none_search_is_empty(cls, value):
        return "" if value is None else value

    @model_validator(mode="after")
    def _search_needs_fields(self):
        if self.search_term.strip() and not self.searchable_fields:
            raise ValueError("searchable_fields must be set when search_term is not empty")
        return self

    @property
    def committed_search(self) -> str:
        return self.search_term.strip()

    def replace(self, **changes) -> "ListQuery":
        data = self.model_dump()
        data.update(changes)
        return ListQuery(**data)
