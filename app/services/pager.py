from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Sequence, TypeVar

from app.core.errors import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageWindow:
    offset: int
    limit: int


def page_window(page: int, page_size: int) -> PageWindow:
    if int(page) < 1:
        raise ValidationError("page must be >= 1")
    if int(page_size) < 1:
        raise ValidationError("page_size must be > 0")
    return PageWindow(offset=(int(page) - 1) * int(page_size), limit=int(page_size))


def total_pages(total_count: int, page_size: int) -> int:
    if int(page_size) < 1:
        raise ValidationError("page_size must be > 0")
    return max(1, math.ceil(max(0, int(total_count)) / int(page_size)))


def clamp_page(page: int, pages: int) -> int:
    return min(max(1, int(page)), max(1, int(pages)))


@dataclass
class PageResult(Generic[T]):
    rows: list[T]
    total_count: int
    page: int
    page_size: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = total_pages(self.total_count, self.page_size)

    @property
    def is_past_end(self) -> bool:
        return self.page > self.total_pages

    def map(self, fn: Callable[[T], Any]) -> "PageResult[Any]":
        return PageResult(rows=[fn(row) for row in self.rows], total_count=self.total_count, page=self.page, page_size=self.page_size)

    def with_rows(self, rows: Sequence[Any]) -> "PageResult[Any]":
        return PageResult(rows=list(rows), total_count=self.total_count, page=self.page, page_size=self.page_size)

    def to_envelope(self) -> dict[str, Any]:
        return {
            "data": self.rows,
            "pagination": {
                "page": self.page,
                "limit": self.page_size,
                "total": self.total_count,
                "totalPages": self.total_pages,
            },
        }

    @classmethod
    def from_envelope(cls, payload: dict[str, Any]) -> "PageResult[Any]":
        pagination = payload.get("pagination") or {}
        return cls(
            rows=list(payload.get("data") or []),
            total_count=int(pagination.get("total") or 0),
            page=int(pagination.get("page") or 1),
            page_size=int(pagination.get("limit") or 1),
        )
