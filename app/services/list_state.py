"""Interactive list browsing state for catalog and admin list views.

One controller owns one browsing session: search text, filters, current
page and the rows last received. Every user action that changes the query
issues a fetch tagged with a sequence number; only the response to the
latest issued fetch is applied, earlier ones are dropped when they arrive.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable

from app.core.config import settings
from app.core.errors import CatalogError, RemoteFailure
from app.schemas.list_query import ListQuery
from app.services.pager import PageResult, clamp_page

_LOG = logging.getLogger("app.list_state")

FetchPage = Callable[[ListQuery], Awaitable[PageResult]]
DeleteRow = Callable[[Any], Awaitable[Any]]
Confirm = Callable[[Any], "bool | Awaitable[bool]"]


class ListPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERRORED = "errored"


@dataclass
class ListUIState:
    search_draft: str = ""
    search_committed: str = ""
    filters: dict[str, Any] = field(default_factory=dict)
    current_page: int = 1
    is_loading: bool = False
    last_error: str | None = None
    rows: list[Any] = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 1
    phase: ListPhase = ListPhase.IDLE


def _default_row_id(row: Any) -> Any:
    if isinstance(row, dict):
        return row.get("id")
    return getattr(row, "id", None)


class ListStateController:
    def __init__(
        self,
        fetch_page: FetchPage,
        *,
        table_name: str,
        searchable_fields: Iterable[str] = ("name_ko", "name_en"),
        initial_filters: dict[str, Any] | None = None,
        sort_field: str | None = "updated_at",
        sort_descending: bool = True,
        page_size: int | None = None,
        delete_row: DeleteRow | None = None,
        debounce_seconds: float | None = None,
        request_timeout: float | None = None,
        on_change: Callable[[ListUIState], None] | None = None,
        row_id: Callable[[Any], Any] = _default_row_id,
    ):
        self._fetch_page = fetch_page
        self._delete_row = delete_row
        self._table_name = table_name
        self._searchable_fields = list(searchable_fields)
        self._initial_filters = dict(initial_filters or {})
        self._sort_field = sort_field
        self._sort_descending = sort_descending
        self._page_size = page_size or settings.ADMIN_PAGE_SIZE
        self._debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.SEARCH_DEBOUNCE_MS / 1000.0
        )
        self._request_timeout = (
            request_timeout if request_timeout is not None else settings.CLIENT_REQUEST_TIMEOUT_SECONDS
        )
        self._on_change = on_change
        self._row_id = row_id

        self.state = ListUIState(filters=dict(self._initial_filters))
        self._seq = 0
        self._composing = False
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def latest_sequence(self) -> int:
        return self._seq

    def build_query(self) -> ListQuery:
        return ListQuery(
            table_name=self._table_name,
            search_term=self.state.search_committed,
            searchable_fields=self._searchable_fields,
            filters=self.state.filters,
            sort_field=self._sort_field,
            sort_descending=self._sort_descending,
            page=self.state.current_page,
            page_size=self._page_size,
        )

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.state)

    # Fetching

    def _dispatch(self) -> asyncio.Task:
        self._seq += 1
        seq = self._seq
        query = self.build_query()
        self.state.is_loading = True
        self.state.phase = ListPhase.LOADING
        self._notify()
        task = asyncio.get_running_loop().create_task(self._run(seq, query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, seq: int, query: ListQuery) -> None:
        try:
            result = await asyncio.wait_for(self._fetch_page(query), timeout=self._request_timeout)
        except asyncio.TimeoutError:
            self._fail(seq, RemoteFailure("Request timed out"))
            return
        except CatalogError as exc:
            self._fail(seq, exc)
            return
        except Exception as exc:
            _LOG.exception("list fetch failed table=%s page=%s", query.table_name, query.page)
            self._fail(seq, RemoteFailure(str(exc) or "Request failed"))
            return
        if seq != self._seq:
            _LOG.debug("discarding stale response seq=%s latest=%s", seq, self._seq)
            return
        self._apply(result)

    def _apply(self, result: PageResult) -> None:
        state = self.state
        state.total_count = result.total_count
        state.total_pages = result.total_pages
        if state.current_page > result.total_pages:
            state.current_page = clamp_page(state.current_page, result.total_pages)
            if result.total_count > 0:
                # The result set shrank under the current page; step back into range.
                self._dispatch()
                return
        state.rows = list(result.rows)
        state.is_loading = False
        state.last_error = None
        state.phase = ListPhase.IDLE
        self._notify()

    def _fail(self, seq: int, exc: CatalogError) -> None:
        if seq != self._seq:
            return
        self.state.is_loading = False
        self.state.last_error = exc.message
        self.state.phase = ListPhase.ERRORED
        self._notify()

    def load(self) -> asyncio.Task:
        return self._dispatch()

    def retry(self) -> asyncio.Task:
        return self._dispatch()

    async def reload(self) -> None:
        self._dispatch()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # Search

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _schedule_debounce(self) -> None:
        self._cancel_debounce()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self._debounce_seconds, self._commit_search)

    def _commit_search(self, force: bool = False) -> asyncio.Task | None:
        self._debounce_handle = None
        term = self.state.search_draft.strip()
        if term == self.state.search_committed and not force:
            return None
        self.state.search_committed = term
        self.state.current_page = 1
        return self._dispatch()

    def edit_search(self, text: str) -> None:
        self.state.search_draft = text
        self._notify()
        if self._composing:
            return
        self._schedule_debounce()

    def begin_composition(self) -> None:
        self._composing = True
        self._cancel_debounce()

    def end_composition(self, text: str | None = None) -> None:
        self._composing = False
        if text is not None:
            self.state.search_draft = text
            self._notify()
        self._schedule_debounce()

    def submit_search(self) -> asyncio.Task | None:
        self._cancel_debounce()
        self._composing = False
        return self._commit_search(force=True)

    # Filters and paging

    def set_filter(self, key: str, value: Any) -> asyncio.Task:
        self.state.filters[key] = value
        self.state.current_page = 1
        return self._dispatch()

    def set_filters(self, filters: dict[str, Any]) -> asyncio.Task:
        self.state.filters = dict(filters)
        self.state.current_page = 1
        return self._dispatch()

    def clear_filters(self) -> asyncio.Task:
        self._cancel_debounce()
        self.state.filters = dict(self._initial_filters)
        self.state.search_draft = ""
        self.state.search_committed = ""
        self.state.current_page = 1
        return self._dispatch()

    def set_page(self, page: int) -> asyncio.Task:
        self.state.current_page = max(1, int(page))
        return self._dispatch()

    # Mutations

    async def delete_row(self, row_id: Any, confirm: Confirm | None = None) -> bool:
        if self._delete_row is None:
            raise RuntimeError("ListStateController was created without a delete function")
        if confirm is not None:
            answer = confirm(row_id)
            if inspect.isawaitable(answer):
                answer = await answer
            if not answer:
                return False
        try:
            await asyncio.wait_for(self._delete_row(row_id), timeout=self._request_timeout)
        except asyncio.TimeoutError:
            self.state.last_error = "Delete timed out"
            self._notify()
            return False
        except CatalogError as exc:
            self.state.last_error = exc.message
            self._notify()
            return False
        self.state.rows = [row for row in self.state.rows if self._row_id(row) != row_id]
        self.state.last_error = None
        self._notify()
        await self.reload()
        return True

    def close(self) -> None:
        self._cancel_debounce()
        for task in list(self._tasks):
            task.cancel()
