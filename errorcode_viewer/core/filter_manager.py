"""
Query engine and session management for the Error Code Viewer application.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

import pandas as pd
from PySide6.QtCore import QObject, Signal

from .io_handler import records_to_table
from .models import (
    ErrorRecord,
    FlatTable,
    PageState,
    QueryState,
    Table,
    TreeRow,
    TreeTable,
)
from .paginator import Page, go_to_page, next_page, paginate, previous_page

logger = logging.getLogger(__name__)

# Wire fields the free-text search looks at on an error record
RECORD_SEARCH_FIELDS = [
    "brand",
    "brandName",
    "model",
    "errorCode",
    "title",
    "description",
    "causes",
    "solutions",
    "severity",
]


def _needle(text: str) -> str:
    return text.strip().casefold()


def _active_field_filters(query: QueryState) -> dict[str, str]:
    """Field filters with a non-empty value, case-folded."""
    return {
        key: _needle(value)
        for key, value in query.field_filters.items()
        if _needle(value)
    }


def _contains(series: pd.Series, needle: str) -> pd.Series:
    return series.astype(str).str.casefold().str.contains(needle, regex=False)


def _filter_flat(table: FlatTable, query: QueryState) -> list[dict[str, Any]]:
    """Boolean-mask filtering of a FlatTable."""
    df = table.dataframe
    mask = pd.Series(True, index=df.index)

    needle = _needle(query.free_text)
    if needle:
        hits = pd.Series(False, index=df.index)
        for col in df.columns:
            hits |= _contains(df[col], needle)
        mask &= hits

    for key, value in _active_field_filters(query).items():
        if key in df.columns:
            mask &= _contains(df[key], value)
        else:
            # An absent field reads as '', which no non-empty filter matches
            mask &= False

    return df[mask].to_dict("records")


def _tree_field(row: TreeRow, key: str) -> str:
    node = row.node
    if key in ("name", "value", "path"):
        return getattr(node, key)
    return node.attributes.get(key, "")


def _filter_tree(table: TreeTable, query: QueryState) -> list[TreeRow]:
    """Filter the pre-order flattening of a TreeTable."""
    needle = _needle(query.free_text)
    field_filters = _active_field_filters(query)

    result = []
    for row in table.iter_rows():
        if needle and not any(
            needle in value.casefold() for value in row.node.search_values()
        ):
            continue
        if any(
            value not in _tree_field(row, key).casefold()
            for key, value in field_filters.items()
        ):
            continue
        result.append(row)
    return result


def filter_rows(table: Table, query: QueryState) -> list[Any]:
    """
    Apply free-text and field filters to a table.

    Args:
        table: FlatTable or TreeTable
        query: Filters to apply

    Returns:
        Matching rows in source order (dicts for flat tables, TreeRows for trees)
    """
    if isinstance(table, TreeTable):
        return _filter_tree(table, query)
    return _filter_flat(table, query)


def filter_records(records: list[ErrorRecord], query: QueryState) -> list[ErrorRecord]:
    """Apply free-text and field filters to error records, keeping their order."""
    needle = _needle(query.free_text)
    field_filters = _active_field_filters(query)

    result = []
    for record in records:
        if needle and not any(
            needle in record.field_value(key).casefold()
            for key in RECORD_SEARCH_FIELDS
        ):
            continue
        if any(
            value not in record.field_value(key).casefold()
            for key, value in field_filters.items()
        ):
            continue
        result.append(record)
    return result


def build_search_params(query: QueryState) -> dict[str, str]:
    """
    Build the query string for a remote search.

    Field filters are trimmed and lower-cased, empty ones are left out, and
    the free text goes in ``q``.
    """
    params = {}
    for key, value in query.field_filters.items():
        value = value.strip().lower()
        if value:
            params[key] = value

    q = query.free_text.strip()
    if q:
        params["q"] = q
    return params


class ViewerSession:
    """
    Query and page state bound to one loaded source.

    A session is created when a source loads and thrown away when the next
    one loads. For a remote session the rows were already filtered by the
    server, so the local filter step passes them through untouched.
    """

    def __init__(
        self,
        source: Union[Table, list[ErrorRecord]],
        query: Optional[QueryState] = None,
        page_size: int = 10,
        remote: bool = False
    ):
        if isinstance(source, list):
            self.records: Optional[list[ErrorRecord]] = list(source)
            self.table: Table = records_to_table(self.records)
        else:
            self.records = None
            self.table = source

        self.query = query or QueryState()
        self.remote = remote
        self.page = PageState(page_size=page_size)
        self._filtered = self._apply_query()

    @property
    def is_record_session(self) -> bool:
        return self.records is not None

    @property
    def filtered_rows(self) -> list[Any]:
        return list(self._filtered)

    @property
    def row_count(self) -> int:
        return len(self._filtered)

    def _apply_query(self) -> list[Any]:
        if self.records is not None:
            if self.remote:
                return list(self.records)
            return filter_records(self.records, self.query)

        if self.remote:
            return list(self.table.rows)
        return filter_rows(self.table, self.query)

    def set_query(self, query: QueryState) -> Page:
        """Re-filter with a new query and go back to the first page."""
        self.query = query
        self._filtered = self._apply_query()
        self.page = PageState(current_page=1, page_size=self.page.page_size)
        logger.debug("Query matched %d of %d row(s)", self.row_count, self.table.row_count)
        return self.current_page()

    def set_page_size(self, page_size: int) -> Page:
        """Change the page size, keeping the current page where possible."""
        self.page = PageState(current_page=self.page.current_page, page_size=page_size)
        return self.current_page()

    def current_page(self) -> Page:
        """The page selected by the current state, clamped to the row count."""
        page = paginate(self._filtered, self.page)
        self.page = page.page_state
        return page

    def next_page(self) -> Page:
        self.page = next_page(self.page, self.row_count)
        return self.current_page()

    def previous_page(self) -> Page:
        self.page = previous_page(self.page, self.row_count)
        return self.current_page()

    def go_to_page(self, page: int) -> Page:
        self.page = go_to_page(self.page, page, self.row_count)
        return self.current_page()


class SessionManager(QObject):
    """
    Owns the current ViewerSession of one surface.

    Emits signals when the session is replaced or the visible page changes
    so widgets can redraw.
    """

    # Signal emitted when a new source replaces the session
    session_replaced = Signal()

    # Signal emitted with the new Page whenever the visible page changes
    page_changed = Signal(object)

    def __init__(self, page_size: int = 10, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.page_size = page_size
        self._session: Optional[ViewerSession] = None
        self._listeners: list[Callable[[Page], None]] = []

    @property
    def session(self) -> Optional[ViewerSession]:
        return self._session

    def load(
        self,
        source: Union[Table, list[ErrorRecord]],
        query: Optional[QueryState] = None,
        remote: bool = False
    ) -> Page:
        """Replace the session wholesale with one bound to a new source."""
        self._session = ViewerSession(
            source,
            query=query,
            page_size=self.page_size,
            remote=remote
        )
        self.session_replaced.emit()
        page = self._session.current_page()
        self._emit_page(page)
        return page

    def clear(self) -> None:
        """Drop the session, e.g. after a failed load."""
        self._session = None
        self.session_replaced.emit()
        self._emit_page(Page())

    def apply_query(self, query: QueryState) -> Page:
        """Apply a new query to the current session."""
        if self._session is None:
            page = Page()
        else:
            page = self._session.set_query(query)
        self._emit_page(page)
        return page

    def next_page(self) -> Page:
        return self._navigate(lambda s: s.next_page())

    def previous_page(self) -> Page:
        return self._navigate(lambda s: s.previous_page())

    def go_to_page(self, page: int) -> Page:
        return self._navigate(lambda s: s.go_to_page(page))

    def current_page(self) -> Page:
        if self._session is None:
            return Page()
        return self._session.current_page()

    def _navigate(self, step: Callable[[ViewerSession], Page]) -> Page:
        if self._session is None:
            return Page()
        page = step(self._session)
        self._emit_page(page)
        return page

    def _emit_page(self, page: Page) -> None:
        """Emit page change signals."""
        self.page_changed.emit(page)

        # Notify listeners
        for listener in self._listeners:
            listener(page)

    def add_listener(self, callback: Callable[[Page], None]) -> None:
        """Add a listener callback for page changes."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[Page], None]) -> None:
        """Remove a listener callback."""
        if callback in self._listeners:
            self._listeners.remove(callback)
