"""
Page slicing and navigation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence, Union

import pandas as pd

from .models import PageState

Rows = Union[Sequence[Any], pd.DataFrame]


def page_count(row_count: int, page_size: int) -> int:
    """Number of pages needed for row_count rows (at least one)."""
    return PageState(page_size=page_size).page_count(row_count)


@dataclass
class Page:
    """One page of rows plus the state that produced it."""
    rows: list[Any] = field(default_factory=list)
    page_state: PageState = field(default_factory=PageState)
    page_count: int = 1
    total_rows: int = 0

    @property
    def current_page(self) -> int:
        return self.page_state.current_page

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to show (the no-results case)."""
        return not self.rows

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.page_count

    @property
    def start_index(self) -> int:
        """Index of the first row on this page within the full sequence."""
        return (self.current_page - 1) * self.page_state.page_size


def paginate(rows: Rows, page_state: PageState) -> Page:
    """
    Slice rows into the page selected by page_state.

    The current page is clamped into [1, page_count] first, so a page state
    left over from a larger row set lands on the last page.

    Args:
        rows: A sequence of rows or a DataFrame
        page_state: Requested page and page size

    Returns:
        Page with the rows on it and the clamped page state
    """
    total = len(rows)
    state = page_state.clamped(total)

    start = (state.current_page - 1) * state.page_size
    end = min(start + state.page_size, total)

    if isinstance(rows, pd.DataFrame):
        on_page = rows.iloc[start:end].to_dict("records")
    else:
        on_page = list(rows[start:end])

    return Page(
        rows=on_page,
        page_state=state,
        page_count=state.page_count(total),
        total_rows=total
    )


def next_page(page_state: PageState, row_count: int) -> PageState:
    """Advance one page; a no-op on the last page."""
    state = page_state.clamped(row_count)
    if state.current_page >= state.page_count(row_count):
        return state
    return PageState(current_page=state.current_page + 1, page_size=state.page_size)


def previous_page(page_state: PageState, row_count: int) -> PageState:
    """Go back one page; a no-op on the first page."""
    state = page_state.clamped(row_count)
    if state.current_page <= 1:
        return state
    return PageState(current_page=state.current_page - 1, page_size=state.page_size)


def go_to_page(page_state: PageState, page: int, row_count: int) -> PageState:
    """Jump to a page, clamped into the valid range."""
    return PageState(current_page=page, page_size=page_state.page_size).clamped(row_count)
