"""Resolved query state of one grid and its render guard.

A ``GridState`` is built once per request by the data-loading layer: rows
are already paginated, filtered and sorted. The renderer only reads it,
apart from the render guard which it advances exactly once.
"""

from __future__ import annotations

import math
import re

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .exceptions import DuplicateRenderError
from .log import debug


if TYPE_CHECKING:
    from .buffer import OutputBuffer
    from .columns import ColumnDescriptor


SortDirection = Literal["asc", "desc"]

_GRID_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")


# =============================================================================
# Render guard
# =============================================================================


@dataclass(frozen=True)
class Unrendered:
    """The grid has not been rendered yet; the only non-terminal state."""

    def finish(self, buffer: OutputBuffer) -> RenderedPlain | RenderedWithBuffer:
        """Transition to the terminal state matching the buffer's mode."""
        if buffer.stubborn:
            return RenderedWithBuffer(buffer=buffer, text=buffer.text)
        return RenderedPlain()


@dataclass(frozen=True)
class RenderedPlain:
    """Rendered without detached filters; the markup was not kept."""

    def finish(self, buffer: OutputBuffer) -> RenderedPlain | RenderedWithBuffer:
        """Reject a second render."""
        raise DuplicateRenderError(
            "Second render of the same grid state. "
            "Did you intend to use detached filters and forget to declare them?",
            grid=buffer.grid_name,
        )


@dataclass(frozen=True)
class RenderedWithBuffer:
    """Rendered with detached filters; the buffer and its text are kept."""

    buffer: OutputBuffer = field(repr=False)
    text: str = field(repr=False)

    def finish(self, buffer: OutputBuffer) -> RenderedPlain | RenderedWithBuffer:
        """Reject a second transition; callers return ``text`` instead."""
        raise DuplicateRenderError("Grid state already holds a rendered buffer", grid=buffer.grid_name)


RenderGuard = Unrendered | RenderedPlain | RenderedWithBuffer


# =============================================================================
# Grid state
# =============================================================================


class ActiveSort(BaseModel):
    """The attribute the result set is currently ordered by."""

    model_config = ConfigDict(frozen=True)

    attribute: str
    direction: SortDirection = "asc"


class GridState(BaseModel):
    """Query, sort, pagination and filter state plus the current page of rows.

    Example:
        GridState(
            name="accounts",
            rows=accounts_page,
            total_count=57,
            offset=20,
            page_size=20,
            active_sort=ActiveSort(attribute="username", direction="asc"),
            active_filters={"status": "open"},
        )
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(description="Namespace for DOM ids and request parameters")
    rows: list[Any] = Field(default_factory=list, repr=False)
    total_count: int = Field(default=0, ge=0)
    offset: int = Field(default=0, ge=0)
    page_size: int = Field(default=20, ge=0)
    active_sort: ActiveSort | None = None
    active_filters: dict[str, Any] = Field(default_factory=dict)

    all_records_mode: bool = False
    saved_query_name: str | None = None
    saved_query_id: int | str | None = None
    status: dict[str, Any] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict, repr=False)
    export_enabled: bool = False

    _render_guard: RenderGuard = PrivateAttr(default_factory=Unrendered)
    _export_path: Path | None = PrivateAttr(default=None)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Grid names end up in DOM ids and parameter keys."""
        if not _GRID_NAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid grid name: '{v}'. Must start with a letter and contain only "
                "alphanumeric characters, underscores, or hyphens."
            )
        return v

    # -------------------------------------------------------------------------
    # Rows and pagination
    # -------------------------------------------------------------------------

    def iter_rows(self) -> Iterator[Any]:
        """Iterate rows in collection order."""
        return iter(self.rows)

    @property
    def page_length(self) -> int:
        """Number of rows on the current page."""
        return len(self.rows)

    @property
    def total_pages(self) -> int:
        """Number of pages; a single page in all-records mode."""
        if self.all_records_mode or self.page_size == 0:
            return 1 if self.total_count else 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def current_page(self) -> int:
        """1-based number of the current page."""
        if self.all_records_mode or self.page_size == 0:
            return 1
        return self.offset // self.page_size + 1

    # -------------------------------------------------------------------------
    # Sort and filter predicates
    # -------------------------------------------------------------------------

    def ordered_by(self, column: ColumnDescriptor) -> bool:
        """Whether the result set is ordered by ``column``'s attribute."""
        return (
            self.active_sort is not None
            and column.attribute is not None
            and column.attribute == self.active_sort.attribute
        )

    @property
    def order_direction(self) -> SortDirection | None:
        """Direction of the active sort, if any."""
        return self.active_sort.direction if self.active_sort else None

    def filtered_by(self, column: ColumnDescriptor) -> bool:
        """Whether a non-empty filter is active on ``column``'s attribute."""
        if column.attribute is None:
            return False
        return _has_value(self.active_filters.get(column.attribute))

    @property
    def filtering_on(self) -> bool:
        """Whether any filter is currently active."""
        return any(_has_value(v) for v in self.active_filters.values())

    def filter_value(self, attribute: str | None) -> Any:
        """The active filter value for ``attribute``, if any."""
        if attribute is None:
            return None
        return self.active_filters.get(attribute)

    # -------------------------------------------------------------------------
    # Render guard
    # -------------------------------------------------------------------------

    @property
    def render_guard(self) -> RenderGuard:
        """The current render guard state."""
        return self._render_guard

    def mark_rendered(self, buffer: OutputBuffer) -> None:
        """Advance the render guard after a completed render."""
        self._render_guard = self._render_guard.finish(buffer)
        debug(f"Grid '{self.name}' render guard -> {type(self._render_guard).__name__}")

    @property
    def export_path(self) -> Path | None:
        """Path of the last flat export produced for this state."""
        return self._export_path

    def set_export_path(self, path: Path) -> None:
        """Remember the artifact produced by a flat export."""
        self._export_path = path


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, Mapping):
        return any(_has_value(v) for v in value.values())
    if isinstance(value, (str, list, tuple, set)):
        return len(value) > 0
    return True
