"""Accumulating output sink for a single grid render."""

from __future__ import annotations

from typing import Literal

from .exceptions import DetachedFilterNotFound
from .log import debug


BufferMode = Literal["plain", "stubborn"]


class OutputBuffer:
    """Ordered markup fragments plus detached filter markup.

    In ``plain`` mode the buffer only concatenates. Registering a detached
    filter promotes it to ``stubborn``: the buffer is then kept on the grid
    state so detached filters can be fetched by key after the main render.
    """

    def __init__(self, grid_name: str = "") -> None:
        self.grid_name = grid_name
        self.mode: BufferMode = "plain"
        self.return_empty_for_missing_filters = False
        self._parts: list[str] = []
        self._detached: dict[str, str] = {}

    def append(self, fragment: str | None) -> OutputBuffer:
        """Append a fragment; None is ignored."""
        if fragment:
            self._parts.append(fragment)
        return self

    def __iadd__(self, fragment: str | None) -> OutputBuffer:
        return self.append(fragment)

    @property
    def stubborn(self) -> bool:
        """Whether the buffer outlives the render call."""
        return self.mode == "stubborn"

    def promote(self) -> None:
        """Switch to stubborn mode."""
        if self.mode != "stubborn":
            debug(f"Output buffer of grid '{self.grid_name}' promoted to stubborn mode")
            self.mode = "stubborn"

    def add_filter(self, key: str, markup: str) -> None:
        """Store detached filter markup under ``key``."""
        self.promote()
        self._detached[key] = markup

    def filter_for(self, key: str) -> str:
        """Return the markup stored under ``key``.

        Raises
        ------
        DetachedFilterNotFound
            If nothing was stored under ``key`` and the buffer does not
            tolerate missing filters.
        """
        if key in self._detached:
            return self._detached[key]
        if self.return_empty_for_missing_filters:
            return ""
        raise DetachedFilterNotFound(
            f"No detached filter registered under '{key}'",
            key=key,
            grid=self.grid_name,
        )

    @property
    def detached_keys(self) -> list[str]:
        """Keys of all stored detached filters, in registration order."""
        return list(self._detached)

    @property
    def text(self) -> str:
        """The accumulated markup."""
        return "".join(self._parts)

    def __str__(self) -> str:
        return self.text
