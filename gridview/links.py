"""URL construction for sorting, filtering, paging and export links.

Every grid parameter lives under the grid's name, e.g. ``accounts[order]``.
Links keep the parameters of the current request and replace the grid's
own keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import urlencode


if TYPE_CHECKING:
    from .columns import ColumnDescriptor
    from .state import GridState


ParameterPairs = list[tuple[str, Any]]


def namespaced(grid_name: str, *keys: str) -> str:
    """Build ``name[k1][k2]`` from a grid name and nested keys."""
    return grid_name + "".join(f"[{key}]" for key in keys)


def flatten_parameters(prefix: str, value: Any) -> ParameterPairs:
    """Flatten nested mappings and sequences into ``(key, value)`` pairs."""
    if isinstance(value, Mapping):
        pairs: ParameterPairs = []
        for key, item in value.items():
            pairs.extend(flatten_parameters(f"{prefix}[{key}]", item))
        return pairs
    if isinstance(value, (list, tuple, set)):
        return [(f"{prefix}[]", item) for item in value]
    return [(prefix, value)]


def state_as_parameter_pairs(state: GridState) -> ParameterPairs:
    """Serialize sort, filter and paging state as ordered parameter pairs."""
    name = state.name
    pairs: ParameterPairs = []
    if state.saved_query_id is not None:
        pairs.append((namespaced(name, "q"), state.saved_query_id))
    if state.active_sort is not None:
        pairs.append((namespaced(name, "order"), state.active_sort.attribute))
        pairs.append((namespaced(name, "order_direction"), state.active_sort.direction))
    for attribute, value in state.active_filters.items():
        if value is None or value == "":
            continue
        pairs.extend(flatten_parameters(namespaced(name, "f", attribute), value))
    if state.all_records_mode:
        pairs.append((namespaced(name, "pp"), state.total_count))
    elif state.current_page > 1:
        pairs.append((namespaced(name, "page"), state.current_page))
    return pairs


def _request_pairs(state: GridState) -> ParameterPairs:
    """Current request parameters that do not belong to this grid."""
    pairs: ParameterPairs = []
    for key, value in state.params.items():
        if key == state.name or key.startswith(f"{state.name}["):
            continue
        pairs.extend(flatten_parameters(key, value))
    return pairs


class LinkBuilder(Protocol):
    """The URL construction collaborator used by the renderer."""

    def sort_link(
        self,
        state: GridState,
        column: ColumnDescriptor,
        direction: str,
        extra: Mapping[str, Any],
    ) -> str: ...

    def filter_links(self, state: GridState, extra: Mapping[str, Any]) -> tuple[str, str]: ...

    def export_link(self, state: GridState, fmt: str, extra: Mapping[str, Any]) -> str: ...

    def page_link(self, state: GridState, page: int, extra: Mapping[str, Any]) -> str: ...


class QueryLinkBuilder:
    """Builds links as ``base_url?query`` with bracketed grid parameters.

    Parameters
    ----------
    base_url : str
        Path (or absolute URL) of the page hosting the grid.
    """

    def __init__(self, base_url: str = "") -> None:
        self.base_url = base_url

    def _url(self, pairs: ParameterPairs) -> str:
        query = urlencode([(k, "" if v is None else v) for k, v in pairs])
        if not query:
            return self.base_url or "?"
        separator = "&" if "?" in self.base_url else "?"
        return f"{self.base_url}{separator}{query}"

    def _base_pairs(self, state: GridState, extra: Mapping[str, Any]) -> ParameterPairs:
        pairs = _request_pairs(state)
        for key, value in extra.items():
            pairs.extend(flatten_parameters(key, value))
        return pairs

    def _filter_and_query_pairs(self, state: GridState) -> ParameterPairs:
        name = state.name
        pairs: ParameterPairs = []
        if state.saved_query_id is not None:
            pairs.append((namespaced(name, "q"), state.saved_query_id))
        for attribute, value in state.active_filters.items():
            if value is None or value == "":
                continue
            pairs.extend(flatten_parameters(namespaced(name, "f", attribute), value))
        return pairs

    def sort_link(
        self,
        state: GridState,
        column: ColumnDescriptor,
        direction: str,
        extra: Mapping[str, Any],
    ) -> str:
        """Link ordering the grid by ``column``; paging restarts."""
        pairs = self._base_pairs(state, extra) + self._filter_and_query_pairs(state)
        pairs.append((namespaced(state.name, "order"), column.attribute))
        pairs.append((namespaced(state.name, "order_direction"), direction))
        if state.all_records_mode:
            pairs.append((namespaced(state.name, "pp"), state.total_count))
        return self._url(pairs)

    def filter_links(self, state: GridState, extra: Mapping[str, Any]) -> tuple[str, str]:
        """Base links the client appends filter values to.

        The first keeps the sort order; the second additionally keeps the
        all-records mode.
        """
        pairs = self._base_pairs(state, extra)
        if state.active_sort is not None:
            pairs.append((namespaced(state.name, "order"), state.active_sort.attribute))
            pairs.append((namespaced(state.name, "order_direction"), state.active_sort.direction))
        base_for_filter = self._url(pairs)
        if state.all_records_mode:
            pairs = [*pairs, (namespaced(state.name, "pp"), state.total_count)]
        return base_for_filter, self._url(pairs)

    def export_link(self, state: GridState, fmt: str, extra: Mapping[str, Any]) -> str:
        """Link requesting a flat export of the current result set."""
        pairs = self._base_pairs(state, extra) + [
            p for p in state_as_parameter_pairs(state) if not p[0].startswith(namespaced(state.name, "page"))
        ]
        pairs.append((namespaced(state.name, "export"), fmt))
        return self._url(pairs)

    def page_link(self, state: GridState, page: int, extra: Mapping[str, Any]) -> str:
        """Link to ``page`` keeping sort and filter state."""
        pairs = self._base_pairs(state, extra) + self._filter_and_query_pairs(state)
        if state.active_sort is not None:
            pairs.append((namespaced(state.name, "order"), state.active_sort.attribute))
            pairs.append((namespaced(state.name, "order_direction"), state.active_sort.direction))
        pairs.append((namespaced(state.name, "page"), page))
        return self._url(pairs)
