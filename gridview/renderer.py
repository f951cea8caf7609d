"""Render orchestration: grid state + column registry -> markup or export.

A table render runs five phases in order, each at most once:

1. layout decision (filter row, folding, extra controls column)
2. header row
3. filter row, or registration of detached filters
4. body rows (after the footer panel, which sits in ``<tfoot>``)
5. closing: data carrier for the client layer and the render guard

Usage:
    from gridview import ColumnRegistry, GridRenderer, GridState, TextFilter

    columns = ColumnRegistry()
    columns.column(label="Username", attribute="username", filter=TextFilter())
    columns.column(cell_fn=lambda account: f'<a href="/accounts/{account.id}">Show</a>')

    html = GridRenderer().render(state, columns, show_filters="when_filtered")
"""

from __future__ import annotations

import json

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from .buffer import OutputBuffer
from .columns import CellValueWithAttributes, ColumnDescriptor, ColumnRegistry
from .config import get_settings
from .exceptions import DuplicateRenderError, GridArgumentError, GridNotYetRendered, NoDetachedFilters
from .export import write_export
from .filters import collect_declarations
from .links import QueryLinkBuilder, namespaced
from .log import debug, info
from .markup import add_or_append_class, content_tag, escape, merge_attributes, tag_options
from .messages import Messages
from .models import RenderOptions, ShowFilters
from .pagination import pagination_panel_content
from .scripts import build_runtime_check_script
from .state import GridState, RenderedPlain, RenderedWithBuffer, Unrendered


if TYPE_CHECKING:
    from pathlib import Path

    from .config import GridViewSettings
    from .links import LinkBuilder


Columns = ColumnRegistry | Iterable[ColumnDescriptor | Mapping[str, Any]]


# =============================================================================
# Layout
# =============================================================================


@dataclass(frozen=True)
class Layout:
    """Phase 1 decisions shared by every later phase.

    Attributes:
        filters_suppressed: No filter UI at all.
        filter_row_absent: No filter row in the table (suppressed, or every
            filter is detached).
        fold_controls: The last column hosts the filter controls.
        extra_column: A trailing column hosts the filter controls.
        column_count: Number of table columns declared.
        filter_shown: Whether the filter row starts visible.
    """

    filters_suppressed: bool
    filter_row_absent: bool
    fold_controls: bool
    extra_column: bool
    column_count: int
    filter_shown: bool

    @property
    def visible_column_count(self) -> int:
        """Columns actually emitted per row, used for colspans."""
        return self.column_count + (1 if self.extra_column else 0)


def decide_layout(state: GridState, columns: ColumnRegistry, options: RenderOptions) -> Layout:
    """Work out filter row placement and the visible column count."""
    filters_suppressed = options.show_filters == ShowFilters.NO or not columns.any_filter_present("table")
    filter_row_absent = filters_suppressed or not columns.filter_needed_in_main_table("table")

    last = columns.last_applicable("table")
    fold_controls = (
        options.fold_filter_controls_into_last_column
        and not filters_suppressed
        and last is not None
        and last.capable_of_hosting_filter_icons
    )

    if options.show_filters == ShowFilters.ALWAYS:
        filter_shown = True
    elif options.show_filters == ShowFilters.WHEN_FILTERED:
        filter_shown = state.filtering_on
    else:
        filter_shown = False

    return Layout(
        filters_suppressed=filters_suppressed,
        filter_row_absent=filter_row_absent,
        fold_controls=fold_controls,
        extra_column=not (filter_row_absent or fold_controls),
        column_count=columns.count("table"),
        filter_shown=filter_shown,
    )


class _RowCycler:
    """Alternates ``odd``/``even`` bands, optionally only on key changes."""

    _UNSET = object()

    def __init__(self) -> None:
        self._band: str | None = None
        self._previous: Any = self._UNSET

    def _flip(self) -> str:
        self._band = "even" if self._band == "odd" else "odd"
        return self._band

    def next(self) -> str:
        """Band of the next row under strict alternation."""
        return self._flip()

    def next_for(self, key: Any) -> str:
        """Band of the next row, flipping only when ``key`` changed."""
        if self._previous is self._UNSET or key != self._previous:
            self._flip()
        self._previous = key
        return self._band  # type: ignore[return-value]


# =============================================================================
# Table rendering
# =============================================================================


class _TableRender:
    """One table render of one grid state; discarded afterwards."""

    def __init__(
        self,
        renderer: GridRenderer,
        state: GridState,
        columns: ColumnRegistry,
        options: RenderOptions,
    ) -> None:
        self.settings = renderer.settings
        self.links = renderer.links
        self.messages = renderer.messages
        self.state = state
        self.registry = columns
        self.options = options
        self.columns = list(columns.for_mode("table"))
        self.layout = decide_layout(state, columns, options)
        self.buffer = OutputBuffer(state.name)
        self.status_classes: list[str | None] = [None] * len(self.columns)
        self._panel_content: str | None = None

    def run(self) -> OutputBuffer:
        layout = self.layout
        debug(
            f"Grid '{self.state.name}' layout: filters_suppressed={layout.filters_suppressed}, "
            f"filter_row_absent={layout.filter_row_absent}, fold_controls={layout.fold_controls}, "
            f"extra_column={layout.extra_column}, visible_columns={layout.visible_column_count}"
        )
        self._open()
        self._header_row()
        self._filter_row()
        self.buffer += "</thead><tfoot>"
        self.buffer += self._pagination_panel()
        self.buffer += "</tfoot><tbody>"
        self._body()
        self.buffer += "</tbody></table>"
        self._closing()
        return self.buffer

    # -------------------------------------------------------------------------
    # Shared pieces
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.state.name

    def _table_attributes(self) -> dict[str, Any]:
        attrs = add_or_append_class(self.options.root_attributes, "gridview-grid", prepend=True)
        attrs = add_or_append_class(attrs, self.settings.grid.default_table_classes)
        if self.options.css_class:
            attrs = add_or_append_class(attrs, self.options.css_class)
        return attrs

    def _panel(self) -> str:
        # Computed once; shared by the upper and the footer panel
        if self._panel_content is None:
            self._panel_content = pagination_panel_content(
                self.state,
                self.links,
                self.messages,
                self.options.extra_link_parameters,
                allow_show_all=self.options.allow_show_all_records,
                warning_threshold=self.settings.grid.start_showing_warning_from,
            )
        return self._panel_content

    def _export_control(self) -> str:
        if not self.state.export_enabled or self.options.hide_export_button:
            return ""
        return content_tag(
            "div",
            "",
            {
                "title": self.messages["export_tooltip"],
                "id": f"{self.name}_export_button",
                "class": "clickable gridview-export-button",
            },
        )

    def _pagination_panel(self) -> str:
        visible = self.layout.visible_column_count
        if visible > 1:
            return (
                f'<tr><td colspan="{visible - 1}">{self._panel()}</td>'
                f"<td>{self._export_control()}</td></tr>"
            )
        return f'<tr><td colspan="1">{self._panel()}{self._export_control()}</td></tr>'

    def _toggle_control(self) -> str:
        """Show/hide icons of the filter row; empty when there is nothing to toggle."""
        if self.options.show_filters == ShowFilters.ALWAYS or self.layout.filter_row_absent:
            return ""
        styles = ["display: block;", "display: none;"]
        if not self.layout.filter_shown:
            styles.reverse()
        return content_tag(
            "div",
            "",
            {
                "title": self.messages["hide_filter_tooltip"],
                "style": styles[0],
                "class": "clickable gridview-hide-filter",
            },
        ) + content_tag(
            "div",
            "",
            {
                "title": self.messages["show_filter_tooltip"],
                "style": styles[1],
                "class": "clickable gridview-show-filter",
            },
        )

    def _reset_submit_buttons(self) -> str:
        submit = ""
        if not self.options.hide_submit_button:
            submit = content_tag(
                "div",
                "",
                {
                    "title": self.messages["filter_tooltip"],
                    "id": f"{self.name}_submit_grid_icon",
                    "class": "submit clickable",
                },
            )
        reset = ""
        if not self.options.hide_reset_button:
            reset = content_tag(
                "div",
                "",
                {
                    "title": self.messages["reset_filter_tooltip"],
                    "id": f"{self.name}_reset_grid_icon",
                    "class": "reset clickable",
                },
            )
        return f"{submit} {reset}"

    def _filter_markup(self, column: ColumnDescriptor) -> str:
        assert column.filter is not None and column.attribute is not None
        return column.filter.build_html(self.name, column.attribute, self.state.filter_value(column.attribute))

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def _open(self) -> None:
        self.buffer += f'<div class="gridview-container" id="{self.name}"><div id="{self.name}_title">'
        if self.state.saved_query_name:
            self.buffer += content_tag("h3", escape(self.state.saved_query_name))
        self.buffer += f"</div><table{tag_options(self._table_attributes())}><thead>"
        if self.options.show_upper_pagination_panel:
            self.buffer += self._pagination_panel()

    def _header_row(self) -> None:
        state = self.state
        attrs = add_or_append_class(self.options.header_row_attributes, "gridview-title-row", prepend=True)
        self.buffer += f"<tr{tag_options(attrs)}>"

        last_index = len(self.columns) - 1
        for index, column in enumerate(self.columns):
            if column.ordering:
                css = []
                if state.filtered_by(column):
                    css.append("active-filter")
                direction = "asc"
                link_class = None
                if state.ordered_by(column):
                    css.append("sorted")
                    link_class = state.order_direction
                    if state.order_direction == "asc":
                        direction = "desc"
                status = " ".join(css) or None
                self.status_classes[index] = status
                link = content_tag(
                    "a",
                    escape(column.label),
                    {
                        "href": self.links.sort_link(state, column, direction, self.options.extra_link_parameters),
                        "class": link_class,
                    },
                )
                self.buffer += content_tag("th", link, {"class": status})
            elif self.layout.fold_controls and index == last_index and not self.layout.filter_row_absent:
                self.buffer += content_tag("th", self._toggle_control())
            else:
                self.buffer += content_tag("th", escape(column.label))

        if self.layout.extra_column:
            self.buffer += content_tag("th", self._toggle_control())
        self.buffer += "</tr>"

    def _filter_row(self) -> None:
        layout = self.layout
        if layout.filters_suppressed:
            return

        if layout.filter_row_absent:
            # every filter is detached
            for column in self.columns:
                if column.filter is not None:
                    self.buffer.add_filter(column.detach_with_id, self._filter_markup(column))  # type: ignore[arg-type]
            debug(f"Grid '{self.name}' registered detached filters {self.buffer.detached_keys}")
            return

        attrs = add_or_append_class(self.options.header_row_attributes, "gridview-filter-row", prepend=True)
        attrs["id"] = f"{self.name}_filter_row"
        if not layout.filter_shown:
            attrs["style"] = "display:none"
        self.buffer += f"<tr{tag_options(attrs)}>"

        last_index = len(self.columns) - 1
        for index, column in enumerate(self.columns):
            status_attrs = {"class": self.status_classes[index]}
            if column.filter is not None:
                markup = self._filter_markup(column)
                if column.detach_with_id is not None:
                    self.buffer.add_filter(column.detach_with_id, markup)
                    self.buffer += content_tag("th", "", status_attrs)
                else:
                    self.buffer += content_tag("th", markup, status_attrs)
            elif layout.fold_controls and index == last_index:
                self.buffer += content_tag(
                    "th",
                    self._reset_submit_buttons(),
                    add_or_append_class(status_attrs, "filter_icons"),
                )
            else:
                self.buffer += content_tag("th", "", status_attrs)

        if layout.extra_column:
            self.buffer += content_tag("th", self._reset_submit_buttons(), {"class": "filter_icons"})
        self.buffer += "</tr>"

    def _sort_key_index(self) -> int | None:
        """Index of the column whose values drive sort-dependent cycling."""
        if not self.options.sort_dependent_row_cycling:
            return None
        for index, column in enumerate(self.columns):
            if column.attribute is not None and self.state.ordered_by(column):
                return index
        return None

    def _body(self) -> None:
        state = self.state
        registry = self.registry
        extra_colspan = self.layout.visible_column_count
        sort_index = self._sort_key_index()
        cycler = _RowCycler()

        # per-column cell attributes do not change between rows
        base_attrs = [
            merge_attributes(column.html, {"class": self.status_classes[index]})
            for index, column in enumerate(self.columns)
        ]

        for row in state.iter_rows():
            cells = []
            sort_value = None
            for index, column in enumerate(self.columns):
                result = column.evaluate(row, state.params)
                attrs = base_attrs[index]
                if isinstance(result, CellValueWithAttributes):
                    attrs = merge_attributes(attrs, result.attributes)
                if index == sort_index:
                    sort_value = result.value
                content = escape(result.value) if column.cell_fn is None else _cell_text(result.value)
                cells.append(content_tag("td", content, attrs))
            if self.layout.extra_column:
                cells.append("<td></td>")

            row_attrs: dict[str, Any] = {}
            if registry.row_attributes_handler is not None:
                row_attrs = dict(registry.row_attributes_handler(row) or {})
            band = cycler.next() if sort_index is None else cycler.next_for(sort_value)
            row_attrs = add_or_append_class(row_attrs, band)

            if registry.before_row_handler is not None:
                self.buffer += registry.before_row_handler(row, extra_colspan)
            self.buffer += f"<tr{tag_options(row_attrs)}>{''.join(cells)}</tr>"
            if registry.after_row_handler is not None:
                self.buffer += registry.after_row_handler(row, extra_colspan)

        if registry.last_row_handler is not None:
            self.buffer += registry.last_row_handler(extra_colspan)

    def _closing(self) -> None:
        state = self.state
        extra = self.options.extra_link_parameters
        base_link_for_filter, base_link_for_show_all = self.links.filter_links(state, extra)
        initializer_arguments = [
            base_link_for_filter,
            base_link_for_show_all,
            self.links.export_link(state, "csv", extra),
            urlencode({namespaced(self.name, "q"): ""}),
            urlencode({namespaced(self.name, "foc"): ""}),
            self.settings.environment,
        ]
        declarations = [] if self.layout.filters_suppressed else collect_declarations(self.name, self.columns)

        data_attrs: dict[str, Any] = {
            "class": "gridview-data",
            "data-processor-initializer-arguments": json.dumps(initializer_arguments),
            "data-filter-declarations": json.dumps(declarations),
        }
        if state.status.get("foc"):
            data_attrs["data-foc"] = str(state.status["foc"])
        self.buffer += content_tag("div", "", data_attrs)
        self.buffer += "</div>"

        if self.settings.is_development:
            self.buffer += build_runtime_check_script()


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value)


# =============================================================================
# Public entry points
# =============================================================================


def _require_state(state: Any, operation: str) -> GridState:
    if not isinstance(state, GridState):
        raise GridArgumentError(
            f"{operation}: the first argument must be a GridState instance",
            got=type(state).__name__,
        )
    return state


class GridRenderer:
    """Renders grid states with one merged set of defaults.

    Parameters
    ----------
    settings : GridViewSettings, optional
        Defaults and environment; the cached global settings if omitted.
    links : LinkBuilder, optional
        URL construction; a ``QueryLinkBuilder`` on the current path if omitted.
    messages : Messages, optional
        Label catalog; built from ``settings.messages`` if omitted.
    """

    def __init__(
        self,
        settings: GridViewSettings | None = None,
        links: LinkBuilder | None = None,
        messages: Messages | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.links = links or QueryLinkBuilder()
        self.messages = messages or Messages.from_settings(self.settings.messages)

    def build_options(
        self,
        options: RenderOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> RenderOptions:
        """Merge per-call options onto the configured defaults."""
        if isinstance(options, RenderOptions):
            if not overrides:
                return options
            return RenderOptions(**{**options.model_dump(), **overrides})
        return RenderOptions.from_settings(self.settings, **{**(options or {}), **overrides})

    def render(
        self,
        state: GridState,
        columns: Columns,
        options: RenderOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> str:
        """Render ``state`` as an HTML table.

        Parameters
        ----------
        state : GridState
            The resolved grid state; rendered at most once.
        columns : ColumnRegistry or iterable of declarations
            Column declarations in display order.
        options : RenderOptions or mapping, optional
            Per-call options; keyword overrides are merged on top.

        Returns
        -------
        str
            The table markup. A state rendered with detached filters returns
            the same markup again on later calls.

        Raises
        ------
        DuplicateRenderError
            If ``state`` was already rendered without detached filters.
        InvalidCellResult
            If a cell function returns a malformed tuple.
        """
        state = _require_state(state, "render")
        guard = state.render_guard
        if isinstance(guard, RenderedWithBuffer):
            info(f"Grid '{state.name}' already rendered with detached filters, returning cached markup")
            return guard.text
        if isinstance(guard, RenderedPlain):
            raise DuplicateRenderError(
                "Second render of the same grid state. "
                "Did you intend to use detached filters and forget to declare them?",
                grid=state.name,
            )

        registry = ColumnRegistry.coerce(columns)
        resolved = self.build_options(options, **overrides)

        if (
            registry.blank_slate_handler is not None
            and state.page_length == 0
            and not state.filtering_on
        ):
            return self._render_blank_slate(state, registry)

        buffer = _TableRender(self, state, registry, resolved).run()
        state.mark_rendered(buffer)
        return buffer.text

    def _render_blank_slate(self, state: GridState, registry: ColumnRegistry) -> str:
        buffer = OutputBuffer(state.name)
        handler = registry.blank_slate_handler
        buffer += handler() if callable(handler) else handler
        if registry.find_one("table", lambda c: c.detach_with_id is not None) is not None:
            # detached filter slots elsewhere on the page render empty
            buffer.promote()
            buffer.return_empty_for_missing_filters = True
        debug(f"Grid '{state.name}' has no rows; rendered blank slate")
        state.mark_rendered(buffer)
        return buffer.text

    def render_detached_filter(self, state: GridState, key: str) -> str:
        """Markup of the filter registered under ``key`` by a prior render.

        Raises
        ------
        GridNotYetRendered
            If ``render`` has not been called on ``state``.
        NoDetachedFilters
            If ``state`` was rendered without any detached filter.
        DetachedFilterNotFound
            If no filter was registered under ``key``.
        """
        state = _require_state(state, "render_detached_filter")
        guard = state.render_guard
        if isinstance(guard, Unrendered):
            raise GridNotYetRendered(
                "render_detached_filter was called before render; render the grid first",
                grid=state.name,
            )
        if isinstance(guard, RenderedPlain):
            raise NoDetachedFilters(
                "The grid was rendered without detached filters, or with show_filters='no'",
                key=key,
                grid=state.name,
            )
        return content_tag(
            "span",
            guard.buffer.filter_for(key),
            {
                "class": f"gridview-detached-filter {state.name}_detached_filter",
                "data-grid-name": state.name,
            },
        )

    def export_flat(self, state: GridState, columns: Columns) -> Path:
        """Write the export-mode columns of every row to a CSV file.

        The render guard is not involved; a state may be exported and
        rendered independently.
        """
        state = _require_state(state, "export_flat")
        registry = ColumnRegistry.coerce(columns)
        return write_export(state, registry, self.settings.grid.export_field_separator)


def render(
    state: GridState,
    columns: Columns,
    options: RenderOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> str:
    """Render ``state`` with a renderer built from the global settings."""
    return GridRenderer().render(state, columns, options, **overrides)


def render_detached_filter(state: GridState, key: str) -> str:
    """Detached filter markup using a renderer built from the global settings."""
    return GridRenderer().render_detached_filter(state, key)


def export_flat(state: GridState, columns: Columns) -> Path:
    """Flat export using a renderer built from the global settings."""
    return GridRenderer().export_flat(state, columns)
