"""Pydantic models for grid filter widgets.

A filter widget produces the markup of one filter control and the
declaration handed to the client layer. Inputs are named after the grid's
parameter namespace, so a text filter on ``username`` in grid ``accounts``
submits ``accounts[f][username]``.

Usage:
    from gridview.filters import TextFilter, SelectFilter, Option

    TextFilter(placeholder="Name...")
    SelectFilter(options=[Option(label="Active", value="1"), Option(label="Closed", value="0")])
"""

from __future__ import annotations

import html

from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


def filter_param_name(grid_name: str, attribute: str) -> str:
    """Name of the request parameter carrying the filter value."""
    return f"{grid_name}[f][{attribute}]"


def filter_dom_id(grid_name: str, attribute: str, suffix: str = "") -> str:
    """DOM id of a filter input; attribute dots become underscores."""
    base = f"{grid_name}_f_{attribute.replace('.', '_')}"
    return f"{base}_{suffix}" if suffix else base


class Option(BaseModel):
    """A single option for select filters."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: str | None = None

    @model_validator(mode="after")
    def set_value_from_label(self) -> Option:
        """If value is not provided, use label as value."""
        if self.value is None:
            object.__setattr__(self, "value", self.label)
        return self


class FilterWidget(BaseModel):
    """Base class for all filter widgets.

    Subclasses implement ``build_html``; the default declaration lists the
    DOM ids the client layer collects values from.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: str = "custom"
    css_class: str = ""

    def build_html(self, grid_name: str, attribute: str, current_value: Any = None) -> str:
        """Build the filter control markup. Override in subclasses."""
        raise NotImplementedError

    def dom_ids(self, grid_name: str, attribute: str) -> list[str]:
        """DOM ids of the inputs making up this control."""
        return [filter_dom_id(grid_name, attribute)]

    def declaration(self, grid_name: str, attribute: str, detached: bool = False) -> dict[str, Any]:
        """Describe this filter for the client layer."""
        return {
            "filterName": filter_param_name(grid_name, attribute),
            "type": self.type,
            "ids": self.dom_ids(grid_name, attribute),
            "detached": detached,
        }

    def _class_attr(self, base: str) -> str:
        classes = f"{base} {self.css_class}".strip()
        return f' class="{html.escape(classes)}"'


class TextFilter(FilterWidget):
    """A free-text filter input.

    Example:
        TextFilter(placeholder="Search by name")
    """

    type: Literal["text"] = "text"
    placeholder: str = ""

    def build_html(self, grid_name: str, attribute: str, current_value: Any = None) -> str:
        """Build text input HTML."""
        value = "" if current_value is None else str(current_value)
        placeholder = f' placeholder="{html.escape(self.placeholder)}"' if self.placeholder else ""
        return (
            f'<input type="text"{self._class_attr("gridview-filter gridview-filter-text")} '
            f'id="{filter_dom_id(grid_name, attribute)}" '
            f'name="{html.escape(filter_param_name(grid_name, attribute))}" '
            f'value="{html.escape(value)}"{placeholder}>'
        )


class SelectFilter(FilterWidget):
    """A dropdown filter, optionally allowing several values.

    Example:
        SelectFilter(options=[Option(label="Open"), Option(label="Closed")], include_blank=True)
    """

    type: Literal["select"] = "select"
    options: list[Option] = Field(default_factory=list)
    multiple: bool = False
    include_blank: bool = True

    def build_html(self, grid_name: str, attribute: str, current_value: Any = None) -> str:
        """Build select HTML with the active values marked as selected."""
        if current_value is None:
            selected: set[str] = set()
        elif isinstance(current_value, (list, tuple, set)):
            selected = {str(v) for v in current_value}
        else:
            selected = {str(current_value)}

        name = filter_param_name(grid_name, attribute)
        if self.multiple:
            name += "[]"

        parts = []
        if self.include_blank and not self.multiple:
            parts.append('<option value=""></option>')
        for opt in self.options:
            val = str(opt.value)
            selected_attr = " selected" if val in selected else ""
            parts.append(
                f'<option value="{html.escape(val)}"{selected_attr}>{html.escape(opt.label)}</option>'
            )
        multiple_attr = " multiple" if self.multiple else ""
        return (
            f'<select{self._class_attr("gridview-filter gridview-filter-select")} '
            f'id="{filter_dom_id(grid_name, attribute)}" name="{html.escape(name)}"{multiple_attr}>'
            f'{"".join(parts)}</select>'
        )


class RangeFilter(FilterWidget):
    """Two inputs bounding a value from below and above.

    The active filter value is a mapping with optional ``fr`` and ``to`` keys.
    """

    type: Literal["range"] = "range"
    input_type: Literal["text", "number", "date"] = "text"

    def dom_ids(self, grid_name: str, attribute: str) -> list[str]:
        """Ids of the lower and upper bound inputs."""
        return [filter_dom_id(grid_name, attribute, "fr"), filter_dom_id(grid_name, attribute, "to")]

    def build_html(self, grid_name: str, attribute: str, current_value: Any = None) -> str:
        """Build the pair of bound inputs."""
        bounds = current_value if isinstance(current_value, Mapping) else {}
        name = filter_param_name(grid_name, attribute)
        inputs = []
        for bound, dom_id in zip(("fr", "to"), self.dom_ids(grid_name, attribute)):
            value = bounds.get(bound)
            value = "" if value is None else str(value)
            inputs.append(
                f'<input type="{self.input_type}" class="gridview-filter-range-{bound}" '
                f'id="{dom_id}" name="{html.escape(name)}[{bound}]" value="{html.escape(value)}">'
            )
        return f'<div{self._class_attr("gridview-filter gridview-filter-range")}>{"".join(inputs)}</div>'


class BooleanFilter(FilterWidget):
    """A yes/no/any dropdown."""

    type: Literal["boolean"] = "boolean"
    true_label: str = "yes"
    false_label: str = "no"

    def build_html(self, grid_name: str, attribute: str, current_value: Any = None) -> str:
        """Build the tri-state dropdown."""
        select = SelectFilter(
            options=[Option(label=self.true_label, value="t"), Option(label=self.false_label, value="f")],
            css_class=f"gridview-filter-boolean {self.css_class}".strip(),
        )
        if isinstance(current_value, bool):
            current_value = "t" if current_value else "f"
        return select.build_html(grid_name, attribute, current_value)


def collect_declarations(
    grid_name: str,
    columns: Sequence[Any],
) -> list[dict[str, Any]]:
    """Declarations of every bound, filter-bearing column in ``columns``."""
    return [
        column.filter.declaration(grid_name, column.attribute, detached=column.detach_with_id is not None)
        for column in columns
        if column.attribute and column.filter is not None
    ]
