"""Column declarations and the ordered registry built from them.

Usage:
    from gridview.columns import ColumnRegistry, CellValueWithAttributes
    from gridview.filters import TextFilter

    columns = ColumnRegistry()
    columns.column(label="Username", attribute="username", filter=TextFilter())
    columns.column(
        label="Balance",
        attribute="balance",
        cell_fn=lambda account: CellValueWithAttributes(account.balance, {"class": "num"}),
        modes={"table"},
    )
    columns.column(cell_fn=lambda account: f'<a href="/accounts/{account.id}/edit">Edit</a>')
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import InvalidCellResult, InvalidColumnDeclaration
from .filters import FilterWidget


RenderMode = Literal["table", "export"]
ALL_MODES: frozenset[str] = frozenset({"table", "export"})


# =============================================================================
# Cell results
# =============================================================================


@dataclass(frozen=True)
class CellValue:
    """A cell's content without extra cell attributes."""

    value: Any


@dataclass(frozen=True)
class CellValueWithAttributes:
    """A cell's content plus attributes merged into its ``<td>``."""

    value: Any
    attributes: Mapping[str, Any] = field(default_factory=dict)


CellResult = CellValue | CellValueWithAttributes


def coerce_cell_result(output: Any, column: ColumnDescriptor | None = None) -> CellResult:
    """Normalize what a cell function returned into a ``CellResult``.

    Plain values become ``CellValue``; a ``(value, mapping)`` tuple becomes
    ``CellValueWithAttributes``.

    Raises
    ------
    InvalidCellResult
        If a tuple does not hold exactly two elements, or its second
        element is not a mapping.
    """
    if isinstance(output, (CellValue, CellValueWithAttributes)):
        return output
    if not isinstance(output, tuple):
        return CellValue(output)

    column_name = column.display_name if column is not None else None
    if len(output) != 2:
        raise InvalidCellResult(
            "A cell function returning a tuple must return exactly 2 elements: "
            "the cell content and a mapping of cell attributes",
            column=column_name,
            result=output,
        )
    value, attributes = output
    if not isinstance(attributes, Mapping):
        raise InvalidCellResult(
            "The second element of a cell function's tuple must be a mapping of cell attributes",
            column=column_name,
            result=output,
        )
    return CellValueWithAttributes(value, dict(attributes))


def read_attribute(row: Any, attribute: str) -> Any:
    """Read a possibly dotted attribute from a mapping or an object."""
    value = row
    for part in attribute.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


# =============================================================================
# Column descriptor
# =============================================================================


class ColumnDescriptor(BaseModel):
    """Immutable definition of one output column.

    Attributes:
        label: Header text; None for unlabeled columns such as action links.
        attribute: Field the column is bound to; unbound columns can never be
            sorted or filtered.
        ordering: Whether the header toggles sorting. Defaults to True for
            bound columns.
        cell_fn: ``(row) -> cell``; ``(row, request_params) -> cell`` when
            ``receives_request_context`` is set. Bound columns default to
            reading the attribute from the row.
        filter: Widget rendering this column's filter control.
        detach_with_id: Render the filter outside the table under this key.
        modes: Rendering modes the column takes part in.
        html: Attributes of every ``<td>`` of this column.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    label: str | None = None
    attribute: str | None = None
    ordering: bool = False
    cell_fn: Callable[..., Any] | None = Field(default=None, repr=False)
    filter: FilterWidget | None = None
    detach_with_id: str | None = None
    modes: frozenset[RenderMode] = ALL_MODES  # type: ignore[assignment]
    html: dict[str, Any] = Field(default_factory=dict)
    receives_request_context: bool = False

    @model_validator(mode="before")
    @classmethod
    def default_ordering(cls, data: Any) -> Any:
        """Bound columns are sortable unless told otherwise."""
        if isinstance(data, dict) and data.get("ordering") is None:
            data = {**data, "ordering": data.get("attribute") is not None}
        return data

    @field_validator("modes", mode="before")
    @classmethod
    def parse_modes(cls, v: Any) -> Any:
        """Accept a single mode name."""
        if isinstance(v, str):
            return frozenset({v})
        return v

    @model_validator(mode="after")
    def check_consistency(self) -> ColumnDescriptor:
        """Reject declarations whose options contradict each other."""
        if not self.modes:
            raise ValueError("a column must take part in at least one rendering mode")
        if self.ordering and self.attribute is None:
            raise ValueError("a sortable column needs an attribute")
        if self.ordering and "table" not in self.modes:
            raise ValueError("a sortable column must be rendered in table mode")
        if self.cell_fn is None and self.attribute is None:
            raise ValueError("a column without an attribute needs a cell function")
        if self.filter is not None and self.attribute is None:
            raise ValueError("a filter needs an attribute to filter on")
        if self.detach_with_id is not None and self.filter is None:
            raise ValueError("detach_with_id requires a filter")
        return self

    @property
    def display_name(self) -> str | None:
        """Label, or attribute for unlabeled columns; used in error context."""
        return self.label if self.label is not None else self.attribute

    @property
    def capable_of_hosting_filter_icons(self) -> bool:
        """Only free-form columns may host the shared filter controls."""
        return self.attribute is None

    def applies_to(self, mode: str) -> bool:
        """Whether this column takes part in ``mode``."""
        return mode in self.modes

    def evaluate(self, row: Any, request_params: Mapping[str, Any] | None = None) -> CellResult:
        """Run the cell function for ``row`` and normalize its result."""
        if self.cell_fn is None:
            output = read_attribute(row, self.attribute)  # type: ignore[arg-type]
        elif self.receives_request_context:
            output = self.cell_fn(row, request_params or {})
        else:
            output = self.cell_fn(row)
        return coerce_cell_result(output, self)


def build_column(declaration: ColumnDescriptor | Mapping[str, Any]) -> ColumnDescriptor:
    """Turn a declaration into a descriptor, mapping validation errors."""
    if isinstance(declaration, ColumnDescriptor):
        return declaration
    if not isinstance(declaration, Mapping):
        raise InvalidColumnDeclaration(
            f"A column declaration must be a mapping or ColumnDescriptor, got {type(declaration).__name__}"
        )
    try:
        return ColumnDescriptor(**declaration)
    except ValidationError as exc:
        name = declaration.get("label") or declaration.get("attribute")
        details = "; ".join(err["msg"] for err in exc.errors())
        raise InvalidColumnDeclaration(f"Invalid column declaration: {details}", column=name) from exc


# =============================================================================
# Registry
# =============================================================================


RowHook = Callable[[Any, int], Any]


class ColumnRegistry:
    """Ordered column descriptors for one render call, plus row hooks.

    Hooks (all optional):
        before_row / after_row: ``(row, extra_row_colspan) -> markup``
        last_row: ``(extra_row_colspan) -> markup``
        row_attributes: ``(row) -> mapping`` of ``<tr>`` attributes
        blank_slate: markup, or a callable returning it, shown instead of
            the table when there are no rows and no active filter
    """

    def __init__(self, declarations: Iterable[ColumnDescriptor | Mapping[str, Any]] = ()) -> None:
        self._columns: list[ColumnDescriptor] = []
        self.before_row_handler: RowHook | None = None
        self.after_row_handler: RowHook | None = None
        self.last_row_handler: Callable[[int], str | None] | None = None
        self.row_attributes_handler: Callable[[Any], Mapping[str, Any]] | None = None
        self.blank_slate_handler: str | Callable[[], str] | None = None
        for declaration in declarations:
            self.register(declaration)

    @classmethod
    def coerce(cls, columns: ColumnRegistry | Iterable[ColumnDescriptor | Mapping[str, Any]]) -> ColumnRegistry:
        """Return ``columns`` as a registry, building one from declarations."""
        if isinstance(columns, ColumnRegistry):
            return columns
        return cls(columns)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, declaration: ColumnDescriptor | Mapping[str, Any]) -> ColumnDescriptor:
        """Validate ``declaration`` and append it.

        Raises
        ------
        InvalidColumnDeclaration
            If the declaration is malformed or inconsistent, or reuses a
            detach key.
        """
        column = build_column(declaration)
        if column.detach_with_id is not None and any(
            c.detach_with_id == column.detach_with_id for c in self._columns
        ):
            raise InvalidColumnDeclaration(
                f"Detach key '{column.detach_with_id}' is used by more than one column",
                column=column.display_name,
            )
        self._columns.append(column)
        return column

    def column(self, **declaration: Any) -> ColumnDescriptor:
        """Keyword shortcut for ``register``."""
        return self.register(declaration)

    def before_row(self, handler: RowHook) -> RowHook:
        """Set the hook emitting markup before each row (usable as decorator)."""
        self.before_row_handler = handler
        return handler

    def after_row(self, handler: RowHook) -> RowHook:
        """Set the hook emitting markup after each row (usable as decorator)."""
        self.after_row_handler = handler
        return handler

    def last_row(self, handler: Callable[[int], str | None]) -> Callable[[int], str | None]:
        """Set the hook emitting markup after the final row."""
        self.last_row_handler = handler
        return handler

    def row_attributes(self, handler: Callable[[Any], Mapping[str, Any]]) -> Callable[[Any], Mapping[str, Any]]:
        """Set the hook computing ``<tr>`` attributes per row."""
        self.row_attributes_handler = handler
        return handler

    def blank_slate(self, content: str | Callable[[], str]) -> str | Callable[[], str]:
        """Set the content shown instead of an empty, unfiltered grid."""
        self.blank_slate_handler = content
        return content

    # -------------------------------------------------------------------------
    # Composition queries
    # -------------------------------------------------------------------------

    def for_mode(self, mode: str) -> Iterator[ColumnDescriptor]:
        """Columns applicable to ``mode`` in declaration order.

        Each call starts a fresh iteration.
        """
        return (column for column in self._columns if column.applies_to(mode))

    def each_with_last(self, mode: str) -> Iterator[tuple[ColumnDescriptor, bool]]:
        """Columns applicable to ``mode`` paired with an is-last flag."""
        columns = list(self.for_mode(mode))
        for index, column in enumerate(columns):
            yield column, index == len(columns) - 1

    def count(self, mode: str) -> int:
        """Number of columns applicable to ``mode``."""
        return sum(1 for _ in self.for_mode(mode))

    def last_applicable(self, mode: str) -> ColumnDescriptor | None:
        """The final column applicable to ``mode``, if any."""
        last = None
        for column in self.for_mode(mode):
            last = column
        return last

    def any_filter_present(self, mode: str = "table") -> bool:
        """Whether some column applicable to ``mode`` has a filter."""
        return self.find_one(mode, lambda c: c.filter is not None) is not None

    def filter_needed_in_main_table(self, mode: str = "table") -> bool:
        """Whether some filter is rendered inline rather than detached."""
        return self.find_one(mode, lambda c: c.filter is not None and c.detach_with_id is None) is not None

    def find_one(self, mode: str, predicate: Callable[[ColumnDescriptor], bool]) -> ColumnDescriptor | None:
        """First column applicable to ``mode`` matching ``predicate``."""
        return next((c for c in self.for_mode(mode) if predicate(c)), None)

    def select(self, mode: str, predicate: Callable[[ColumnDescriptor], bool]) -> list[ColumnDescriptor]:
        """All columns applicable to ``mode`` matching ``predicate``."""
        return [c for c in self.for_mode(mode) if predicate(c)]

    def column_labels(self, mode: str) -> list[str]:
        """Labels of the columns applicable to ``mode``; unlabeled are empty."""
        return [c.label or "" for c in self.for_mode(mode)]

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(self._columns)
