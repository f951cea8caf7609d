"""gridview - server-side HTML data grids with sorting, filtering and export.

This package renders an already-queried page of rows as an HTML table with
sortable headers, a filter row (or filters detached elsewhere on the page),
a pagination footer and a flat CSV export.
"""

from .buffer import OutputBuffer
from .columns import (
    CellValue,
    CellValueWithAttributes,
    ColumnDescriptor,
    ColumnRegistry,
    build_column,
)
from .config import (
    GridDefaults,
    GridViewSettings,
    LogSettings,
    MessageSettings,
    clear_settings,
    get_settings,
    reload_settings,
)
from .exceptions import (
    DetachedFilterNotFound,
    DuplicateRenderError,
    GridArgumentError,
    GridNotYetRendered,
    GridViewException,
    InvalidCellResult,
    InvalidColumnDeclaration,
    NoDetachedFilters,
    RenderStateError,
)
from .filters import (
    BooleanFilter,
    FilterWidget,
    Option,
    RangeFilter,
    SelectFilter,
    TextFilter,
)
from .links import LinkBuilder, QueryLinkBuilder
from .log import enable_debug
from .messages import Messages
from .models import RenderOptions, ShowFilters
from .renderer import GridRenderer, export_flat, render, render_detached_filter
from .state import ActiveSort, GridState


__version__ = "0.1.0"

__all__ = [
    "ActiveSort",
    "BooleanFilter",
    "CellValue",
    "CellValueWithAttributes",
    "ColumnDescriptor",
    "ColumnRegistry",
    "DetachedFilterNotFound",
    "DuplicateRenderError",
    "FilterWidget",
    "GridArgumentError",
    "GridDefaults",
    "GridNotYetRendered",
    "GridRenderer",
    "GridState",
    "GridViewException",
    "GridViewSettings",
    "InvalidCellResult",
    "InvalidColumnDeclaration",
    "LinkBuilder",
    "LogSettings",
    "MessageSettings",
    "Messages",
    "NoDetachedFilters",
    "Option",
    "OutputBuffer",
    "QueryLinkBuilder",
    "RangeFilter",
    "RenderOptions",
    "RenderStateError",
    "SelectFilter",
    "ShowFilters",
    "TextFilter",
    "__version__",
    "build_column",
    "clear_settings",
    "enable_debug",
    "export_flat",
    "get_settings",
    "reload_settings",
    "render",
    "render_detached_filter",
]
