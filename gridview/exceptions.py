"""gridview exception hierarchy.

All gridview-specific exceptions inherit from GridViewException, enabling
catch-all handling while supporting specific error types. Every error here
is a usage error (a malformed declaration or a wrong call order); none of
them is retried internally.
"""

from __future__ import annotations

from typing import Any


class GridViewException(Exception):
    """Base exception for all gridview errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize gridview exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (grid, column, key, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class GridArgumentError(GridViewException):
    """A public entry point received an argument of the wrong kind."""


class InvalidColumnDeclaration(GridArgumentError):
    """A column declaration is malformed or internally inconsistent.

    Raised at registration time, before anything is rendered.
    """

    def __init__(self, message: str, column: str | None = None, **context: Any) -> None:
        """Initialize declaration error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        column : str, optional
            Label or attribute identifying the offending column.
        **context : Any
            Additional context.
        """
        super().__init__(message, column=column, **context)
        self.column = column


class InvalidCellResult(GridViewException):
    """A cell function returned a value violating the two-element contract."""

    def __init__(
        self,
        message: str,
        column: str | None = None,
        result: Any = None,
        **context: Any,
    ) -> None:
        """Initialize cell result error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        column : str, optional
            Label or attribute of the column whose cell function misbehaved.
        result : Any, optional
            The offending return value.
        **context : Any
            Additional context.
        """
        super().__init__(message, column=column, result=result, **context)
        self.column = column
        self.result = result


class RenderStateError(GridViewException):
    """Base class for render-ordering mistakes on a grid state."""

    def __init__(self, message: str, grid: str | None = None, **context: Any) -> None:
        """Initialize render state error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        grid : str, optional
            Name of the grid involved.
        **context : Any
            Additional context.
        """
        super().__init__(message, grid=grid, **context)
        self.grid = grid


class DuplicateRenderError(RenderStateError):
    """The same grid state was rendered twice without detached filters."""


class GridNotYetRendered(RenderStateError):
    """A detached filter was requested before the grid was rendered."""


class DetachedFilterNotFound(RenderStateError):
    """No detached filter was registered under the requested key."""

    def __init__(
        self,
        message: str,
        key: str,
        grid: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize lookup error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        key : str
            The detach key that was requested.
        grid : str, optional
            Name of the grid involved.
        **context : Any
            Additional context.
        """
        super().__init__(message, grid=grid, key=key, **context)
        self.key = key


class NoDetachedFilters(DetachedFilterNotFound):
    """A detached filter was requested from a grid rendered without any.

    Also raised when filters are detached but ``show_filters`` is ``no``.
    """
