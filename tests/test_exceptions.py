"""Tests for gridview.exceptions module.

These tests verify the exception hierarchy, message formatting,
context storage, and inheritance relationships.
"""

from __future__ import annotations

import pytest

from gridview.exceptions import (
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


class TestGridViewException:
    """Test base exception class behavior."""

    def test_message_only(self) -> None:
        """Exception with just a message stores it correctly."""
        exc = GridViewException("Something went wrong")
        assert exc.message == "Something went wrong"
        assert not exc.context
        assert str(exc) == "Something went wrong"

    def test_with_context(self) -> None:
        """Context appears in the string representation."""
        exc = GridViewException("Failed", grid="accounts", row=3)
        assert exc.context == {"grid": "accounts", "row": 3}
        assert str(exc) == "Failed (grid='accounts', row=3)"

    def test_args_preserved(self) -> None:
        """Standard exception args are preserved."""
        assert GridViewException("message").args == ("message",)


class TestHierarchy:
    """Test inheritance relationships."""

    @pytest.mark.parametrize(
        ("exc_class", "parent"),
        [
            (GridArgumentError, GridViewException),
            (InvalidColumnDeclaration, GridArgumentError),
            (InvalidCellResult, GridViewException),
            (RenderStateError, GridViewException),
            (DuplicateRenderError, RenderStateError),
            (GridNotYetRendered, RenderStateError),
            (DetachedFilterNotFound, RenderStateError),
            (NoDetachedFilters, DetachedFilterNotFound),
        ],
    )
    def test_subclass(self, exc_class, parent) -> None:
        """Each error is catchable through its parent."""
        assert issubclass(exc_class, parent)


class TestSpecificErrors:
    """Test attributes of specific errors."""

    def test_column_declaration(self) -> None:
        """The offending column is stored."""
        exc = InvalidColumnDeclaration("bad", column="Username")
        assert exc.column == "Username"
        assert "column='Username'" in str(exc)

    def test_cell_result(self) -> None:
        """The offending result is stored."""
        exc = InvalidCellResult("bad", column="Balance", result=(1, 2, 3))
        assert exc.result == (1, 2, 3)
        assert exc.context["column"] == "Balance"

    def test_render_state(self) -> None:
        """Render state errors name the grid."""
        exc = DuplicateRenderError("twice", grid="accounts")
        assert exc.grid == "accounts"

    def test_detached_filter(self) -> None:
        """Lookup errors carry the key and the grid."""
        exc = NoDetachedFilters("none", key="status", grid="accounts")
        assert exc.key == "status"
        assert exc.grid == "accounts"
        assert str(exc) == "none (grid='accounts', key='status')"
