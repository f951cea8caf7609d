"""Pytest configuration and fixtures."""

from __future__ import annotations

import os

from typing import TYPE_CHECKING, Any

import pytest

from gridview.config import GridViewSettings, clear_settings
from gridview.filters import TextFilter
from gridview.links import QueryLinkBuilder
from gridview.renderer import GridRenderer
from gridview.state import GridState
from tests.helpers import Account


if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Keep config files and GRIDVIEW_* variables of the host out of tests."""
    for key in list(os.environ):
        if key.startswith("GRIDVIEW"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    clear_settings()
    yield
    clear_settings()


@pytest.fixture
def settings() -> GridViewSettings:
    """Settings with no development-only output."""
    return GridViewSettings(environment="test")


@pytest.fixture
def renderer(settings: GridViewSettings) -> GridRenderer:
    """Renderer linking to /accounts."""
    return GridRenderer(settings=settings, links=QueryLinkBuilder("/accounts"))


# =============================================================================
# Rows, states and columns
# =============================================================================


@pytest.fixture
def accounts() -> list[Account]:
    """Three accounts in display order."""
    return [
        Account(id=1, username="alice", balance=10),
        Account(id=2, username="bob", balance=-5, status="closed"),
        Account(id=3, username="carol", balance=30),
    ]


@pytest.fixture
def make_state(accounts: list[Account]) -> Callable[..., GridState]:
    """Factory for grid states; defaults to one page holding all accounts."""

    def _make(**overrides: Any) -> GridState:
        values: dict[str, Any] = {
            "name": "accounts",
            "rows": accounts,
            "total_count": len(accounts),
            "offset": 0,
            "page_size": 20,
        }
        values.update(overrides)
        return GridState(**values)

    return _make


@pytest.fixture
def declarations() -> list[dict[str, Any]]:
    """Username (filtered), balance, and a trailing action column."""
    return [
        {"label": "Username", "attribute": "username", "filter": TextFilter()},
        {"label": "Balance", "attribute": "balance"},
        {"cell_fn": lambda account: f'<a href="/accounts/{account.id}">Show</a>'},
    ]

