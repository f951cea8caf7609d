"""Row type and markup helpers shared by the test modules."""

from __future__ import annotations

import html
import json
import re

from dataclasses import dataclass
from typing import Any


@dataclass
class Account:
    """Row type used throughout the tests."""

    id: int
    username: str
    balance: int
    status: str = "open"
    group: int = 0


def data_attribute(markup: str, name: str) -> Any:
    """Decode a JSON ``data-*`` attribute from rendered markup."""
    match = re.search(rf'{re.escape(name)}="([^"]*)"', markup)
    assert match is not None, f"{name} not found"
    return json.loads(html.unescape(match.group(1)))


def body_of(markup: str) -> str:
    """Markup between ``<tbody>`` and ``</tbody>``."""
    return markup.split("<tbody>", 1)[1].split("</tbody>", 1)[0]


def footer_of(markup: str) -> str:
    """Markup between ``<tfoot>`` and ``</tfoot>``."""
    return markup.split("<tfoot>", 1)[1].split("</tfoot>", 1)[0]


def header_of(markup: str) -> str:
    """Markup between ``<thead>`` and ``</thead>``."""
    return markup.split("<thead>", 1)[1].split("</thead>", 1)[0]


def row_bands(markup: str) -> list[str]:
    """The odd/even tokens of the body rows, in order."""
    return re.findall(r'<tr class="(odd|even)"', body_of(markup))
