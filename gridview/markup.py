"""Small HTML building helpers shared by the renderer and filter widgets."""

from __future__ import annotations

import html
import json

from collections.abc import Mapping
from typing import Any


def class_tokens(value: Any) -> list[str]:
    """Split a class attribute value (string or sequence) into tokens."""
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return [token for item in value for token in str(item).split()]


def add_or_append_class(
    attrs: Mapping[str, Any] | None,
    value: Any,
    prepend: bool = False,
) -> dict[str, Any]:
    """Return a copy of ``attrs`` with ``value`` added to its class list.

    Existing tokens are kept; a token that is already present is not
    repeated.
    """
    result = dict(attrs or {})
    existing = class_tokens(result.get("class"))
    added = [token for token in class_tokens(value) if token not in existing]
    if not added:
        return result
    tokens = added + existing if prepend else existing + added
    result["class"] = " ".join(tokens)
    return result


def merge_attributes(base: Mapping[str, Any] | None, extra: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge ``extra`` into ``base``: classes accumulate, other keys override."""
    result = dict(base or {})
    if not extra:
        return result
    extra = dict(extra)
    extra_class = extra.pop("class", None)
    result.update(extra)
    if extra_class:
        result = add_or_append_class(result, extra_class)
    return result


def tag_options(attrs: Mapping[str, Any] | None) -> str:
    """Render attributes as ``' key="value"'`` pairs, skipping None values."""
    if not attrs:
        return ""
    parts = []
    for key, value in attrs.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {html.escape(str(key))}")
            continue
        if not isinstance(value, str):
            value = json.dumps(value) if isinstance(value, (list, dict)) else str(value)
        parts.append(f' {html.escape(str(key))}="{html.escape(value, quote=True)}"')
    return "".join(parts)


def content_tag(name: str, content: Any = "", attrs: Mapping[str, Any] | None = None) -> str:
    """Build ``<name attrs>content</name>``; content is inserted verbatim."""
    body = "" if content is None else str(content)
    return f"<{name}{tag_options(attrs)}>{body}</{name}>"


def escape(value: Any) -> str:
    """HTML-escape any value, rendering None as an empty string."""
    if value is None:
        return ""
    return html.escape(str(value))
