"""JavaScript snippets emitted alongside rendered grids."""

from __future__ import annotations


CLIENT_RUNTIME_GLOBAL = "GridViewProcessor"

RUNTIME_CHECK_JS = f"""
if (typeof({CLIENT_RUNTIME_GLOBAL}) == "undefined") {{
  alert("gridview.js not loaded, the grid cannot proceed!\\n" +
    "Make sure that gridview.js is included on this page.");
}}
"""


def build_runtime_check_script() -> str:
    """Script warning when the client runtime is missing (development only)."""
    return wrap_script(RUNTIME_CHECK_JS)


def wrap_script(js: str) -> str:
    """Wrap JavaScript in a ``<script>`` tag."""
    return f"<script>{js}</script>"

