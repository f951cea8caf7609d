"""User-facing labels and tooltips, looked up by key.

Usage:
    from gridview.messages import Messages

    messages = Messages(locale="de", overrides={"next_label": "Weiter"})
    messages["previous_label"]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .log import warn


if TYPE_CHECKING:
    from collections.abc import Mapping

    from .config import MessageSettings


CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "hide_filter_tooltip": "Hide filter",
        "show_filter_tooltip": "Show filter",
        "filter_tooltip": "Filter",
        "reset_filter_tooltip": "Reset",
        "previous_label": "« Previous",
        "next_label": "Next »",
        "all_queries_warning": "Are you sure you want to display all records?",
        "show_all_records_label": "show all",
        "show_all_records_tooltip": "Show all records",
        "switch_back_to_paginated_mode_label": "back to paginated view",
        "switch_back_to_paginated_mode_tooltip": "Switch back to the view with pages",
        "export_tooltip": "Export to CSV",
    },
    "de": {
        "hide_filter_tooltip": "Filter ausblenden",
        "show_filter_tooltip": "Filter einblenden",
        "filter_tooltip": "Filtern",
        "reset_filter_tooltip": "Zurücksetzen",
        "previous_label": "« Zurück",
        "next_label": "Weiter »",
        "all_queries_warning": "Wirklich alle Datensätze anzeigen?",
        "show_all_records_label": "alle anzeigen",
        "show_all_records_tooltip": "Alle Datensätze anzeigen",
        "switch_back_to_paginated_mode_label": "zurück zur seitenweisen Ansicht",
        "switch_back_to_paginated_mode_tooltip": "Zurück zur Ansicht mit Seiten",
        "export_tooltip": "Als CSV exportieren",
    },
}

DEFAULT_LOCALE = "en"


class Messages:
    """Catalog lookup for one locale with optional per-key overrides.

    Keys missing from the locale fall back to the English catalog; keys
    missing everywhere are logged and returned unchanged.
    """

    def __init__(
        self,
        locale: str = DEFAULT_LOCALE,
        overrides: Mapping[str, str] | None = None,
    ) -> None:
        if locale not in CATALOGS:
            warn(f"Unknown locale '{locale}', falling back to '{DEFAULT_LOCALE}'")
            locale = DEFAULT_LOCALE
        self.locale = locale
        self._catalog = {**CATALOGS[DEFAULT_LOCALE], **CATALOGS[locale], **(overrides or {})}

    @classmethod
    def from_settings(cls, settings: MessageSettings) -> Messages:
        """Build the catalog configured in ``settings``."""
        return cls(locale=settings.locale, overrides=settings.overrides)

    def __getitem__(self, key: str) -> str:
        try:
            return self._catalog[key]
        except KeyError:
            warn(f"Missing translation for '{key}' (locale '{self.locale}')")
            return key
