"""Pydantic models for per-render options."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


if TYPE_CHECKING:
    from .config import GridViewSettings


class ShowFilters(str, Enum):
    """When the filter row is visible."""

    NO = "no"
    ALWAYS = "always"
    WHEN_FILTERED = "when_filtered"


class RenderOptions(BaseModel):
    """Options accepted by a single render call.

    Unset options take their value from ``GridDefaults``; see
    ``from_settings``. Unknown option names are rejected.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    show_filters: ShowFilters = ShowFilters.ALWAYS
    fold_filter_controls_into_last_column: bool = True
    show_upper_pagination_panel: bool = False
    sort_dependent_row_cycling: bool = False
    allow_show_all_records: bool = True
    hide_reset_button: bool = False
    hide_submit_button: bool = False
    hide_export_button: bool = False
    extra_link_parameters: dict[str, Any] = Field(default_factory=dict)
    header_row_attributes: dict[str, Any] = Field(default_factory=dict)
    root_attributes: dict[str, Any] = Field(default_factory=dict)
    css_class: str | None = Field(default=None, alias="class")

    @field_validator("show_filters", mode="before")
    @classmethod
    def parse_show_filters(cls, v: Any) -> Any:
        """Accept booleans as aliases for 'always' and 'no'."""
        if v is True:
            return ShowFilters.ALWAYS
        if v is False:
            return ShowFilters.NO
        return v

    @classmethod
    def from_settings(cls, settings: GridViewSettings, **overrides: Any) -> RenderOptions:
        """Build options from configured defaults plus explicit overrides."""
        defaults = settings.grid
        values: dict[str, Any] = {
            "show_filters": defaults.show_filters,
            "fold_filter_controls_into_last_column": defaults.reuse_last_column_for_filter_icons,
            "show_upper_pagination_panel": defaults.show_upper_pagination_panel,
            "sort_dependent_row_cycling": defaults.sort_dependent_row_cycling,
            "allow_show_all_records": defaults.allow_showing_all_records,
        }
        values.update(overrides)
        return cls(**values)
