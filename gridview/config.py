"""Configuration system for gridview using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.gridview] section (project-level)
3. ./gridview.toml (project-level, explicit)
4. ~/.config/gridview/config.toml (user-level, overrides project)
5. Environment variables (highest priority)

Environment variables use GRIDVIEW_ prefix with nested delimiter __.
Example: GRIDVIEW_GRID__SHOW_FILTERS, GRIDVIEW_LOG__LEVEL
"""

from __future__ import annotations

import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .log import set_format, set_level, warn


if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]


ShowFiltersValue = Literal["no", "always", "when_filtered"]


def _find_config_files() -> list[Path]:
    """Find all configuration files in order of precedence (lowest first)."""
    files = []

    pyproject = Path("pyproject.toml")
    if pyproject.exists():
        files.append(pyproject)

    gridview_toml = Path("gridview.toml")
    if gridview_toml.exists():
        files.append(gridview_toml)

    if sys.platform == "win32":
        user_config = Path(os.environ.get("APPDATA", "~")) / "gridview" / "config.toml"
    else:
        user_config = Path("~/.config/gridview/config.toml")
    user_config = user_config.expanduser()
    if user_config.exists():
        files.append(user_config)

    env_config = os.environ.get("GRIDVIEW_CONFIG_FILE")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            files.append(env_path)

    return files


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            warn(f"Ignoring unreadable config file {config_file}: {exc}")
            continue

        # pyproject.toml keeps its settings under [tool.gridview]
        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("gridview", {})

        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class GridDefaults(BaseSettings):
    """Project-wide defaults for every rendered grid.

    Per-call render options override these.

    Environment prefix: GRIDVIEW_GRID__
    Example: GRIDVIEW_GRID__SHOW_FILTERS=when_filtered
    Example: GRIDVIEW_GRID__DEFAULT_TABLE_CLASSES="table,table-striped"
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDVIEW_GRID__",
        extra="ignore",
    )

    show_filters: ShowFiltersValue = Field(
        default="always",
        description="When the filter row is shown: 'no', 'always' or 'when_filtered'",
    )
    show_upper_pagination_panel: bool = False
    allow_showing_all_records: bool = True
    start_showing_warning_from: int = Field(
        default=100,
        ge=0,
        description="Ask for confirmation before showing more records than this",
    )
    reuse_last_column_for_filter_icons: bool = Field(
        default=True,
        description="Fold filter controls into a trailing action column when possible",
    )
    sort_dependent_row_cycling: bool = False
    default_table_classes: Annotated[list[str], NoDecode] = Field(default_factory=list)
    export_field_separator: str = Field(default=",", min_length=1, max_length=1)

    @field_validator("show_filters", mode="before")
    @classmethod
    def parse_show_filters(cls, v: Any) -> Any:
        """Accept booleans as aliases for 'always' and 'no'."""
        if v is True:
            return "always"
        if v is False:
            return "no"
        return v

    @field_validator("default_table_classes", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[str]:
        """Parse comma-separated strings from env vars."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v or []


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: GRIDVIEW_LOG__
    Example: GRIDVIEW_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDVIEW_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = "%(name)s - %(levelname)s - %(message)s"


class MessageSettings(BaseSettings):
    """Localization settings for user-facing labels and tooltips.

    Environment prefix: GRIDVIEW_MESSAGES__
    Example: GRIDVIEW_MESSAGES__LOCALE=de
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDVIEW_MESSAGES__",
        extra="ignore",
    )

    locale: str = "en"
    overrides: dict[str, str] = Field(
        default_factory=dict,
        description="Per-key replacements applied on top of the locale catalog",
    )


class GridViewSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Environment prefix: GRIDVIEW__

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.gridview] section
    3. ./gridview.toml (project-level)
    4. ~/.config/gridview/config.toml (user-level, overrides project)
    5. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDVIEW__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(
        default="production",
        description="'development' adds a client runtime check script to every grid",
    )
    grid: GridDefaults = Field(default_factory=GridDefaults)
    log: LogSettings = Field(default_factory=LogSettings)
    messages: MessageSettings = Field(default_factory=MessageSettings)

    def __init__(self, **data: Any) -> None:
        # Explicit keyword arguments take precedence over TOML files
        merged = _deep_merge(_load_toml_config(), data)
        super().__init__(**merged)

    @property
    def is_development(self) -> bool:
        """Whether development-only output (runtime checks) is enabled."""
        return self.environment == "development"


@lru_cache(maxsize=1)
def get_settings() -> GridViewSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration. The log section is
    applied to the gridview logger when the settings are first loaded.
    """
    settings = GridViewSettings()
    set_level(settings.log.level)
    set_format(settings.log.format)
    return settings


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> GridViewSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()
