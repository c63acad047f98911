"""Settings for the implementors index.

Configuration is read from ``IMPLINDEX_*`` environment variables and an
optional ``.env`` file, validated once, and cached.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    The only behaviour a host may want to change without code is how loud
    the index is and what happens when a second consumer shows up.

Features:
    - **IndexSettings:** log level/format, duplicate-consumer policy, fragment glob
    - **env_prefix:** ``IMPLINDEX_``
    - **.env file support:** automatic loading via pydantic-settings
    - **get_settings():** cached accessor, ``_force_reload`` for tests

Examples:
    >>> import os
    >>> os.environ["IMPLINDEX_DUPLICATE_CONSUMER"] = "replace"
    >>> get_settings(_force_reload=True).duplicate_consumer
    <ConsumerPolicy.REPLACE: 'replace'>

Tags:
    settings, configuration, pydantic, environment, implindex

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from implindex.core.errors import ConfigError


class ConsumerPolicy(str, Enum):
    """What the coordinator does when a second consumer registers."""

    REJECT = "reject"
    REPLACE = "replace"


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"
    AUTO = "auto"


class IndexSettings(BaseSettings):
    """Settings shared by the coordinator, the loader and the CLI.

    Fields
    ──────
    log_level          : Structlog log level
    log_format         : console, json, or auto (json when not a tty)
    duplicate_consumer : reject (raise) or replace (swap) a second consumer
    fragment_pattern   : Glob used to discover fragment files under a root
    """

    model_config = SettingsConfigDict(
        env_prefix="IMPLINDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    log_format: LogFormat = LogFormat.AUTO

    # ── Coordinator ──────────────────────────────────────────────
    duplicate_consumer: ConsumerPolicy = ConsumerPolicy.REJECT

    # ── Loader ───────────────────────────────────────────────────
    fragment_pattern: str = Field(
        default="**/*.js",
        description="Glob (relative to the load root) matching fragment files",
    )

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"unknown log level {value!r}")
        return value

    def json_logs(self) -> bool | None:
        """Translate ``log_format`` into ``configure_logging``'s json flag."""
        if self.log_format is LogFormat.AUTO:
            return None
        return self.log_format is LogFormat.JSON


_settings: IndexSettings | None = None


def get_settings(*, _force_reload: bool = False) -> IndexSettings:
    """Load, validate, and cache an :class:`IndexSettings` instance."""
    global _settings
    if _settings is None or _force_reload:
        try:
            _settings = IndexSettings()
        except ValidationError as exc:
            raise ConfigError(f"Invalid implindex settings: {exc}", cause=exc) from exc
    return _settings


def clear_settings_cache() -> None:
    """Forget the cached settings (for testing)."""
    global _settings
    _settings = None
