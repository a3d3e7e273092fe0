"""Worklane settings.

Configuration is explicit, validated, and environment-driven. Values are
read from ``WORKLANE_*`` environment variables and an optional ``.env``
file; unknown variables are ignored.

Fields
──────
log_level            : structlog level used by ``configure_logging``
log_format           : ``json`` or ``console``; unset means auto-detect
queue_poll_interval  : seconds between admission retries of a blocked queue
queue_max_polls      : retries before a blocked queue stalls; unset = forever

Examples:
    >>> from worklane.core.settings import get_settings
    >>> get_settings().queue_poll_interval
    0.0

Tags:
    settings, configuration, pydantic, environment, worklane
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorklaneSettings(BaseSettings):
    """Settings shared by the orchestrator, the queue and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="WORKLANE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] | None = None

    # ── Queue backpressure ───────────────────────────────────────
    queue_poll_interval: float = Field(
        default=0.0,
        ge=0.0,
        description="Delay in seconds before a paused or blocked queue retries",
    )
    queue_max_polls: int | None = Field(
        default=None,
        ge=1,
        description="Retries before a blocked queue stops polling",
    )


_settings: WorklaneSettings | None = None


def get_settings(*, reload: bool = False) -> WorklaneSettings:
    """Load and cache a :class:`WorklaneSettings` instance.

    Parameters
    ----------
    reload:
        Bypass the cache and re-read the environment.
    """
    global _settings
    if _settings is None or reload:
        _settings = WorklaneSettings()
    return _settings


__all__ = ["WorklaneSettings", "get_settings"]
