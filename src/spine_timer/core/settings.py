"""Settings for spine-timer.

``TimerSettings`` reads ``SPINE_TIMER_*`` environment variables (and a
``.env`` file) so the scheduler's zone, logging and shutdown bounds can be
changed without touching code.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not runtime
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** UTC, INFO, five-second shutdown bound

Examples:
    >>> settings = TimerSettings(timezone="Europe/Berlin")
    >>> settings.tzinfo().key
    'Europe/Berlin'

Tags:
    settings, configuration, pydantic, environment, spine-timer

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from spine_timer.core.errors import InvalidConfigError
from spine_timer.core.sources import DEFAULT_MAX_YEARS_BETWEEN_MATCHES


class TimerSettings(BaseSettings):
    """Runtime settings for the scheduler and CLI.

    Fields
    ──────
    timezone             : IANA zone due instants are rendered in
    log_level            : Structlog log level
    json_logs            : True JSON, False console, None auto-detect
    join_timeout_seconds : Bound for joining entry threads on stop
    cron_max_years       : Search horizon for calendar expressions
    """

    model_config = SettingsConfigDict(
        env_prefix="SPINE_TIMER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Time ─────────────────────────────────────────────────────
    timezone: str = "UTC"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Scheduler ────────────────────────────────────────────────
    join_timeout_seconds: float = Field(default=5.0, gt=0)
    cron_max_years: int = Field(default=DEFAULT_MAX_YEARS_BETWEEN_MATCHES, ge=1)

    def tzinfo(self) -> ZoneInfo:
        """Resolve ``timezone`` to a ZoneInfo.

        Raises:
            InvalidConfigError: the zone name is unknown
        """
        return resolve_timezone(self.timezone)


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA zone, raising ``InvalidConfigError`` for unknown names."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidConfigError("timezone", name, f"Unknown time zone: {name!r}", cause=e) from e


@lru_cache(maxsize=1)
def get_settings() -> TimerSettings:
    """Process-wide settings, loaded once."""
    return TimerSettings()


__all__ = ["TimerSettings", "get_settings", "resolve_timezone"]
