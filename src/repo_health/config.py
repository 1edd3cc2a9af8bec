"""Runtime settings, read from the environment and overridden by CLI options."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_FRESHNESS_SECONDS = 3600  # 1 hour
DEFAULT_HOST = "github.com"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def _env_seconds(name: str, value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        seconds = int(value)
    except ValueError:
        seconds = None
    if seconds is None or seconds < 0:
        logger.warning("Ignoring %s=%r, expected whole seconds; using %d", name, value, default)
        return default
    return seconds


@dataclass(frozen=True)
class Settings:
    token: str | None = None
    api_url: str = DEFAULT_API_URL
    verify_ssl: bool = True
    freshness_seconds: int = DEFAULT_FRESHNESS_SECONDS
    host: str = DEFAULT_HOST

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from GITHUB_* and REPO_HEALTH_* variables."""
        env = os.environ if environ is None else environ
        return cls(
            token=env.get("GITHUB_TOKEN") or env.get("GITHUB_API_KEY") or None,
            api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
            verify_ssl=_env_bool(env.get("REPO_HEALTH_VERIFY_SSL"), True),
            freshness_seconds=_env_seconds(
                "REPO_HEALTH_FRESHNESS_SECONDS",
                env.get("REPO_HEALTH_FRESHNESS_SECONDS"),
                DEFAULT_FRESHNESS_SECONDS,
            ),
        )

    def override(self, **changes: object) -> Settings:
        """Return a copy with the non-None values of ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
