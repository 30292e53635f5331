"""Runtime settings for an analysis run.

Defaults live here as module constants; environment variables and CLI
options override them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

GITHUB_API_URL = "https://api.github.com"
DEFAULT_MAX_DEPTH = 4
DEFAULT_SESSION_GAP_HOURS = 4.0
MAX_FILE_SIZE = 1024 * 1024  # files at or above 1 MiB are not analyzed
COMMIT_PAGE_SIZE = 100
MAX_COMMIT_PAGES = 10  # 1000 commits max
DEFAULT_MAX_WORKERS = 8
DEFAULT_MARKER_KEYWORD = "lovable"
REQUEST_TIMEOUT = 30.0


class ConfigError(ValueError):
    """Raised when a setting cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    """Tuning knobs for one analysis run."""

    max_depth: int = DEFAULT_MAX_DEPTH
    session_gap_hours: float = DEFAULT_SESSION_GAP_HOURS
    max_file_size: int = MAX_FILE_SIZE
    commit_page_size: int = COMMIT_PAGE_SIZE
    max_commit_pages: int = MAX_COMMIT_PAGES
    max_workers: int = DEFAULT_MAX_WORKERS
    marker_keyword: str = DEFAULT_MARKER_KEYWORD
    include_commit_history: bool = True
    api_url: str | None = None
    token: str | None = None
    request_timeout: float = REQUEST_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``VIBECHECK_*`` variables (and ``GITHUB_TOKEN``)."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        token = env.get("VIBECHECK_TOKEN") or env.get("GITHUB_TOKEN")
        if token:
            values["token"] = token
        if env.get("VIBECHECK_API_URL"):
            values["api_url"] = env["VIBECHECK_API_URL"]
        if env.get("VIBECHECK_MARKER"):
            values["marker_keyword"] = env["VIBECHECK_MARKER"]

        for key, attr, cast in (
            ("VIBECHECK_MAX_DEPTH", "max_depth", int),
            ("VIBECHECK_MAX_WORKERS", "max_workers", int),
            ("VIBECHECK_MAX_COMMIT_PAGES", "max_commit_pages", int),
            ("VIBECHECK_SESSION_GAP_HOURS", "session_gap_hours", float),
            ("VIBECHECK_TIMEOUT", "request_timeout", float),
        ):
            raw = env.get(key)
            if raw is None or not raw.strip():
                continue
            try:
                values[attr] = cast(raw)
            except ValueError as exc:
                raise ConfigError(f"{key} must be a number, got {raw!r}") from exc

        return cls(**values).validated()

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes).validated()

    def validated(self) -> "Settings":
        if self.max_depth < 1:
            raise ConfigError("max_depth must be at least 1")
        if self.max_workers < 1:
            raise ConfigError("max_workers must be at least 1")
        if self.session_gap_hours <= 0:
            raise ConfigError("session_gap_hours must be positive")
        if not self.marker_keyword:
            raise ConfigError("marker_keyword must not be empty")
        return self
