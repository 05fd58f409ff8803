"""Configuration constants and environment settings for the issue bot."""

from __future__ import annotations

import os
from dataclasses import dataclass

# ── Release issues ───────────────────────────────────────────
RELEASE_LABEL = "release"
TSC_AGENDA_LABEL = "tsc agenda"
RELEASE_TITLE_PREFIX = "Scheduled release for "
RELEASE_INTERVAL_DAYS = 14
RELEASE_GUIDELINES_URL = "https://eslint.org/docs/maintainer-guide/releases"

RELEASE_BODY_TEMPLATE = """
The scheduled release on {release_date} is assigned to:

* (needs volunteers)
* (needs volunteers)

Please use this issue to document how the release went, any problems during the release, and anything the team might want to know about the release process. This issue should be closed after all patch releases have been completed (or there was no patch release needed).

Resources:

* [Release guidelines]({guidelines_url})
""".strip()

# ── Auto-closer ──────────────────────────────────────────────
AUTO_CLOSED_LABEL = "auto closed"
ACCEPTED_LABEL = "accepted"
ACCEPTED_INACTIVE_DAYS = 90
UNACCEPTED_INACTIVE_DAYS = 21

ACCEPTED_CLOSE_COMMENT = (
    "This accepted issue has had no activity in the last {days} days, so it is being closed "
    "automatically. Accepted issues that sit idle this long usually mean nobody is able to "
    "work on them right now. If you are still interested, please leave a comment or reopen "
    "the issue and we will take another look."
)
UNACCEPTED_CLOSE_COMMENT = (
    "This issue has had no activity in the last {days} days and was not accepted by the team, "
    "so it is being closed automatically. Issues that do not reach accepted status within "
    "{days} days rarely do. This does not mean the idea is not useful, only that the team "
    "cannot commit to it at this time. Thanks for understanding."
)

# ── GitHub API ───────────────────────────────────────────────
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRIES = 3
ISSUE_EVENTS_PAGE_SIZE = 100
ISSUE_EVENTS_MAX_PAGES = 3
SEARCH_MAX_PAGES = 10


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class BotConfig:
    token: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retries: int = DEFAULT_RETRIES
    events_page_size: int = ISSUE_EVENTS_PAGE_SIZE
    events_max_pages: int = ISSUE_EVENTS_MAX_PAGES
    search_max_pages: int = SEARCH_MAX_PAGES
    accepted_days: int = ACCEPTED_INACTIVE_DAYS
    unaccepted_days: int = UNACCEPTED_INACTIVE_DAYS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "BotConfig":
        return cls(
            token=os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN"),
            timeout_seconds=_env_float("ISSUE_BOT_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            retries=_env_int("ISSUE_BOT_RETRIES", DEFAULT_RETRIES),
            events_page_size=_env_int("ISSUE_BOT_EVENTS_PAGE_SIZE", ISSUE_EVENTS_PAGE_SIZE),
            events_max_pages=_env_int("ISSUE_BOT_EVENTS_MAX_PAGES", ISSUE_EVENTS_MAX_PAGES),
            search_max_pages=_env_int("ISSUE_BOT_SEARCH_MAX_PAGES", SEARCH_MAX_PAGES),
            accepted_days=_env_int("ISSUE_BOT_ACCEPTED_DAYS", ACCEPTED_INACTIVE_DAYS),
            unaccepted_days=_env_int("ISSUE_BOT_UNACCEPTED_DAYS", UNACCEPTED_INACTIVE_DAYS),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
