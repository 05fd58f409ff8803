"""Scheduled auto-closer for stale issues.

On each scheduled run for a repository:

1. Skip the whole run unless the repository defines the ``auto closed`` label.
2. Search open issues that have been inactive for too long, in two partitions:
   issues labelled ``accepted`` and issues without it. Each partition has its
   own inactivity window.
3. For every issue found, in this order: add the ``auto closed`` label, close
   the issue, and post a comment explaining the closure.

Partial failures: if one of the three calls fails for an issue, the remaining
calls for that issue are skipped and the failure is recorded; the run goes on
with the next issue. Nothing is rolled back. Adding a label is idempotent and
the searches only match open issues, so an issue that could not be closed is
picked up again on the next run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable

from .config import (
    ACCEPTED_CLOSE_COMMENT,
    ACCEPTED_LABEL,
    AUTO_CLOSED_LABEL,
    BotConfig,
    UNACCEPTED_CLOSE_COMMENT,
)
from .github_api import GitHubAPIError
from .types import RepoRef

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(frozen=True)
class CloseQuery:
    query: str
    days: int
    comment: str


@dataclass
class AutoCloseReport:
    repo: str
    skipped: bool = False
    closed: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def build_queries(repo: RepoRef, today: date, *, accepted_days: int, unaccepted_days: int) -> list[CloseQuery]:
    def _query(days: int, label_filter: str) -> str:
        cutoff = (today - timedelta(days=days)).isoformat()
        return f"repo:{repo.full_name} is:open is:issue updated:<{cutoff} {label_filter}"

    return [
        CloseQuery(
            query=_query(accepted_days, f"label:{ACCEPTED_LABEL}"),
            days=accepted_days,
            comment=ACCEPTED_CLOSE_COMMENT.format(days=accepted_days),
        ),
        CloseQuery(
            query=_query(unaccepted_days, f"-label:{ACCEPTED_LABEL}"),
            days=unaccepted_days,
            comment=UNACCEPTED_CLOSE_COMMENT.format(days=unaccepted_days),
        ),
    ]


class AutoCloser:
    def __init__(self, client, config: BotConfig | None = None, today: Callable[[], date] = utc_today) -> None:
        self.client = client
        self.config = config or BotConfig()
        self.today = today

    def has_close_label(self, repo: RepoRef) -> bool:
        return AUTO_CLOSED_LABEL in set(self.client.list_labels(repo.owner, repo.name))

    def find_issues(self, query: CloseQuery) -> list[int]:
        items = self.client.search_issues(query.query, max_pages=self.config.search_max_pages)
        return [int(item["number"]) for item in items if item.get("number") is not None]

    def run(self, repo: RepoRef) -> AutoCloseReport:
        report = AutoCloseReport(repo=repo.full_name)

        if not self.has_close_label(repo):
            logger.info("Label %r not found in %s; skipping auto-close run", AUTO_CLOSED_LABEL, repo.full_name)
            report.skipped = True
            return report

        queries = build_queries(
            repo,
            self.today(),
            accepted_days=self.config.accepted_days,
            unaccepted_days=self.config.unaccepted_days,
        )

        # Search everything first; closing issues shifts later search pages.
        planned: list[tuple[int, CloseQuery]] = []
        seen: set[int] = set()
        for query in queries:
            numbers = self.find_issues(query)
            logger.info("Found %d stale issues in %s for: %s", len(numbers), repo.full_name, query.query)
            for number in numbers:
                if number not in seen:
                    seen.add(number)
                    planned.append((number, query))

        for number, query in planned:
            self._close_issue(repo, number, query, report)

        if report.failed:
            logger.warning(
                "Auto-close for %s finished with %d failures: %s",
                repo.full_name, len(report.failed), sorted(report.failed),
            )
        return report

    def _close_issue(self, repo: RepoRef, number: int, query: CloseQuery, report: AutoCloseReport) -> None:
        step = "label"
        try:
            self.client.add_labels(repo.owner, repo.name, number, [AUTO_CLOSED_LABEL])
            step = "close"
            self.client.set_issue_state(repo.owner, repo.name, number, "closed")
            step = "comment"
            self.client.create_comment(repo.owner, repo.name, number, query.comment)
        except GitHubAPIError as error:
            logger.error("Auto-close of %s#%d failed at %s: %s", repo.full_name, number, step, error)
            report.failed[number] = f"{step}: {error}"
            return

        logger.info("Auto-closed %s#%d after %d days of inactivity", repo.full_name, number, query.days)
        report.closed.append(number)
