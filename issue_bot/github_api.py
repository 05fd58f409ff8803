"""GitHub API client with rate limiting, retries and pagination support."""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Any, Iterator, Optional

import requests

from .config import (
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    ISSUE_EVENTS_MAX_PAGES,
    ISSUE_EVENTS_PAGE_SIZE,
    SEARCH_MAX_PAGES,
)

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 100
RATE_LIMIT_BUFFER = 10
BACKOFF_MULTIPLIER = 1.5
ISSUE_STATES = frozenset({"open", "closed"})


class GitHubAPIError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceeded(GitHubAPIError):
    pass


class GitHubClient:
    """Handles all communication with the GitHub REST API."""

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = DEFAULT_RETRIES,
        backoff: float = 2.0,
        base_url: str | None = None,
    ):
        self.token = token or self._get_gh_cli_token()
        if not self.token:
            raise GitHubAPIError(
                "No GitHub token found. Set GITHUB_TOKEN env var or install gh CLI."
            )
        self.timeout = timeout
        self.retries = max(0, retries)
        self.backoff = backoff
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "issue-bot",
        })
        self._requests_remaining: int | None = None
        self._reset_time: int | None = None

    @staticmethod
    def _get_gh_cli_token() -> Optional[str]:
        try:
            result = subprocess.run(
                ["gh", "auth", "token"],
                capture_output=True, text=True, timeout=10
            )
            if result.returncode == 0:
                return result.stdout.strip() or None
        except (FileNotFoundError, subprocess.TimeoutExpired):
            pass
        return None

    def _update_rate_limit(self, response: requests.Response):
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self._requests_remaining = int(remaining)
        if reset is not None:
            self._reset_time = int(reset)

    def _wait_for_rate_limit(self):
        if self._requests_remaining is not None and self._requests_remaining < RATE_LIMIT_BUFFER:
            if self._reset_time:
                wait_seconds = max(0, self._reset_time - int(time.time())) + 5
                logger.warning(
                    "Rate limit low (%d remaining). Waiting %d seconds.",
                    self._requests_remaining, wait_seconds
                )
                time.sleep(wait_seconds)

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        self._wait_for_rate_limit()
        url = f"{self.base_url}{endpoint}" if endpoint.startswith("/") else endpoint
        backoff = self.backoff

        for attempt in range(self.retries + 1):
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.exceptions.RequestException as e:
                if attempt < self.retries:
                    logger.warning("Request failed (%s). Retrying in %.1f seconds.", e, backoff)
                    time.sleep(backoff)
                    backoff *= BACKOFF_MULTIPLIER
                    continue
                raise GitHubAPIError(f"{method} {endpoint} failed after {self.retries} retries: {e}")

            self._update_rate_limit(response)

            if response.status_code in (403, 429) and "rate limit" in response.text.lower():
                if attempt < self.retries:
                    wait = max(backoff, self._reset_time - time.time() + 5) if self._reset_time else backoff
                    logger.warning("Rate limited. Retrying in %.1f seconds.", wait)
                    time.sleep(wait)
                    backoff *= BACKOFF_MULTIPLIER
                    continue
                raise RateLimitExceeded("GitHub API rate limit exceeded", status_code=response.status_code)

            if response.status_code >= 500 and attempt < self.retries:
                logger.warning(
                    "%s %s returned %d. Retrying in %.1f seconds.",
                    method, endpoint, response.status_code, backoff
                )
                time.sleep(backoff)
                backoff *= BACKOFF_MULTIPLIER
                continue

            if response.status_code >= 400:
                raise GitHubAPIError(
                    f"GitHub API error {response.status_code} for {method} {endpoint}: {response.text[:500]}",
                    status_code=response.status_code,
                )
            return response

        raise GitHubAPIError("Max retries exceeded")

    @staticmethod
    def _json(response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        return self._json(self._request("GET", endpoint, params=params))

    def post(self, endpoint: str, payload: dict) -> Any:
        return self._json(self._request("POST", endpoint, json=payload))

    def patch(self, endpoint: str, payload: dict) -> Any:
        return self._json(self._request("PATCH", endpoint, json=payload))

    def iter_paginated(self, endpoint: str, params: Optional[dict] = None,
                       per_page: int = DEFAULT_PER_PAGE, max_pages: int = 10) -> Iterator[dict]:
        """Lazily yield the items of a paginated endpoint, at most *max_pages* pages.

        Each call starts again from the first page. Search endpoints wrap their
        results in ``{"items": [...]}``; those are unwrapped.
        """
        params = dict(params or {})
        params["per_page"] = per_page

        for page in range(1, max_pages + 1):
            params["page"] = page
            data = self.get(endpoint, params=params)
            if not data:
                return
            if isinstance(data, dict) and "items" in data:
                items = data["items"] or []
            elif isinstance(data, list):
                items = data
            else:
                raise GitHubAPIError(f"Expected list for paginated endpoint {endpoint}, got {type(data).__name__}")

            yield from items
            if len(items) < per_page:
                return

    def get_paginated(self, endpoint: str, params: Optional[dict] = None,
                      per_page: int = DEFAULT_PER_PAGE, max_pages: int = 10) -> list:
        """Fetch all pages of a paginated endpoint."""
        return list(self.iter_paginated(endpoint, params=params, per_page=per_page, max_pages=max_pages))

    # ── Issues ───────────────────────────────────────────────────

    def iter_issue_events(self, owner: str, repo: str, issue_number: int,
                          page_size: int = ISSUE_EVENTS_PAGE_SIZE,
                          max_pages: int = ISSUE_EVENTS_MAX_PAGES) -> Iterator[dict]:
        return self.iter_paginated(
            f"/repos/{owner}/{repo}/issues/{issue_number}/events",
            per_page=page_size,
            max_pages=max_pages,
        )

    def list_issue_events(self, owner: str, repo: str, issue_number: int,
                          page_size: int = ISSUE_EVENTS_PAGE_SIZE,
                          max_pages: int = ISSUE_EVENTS_MAX_PAGES) -> list:
        return list(self.iter_issue_events(owner, repo, issue_number, page_size, max_pages))

    def create_issue(self, owner: str, repo: str, *, title: str, body: str,
                     labels: list[str] | tuple[str, ...] = ()) -> dict:
        return self.post(
            f"/repos/{owner}/{repo}/issues",
            {"title": title, "body": body, "labels": list(labels)},
        )

    def add_labels(self, owner: str, repo: str, issue_number: int, labels: list[str]) -> list:
        return self.post(
            f"/repos/{owner}/{repo}/issues/{issue_number}/labels",
            {"labels": list(labels)},
        )

    def set_issue_state(self, owner: str, repo: str, issue_number: int, state: str) -> dict:
        desired = (state or "").strip().lower()
        if desired not in ISSUE_STATES:
            raise ValueError(f"Unsupported issue state: {state!r}")
        return self.patch(f"/repos/{owner}/{repo}/issues/{issue_number}", {"state": desired})

    def create_comment(self, owner: str, repo: str, issue_number: int, body: str) -> dict:
        return self.post(
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            {"body": body},
        )

    # ── Repository ───────────────────────────────────────────────

    def list_labels(self, owner: str, repo: str, max_pages: int = 10) -> list[str]:
        labels = self.get_paginated(f"/repos/{owner}/{repo}/labels", max_pages=max_pages)
        return [label.get("name", "") for label in labels]

    def search_issues(self, query: str, max_pages: int = SEARCH_MAX_PAGES) -> list:
        return self.get_paginated("/search/issues", params={"q": query}, max_pages=max_pages)
