from __future__ import annotations

import pytest

from issue_bot.github_api import GitHubAPIError


class FakeGitHub:
    """In-memory stand-in for GitHubClient that records every call."""

    def __init__(
        self,
        *,
        labels: list[str] | None = None,
        issue_events: dict[int, list[dict]] | None = None,
        search_results: dict[str, list[int]] | None = None,
        fail_on: dict[tuple[str, int], str] | None = None,
    ) -> None:
        self._labels = labels or []
        self._issue_events = issue_events or {}
        self._search_results = search_results or {}
        self._fail_on = fail_on or {}
        self._next_number = 100
        self.calls: list[tuple] = []

    def _maybe_fail(self, method: str, number: int) -> None:
        if (method, number) in self._fail_on:
            raise GitHubAPIError(self._fail_on[(method, number)], status_code=500)

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    def iter_issue_events(self, owner, repo, issue_number, page_size=100, max_pages=3):
        self.calls.append(("iter_issue_events", owner, repo, issue_number))
        yield from self._issue_events.get(issue_number, [])

    def create_issue(self, owner, repo, *, title, body, labels=()):
        self.calls.append(("create_issue", owner, repo, title, body, tuple(labels)))
        number = self._next_number
        self._next_number += 1
        return {"number": number, "title": title}

    def list_labels(self, owner, repo, max_pages=10):
        self.calls.append(("list_labels", owner, repo))
        return list(self._labels)

    def search_issues(self, query, max_pages=10):
        self.calls.append(("search_issues", query))
        for fragment, numbers in self._search_results.items():
            if fragment in query:
                return [{"number": number} for number in numbers]
        return []

    def add_labels(self, owner, repo, issue_number, labels):
        self.calls.append(("add_labels", owner, repo, issue_number, tuple(labels)))
        self._maybe_fail("add_labels", issue_number)
        return [{"name": label} for label in labels]

    def set_issue_state(self, owner, repo, issue_number, state):
        self.calls.append(("set_issue_state", owner, repo, issue_number, state))
        self._maybe_fail("set_issue_state", issue_number)
        return {"number": issue_number, "state": state}

    def create_comment(self, owner, repo, issue_number, body):
        self.calls.append(("create_comment", owner, repo, issue_number, body))
        self._maybe_fail("create_comment", issue_number)
        return {"id": 1, "body": body}


@pytest.fixture
def fake_github():
    return FakeGitHub


def closed_issue_payload(title: str, labels: list[str], number: int = 7) -> dict:
    return {
        "action": "closed",
        "issue": {
            "number": number,
            "title": title,
            "labels": [{"name": name} for name in labels],
        },
        "repository": {"name": "repo-test", "owner": {"login": "test"}},
    }


@pytest.fixture
def issue_payload():
    return closed_issue_payload
