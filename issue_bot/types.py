from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Union


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, full_name: str) -> "RepoRef":
        if "/" not in full_name:
            raise ValueError(f"Repository '{full_name}' must use owner/repo format.")
        owner, name = full_name.split("/", maxsplit=1)
        owner, name = owner.strip(), name.strip()
        if not owner or not name:
            raise ValueError(f"Repository '{full_name}' must use owner/repo format.")
        return cls(owner=owner, name=name)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RepoRef":
        repository = payload.get("repository") or {}
        owner_block = repository.get("owner") or {}
        owner = owner_block.get("login") or owner_block.get("name")
        name = repository.get("name")
        if not owner or not name:
            raise ValueError("Webhook payload is missing repository owner/name.")
        return cls(owner=owner, name=name)


@dataclass(frozen=True)
class IssueEvent:
    """A closed (or scanned) issue as described by one webhook delivery."""

    owner: str
    repo: str
    issue_number: int
    title: str
    labels: frozenset[str] = field(default_factory=frozenset)

    @property
    def repo_ref(self) -> RepoRef:
        return RepoRef(owner=self.owner, name=self.repo)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "IssueEvent":
        repo = RepoRef.from_payload(payload)
        issue = payload.get("issue") or {}
        raw_labels = issue.get("labels") or []
        label_names = frozenset(
            str(lbl.get("name") or "") if isinstance(lbl, dict) else str(lbl)
            for lbl in raw_labels
        )
        return cls(
            owner=repo.owner,
            repo=repo.name,
            issue_number=int(issue.get("number") or 0),
            title=str(issue.get("title") or ""),
            labels=label_names - {""},
        )


class TransitionKind(str, Enum):
    CLOSED = "closed"
    REOPENED = "reopened"
    OTHER = "other"


@dataclass(frozen=True)
class IssueTransition:
    kind: TransitionKind
    created_at: str | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "IssueTransition":
        event = item.get("event")
        try:
            kind = TransitionKind(event)
        except ValueError:
            kind = TransitionKind.OTHER
        return cls(kind=kind, created_at=item.get("created_at"))


def count_closures(history: Iterable[IssueTransition]) -> int:
    return sum(1 for transition in history if transition.kind is TransitionKind.CLOSED)


@dataclass(frozen=True)
class CreateIssue:
    title: str
    body: str
    labels: tuple[str, ...]


@dataclass(frozen=True)
class NoOp:
    reason: str = ""


FollowUpAction = Union[CreateIssue, NoOp]
