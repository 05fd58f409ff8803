"""Carry out a follow-up action against GitHub."""

from __future__ import annotations

import logging
from typing import Any

from .types import CreateIssue, FollowUpAction, NoOp, RepoRef

logger = logging.getLogger(__name__)


def apply_action(client, repo: RepoRef, action: FollowUpAction) -> dict[str, Any] | None:
    """Execute *action* through *client*; returns the created issue payload, if any.

    API errors are not caught here.
    """
    if isinstance(action, NoOp):
        logger.info("Nothing to do for %s (%s)", repo.full_name, action.reason or "no-op")
        return None

    if isinstance(action, CreateIssue):
        created = client.create_issue(
            repo.owner,
            repo.name,
            title=action.title,
            body=action.body,
            labels=list(action.labels),
        )
        number = (created or {}).get("number")
        logger.info("Created issue #%s in %s: %s", number, repo.full_name, action.title)
        return created

    raise TypeError(f"Unsupported follow-up action: {action!r}")
