"""Release issue rule: decide the follow-up for a closed release issue.

``evaluate`` is pure. It never raises and never performs I/O; every skip
condition is returned as a ``NoOp`` and the caller hands the result to the
actuator.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .config import (
    RELEASE_BODY_TEMPLATE,
    RELEASE_GUIDELINES_URL,
    RELEASE_INTERVAL_DAYS,
    RELEASE_LABEL,
    TSC_AGENDA_LABEL,
)
from .dates import ScheduledDate
from .types import CreateIssue, FollowUpAction, IssueEvent, IssueTransition, NoOp, count_closures

logger = logging.getLogger(__name__)


def render_release_body(release_date: ScheduledDate, *, guidelines_url: str = RELEASE_GUIDELINES_URL) -> str:
    return RELEASE_BODY_TEMPLATE.format(
        release_date=release_date.format_long(),
        guidelines_url=guidelines_url,
    )


def next_release_issue(release_date: ScheduledDate) -> CreateIssue:
    next_date = release_date.plus_days(RELEASE_INTERVAL_DAYS)
    return CreateIssue(
        title=next_date.format_title(),
        body=render_release_body(next_date),
        labels=(RELEASE_LABEL, TSC_AGENDA_LABEL),
    )


def evaluate(event: IssueEvent, history: Iterable[IssueTransition]) -> FollowUpAction:
    if RELEASE_LABEL not in event.labels:
        return NoOp("missing-label")

    # Reopened and closed again: the follow-up was created on the first close.
    if count_closures(history) > 1:
        return NoOp("reclosed")

    release_date = ScheduledDate.parse_title(event.title)
    if release_date is None:
        return NoOp("unparsable-title")

    try:
        action = next_release_issue(release_date)
    except (OverflowError, ValueError):
        # December 9999 has no successor date.
        return NoOp("date-out-of-range")
    logger.debug("Issue #%d (%s) schedules %r", event.issue_number, release_date, action.title)
    return action
