"""Event registry and the plugin handlers bound to webhook event names."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

from . import rules
from .actuator import apply_action
from .auto_closer import AutoCloser, AutoCloseReport
from .config import RELEASE_LABEL, BotConfig
from .types import IssueEvent, IssueTransition, RepoRef

logger = logging.getLogger(__name__)

ISSUES_CLOSED = "issues.closed"
SCHEDULE_REPOSITORY = "schedule.repository"


@dataclass(frozen=True)
class WebhookContext:
    """One webhook delivery: its event name, raw payload and the API client."""

    name: str
    payload: dict[str, Any]
    client: Any

    def repo(self) -> RepoRef:
        return RepoRef.from_payload(self.payload)

    def issue(self) -> tuple[RepoRef, int]:
        issue = self.payload.get("issue") or {}
        return self.repo(), int(issue.get("number") or 0)


Handler = Callable[[WebhookContext], Any]


class EventRegistry:
    """Maps event names (``issues`` or ``issues.closed``) to handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def on(self, name: str, handler: Handler) -> None:
        self._handlers[name].append(handler)

    def handlers_for(self, name: str) -> list[Handler]:
        names = [name]
        base = name.split(".", 1)[0]
        if base != name:
            names.append(base)
        return [handler for key in names for handler in self._handlers.get(key, [])]

    @property
    def event_names(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, name: str, payload: dict[str, Any], client) -> list[Any]:
        handlers = self.handlers_for(name)
        if not handlers:
            logger.debug("No handlers registered for %s", name)
            return []

        context = WebhookContext(name=name, payload=payload, client=client)
        results = []
        for handler in handlers:
            logger.info("Dispatching %s to %s", name, getattr(handler, "__name__", repr(handler)))
            results.append(handler(context))
        return results


def fetch_history(client, event: IssueEvent, config: BotConfig) -> list[IssueTransition]:
    items = client.iter_issue_events(
        event.owner,
        event.repo,
        event.issue_number,
        page_size=config.events_page_size,
        max_pages=config.events_max_pages,
    )
    return [IssueTransition.from_api(item) for item in items]


def handle_issue_closed(context: WebhookContext, config: BotConfig | None = None) -> dict[str, Any] | None:
    """Open the next scheduled release issue when a release issue is closed."""
    config = config or BotConfig()
    event = IssueEvent.from_payload(context.payload)

    # The history is only needed once the label gate passes.
    history: list[IssueTransition] = []
    if RELEASE_LABEL in event.labels:
        history = fetch_history(context.client, event, config)

    action = rules.evaluate(event, history)
    return apply_action(context.client, event.repo_ref, action)


def handle_schedule(context: WebhookContext, config: BotConfig | None = None) -> AutoCloseReport:
    """Close stale issues in the repository the schedule fired for."""
    closer = AutoCloser(context.client, config)
    return closer.run(context.repo())


def build_registry(config: BotConfig | None = None) -> EventRegistry:
    config = config or BotConfig()
    registry = EventRegistry()
    registry.on(ISSUES_CLOSED, _named(partial(handle_issue_closed, config=config), "release_issues"))
    registry.on(SCHEDULE_REPOSITORY, _named(partial(handle_schedule, config=config), "auto_closer"))
    return registry


def _named(handler: partial, name: str) -> partial:
    handler.__name__ = name
    return handler
