from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .auto_closer import AutoCloseReport
from .config import BotConfig
from .dates import ScheduledDate
from .github_api import GitHubAPIError, GitHubClient
from .plugins import SCHEDULE_REPOSITORY, build_registry
from .rules import next_release_issue
from .types import RepoRef

console = Console()
logger = logging.getLogger("issue_bot")


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _event_name(name: str, payload: dict) -> str:
    action = payload.get("action")
    if "." not in name and isinstance(action, str) and action:
        return f"{name}.{action}"
    return name


def _print_report(report: AutoCloseReport) -> None:
    if report.skipped:
        console.print(f"[yellow]Skipped {report.repo}: required label is missing.[/yellow]")
        return

    table = Table(title=f"Auto-close {report.repo}")
    table.add_column("issue", justify="right")
    table.add_column("result")
    for number in report.closed:
        table.add_row(f"#{number}", "[green]closed[/green]")
    for number, reason in sorted(report.failed.items()):
        table.add_row(f"#{number}", f"[red]failed[/red] {reason}")
    if not report.closed and not report.failed:
        console.print(f"No stale issues found in {report.repo}.")
        return
    console.print(table)


def _run(ctx: click.Context, name: str, payload: dict) -> list:
    config: BotConfig = ctx.obj["config"]
    try:
        client = GitHubClient(config.token, timeout=config.timeout_seconds, retries=config.retries)
        results = build_registry(config).dispatch(name, payload, client)
    except GitHubAPIError as error:
        logger.error("Handling %s failed: %s", name, error)
        ctx.exit(1)
    except ValueError as error:
        # Payload without the repository/issue fields the handlers need.
        logger.error("Cannot handle %s: %s", name, error)
        ctx.exit(1)
    if not results:
        console.print(f"No handler registered for [bold]{name}[/bold].")
    return results


@click.group()
@click.option("--log-level", envvar="LOG_LEVEL", default="INFO", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token (defaults to gh auth token).")
@click.pass_context
def main(ctx: click.Context, log_level: str, token: str | None) -> None:
    """GitHub issue automation: release issue follow-ups and stale issue auto-closing."""
    _configure_logging(log_level)
    try:
        config = BotConfig.from_env()
    except ValueError as error:
        raise click.UsageError(str(error))
    ctx.obj = {"config": replace(config, token=token or config.token, log_level=log_level.upper())}


@main.command()
@click.option("--event", "event_name", envvar="GITHUB_EVENT_NAME", required=True,
              help="Event name, e.g. 'issues' or 'issues.closed'.")
@click.argument("payload_path", envvar="GITHUB_EVENT_PATH",
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def dispatch(ctx: click.Context, event_name: str, payload_path: Path) -> None:
    """Replay one webhook delivery from a JSON payload file."""
    try:
        payload = json.loads(payload_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise click.BadParameter(f"invalid JSON: {error}", param_hint="PAYLOAD_PATH")
    if not isinstance(payload, dict):
        raise click.BadParameter("payload must be a JSON object", param_hint="PAYLOAD_PATH")

    name = _event_name(event_name, payload)
    for result in _run(ctx, name, payload):
        if isinstance(result, AutoCloseReport):
            _print_report(result)
        elif result:
            console.print(f"Created issue #{result.get('number')}: {result.get('title')}")


@main.command()
@click.option("--repo", "repo_name", required=True, help="Repository in owner/repo format.")
@click.pass_context
def schedule(ctx: click.Context, repo_name: str) -> None:
    """Run the scheduled repository scan (auto-closer) once."""
    try:
        repo = RepoRef.parse(repo_name)
    except ValueError as error:
        raise click.BadParameter(str(error), param_hint="--repo")

    payload = {"repository": {"name": repo.name, "owner": {"login": repo.owner}}}
    for result in _run(ctx, SCHEDULE_REPOSITORY, payload):
        if isinstance(result, AutoCloseReport):
            _print_report(result)


@main.command()
@click.argument("title")
def preview(title: str) -> None:
    """Show the follow-up issue a closed release issue titled TITLE would open."""
    release_date = ScheduledDate.parse_title(title)
    if release_date is None:
        raise click.BadParameter(f"not a scheduled release title: {title!r}", param_hint="TITLE")

    try:
        action = next_release_issue(release_date)
    except (OverflowError, ValueError):
        raise click.BadParameter(f"no release date follows {release_date}", param_hint="TITLE")
    console.print(f"[bold]{action.title}[/bold]")
    console.print(f"labels: {', '.join(action.labels)}")
    console.print()
    console.print(action.body, markup=False)


if __name__ == "__main__":
    main()
