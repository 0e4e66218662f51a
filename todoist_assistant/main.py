"""todoist-assistant CLI: all commands."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.table import Table

from todoist_assistant.models import RunResult
from todoist_assistant.providers.base import TaskRepository
from todoist_assistant.providers.todoist import TodoistProvider
from todoist_assistant.runner import SyncService, run_once
from todoist_assistant.settings import AssistantSettings, get_settings

app = typer.Typer(help="todoist-assistant: Jira → Todoist sync and project labeling", no_args_is_help=True)

ConfigOpt = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config.toml (default: ./config.toml)"),
]


# ---------------------------------------------------------------------------
# Wiring helpers
# ---------------------------------------------------------------------------


def configure_logging(level: str) -> None:
    """Route all logging through rich; unknown level names fall back to ERROR."""
    logging.basicConfig(
        level=logging.getLevelNamesMapping().get(level.upper(), logging.ERROR),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
        force=True,
    )


def get_repository(settings: AssistantSettings) -> TaskRepository:
    return TodoistProvider(settings.todoist)


def _render_result(result: RunResult) -> Table:
    table = Table(title=f"Update finished in {result.elapsed:.1f}s")
    table.add_column("Scope", style="cyan")
    table.add_column("Outcome")

    for summary in result.reconciled:
        table.add_row(
            summary.site,
            f"{summary.created} created, {summary.completed} completed, {summary.skipped} skipped, "
            f"{summary.priority_updates} priority / {summary.label_updates} label updates",
        )
    if result.labeling is not None:
        table.add_row(
            "projects",
            f"{result.labeling.projects} labeled, {result.labeling.labels_added} labels added, "
            f"{result.labeling.labels_removed} removed",
        )
    for error in result.errors:
        table.add_row("[red]error[/red]", error)

    return table


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("run")
def run_cmd(config: ConfigOpt = None) -> None:
    """Sync now, then again every update_interval minutes."""
    settings = get_settings(config)
    configure_logging(settings.log_level)

    service = SyncService(settings, get_repository(settings))
    try:
        service.start()
    except (KeyboardInterrupt, SystemExit):
        service.stop()


@app.command("once")
def once_cmd(config: ConfigOpt = None) -> None:
    """Run a single update and print a summary."""
    settings = get_settings(config)
    configure_logging(settings.log_level)

    result = run_once(settings, get_repository(settings))
    rprint(_render_result(result))
    if not result.ok:
        raise typer.Exit(1)


@app.command("projects")
def projects_cmd(config: ConfigOpt = None) -> None:
    """List Todoist projects, to help pick project / parent_project_name values."""
    settings = get_settings(config)
    projects = get_repository(settings).list_projects()
    names = {p.id: p.name for p in projects}

    table = Table(title="Todoist Projects")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Parent")

    for p in projects:
        table.add_row(p.id, p.name, names.get(p.parent_id, "-") if p.parent_id else "-")

    rprint(table)


@app.command("config-show")
def config_show(config: ConfigOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(config)

    def mask(val: str | None) -> str:
        if not val:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    def unset(val: str | None) -> str:
        return val or "[dim](not set)[/dim]"

    todoist = settings.todoist
    table = Table(title="todoist-assistant Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("log_level", settings.log_level)
    table.add_row("update_interval", f"{settings.update_interval} min")
    table.add_row("todoist.token", mask(todoist.token.get_secret_value() if todoist.token else None))
    table.add_row("todoist.next_action_label", todoist.next_action_label)
    table.add_row("todoist.assign_project_label", str(todoist.assign_project_label))
    table.add_row("todoist.assign_next_action_label", str(todoist.assign_next_action_label))
    table.add_row("todoist.parent_project_name", unset(todoist.parent_project_name))
    table.add_row("todoist.projects_label_prefix", todoist.projects_label_prefix)

    for i, instance in enumerate(settings.jira):
        prefix = f"jira[{i}]"
        table.add_row(f"{prefix}.site", instance.site)
        table.add_row(f"{prefix}.username", unset(instance.username))
        table.add_row(f"{prefix}.token", mask(instance.token.get_secret_value() if instance.token else None))
        table.add_row(f"{prefix}.jql", instance.jql)
        table.add_row(f"{prefix}.project", unset(instance.project))
        table.add_row(f"{prefix}.labels", ", ".join(instance.labels) or "none")
        table.add_row(f"{prefix}.completion_statuses", ", ".join(instance.completion_statuses) or "none")
        table.add_row(
            f"{prefix}.priority_map",
            "; ".join(f"{tier}={', '.join(names)}" for tier, names in sorted(instance.priority_map.items())) or "none",
        )
        table.add_row(f"{prefix}.default_priority", unset(instance.default_priority))

    rprint(table)
