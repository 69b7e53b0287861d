"""Output formatters for the Flvr CLI."""

from __future__ import annotations

import json
from collections.abc import Collection, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel
from rich.table import Table
from rich.text import Text

from flvr_cli.models.core import Devlog, Project, StoreItem, User
from flvr_cli.services.derived_state import format_logged_time, total_logged_seconds

from .console import get_console

if TYPE_CHECKING:
    from flvr_cli.services.refresh_service import RefreshService

console = get_console()

OUTPUT_FORMATS = ("table", "json", "yaml")


def _plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_plain(item) for item in data]
    return data


def format_output(data: Any, output_format: str, render_table) -> None:
    """Print *data* as json/yaml, or hand it to *render_table* for tables."""
    if output_format == "json":
        print(json.dumps(_plain(data), indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.dump(_plain(data), default_flow_style=False, sort_keys=False))
    else:
        render_table(data)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}", highlight=False)


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def _cell(value: Any) -> str:
    if value is None or value == "":
        return "-"
    return str(value)


def format_projects_table(projects: Sequence[Project], selected_id: int | None = None) -> None:
    """Render projects, marking the selected one."""
    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("", width=1)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Title")
    table.add_column("Devlogs", justify="right")
    table.add_column("Repository", overflow="fold")
    table.add_column("Updated", style="dim")

    for project in projects:
        marker = "▶" if project.id == selected_id else ""
        table.add_row(
            marker,
            str(project.id),
            _cell(project.title),
            str(len(project.devlog_ids or [])),
            _cell(project.repo_url),
            _cell(project.updated_at),
        )

    console.print(table)


def format_store_table(items: Sequence[StoreItem], target_ids: Collection[int]) -> None:
    """Render store items, starring targeted ones."""
    if not items:
        console.print("[yellow]No store items found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("", width=1)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name")
    table.add_column("Cost", justify="right", style="yellow")
    table.add_column("Stock", justify="right")
    table.add_column("Type", style="dim")

    for item in items:
        table.add_row(
            "★" if item.id in target_ids else "",
            str(item.id),
            _cell(item.name),
            _cell(item.base_cost),
            _cell(item.stock),
            _cell(item.type),
        )

    console.print(table)


def format_users_table(users: Sequence[User]) -> None:
    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name")
    table.add_column("Cookies", justify="right", style="yellow")
    table.add_column("Projects", justify="right")
    table.add_column("Slack", style="dim")

    for user in users:
        table.add_row(
            str(user.id),
            _cell(user.display_name),
            _cell(user.cookies),
            str(len(user.project_ids or [])),
            _cell(user.slack_id),
        )

    console.print(table)


def format_devlogs_table(devlogs: Sequence[Devlog]) -> None:
    """Render devlogs with a total logged time footer."""
    if not devlogs:
        console.print("[yellow]No devlogs found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Logged", justify="right")
    table.add_column("Likes", justify="right")
    table.add_column("Comments", justify="right")
    table.add_column("Posted", style="dim")
    table.add_column("Body", overflow="fold")

    for log in devlogs:
        body = (log.body or "").strip().splitlines()
        table.add_row(
            str(log.id),
            format_logged_time(log.duration_seconds or 0) or "-",
            _cell(log.likes_count),
            _cell(log.comments_count),
            _cell(log.created_at),
            body[0] if body else "-",
        )

    console.print(table)
    total = format_logged_time(total_logged_seconds(devlogs))
    if total:
        console.print(f"[bold]Total logged:[/bold] {total}")


def _format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "never"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_status(service: RefreshService) -> None:
    """Render the summary of the cached state as key-value pairs."""
    user = service.current_user
    hours = service.estimated_hours_to_target

    rows: list[tuple[str, str]] = [
        ("User", _cell(user.display_name if user else None)),
        ("Cookies", _cell(user.cookies if user else None)),
        ("Targets", str(len(service.target_item_ids))),
        ("Target Cost", str(service.total_target_cost)),
        ("Cookies Needed", str(service.remaining_cookies_needed)),
        (
            "Hours To Target",
            f"{hours:.1f}h @ {service.cookies_per_hour}/h" if hours is not None else "-",
        ),
        ("Selected Project", _cell(service.selected_project_id)),
        ("Logged Time", _cell(service.total_logged_time_text)),
        ("Last Updated", _format_timestamp(service.last_updated)),
    ]

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    for key, value in rows:
        table.add_row(key, value)
    console.print(table)

    for section, message in service.error_messages.items():
        text = Text()
        text.append(f"{section.value}: ", style="bold red")
        text.append(message)
        console.print(text)
