"""Read-only commands: status, projects, store, users, devlogs."""

from __future__ import annotations

import typer

from flvr_cli.services.api import Section
from flvr_cli.services.config_service import get_config_service
from flvr_cli.services.refresh_service import build_refresh_service
from flvr_cli.utils.exit_codes import ERROR_INVALID_ARGS
from flvr_cli.utils.ui.formatters import (
    format_devlogs_table,
    format_output,
    format_projects_table,
    format_status,
    format_store_table,
    format_users_table,
)

from .common import OutputOption, raise_for_section, refreshed_service
from .decorators import AppError, command_wrapper

app = typer.Typer()


@app.command("status")
@command_wrapper
async def status_command() -> None:
    """Refresh everything and show cookie progress toward your targets."""
    service = await refreshed_service(get_config_service())
    format_status(service)


@app.command("projects")
@command_wrapper
async def projects_command(output: str = OutputOption) -> None:
    """List projects (only your own when a user id is configured)."""
    service = await refreshed_service(get_config_service())
    raise_for_section(service, Section.PROJECTS)
    format_output(
        service.sorted_projects,
        output,
        lambda projects: format_projects_table(projects, service.selected_project_id),
    )


@app.command("store")
@command_wrapper
async def store_command(
    show_all: bool = typer.Option(
        False, "--all", "-a", help="Include items without a price"
    ),
    output: str = OutputOption,
) -> None:
    """List store items, cheapest first. Targeted items are starred."""
    service = await refreshed_service(get_config_service())
    raise_for_section(service, Section.STORE)
    items = service.store_items if show_all else service.sorted_store_items
    format_output(
        items,
        output,
        lambda rows: format_store_table(rows, service.target_item_ids),
    )


@app.command("users")
@command_wrapper
async def users_command(output: str = OutputOption) -> None:
    """List users by display name."""
    service = await refreshed_service(get_config_service())
    raise_for_section(service, Section.USERS)
    format_output(service.sorted_users, output, format_users_table)


@app.command("devlogs")
@command_wrapper
async def devlogs_command(
    project_id: int | None = typer.Argument(
        None, help="Project ID (defaults to the selected project)"
    ),
    output: str = OutputOption,
) -> None:
    """List the devlogs of a project and its total logged time."""
    config_service = get_config_service()
    if project_id is None:
        project_id = config_service.preferences.selected_project_id
    if project_id is None:
        raise AppError(
            "No project given and none selected. Use 'flvr select <id>' first.",
            exit_code=ERROR_INVALID_ARGS,
        )

    service = build_refresh_service(config_service)
    try:
        await service.fetch_devlogs(project_id)
    finally:
        await service.aclose()

    raise_for_section(service, Section.DEVLOGS)
    format_output(service.devlogs.get(project_id, []), output, format_devlogs_table)
