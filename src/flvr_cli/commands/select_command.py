"""Command 'select' of flvr-cli"""

from __future__ import annotations

import typer

from flvr_cli.services.config_service import get_config_service
from flvr_cli.services.refresh_service import build_refresh_service
from flvr_cli.utils.exit_codes import ERROR_INVALID_ARGS
from flvr_cli.utils.ui.formatters import format_success

from .decorators import AppError, command_wrapper

app = typer.Typer()


@app.command("select")
@command_wrapper
def select_command(
    project_id: int | None = typer.Argument(None, help="Project ID to focus"),
    clear: bool = typer.Option(False, "--clear", help="Clear the selected project"),
) -> None:
    """Select the project whose devlogs and logged time are tracked."""
    if clear == (project_id is not None):
        raise AppError("Pass either a project ID or --clear", exit_code=ERROR_INVALID_ARGS)

    service = build_refresh_service(get_config_service())
    service.set_selected_project(None if clear else project_id)
    if clear:
        format_success("Selected project cleared")
    else:
        format_success(f"Project {project_id} selected")
