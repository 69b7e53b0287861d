"""Helpers shared by commands that talk to the API."""

from __future__ import annotations

import typer

from flvr_cli.services.api import APIStatusError, Section
from flvr_cli.services.config_service import ConfigService
from flvr_cli.services.refresh_service import RefreshService, build_refresh_service
from flvr_cli.utils.exit_codes import ERROR_AUTH_FAILURE, ERROR_NETWORK
from flvr_cli.utils.ui.formatters import OUTPUT_FORMATS

from .decorators import AppError


def validate_output(value: str) -> str:
    if value not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"must be one of: {', '.join(OUTPUT_FORMATS)}")
    return value


OutputOption = typer.Option(
    "table",
    "--output",
    "-o",
    help="Output format (table, json, yaml)",
    callback=validate_output,
)


async def refreshed_service(config_service: ConfigService) -> RefreshService:
    """Build a service, run one refresh cycle and release the connection."""
    service = build_refresh_service(config_service)
    try:
        await service.refresh()
    finally:
        await service.aclose()
    return service


def raise_for_section(service: RefreshService, section: Section) -> None:
    """Turn a recorded section error into an :class:`AppError`."""
    error = service.section_errors.get(section)
    if error is None:
        return
    if isinstance(error, APIStatusError) and error.is_auth_failure:
        raise AppError(str(error), exit_code=ERROR_AUTH_FAILURE)
    raise AppError(str(error), exit_code=ERROR_NETWORK)
