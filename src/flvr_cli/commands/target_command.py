"""Target item commands."""

from __future__ import annotations

import typer

from flvr_cli.services.api import Section
from flvr_cli.services.config_service import get_config_service
from flvr_cli.services.refresh_service import build_refresh_service
from flvr_cli.utils.ui.formatters import format_info, format_store_table, format_success

from .common import raise_for_section, refreshed_service
from .decorators import command_wrapper

app = typer.Typer(help="Track store items you are saving cookies for")


@app.command("toggle")
@command_wrapper
def toggle_target(
    item_id: int = typer.Argument(..., help="Store item ID"),
) -> None:
    """Add a store item to your targets, or remove it if already targeted."""
    service = build_refresh_service(get_config_service())
    if service.toggle_target_item(item_id):
        format_success(f"Item {item_id} added to targets")
    else:
        format_success(f"Item {item_id} removed from targets")


@app.command("list")
@command_wrapper
async def list_targets() -> None:
    """Show targeted store items and the cookies still needed."""
    service = await refreshed_service(get_config_service())
    raise_for_section(service, Section.STORE)

    targets = service.target_item_ids
    items = [item for item in service.sorted_store_items if item.id in targets]
    format_store_table(items, targets)

    format_info(
        f"Total {service.total_target_cost} cookies, "
        f"{service.remaining_cookies_needed} still needed"
    )
    hours = service.estimated_hours_to_target
    if hours is not None:
        format_info(f"About {hours:.1f}h of work at {service.cookies_per_hour} cookies/h")


@app.command("clear")
@command_wrapper
def clear_targets(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Remove every target."""
    if not yes and not typer.confirm("Clear all targets?"):
        raise typer.Exit(0)
    build_refresh_service(get_config_service()).clear_targets()
    format_success("Targets cleared")
