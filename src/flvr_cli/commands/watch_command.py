"""Command 'watch' of flvr-cli"""

from __future__ import annotations

import asyncio

import typer

from flvr_cli.services.config_service import get_config_service
from flvr_cli.services.refresh_service import RefreshService, build_refresh_service
from flvr_cli.utils.ui.console import get_console
from flvr_cli.utils.ui.formatters import format_status

from .decorators import command_wrapper

app = typer.Typer()
console = get_console()


async def watch(
    service: RefreshService,
    interval: float | None = None,
    cycles: int | None = None,
) -> None:
    """Poll until interrupted (or until *cycles* cycles have completed)."""
    done = asyncio.Event()
    completed = 0

    def render(svc: RefreshService) -> None:
        nonlocal completed
        completed += 1
        console.rule(f"refresh #{completed}")
        format_status(svc)
        if cycles is not None and completed >= cycles:
            done.set()

    service.add_listener(render)
    service.start_polling(interval)
    try:
        await done.wait()
    finally:
        service.remove_listener(render)
        await service.aclose()


@app.command("watch")
@command_wrapper
def watch_command(
    interval: float | None = typer.Option(
        None, "--interval", "-i", min=1, help="Seconds between refreshes"
    ),
    cycles: int | None = typer.Option(
        None, "--cycles", "-n", min=1, help="Stop after this many refreshes"
    ),
) -> None:
    """Keep refreshing and re-render the status after every cycle."""
    service = build_refresh_service(get_config_service())

    try:
        asyncio.run(watch(service, interval, cycles))
    except KeyboardInterrupt:
        console.print("[dim]Stopped watching[/dim]")
