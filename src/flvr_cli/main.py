"""Main entry point for Flvr CLI."""

import typer

from flvr_cli import __version__
from flvr_cli.commands import (
    config_command,
    select_command,
    target_command,
    view_command,
    watch_command,
)
from flvr_cli.utils.ui.console import get_console

app = typer.Typer(
    name="flvr",
    help="Keep an eye on your Flavortown projects, devlogs and cookie targets",
    no_args_is_help=True,
)

console = get_console()

# Top-level commands
app.add_typer(view_command.app)
app.add_typer(select_command.app)
app.add_typer(watch_command.app)

# Command groups
app.add_typer(target_command.app, name="target", help="Cookie target tracking")
app.add_typer(config_command.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Flvr CLI[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
