"""Configuration management commands."""

from __future__ import annotations

import json
from typing import Any

import typer
from pydantic import BaseModel, ValidationError

from flvr_cli.services.config_service import get_config_service
from flvr_cli.services.refresh_service import build_refresh_service
from flvr_cli.utils.exit_codes import ERROR_INVALID_ARGS, ERROR_NOT_FOUND
from flvr_cli.utils.ui.console import get_console
from flvr_cli.utils.ui.formatters import format_output, format_success

from .common import OutputOption
from .decorators import AppError, command_wrapper

app = typer.Typer(help="Configuration management commands")
console = get_console()


def _parse_value(value: str) -> Any:
    """Decode JSON lists, objects and null; leave scalars for pydantic to coerce."""
    text = value.strip()
    if text == "null" or text.startswith(("[", "{")):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return value
    return value


def _print_dict(data: dict) -> None:
    console.print_json(json.dumps(data, default=str))


@app.command("view")
@command_wrapper
def view_config(output: str = OutputOption) -> None:
    """View current configuration."""
    config_service = get_config_service()
    format_output(config_service.config.model_dump(mode="json"), output, _print_dict)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., polling.interval)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise AppError(f"Configuration key '{key}' not set", exit_code=ERROR_NOT_FOUND)
    if isinstance(value, BaseModel):
        _print_dict(value.model_dump(mode="json"))
    else:
        console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value = _parse_value(value)
    try:
        get_config_service().set(key, parsed_value)
    except KeyError as e:
        raise AppError(f"Unknown configuration key '{key}'", exit_code=ERROR_NOT_FOUND) from e
    except ValidationError as e:
        raise AppError(
            f"Invalid value for '{key}': {e.errors()[0]['msg']}",
            exit_code=ERROR_INVALID_ARGS,
        ) from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: str | None = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            raise typer.Exit(0)

    try:
        get_config_service().reset_config(key)
    except KeyError as e:
        raise AppError(f"Unknown configuration key '{key}'", exit_code=ERROR_NOT_FOUND) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")


@app.command("set-key")
@command_wrapper
def set_api_key(
    api_key: str = typer.Option(
        ..., "--key", prompt="Flavortown API key", hide_input=True, help="API key"
    ),
) -> None:
    """Store the Flavortown API key."""
    build_refresh_service(get_config_service()).set_api_key(api_key)
    format_success("API key saved")


@app.command("clear-key")
@command_wrapper
def clear_api_key() -> None:
    """Forget the stored API key."""
    get_config_service().clear_credentials()
    format_success("API key removed")


@app.command("set-user")
@command_wrapper
def set_user(
    user_id: str = typer.Argument(
        "", help="Flavortown user ID (leave empty to browse all users)"
    ),
) -> None:
    """Target a single user, or browse everyone with an empty ID."""
    build_refresh_service(get_config_service()).set_user_id(user_id)
    if user_id.strip():
        format_success(f"Tracking user {user_id.strip()}")
    else:
        format_success("Browsing all users")


@app.command("set-rate")
@command_wrapper
def set_rate(
    cookies_per_hour: int = typer.Argument(..., help="Cookies earned per hour of work"),
) -> None:
    """Set the cookies-per-hour rate used for time estimates."""
    build_refresh_service(get_config_service()).set_cookies_per_hour(cookies_per_hour)
    format_success(f"Rate set to {cookies_per_hour} cookies/h")
