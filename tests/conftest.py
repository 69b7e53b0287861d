"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real filesystem and from
the real Flavortown API.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio

API_PREFIX = "/api/v1"


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolate_logger(tmp_path):
    """Send the application log into *tmp_path* and reset the singleton."""
    import flvr_cli.utils.logger as logger_mod

    def _reset():
        logger_mod._logger = None
        app_logger = logging.getLogger("flvr_cli")
        for handler in list(app_logger.handlers):
            handler.close()
            app_logger.removeHandler(handler)

    _reset()
    with patch("flvr_cli.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    _reset()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Debounce is shortened so timing tests stay fast.
    """
    from flvr_cli.services.config_service import ConfigService, get_config_service

    get_config_service.cache_clear()
    with patch(
        "flvr_cli.services.config_service.user_config_dir",
        return_value=str(tmp_path / "config"),
    ):
        svc = ConfigService()
        svc.load_config()
        svc.config.polling.debounce = 0.05
        yield svc
    get_config_service.cache_clear()


# ---------------------------------------------------------------------------
# Fake Flavortown backend
# ---------------------------------------------------------------------------


class FakeBackend:
    """In-memory stand-in for the Flavortown API, served through MockTransport.

    Routes map a path (without the ``/api/v1`` prefix) to a status and body.
    A body that is an ``httpx.RequestError`` subclass is raised instead.
    """

    def __init__(self):
        self.routes: dict[str, tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, path: str, body: Any, status: int = 200) -> None:
        self.routes[path] = (status, body)

    @property
    def paths(self) -> list[str]:
        return [request.url.path.removeprefix(API_PREFIX) for request in self.requests]

    def count(self, path: str) -> int:
        return self.paths.count(path)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            path = request.url.path.removeprefix(API_PREFIX)
            if path not in self.routes:
                return httpx.Response(404, text="Not Found")
            status, body = self.routes[path]
            if isinstance(body, type) and issubclass(body, httpx.RequestError):
                raise body("simulated failure", request=request)
            if isinstance(body, str):
                return httpx.Response(status, text=body)
            return httpx.Response(status, json=body)
        finally:
            self.in_flight -= 1

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def make_service(tmp_config, backend) -> Callable:
    """Factory building a RefreshService wired to the fake backend."""
    from flvr_cli.services.refresh_service import build_refresh_service

    def _make():
        return build_refresh_service(tmp_config, transport=backend.transport)

    return _make


@pytest_asyncio.fixture()
async def service(make_service):
    svc = make_service()
    yield svc
    await svc.aclose()


# ---------------------------------------------------------------------------
# CLI wiring
# ---------------------------------------------------------------------------

_COMMAND_MODULES = (
    "view_command",
    "target_command",
    "select_command",
    "config_command",
    "watch_command",
)


@pytest.fixture()
def cli_env(tmp_config, backend):
    """Point every command at *tmp_config* and the fake backend."""
    from contextlib import ExitStack
    from functools import partial

    from flvr_cli.services.refresh_service import build_refresh_service

    builder = partial(build_refresh_service, transport=backend.transport)
    with ExitStack() as stack:
        stack.enter_context(
            patch("flvr_cli.commands.common.build_refresh_service", builder)
        )
        for name in _COMMAND_MODULES:
            module = f"flvr_cli.commands.{name}"
            stack.enter_context(
                patch(f"{module}.get_config_service", return_value=tmp_config)
            )
            stack.enter_context(patch(f"{module}.build_refresh_service", builder))
        yield tmp_config
