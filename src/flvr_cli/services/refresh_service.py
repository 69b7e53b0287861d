"""Refresh service: the in-memory cache of Flavortown data and its upkeep.

One :class:`RefreshService` is built at startup and handed to whatever
presents the data. It owns the cached collections, runs refresh cycles,
debounces credential changes and drives the periodic poller.

All cache writes happen on the event loop thread; network I/O runs
concurrently and results are applied as each request lands. Cycles are not
mutually exclusive: when two overlap, whichever write lands last wins.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TypeVar

import httpx

from flvr_cli.models.core import Devlog, Project, StoreItem, User
from flvr_cli.services import derived_state
from flvr_cli.services.api import (
    FlavortownAPIError,
    FlavortownClient,
    ProjectsAPI,
    Section,
    StoreAPI,
    UsersAPI,
)
from flvr_cli.services.config_service import ConfigService
from flvr_cli.utils.logger import get_logger
from flvr_cli.utils.timer import CancellableTimer, PeriodicTimer, TaskSet

T = TypeVar("T")

ChangeListener = Callable[["RefreshService"], None]


class RefreshService:
    """Cached Flavortown state plus the actions that keep it fresh."""

    def __init__(self, config_service: ConfigService, client: FlavortownClient):
        self.config_service = config_service
        self.client = client
        self.projects_api = ProjectsAPI(client)
        self.store_api = StoreAPI(client)
        self.users_api = UsersAPI(client)

        self.projects: list[Project] = []
        self.users: list[User] = []
        self.store_items: list[StoreItem] = []
        self.devlogs: dict[int, list[Devlog]] = {}
        self.section_errors: dict[Section, FlavortownAPIError] = {}
        self.last_updated: datetime | None = None

        self._in_flight = 0
        self._listeners: list[ChangeListener] = []
        self._background = TaskSet()

        polling = config_service.config.polling
        self._debounce = CancellableTimer(polling.debounce, self.refresh)
        self._poller = PeriodicTimer(polling.interval, self.refresh)

    # ------------------------------------------------------------------
    # Persisted preferences
    # ------------------------------------------------------------------

    @property
    def api_key(self) -> str:
        return self.config_service.load_api_key()

    @property
    def user_id(self) -> str:
        return self.config_service.preferences.user_id

    @property
    def selected_project_id(self) -> int | None:
        return self.config_service.preferences.selected_project_id

    @property
    def cookies_per_hour(self) -> int:
        return self.config_service.preferences.cookies_per_hour

    @property
    def target_item_ids(self) -> set[int]:
        return set(self.config_service.preferences.target_item_ids)

    @property
    def is_fetching(self) -> bool:
        return self._in_flight > 0

    @property
    def error_messages(self) -> dict[Section, str]:
        return {section: str(error) for section, error in self.section_errors.items()}

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def set_api_key(self, api_key: str) -> None:
        """Store a new API key and schedule a debounced refresh."""
        self.config_service.save_api_key(api_key.strip())
        self.trigger_refresh()

    def set_user_id(self, user_id: str) -> None:
        """Target a user (or browse mode for a blank id) and schedule a refresh."""
        self.config_service.update_preferences(user_id=user_id.strip())
        self.trigger_refresh()

    def set_selected_project(self, project_id: int | None) -> None:
        """Focus a project (or clear the focus) and schedule a refresh."""
        self.config_service.update_preferences(selected_project_id=project_id)
        self.trigger_refresh()

    def set_cookies_per_hour(self, rate: int) -> None:
        self.config_service.update_preferences(cookies_per_hour=rate)

    def toggle_target_item(self, item_id: int) -> bool:
        """Add or remove a store item from the target set.

        Returns:
            True if the item is targeted after the call.
        """
        targets = self.target_item_ids
        if item_id in targets:
            targets.remove(item_id)
        else:
            targets.add(item_id)
        self.config_service.update_preferences(target_item_ids=sorted(targets))
        return item_id in targets

    def clear_targets(self) -> None:
        self.config_service.update_preferences(target_item_ids=[])

    def trigger_refresh(self) -> None:
        """Schedule a refresh after the quiet period, restarting any countdown.

        Outside a running event loop there is nothing to schedule on; the next
        cycle started by the host picks up the new settings.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        restarted = self._debounce.pending
        self._debounce.schedule()
        get_logger().debug(
            "refresh %s in %.3fs", "rescheduled" if restarted else "scheduled", self._debounce.delay
        )

    def cancel_pending_refresh(self) -> bool:
        return self._debounce.cancel()

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback run after every completed refresh cycle."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    @property
    def polling(self) -> bool:
        return self._poller.running

    def start_polling(self, interval: float | None = None) -> None:
        """Run one cycle now, then one every polling interval."""
        if interval is not None:
            self._poller.interval = interval
        self._poller.start()
        self._background.spawn(self.refresh())
        get_logger().info("polling started every %.0fs", self._poller.interval)

    def stop_polling(self) -> None:
        """Stop the poller. A cycle already in flight is left to finish."""
        if self._poller.running:
            get_logger().info("polling stopped")
        self._poller.stop()

    async def wait_idle(self) -> None:
        """Wait for every cycle started in the background to finish."""
        await self._background.wait()
        await self._debounce.join()
        await self._poller.join()

    async def aclose(self) -> None:
        """Stop timers, let in-flight cycles land, then close the client."""
        self.stop_polling()
        self._debounce.cancel()
        await self.wait_idle()
        await self.client.close()

    # ------------------------------------------------------------------
    # Refresh cycle
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Run one refresh cycle.

        Store items and the user/project branch are fetched concurrently; the
        selected project's devlogs are fetched once both are done. Errors are
        recorded per section and never abort the cycle.
        """
        logger = get_logger()
        start = time.monotonic()
        self._in_flight += 1
        self.section_errors.clear()
        logger.info("refresh cycle started")

        try:
            user_id = derived_state.parse_user_id(self.user_id)
            if user_id is not None:
                branch = self._refresh_user_scope(user_id)
            else:
                branch = self._refresh_browse_scope()

            await asyncio.gather(self._refresh_store(), branch)

            selected = self.selected_project_id
            if selected is not None:
                await self.fetch_devlogs(selected)
        finally:
            self._in_flight -= 1

        self.last_updated = datetime.now(UTC)
        logger.info(
            "refresh cycle finished (%.3fs, %d section error(s))",
            time.monotonic() - start,
            len(self.section_errors),
        )
        self._notify()

    async def fetch_devlogs(self, project_id: int) -> None:
        """Fetch and cache the devlogs of one project."""
        devlogs = await self._capture(self.projects_api.list_devlogs(project_id))
        if devlogs is not None:
            self.devlogs[project_id] = devlogs
            self.section_errors.pop(Section.DEVLOGS, None)

    async def _capture(self, fetch: Awaitable[T]) -> T | None:
        """Await a fetch, turning API errors into a section error."""
        try:
            return await fetch
        except FlavortownAPIError as e:
            get_logger().warning("%s section error: %s", e.section.value, e)
            self.section_errors[e.section] = e
            return None

    async def _refresh_store(self) -> None:
        items = await self._capture(self.store_api.list_items())
        if items is not None:
            self.store_items = items

    async def _refresh_browse_scope(self) -> None:
        async def load_projects() -> None:
            projects = await self._capture(self.projects_api.list_projects())
            if projects is not None:
                self.projects = projects

        async def load_users() -> None:
            users = await self._capture(self.users_api.list_users())
            if users is not None:
                self.users = users

        await asyncio.gather(load_projects(), load_users())

    async def _refresh_user_scope(self, user_id: int) -> None:
        user = await self._capture(self.users_api.get_user(user_id))
        if user is None:
            return
        self.users = [user]

        owned = list(dict.fromkeys(user.project_ids or []))
        owned_set = set(owned)
        self.projects = [p for p in self.projects if p.id in owned_set]

        async def load_project(project_id: int) -> None:
            project = await self._capture(self.projects_api.get_project(project_id))
            if project is not None:
                self._upsert_project(project)

        await asyncio.gather(*(load_project(pid) for pid in owned))

    def _upsert_project(self, project: Project) -> None:
        for index, cached in enumerate(self.projects):
            if cached.id == project.id:
                self.projects[index] = project
                return
        self.projects.append(project)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                get_logger().exception("refresh listener %r failed", listener)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def sorted_projects(self) -> list[Project]:
        return derived_state.sorted_projects(self.projects)

    @property
    def sorted_store_items(self) -> list[StoreItem]:
        return derived_state.sorted_store_items(self.store_items)

    @property
    def sorted_users(self) -> list[User]:
        return derived_state.sorted_users(self.users)

    @property
    def current_user(self) -> User | None:
        return derived_state.find_current_user(self.users, self.user_id)

    @property
    def user_projects(self) -> list[Project]:
        return derived_state.user_projects(self.projects, self.current_user)

    @property
    def total_target_cost(self) -> int:
        return derived_state.total_target_cost(self.store_items, self.target_item_ids)

    @property
    def remaining_cookies_needed(self) -> int:
        return derived_state.remaining_cookies_needed(
            self.total_target_cost, self.current_user
        )

    @property
    def estimated_hours_to_target(self) -> float | None:
        return derived_state.estimated_hours_to_target(
            self.remaining_cookies_needed, self.cookies_per_hour
        )

    @property
    def total_logged_time_text(self) -> str | None:
        return derived_state.logged_time_text(self.devlogs, self.selected_project_id)

    @property
    def total_hours_logged(self) -> float:
        return derived_state.total_hours_logged(self.devlogs, self.selected_project_id)


def build_refresh_service(
    config_service: ConfigService,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RefreshService:
    """Wire a client and refresh service to *config_service*."""
    client = FlavortownClient(
        config_service.config.api,
        config_service.load_api_key,
        transport=transport,
    )
    return RefreshService(config_service, client)
