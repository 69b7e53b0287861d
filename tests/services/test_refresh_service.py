"""Tests for the refresh service: cycles, debounce, polling and actions."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from flvr_cli.services.api import APIConnectionError, Section


def _browse_backend(backend):
    backend.add("/projects", {"projects": [{"id": 2, "title": "Zeta"}, {"id": 1, "title": "Alpha"}]})
    backend.add("/users", {"users": [{"id": 7, "display_name": "Ada", "cookies": 30}]})
    backend.add("/store", {"items": [{"id": 1, "ticket_cost": 50}, {"id": 2, "ticket_cost": 20}]})


class TestRefreshCycle:
    @pytest.mark.asyncio
    async def test_browse_mode_populates_everything(self, service, backend):
        _browse_backend(backend)

        await service.refresh()

        assert sorted(backend.paths) == ["/projects", "/store", "/users"]
        assert [p.title for p in service.sorted_projects] == ["Alpha", "Zeta"]
        assert [u.id for u in service.users] == [7]
        assert [i.id for i in service.sorted_store_items] == [2, 1]
        assert service.section_errors == {}
        assert service.last_updated is not None
        assert not service.is_fetching

    @pytest.mark.asyncio
    async def test_store_failure_leaves_projects_populated(self, service, backend):
        backend.add("/projects", {"projects": [{"id": 1, "title": "Oven"}]})
        backend.add("/users", [])
        backend.add("/store", "invalid token", status=401)

        await service.refresh()

        assert [p.id for p in service.projects] == [1]
        assert service.store_items == []
        message = service.error_messages[Section.STORE]
        assert "401" in message
        assert "invalid token" in message
        assert Section.PROJECTS not in service.section_errors

    @pytest.mark.asyncio
    async def test_failed_fetch_keeps_previous_cache(self, service, backend):
        _browse_backend(backend)
        await service.refresh()

        backend.add("/store", "down for maintenance", status=503)
        await service.refresh()

        assert [i.id for i in service.store_items] == [1, 2]
        assert "503" in service.error_messages[Section.STORE]

    @pytest.mark.asyncio
    async def test_connection_error_is_section_scoped(self, service, backend):
        _browse_backend(backend)
        backend.add("/users", httpx.ConnectError)

        await service.refresh()

        assert isinstance(service.section_errors[Section.USERS], APIConnectionError)
        assert service.error_messages[Section.USERS].startswith("Connection Error")
        assert len(service.projects) == 2
        assert len(service.store_items) == 2

    @pytest.mark.asyncio
    async def test_decode_error_includes_preview(self, service, backend):
        _browse_backend(backend)
        backend.add("/projects", "<html>teapot</html>")

        await service.refresh()

        message = service.error_messages[Section.PROJECTS]
        assert message.startswith("Decode Error")
        assert "<html>teapot</html>" in message

    @pytest.mark.asyncio
    async def test_errors_are_cleared_by_next_cycle(self, service, backend):
        _browse_backend(backend)
        backend.add("/store", "nope", status=500)
        await service.refresh()
        assert Section.STORE in service.section_errors

        backend.add("/store", {"items": []})
        await service.refresh()
        assert service.section_errors == {}

    @pytest.mark.asyncio
    async def test_is_fetching_while_cycle_in_flight(self, service, backend):
        _browse_backend(backend)
        backend.delay = 0.05

        task = asyncio.create_task(service.refresh())
        await asyncio.sleep(0.01)
        assert service.is_fetching
        await task
        assert not service.is_fetching

    @pytest.mark.asyncio
    async def test_store_and_branch_run_concurrently(self, service, backend):
        _browse_backend(backend)
        backend.delay = 0.02

        await service.refresh()

        assert backend.max_in_flight == 3


class TestUserScope:
    @pytest.mark.asyncio
    async def test_fetches_each_owned_project_concurrently(self, service, backend, tmp_config):
        tmp_config.update_preferences(user_id="7")
        backend.add("/store", {"items": []})
        backend.add("/users/7", {"id": 7, "project_ids": [1, 2], "cookies": 5})
        backend.add("/projects/1", {"id": 1, "title": "Fresh"})
        backend.add("/projects/2", {"id": 2, "title": "Other"})
        backend.delay = 0.02

        # Project 1 already cached, project 99 not owned by the user
        from flvr_cli.models.core import Project

        service.projects = [Project(id=1, title="Stale"), Project(id=99, title="Gone")]

        await service.refresh()

        assert backend.count("/projects/1") == 1
        assert backend.count("/projects/2") == 1
        assert "/projects" not in backend.paths
        assert "/users" not in backend.paths
        # store + two projects overlap
        assert backend.max_in_flight >= 2
        assert sorted(p.id for p in service.projects) == [1, 2]
        assert {p.id: p.title for p in service.projects}[1] == "Fresh"
        assert service.current_user is not None
        assert sorted(p.id for p in service.user_projects) == [1, 2]

    @pytest.mark.asyncio
    async def test_duplicate_owned_ids_fetched_once(self, service, backend, tmp_config):
        tmp_config.update_preferences(user_id=" 7 ")
        backend.add("/store", [])
        backend.add("/users/7", {"id": 7, "project_ids": [3, "3"]})
        backend.add("/projects/3", {"id": 3})

        await service.refresh()

        assert backend.count("/projects/3") == 1
        assert [p.id for p in service.projects] == [3]

    @pytest.mark.asyncio
    async def test_user_failure_skips_project_fetches(self, service, backend, tmp_config):
        tmp_config.update_preferences(user_id="7")
        backend.add("/store", [])
        backend.add("/users/7", "no such user", status=404)

        await service.refresh()

        assert "404" in service.error_messages[Section.USERS]
        assert not any(path.startswith("/projects") for path in backend.paths)

    @pytest.mark.asyncio
    async def test_non_numeric_user_id_uses_browse_mode(self, service, backend, tmp_config):
        tmp_config.update_preferences(user_id="ada")
        _browse_backend(backend)

        await service.refresh()

        assert "/projects" in backend.paths
        assert service.current_user is None


class TestDevlogs:
    @pytest.mark.asyncio
    async def test_selected_project_devlogs_fetched_after_branch(self, service, backend, tmp_config):
        tmp_config.update_preferences(selected_project_id=1)
        _browse_backend(backend)
        backend.add(
            "/projects/1/devlogs",
            {"devlogs": [{"id": 1, "duration_seconds": 3600}, {"id": 2, "duration_seconds": 900}]},
        )

        await service.refresh()

        assert backend.paths[-1] == "/projects/1/devlogs"
        assert len(service.devlogs[1]) == 2
        assert service.total_logged_time_text == "1h 15m"
        assert service.total_hours_logged == pytest.approx(1.25)

    @pytest.mark.asyncio
    async def test_devlogs_persist_across_unrelated_refreshes(self, service, backend):
        _browse_backend(backend)
        backend.add("/projects/2/devlogs", [{"id": 5, "duration_seconds": 120}])

        await service.fetch_devlogs(2)
        await service.refresh()

        assert [d.id for d in service.devlogs[2]] == [5]
        assert backend.count("/projects/2/devlogs") == 1

    @pytest.mark.asyncio
    async def test_devlog_error_tagged(self, service, backend):
        backend.add("/projects/8/devlogs", "gone", status=410)

        await service.fetch_devlogs(8)

        assert "410" in service.error_messages[Section.DEVLOGS]
        assert 8 not in service.devlogs

    @pytest.mark.asyncio
    async def test_successful_refetch_clears_devlog_error(self, service, backend):
        backend.add("/projects/8/devlogs", "gone", status=500)
        await service.fetch_devlogs(8)
        assert Section.DEVLOGS in service.section_errors

        backend.add("/projects/8/devlogs", [{"id": 1, "duration_seconds": 60}])
        await service.fetch_devlogs(8)

        assert len(service.devlogs[8]) == 1
        assert Section.DEVLOGS not in service.section_errors


class TestDebounce:
    @pytest.mark.asyncio
    async def test_burst_of_key_changes_runs_one_cycle_with_final_key(self, service, backend):
        _browse_backend(backend)
        cycles = []
        service.add_listener(lambda svc: cycles.append(svc.last_updated))

        service.set_api_key("first")
        await asyncio.sleep(0.01)
        service.set_api_key("second")
        await asyncio.sleep(0.01)
        service.set_api_key("third")

        await asyncio.sleep(0.12)
        await service.wait_idle()

        assert len(cycles) == 1
        assert backend.count("/store") == 1
        assert {r.headers["Authorization"] for r in backend.requests} == {"Bearer third"}

    @pytest.mark.asyncio
    async def test_cancel_before_quiet_period_prevents_cycle(self, service, backend):
        _browse_backend(backend)

        service.set_user_id("42")
        assert service.cancel_pending_refresh() is True

        await asyncio.sleep(0.1)
        await service.wait_idle()

        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_new_trigger_does_not_cancel_in_flight_cycle(self, service, backend):
        _browse_backend(backend)
        backend.delay = 0.1
        cycles = []
        service.add_listener(lambda svc: cycles.append(1))

        service.trigger_refresh()
        await asyncio.sleep(0.08)  # first cycle fired and is waiting on the network
        service.trigger_refresh()

        await asyncio.sleep(0.1)
        await service.wait_idle()

        assert len(cycles) == 2

    @pytest.mark.asyncio
    async def test_selecting_project_triggers_refresh(self, service, backend, tmp_config):
        _browse_backend(backend)
        backend.add("/projects/2/devlogs", [])

        service.set_selected_project(2)
        assert tmp_config.preferences.selected_project_id == 2

        await asyncio.sleep(0.1)
        await service.wait_idle()

        assert "/projects/2/devlogs" in backend.paths

    def test_trigger_outside_event_loop_is_a_no_op(self, make_service, tmp_config):
        service = make_service()
        service.set_user_id("12")

        assert tmp_config.preferences.user_id == "12"
        assert service.cancel_pending_refresh() is False


class TestPolling:
    @pytest.mark.asyncio
    async def test_start_runs_immediately_then_on_interval(self, service, backend):
        _browse_backend(backend)

        service.start_polling(interval=0.05)
        assert service.polling
        await asyncio.sleep(0.01)
        await service._background.wait()
        assert backend.count("/store") == 1

        await asyncio.sleep(0.12)
        service.stop_polling()
        await service.wait_idle()
        ticks = backend.count("/store")
        assert ticks >= 2

        await asyncio.sleep(0.1)
        assert backend.count("/store") == ticks
        assert not service.polling

    @pytest.mark.asyncio
    async def test_stop_leaves_in_flight_cycle_running(self, service, backend):
        _browse_backend(backend)
        backend.delay = 0.05
        finished = []
        service.add_listener(lambda svc: finished.append(1))

        service.start_polling(interval=10)
        await asyncio.sleep(0.01)
        service.stop_polling()
        await service.wait_idle()

        assert finished == [1]
        assert len(service.store_items) == 2

    @pytest.mark.asyncio
    async def test_new_interval_keeps_tick_cycles_awaited(self, service, backend):
        _browse_backend(backend)

        service.start_polling(interval=0.02)
        await asyncio.sleep(0.005)
        backend.delay = 0.2
        await asyncio.sleep(0.03)
        assert service.is_fetching

        backend.delay = 0.0
        service.start_polling(interval=10)
        await service.aclose()

        assert not service.is_fetching
        assert backend.in_flight == 0


class TestActions:
    def test_toggle_target_twice_restores_set(self, make_service, tmp_config):
        service = make_service()
        original = service.target_item_ids

        assert service.toggle_target_item(5) is True
        assert 5 in service.target_item_ids
        assert service.toggle_target_item(5) is False
        assert service.target_item_ids == original

    def test_targets_persist_to_disk(self, make_service, tmp_config):
        service = make_service()
        service.toggle_target_item(9)
        service.toggle_target_item(3)

        stored = json.loads(tmp_config.config_path.read_text())
        assert stored["preferences"]["target_item_ids"] == [3, 9]

    def test_cookies_per_hour(self, make_service):
        service = make_service()
        assert service.cookies_per_hour == 10
        service.set_cookies_per_hour(25)
        assert service.cookies_per_hour == 25

    @pytest.mark.asyncio
    async def test_target_math(self, service, backend, tmp_config):
        tmp_config.update_preferences(user_id="7", target_item_ids=[1, 2], cookies_per_hour=10)
        backend.add("/store", {"items": [{"id": 1, "ticket_cost": 50}, {"id": 2, "ticket_cost": 20}, {"id": 3, "ticket_cost": 5}]})
        backend.add("/users/7", {"id": 7, "cookies": 30, "project_ids": []})

        await service.refresh()

        assert service.total_target_cost == 70
        assert service.remaining_cookies_needed == 40
        assert service.estimated_hours_to_target == pytest.approx(4.0)

    @pytest.mark.asyncio
    async def test_listener_failure_does_not_break_cycle(self, service, backend):
        _browse_backend(backend)
        calls = []

        def broken(svc):
            raise RuntimeError("render failed")

        service.add_listener(broken)
        service.add_listener(lambda svc: calls.append(1))

        await service.refresh()

        assert calls == [1]
