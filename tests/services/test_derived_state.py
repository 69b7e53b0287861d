"""Tests for the pure derived-state helpers."""

import pytest

from flvr_cli.models.core import Devlog, Project, StoreItem, User
from flvr_cli.services import derived_state as ds


def _item(item_id, cost):
    return StoreItem.model_validate({"id": item_id, "ticket_cost": cost})


class TestParseUserId:
    @pytest.mark.parametrize("raw, expected", [("7", 7), (" 42 ", 42), ("-3", -3)])
    def test_integers(self, raw, expected):
        assert ds.parse_user_id(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "ada", "7.5", "U123", "١٢"])
    def test_not_integers(self, raw):
        assert ds.parse_user_id(raw) is None


class TestSorting:
    def test_projects_by_title_missing_first(self):
        projects = [
            Project(id=1, title="beta"),
            Project(id=2),
            Project(id=3, title="Alpha"),
            Project(id=4, title="alpha"),
        ]
        assert [p.id for p in ds.sorted_projects(projects)] == [2, 3, 4, 1]

    def test_users_by_display_name(self):
        users = [User(id=1, display_name="Zed"), User(id=2), User(id=3, display_name="Ada")]
        assert [u.id for u in ds.sorted_users(users)] == [2, 3, 1]

    def test_store_items_priced_and_ascending(self):
        items = [
            _item(1, 50),
            _item(2, 0),
            _item(3, 5),
            StoreItem(id=4),
            _item(5, {"base_cost": None}),
            _item(6, 5),
            _item(7, -1),
            _item(8, 20),
        ]
        result = ds.sorted_store_items(items)

        assert [i.id for i in result] == [3, 6, 8, 1]
        costs = [i.base_cost for i in result]
        assert costs == sorted(costs)
        assert all(cost > 0 for cost in costs)

    def test_sorting_does_not_mutate_input(self):
        items = [_item(1, 9), _item(2, 1)]
        ds.sorted_store_items(items)
        assert [i.id for i in items] == [1, 2]


class TestCurrentUser:
    users = [User(id=1, project_ids=[10, 11]), User(id=2)]

    def test_found(self):
        assert ds.find_current_user(self.users, "1").id == 1

    def test_not_found(self):
        assert ds.find_current_user(self.users, "3") is None

    def test_unparsable(self):
        assert ds.find_current_user(self.users, "one") is None

    def test_user_projects(self):
        projects = [Project(id=10), Project(id=12), Project(id=11)]
        owned = ds.user_projects(projects, self.users[0])
        assert [p.id for p in owned] == [10, 11]

    def test_user_projects_without_user(self):
        assert ds.user_projects([Project(id=10)], None) == []
        assert ds.user_projects([Project(id=10)], self.users[1]) == []


class TestTargets:
    items = [_item(1, 50), _item(2, 20), StoreItem(id=3), _item(4, 7)]

    def test_total_cost_of_targets_only(self):
        assert ds.total_target_cost(self.items, {1, 4}) == 57

    def test_unpriced_and_unknown_targets_count_zero(self):
        assert ds.total_target_cost(self.items, {3, 99}) == 0

    def test_empty_target_set(self):
        assert ds.total_target_cost(self.items, set()) == 0

    @pytest.mark.parametrize(
        "cookies, expected", [(None, 70), (0, 70), (30, 40), (70, 0), (10_000, 0)]
    )
    def test_remaining_never_negative(self, cookies, expected):
        user = User(id=1, cookies=cookies)
        assert ds.remaining_cookies_needed(70, user) == expected

    def test_remaining_without_user(self):
        assert ds.remaining_cookies_needed(70, None) == 70

    def test_estimated_hours(self):
        assert ds.estimated_hours_to_target(45, 10) == pytest.approx(4.5)

    @pytest.mark.parametrize("remaining, rate", [(0, 10), (45, 0), (45, -5)])
    def test_estimated_hours_undefined(self, remaining, rate):
        assert ds.estimated_hours_to_target(remaining, rate) is None


class TestLoggedTime:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, None), (-5, None), (30, "0m"), (59 * 60, "59m"), (3600, "1h 0m"), (3 * 3600 + 125, "3h 2m")],
    )
    def test_format(self, seconds, expected):
        assert ds.format_logged_time(seconds) == expected

    def test_text_for_project(self):
        devlogs = {5: [Devlog(id=1, duration_seconds=1800), Devlog(id=2), Devlog(id=3, duration_seconds=600)]}
        assert ds.logged_time_text(devlogs, 5) == "40m"
        assert ds.total_hours_logged(devlogs, 5) == pytest.approx(40 / 60)

    def test_absent_when_nothing_cached(self):
        assert ds.logged_time_text({}, 5) is None
        assert ds.logged_time_text({5: []}, 5) is None
        assert ds.logged_time_text({5: [Devlog(id=1)]}, None) is None
        assert ds.total_hours_logged({}, 5) == 0.0
