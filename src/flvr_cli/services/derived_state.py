"""Derived views over the cached Flavortown data.

Pure functions: they read the cached entities and return new values, never
mutating their inputs. Inputs are small, so nothing here is memoized.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Iterable, Mapping, Sequence

from flvr_cli.models.core import Devlog, Project, StoreItem, User

_USER_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_user_id(user_id: str) -> int | None:
    """Parse a configured user id, returning None when it is not an integer."""
    value = user_id.strip()
    if not _USER_ID_PATTERN.fullmatch(value):
        return None
    return int(value)


def sorted_projects(projects: Iterable[Project]) -> list[Project]:
    """Projects by title; untitled projects first."""
    return sorted(projects, key=lambda p: p.title or "")


def sorted_store_items(items: Iterable[StoreItem]) -> list[StoreItem]:
    """Priced store items, cheapest first. Free or unpriced items are dropped."""
    priced = [item for item in items if (item.base_cost or 0) > 0]
    return sorted(priced, key=lambda item: item.base_cost or 0)


def sorted_users(users: Iterable[User]) -> list[User]:
    """Users by display name; unnamed users first."""
    return sorted(users, key=lambda u: u.display_name or "")


def find_current_user(users: Iterable[User], user_id: str) -> User | None:
    """Resolve the configured user id against the cached users."""
    wanted = parse_user_id(user_id)
    if wanted is None:
        return None
    return next((user for user in users if user.id == wanted), None)


def user_projects(projects: Iterable[Project], user: User | None) -> list[Project]:
    """Cached projects owned by *user*."""
    if user is None or not user.project_ids:
        return []
    owned = set(user.project_ids)
    return [project for project in projects if project.id in owned]


def total_target_cost(items: Iterable[StoreItem], target_ids: Collection[int]) -> int:
    """Sum of base costs over the targeted store items."""
    return sum(
        item.base_cost or 0 for item in items if item.id in target_ids
    )


def remaining_cookies_needed(total_cost: int, user: User | None) -> int:
    """Cookies still missing to afford the target, never negative."""
    cookies = (user.cookies if user is not None else None) or 0
    return max(0, total_cost - cookies)


def estimated_hours_to_target(remaining: int, cookies_per_hour: int) -> float | None:
    """Hours of work left at *cookies_per_hour*, or None if not meaningful."""
    if cookies_per_hour <= 0 or remaining <= 0:
        return None
    return remaining / cookies_per_hour


def total_logged_seconds(devlogs: Sequence[Devlog]) -> int:
    return sum(log.duration_seconds or 0 for log in devlogs)


def format_logged_time(total_seconds: int) -> str | None:
    """Render seconds as ``"2h 5m"`` or ``"5m"``; None when nothing is logged."""
    if total_seconds <= 0:
        return None
    hours, remainder = divmod(total_seconds, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def logged_time_text(
    devlogs: Mapping[int, Sequence[Devlog]], project_id: int | None
) -> str | None:
    """Total logged time of a project's cached devlogs, formatted."""
    if project_id is None or project_id not in devlogs:
        return None
    return format_logged_time(total_logged_seconds(devlogs[project_id]))


def total_hours_logged(
    devlogs: Mapping[int, Sequence[Devlog]], project_id: int | None
) -> float:
    if project_id is None or project_id not in devlogs:
        return 0.0
    return total_logged_seconds(devlogs[project_id]) / 3600.0
