"""Flavortown entity models.

Every field except ``id`` is optional: the backend omits fields freely and
the client has to render whatever it gets.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, model_validator

from .flexible import FlexibleNumber, MalformedNumber, parse_flexible_int


class Project(BaseModel):
    """Project model.

    Attributes:
        id: Unique identifier for the project
        title: Project title
        description: Free-form description
        repo_url: Source repository URL
        demo_url: Live demo URL
        readme_url: Readme URL
        devlog_ids: Identifiers of the devlogs posted on this project
        created_at: Creation timestamp (kept as the raw string)
        updated_at: Last update timestamp (kept as the raw string)
    """

    model_config = ConfigDict(extra="ignore")

    id: FlexibleNumber
    title: str | None = None
    description: str | None = None
    repo_url: str | None = None
    demo_url: str | None = None
    readme_url: str | None = None
    devlog_ids: list[FlexibleNumber] | None = None
    created_at: str | None = None
    updated_at: str | None = None


class Devlog(BaseModel):
    """Devlog model, a time-logged progress entry on a project."""

    model_config = ConfigDict(extra="ignore")

    id: FlexibleNumber
    body: str | None = None
    comments_count: StrictInt | None = None
    duration_seconds: StrictInt | None = None
    likes_count: StrictInt | None = None
    scrapbook_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class TicketCost(BaseModel):
    """Cost of a store item, in cookies.

    The backend sends either a bare number or ``{"base_cost": ...}``.
    A malformed ``base_cost`` inside the object is treated as absent.
    """

    model_config = ConfigDict(extra="ignore")

    base_cost: FlexibleNumber | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_bare_number(cls, data: Any) -> Any:
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return {"base_cost": parse_flexible_int(data)}
        if isinstance(data, dict) and "base_cost" in data:
            try:
                base_cost = parse_flexible_int(data["base_cost"])
            except MalformedNumber:
                base_cost = None
            return {**data, "base_cost": base_cost}
        return data


class StoreItem(BaseModel):
    """Store item model.

    Attributes:
        id: Unique identifier for the item
        name: Display name
        description: Item description
        stock: Remaining stock, if the item is limited
        type: Backend type tag
        image_url: Image URL
        ticket_cost: Price of the item
    """

    model_config = ConfigDict(extra="ignore")

    id: FlexibleNumber
    name: str | None = None
    description: str | None = None
    stock: FlexibleNumber | None = None
    type: str | None = None
    image_url: str | None = None
    ticket_cost: TicketCost | None = None

    @property
    def base_cost(self) -> int | None:
        """Resolved base cost, or None when the item carries no price."""
        if self.ticket_cost is None:
            return None
        return self.ticket_cost.base_cost


class User(BaseModel):
    """User model."""

    model_config = ConfigDict(extra="ignore")

    id: FlexibleNumber
    slack_id: str | None = None
    display_name: str | None = None
    avatar: str | None = None
    project_ids: list[FlexibleNumber] | None = None
    cookies: StrictInt | None = None
