"""Users API endpoints."""

from __future__ import annotations

from flvr_cli.models.core import User

from .client import FlavortownClient
from .decoding import decode_list, decode_one, wrapped_then_bare
from .errors import Section

USER_LIST_SHAPES = wrapped_then_bare("users")
USER_SHAPES = wrapped_then_bare("user")


class UsersAPI:
    """Users API client."""

    def __init__(self, client: FlavortownClient):
        self.client = client

    async def list_users(self) -> list[User]:
        """List users."""
        response = await self.client.get("/users", section=Section.USERS)
        return decode_list(response.content, User, USER_LIST_SHAPES, Section.USERS)

    async def get_user(self, user_id: int) -> User:
        """Get a specific user by ID."""
        response = await self.client.get(f"/users/{user_id}", section=Section.USERS)
        return decode_one(response.content, User, USER_SHAPES, Section.USERS)
