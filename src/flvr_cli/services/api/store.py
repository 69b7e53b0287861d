"""Store API endpoints."""

from __future__ import annotations

from flvr_cli.models.core import StoreItem

from .client import FlavortownClient
from .decoding import decode_list, wrapped_then_bare
from .errors import Section

# The store payload has been published under all three keys
STORE_SHAPES = wrapped_then_bare("items", "store_items", "store")


class StoreAPI:
    """Store API client."""

    def __init__(self, client: FlavortownClient):
        self.client = client

    async def list_items(self) -> list[StoreItem]:
        """List store items."""
        response = await self.client.get("/store", section=Section.STORE)
        return decode_list(response.content, StoreItem, STORE_SHAPES, Section.STORE)
