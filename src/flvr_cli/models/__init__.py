"""Flvr CLI domain models.

This package contains Pydantic models that represent the entities served by
the Flavortown API, plus the configuration models persisted on disk.
"""

from .config_models import APIConfig, AppConfig, PollingConfig, Preferences
from .core import Devlog, Project, StoreItem, TicketCost, User
from .flexible import FlexibleNumber, MalformedNumber, parse_flexible_int

__all__ = [
    # Entity models
    "Project",
    "Devlog",
    "StoreItem",
    "TicketCost",
    "User",
    # Flexible decoding
    "FlexibleNumber",
    "MalformedNumber",
    "parse_flexible_int",
    # Config models
    "APIConfig",
    "AppConfig",
    "PollingConfig",
    "Preferences",
]
