"""Flavortown REST API client and endpoint wrappers."""

from .client import FlavortownClient, normalize_authorization
from .errors import (
    APIConnectionError,
    APIDecodeError,
    APIStatusError,
    FlavortownAPIError,
    Section,
)
from .projects import ProjectsAPI
from .store import StoreAPI
from .users import UsersAPI

__all__ = [
    "FlavortownClient",
    "normalize_authorization",
    "ProjectsAPI",
    "StoreAPI",
    "UsersAPI",
    "Section",
    "FlavortownAPIError",
    "APIStatusError",
    "APIConnectionError",
    "APIDecodeError",
]
