"""Services module for Flvr CLI - caching, refresh and configuration."""

from .config_service import ConfigService, get_config_service
from .refresh_service import RefreshService, build_refresh_service

__all__ = [
    "ConfigService",
    "get_config_service",
    "RefreshService",
    "build_refresh_service",
]
