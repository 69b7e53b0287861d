"""Configuration models persisted in config.json."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ENDPOINT = "https://flavortown.hackclub.com/api/v1"
DEFAULT_COOKIES_PER_HOUR = 10


class APIConfig(BaseModel):
    """API configuration."""

    endpoint: str = Field(default=DEFAULT_ENDPOINT)
    timeout: float = Field(default=15.0)
    client_header: str = Field(default="X-Flavortown-Ext-2532")
    client_header_value: str = Field(default="true")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("endpoint cannot be empty")
        return v.strip().rstrip("/")


class PollingConfig(BaseModel):
    """Polling and debounce timing, in seconds."""

    interval: float = Field(default=300, gt=0)
    debounce: float = Field(default=0.8, ge=0)


class Preferences(BaseModel):
    """User preferences that survive restarts."""

    model_config = ConfigDict(validate_assignment=True)

    user_id: str = Field(default="", description="Targeted Flavortown user id")
    selected_project_id: int | None = Field(default=None)
    cookies_per_hour: int = Field(default=DEFAULT_COOKIES_PER_HOUR)
    target_item_ids: list[int] = Field(default_factory=list)

    @field_validator("cookies_per_hour")
    @classmethod
    def zero_means_default(cls, v: int) -> int:
        # An unset rate was historically stored as 0
        return DEFAULT_COOKIES_PER_HOUR if v == 0 else v

    @field_validator("target_item_ids")
    @classmethod
    def normalize_targets(cls, v: list[int]) -> list[int]:
        return sorted(set(v))


class AppConfig(BaseModel):
    """Main Flvr configuration"""

    api: APIConfig = Field(default_factory=APIConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    preferences: Preferences = Field(default_factory=Preferences)
