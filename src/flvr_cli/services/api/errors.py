"""Errors raised by the Flavortown API layer.

Every error is tagged with the :class:`Section` of the client it belongs to,
so a failed store fetch only ever affects the store section.
"""

from __future__ import annotations

from enum import Enum

PREVIEW_LIMIT = 500


class Section(str, Enum):
    """Client sections that own cached data and their own error state."""

    PROJECTS = "projects"
    STORE = "store"
    USERS = "users"
    DEVLOGS = "devlogs"


def preview_body(body: str, limit: int = PREVIEW_LIMIT) -> str:
    """Truncate a raw response body for diagnostics."""
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class FlavortownAPIError(Exception):
    """Base class for all errors reported by a fetch."""

    def __init__(self, section: Section, message: str):
        super().__init__(message)
        self.section = section


class APIStatusError(FlavortownAPIError):
    """The server answered with a status other than 200."""

    def __init__(self, section: Section, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(section, f"API Error ({status_code}): {body}")

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


class APIConnectionError(FlavortownAPIError):
    """The request never produced a response (DNS, refused, timeout)."""

    def __init__(self, section: Section, detail: str):
        self.detail = detail
        super().__init__(section, f"Connection Error: {detail}")


class APIDecodeError(FlavortownAPIError):
    """The response body matched none of the accepted shapes."""

    def __init__(self, section: Section, detail: str, body: str):
        self.detail = detail
        self.body = body
        super().__init__(
            section, f"Decode Error: {detail}\n\nResponse: {preview_body(body)}"
        )
