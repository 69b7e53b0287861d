"""Envelope decoding for Flavortown responses.

The backend is not consistent about how it wraps payloads: a collection may
come back as ``{"projects": [...]}`` or as a bare array, and the store has
used three different keys over time. Each accepted shape is an
:class:`EnvelopeStrategy`; :func:`decode_envelope` tries them in order and
returns the first that validates.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import APIDecodeError, Section

ModelT = TypeVar("ModelT", bound=BaseModel)

_MISSING = object()


@dataclass(frozen=True)
class EnvelopeStrategy:
    """One candidate response shape.

    ``key`` names the wrapper field holding the payload; ``None`` means the
    payload is the whole document.
    """

    key: str | None = None

    @property
    def name(self) -> str:
        return f"wrapped[{self.key!r}]" if self.key else "bare"

    def extract(self, document: Any) -> Any:
        if self.key is None:
            return document
        if not isinstance(document, dict):
            return _MISSING
        return document.get(self.key, _MISSING)


def wrapped_then_bare(*keys: str) -> tuple[EnvelopeStrategy, ...]:
    """Strategies for each wrapper key in order, then the bare document."""
    return tuple(EnvelopeStrategy(key) for key in keys) + (EnvelopeStrategy(),)


def decode_envelope(
    raw: bytes | str,
    adapter: TypeAdapter,
    strategies: Sequence[EnvelopeStrategy],
    section: Section,
) -> Any:
    """Decode *raw* with the first strategy whose payload validates.

    Raises:
        APIDecodeError: If the body is not JSON or no strategy matches.
    """
    body = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw

    try:
        document = json.loads(body)
    except json.JSONDecodeError as e:
        raise APIDecodeError(section, f"Response is not valid JSON ({e})", body) from e

    attempts: list[str] = []
    for strategy in strategies:
        payload = strategy.extract(document)
        if payload is _MISSING:
            attempts.append(f"{strategy.name}: key not present")
            continue
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            attempts.append(f"{strategy.name}: {e.error_count()} validation error(s)")

    raise APIDecodeError(
        section, "No known response shape matched (" + "; ".join(attempts) + ")", body
    )


def decode_list(
    raw: bytes | str,
    model: type[ModelT],
    strategies: Sequence[EnvelopeStrategy],
    section: Section,
) -> list[ModelT]:
    """Decode a collection of *model* under one of *strategies*."""
    return decode_envelope(raw, TypeAdapter(list[model]), strategies, section)


def decode_one(
    raw: bytes | str,
    model: type[ModelT],
    strategies: Sequence[EnvelopeStrategy],
    section: Section,
) -> ModelT:
    """Decode a single *model* under one of *strategies*."""
    return decode_envelope(raw, TypeAdapter(model), strategies, section)
