"""Tagged results for backend calls.

Every backend request produces exactly one of these variants. Callers
match on the type instead of checking for ``None``/``True`` sentinels, so an
empty 204 reply can never be mistaken for a failure.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Success:
    """2xx response with a decoded, non-empty body."""

    payload: Any


@dataclass(frozen=True)
class EmptySuccess:
    """2xx response with no content (201/202/204 style replies)."""


@dataclass(frozen=True)
class TransportFailure:
    """The host could not be reached or the request timed out."""

    endpoint: str
    reason: str = field(default="", compare=False)


@dataclass(frozen=True)
class HttpError:
    """Non-2xx HTTP status."""

    status: int
    body: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class ApiError:
    """2xx envelope carrying a structured error payload."""

    code: str
    message: str = ""


ResponseOutcome = Success | EmptySuccess | TransportFailure | HttpError | ApiError


def is_success(outcome: ResponseOutcome) -> bool:
    """True for ``Success`` and ``EmptySuccess``."""
    return isinstance(outcome, (Success, EmptySuccess))


def payload_of(outcome: ResponseOutcome, default=None):
    """Return the payload of a ``Success``, else *default*."""
    if isinstance(outcome, Success):
        return outcome.payload
    return default


def describe(outcome: ResponseOutcome) -> str:
    """Short human-readable description, used in CLI error messages."""
    if isinstance(outcome, TransportFailure):
        return f"transport failure ({outcome.reason or 'unreachable'})"
    if isinstance(outcome, HttpError):
        return f"HTTP {outcome.status}"
    if isinstance(outcome, ApiError):
        return f"API error {outcome.code}: {outcome.message}"
    if isinstance(outcome, EmptySuccess):
        return "ok (no content)"
    return "ok"
