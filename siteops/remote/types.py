"""Shared data types for remote session acquisition."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Credential:
    """Login for a site's SSH/SFTP user. Lives only in the context cache."""

    resource_id: str
    username: str
    secret: str = field(repr=False)


class AcquireState(Enum):
    NEW = "new"
    CREDENTIALED = "credentialed"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    FAILED = "failed"


class FailureKind(Enum):
    CREDENTIALS = "credentials"
    CONNECT = "connect"
    AUTH = "auth"
    NOT_READY = "not_ready"

    @property
    def transient(self) -> bool:
        """Whether retrying later can succeed.

        A freshly rotated password can take a moment to propagate, so
        authentication failures are retried like connect/readiness failures.
        """
        return self is not FailureKind.CREDENTIALS


@dataclass
class SessionAttempt:
    """Result of one acquisition attempt."""

    session: Any = None
    state: AcquireState = AcquireState.NEW
    failure: FailureKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.state is AcquireState.READY and self.session is not None
