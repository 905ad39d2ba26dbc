"""Remote SSH/SFTP session acquisition."""

from siteops.remote.acquire import (
    READINESS_PROBE,
    SFTP_ONLY_SENTINEL,
    PressableSessionAcquirer,
    SessionAcquirer,
    WPCOMSessionAcquirer,
)
from siteops.remote.session import FileSession, ShellSession
from siteops.remote.types import AcquireState, Credential, FailureKind, SessionAttempt

__all__ = [
    "READINESS_PROBE",
    "SFTP_ONLY_SENTINEL",
    "AcquireState",
    "Credential",
    "FailureKind",
    "FileSession",
    "PressableSessionAcquirer",
    "SessionAcquirer",
    "SessionAttempt",
    "ShellSession",
    "WPCOMSessionAcquirer",
]
