"""Structured errors raised by siteops.

Backend and session failures are not raised; they come back as outcome
values (see ``siteops.api.outcome`` and ``siteops.remote.types``). Only the
errors below cross function boundaries as exceptions.
"""


class SiteOpsError(Exception):
    """Base class for all siteops errors."""


class ConfigError(SiteOpsError):
    """Missing or malformed configuration."""


class SerializationError(SiteOpsError):
    """JSON encode/decode failure."""


class CredentialResolutionError(SiteOpsError):
    """The login identity for a resource could not be determined or rotated."""

    def __init__(self, resource_id, message):
        super().__init__(f"{resource_id}: {message}")
        self.resource_id = resource_id


class CommandError(SiteOpsError):
    """An external process failed to start, timed out, or exited non-zero."""

    def __init__(self, command, returncode, stderr=""):
        super().__init__(f"Command failed (rc={returncode}): {' '.join(command)}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
