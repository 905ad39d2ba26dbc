"""Per-invocation orchestration context.

Holds everything that would otherwise be process-wide state: the request
executor, the credential cache, the logger and the notification callback.
Create one per orchestration run (or per test).
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from siteops.api.executor import RequestExecutor
from siteops.backends import Backend
from siteops.config import Settings, resolve_api_password


@dataclass
class OpsContext:
    settings: Settings
    executor: RequestExecutor
    credentials: dict = field(default_factory=dict)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("siteops"))
    notify: Callable[[str, dict], None] | None = None

    @classmethod
    def create(cls, settings: Settings, client=None, dry_run=False, notify=None) -> "OpsContext":
        """Build a context with an executor authenticated from *settings*.

        Raises:
            ConfigError: when the service-account credentials are incomplete.
        """
        password = resolve_api_password(settings)
        executor = RequestExecutor(
            settings.base_url,
            settings.api_username,
            password,
            timeout=settings.timeout,
            client=client,
            dry_run=dry_run,
        )
        return cls(settings=settings, executor=executor, notify=notify)

    def backend(self, name: str, version: str = "v1") -> Backend:
        return Backend(self.executor, name, version)

    def emit(self, event: str, **data) -> None:
        """Deliver a notification to the ``notify`` callback, if any."""
        if self.notify is not None:
            self.notify(event, data)

    def close(self):
        self.executor.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
