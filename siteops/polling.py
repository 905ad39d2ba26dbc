"""Fixed-delay state polling.

``wait_for`` re-reads a snapshot until a predicate holds. It never backs
off and, unless the caller passes a ceiling, never gives up.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 10
SITE_STATE_DELAY = 3
SSH_READY_DELAY = 5
CODE_DEPLOYMENT_DELAY = 5


@dataclass
class TimedOut:
    """A poll that hit one of its ceilings before the predicate held.

    ``reason`` is ``"max_attempts"``, ``"deadline"`` or ``"failures"``.
    """

    reason: str
    attempts: int
    last_snapshot: Any = None


class LogProgress:
    """Progress sink that logs one line per tick."""

    def __init__(self, label, log=None):
        self.label = label
        self.ticks = 0
        self._log = log or logger

    def __call__(self):
        self.ticks += 1
        self._log.info(f"  ...{self.label} (check #{self.ticks})")

    def finish(self):
        self._log.info(f"Stopped {self.label} after {self.ticks} wait(s).")


def wait_for(
    snapshot_fn,
    predicate_done,
    delay_seconds=DEFAULT_DELAY,
    progress_sink=None,
    *,
    max_attempts=None,
    deadline_seconds=None,
    max_consecutive_failures=None,
    sleep=None,
    clock=None,
):
    """Poll *snapshot_fn* until *predicate_done* holds for its result.

    A ``None`` snapshot counts as "not done yet", so transient fetch
    failures are retried silently.

    Args:
        snapshot_fn: zero-argument callable returning the current state.
        predicate_done: called with each non-None snapshot.
        delay_seconds: fixed sleep between checks.
        progress_sink: zero-argument callable advanced once per failed check.
        max_attempts: stop after this many checks.
        deadline_seconds: stop instead of sleeping past this many seconds.
        max_consecutive_failures: stop after this many ``None`` snapshots in a row.

    Returns:
        The snapshot that satisfied the predicate, or ``TimedOut`` when a
        ceiling was hit. Without ceilings the loop only ends via the predicate.
    """
    sleep = sleep or time.sleep
    clock = clock or time.monotonic
    started = clock()
    attempts = 0
    failures = 0
    while True:
        snapshot = snapshot_fn()
        attempts += 1
        if snapshot is not None and predicate_done(snapshot):
            return snapshot

        failures = failures + 1 if snapshot is None else 0
        if max_consecutive_failures is not None and failures >= max_consecutive_failures:
            logger.error(f"Giving up after {failures} consecutive failed checks.")
            return TimedOut("failures", attempts, snapshot)
        if max_attempts is not None and attempts >= max_attempts:
            logger.error(f"Giving up after {attempts} checks.")
            return TimedOut("max_attempts", attempts, snapshot)
        if deadline_seconds is not None and clock() - started + delay_seconds > deadline_seconds:
            logger.error(f"Timeout after {deadline_seconds}s ({attempts} checks).")
            return TimedOut("deadline", attempts, snapshot)

        if progress_sink is not None:
            progress_sink()
        sleep(delay_seconds)


def _state_of(get_state, snapshot):
    try:
        return get_state(snapshot)
    except (KeyError, IndexError, TypeError, AttributeError):
        return None


def reach_state(state, get_state):
    """Predicate: done once ``get_state(snapshot) == state``."""
    return lambda snapshot: _state_of(get_state, snapshot) == state


def exit_state(state, get_state):
    """Predicate: done once the snapshot has a state other than *state*."""

    def _done(snapshot):
        current = _state_of(get_state, snapshot)
        return current is not None and current != state

    return _done
