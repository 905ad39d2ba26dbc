"""Split multi-resource batch replies into per-item successes and failures."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from siteops.api.outcome import EmptySuccess, ResponseOutcome, Success

ERRORS_FIELD = "errors"


@dataclass
class BatchResult:
    """Per-resource outcome of a batch call.

    Every id of the batch reply is in exactly one of ``results`` or ``errors``.
    """

    results: dict = field(default_factory=dict)
    errors: dict = field(default_factory=dict)

    def map_results(self, fn) -> "BatchResult":
        """Return a copy with *fn* applied to every successful payload."""
        return BatchResult(
            results={key: fn(value) for key, value in self.results.items()},
            errors=dict(self.errors),
        )

    def __len__(self):
        return len(self.results) + len(self.errors)


def is_item_error(item) -> bool:
    return isinstance(item, Mapping) and ERRORS_FIELD in item


def partition(batch_response: Mapping) -> BatchResult:
    """Partition a ``{id: sub-response}`` mapping."""
    result = BatchResult()
    for key, item in batch_response.items():
        if is_item_error(item):
            result.errors[key] = item
        else:
            result.results[key] = item
    return result


def partition_outcome(outcome: ResponseOutcome) -> BatchResult | None:
    """Partition a classified batch reply.

    Returns ``None`` when the batch call itself failed or the payload is not
    keyed by resource id.
    """
    if isinstance(outcome, EmptySuccess):
        return BatchResult()
    if isinstance(outcome, Success) and isinstance(outcome.payload, Mapping):
        return partition(outcome.payload)
    return None
