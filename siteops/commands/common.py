"""Helpers shared by the CLI handlers."""

from siteops.config import load_settings
from siteops.context import OpsContext


def build_context(args, client=None):
    """Build an OpsContext from the global --config flag and the handler's --dry-run."""
    settings = load_settings(getattr(args, "config", None))
    return OpsContext.create(settings, client=client, dry_run=getattr(args, "dry_run", False))


def add_dry_run_argument(parser):
    parser.add_argument("--dry-run", action="store_true", help="Log mutating requests without sending them")


def log_batch_result(logger, result, label):
    """Log one line per batch item; returns the number of failed items."""
    for key, value in result.results.items():
        logger.info(f"{key}: {_summarize(value)}")
    for key, error in result.errors.items():
        logger.error(f"{key}: {label} failed: {error.get('errors')}")
    return len(result.errors)


def _summarize(value):
    if isinstance(value, dict):
        for field in ("URL", "url", "name", "domain"):
            if field in value:
                return value[field]
        return f"{len(value)} entries"
    if isinstance(value, list):
        return f"{len(value)} entries"
    return value
