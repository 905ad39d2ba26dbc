"""Jetpack CLI handlers."""

import logging
import sys

from siteops.backends import jetpack
from siteops.commands.common import build_context, log_batch_result

logger = logging.getLogger(__name__)


def handle_modules_batch(args):
    """CLI handler for 'jetpack modules-batch'."""
    with build_context(args) as ctx:
        result = jetpack.get_site_modules_batch(ctx, args.sites)
    if result is None:
        logger.error("Error: the batch request failed.")
        sys.exit(1)
    if log_batch_result(logger, result, "module lookup"):
        sys.exit(1)


def register_jetpack_command(subparsers):
    """Register the 'jetpack' command."""
    parser = subparsers.add_parser("jetpack", help="Inspect Jetpack sites")
    actions = parser.add_subparsers(dest="action", required=True)

    batch = actions.add_parser("modules-batch", help="List the modules of several sites in one request")
    batch.add_argument("sites", nargs="+", help="Site IDs or URLs")
    batch.set_defaults(func=handle_modules_batch)
