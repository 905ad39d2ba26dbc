"""WordPress.com CLI handlers."""

import argparse
import logging
import sys

from siteops.backends import wpcom
from siteops.commands.common import add_dry_run_argument, build_context, log_batch_result
from siteops.operations import deploy_code, run_wp_cli_command
from siteops.polling import TimedOut
from siteops.remote.acquire import WPCOMSessionAcquirer

logger = logging.getLogger(__name__)


# ── CLI handlers ───────────────────────────────────────────────────


def handle_wp(args):
    """CLI handler for 'wpcom wp'."""
    with build_context(args) as ctx:
        result = run_wp_cli_command(ctx, WPCOMSessionAcquirer(ctx), args.site, args.wp_command)
    if result is None:
        sys.exit(1)
    status, _ = result
    if status != 0:
        sys.exit(status)


def handle_sites_batch(args):
    """CLI handler for 'wpcom sites-batch'."""
    with build_context(args) as ctx:
        result = wpcom.get_sites_batch(ctx, args.sites)
    if result is None:
        logger.error("Error: the batch request failed.")
        sys.exit(1)
    if log_batch_result(logger, result, "lookup"):
        sys.exit(1)


def handle_deploy(args):
    """CLI handler for 'wpcom deploy'."""
    with build_context(args) as ctx:
        deployment = deploy_code(ctx, args.site, args.deployment_id)
    if args.dry_run:
        return
    if deployment is None or isinstance(deployment, TimedOut):
        sys.exit(1)
    logger.info(f"Code deployment {args.deployment_id} on {args.site} finished successfully.")


def register_wpcom_command(subparsers):
    """Register the 'wpcom' command and its actions."""
    parser = subparsers.add_parser("wpcom", help="Manage WordPress.com sites")
    actions = parser.add_subparsers(dest="action", required=True)

    wp = actions.add_parser("wp", help="Run a WP-CLI command on an Atomic site")
    wp.add_argument("site", help="Site ID or URL")
    wp.add_argument("wp_command", nargs=argparse.REMAINDER, help="WP-CLI arguments, e.g. plugin list")
    wp.set_defaults(func=handle_wp)

    batch = actions.add_parser("sites-batch", help="Look up several sites in one request")
    batch.add_argument("sites", nargs="+", help="Site IDs or URLs")
    batch.set_defaults(func=handle_sites_batch)

    deploy = actions.add_parser("deploy", help="Run a code deployment and wait for it to succeed")
    deploy.add_argument("site", help="Site ID")
    deploy.add_argument("deployment_id", type=int, help="Code deployment ID")
    add_dry_run_argument(deploy)
    deploy.set_defaults(func=handle_deploy)
