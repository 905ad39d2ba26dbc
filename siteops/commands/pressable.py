"""Pressable CLI handlers."""

import argparse
import logging
import sys

from siteops.backends import pressable
from siteops.commands.common import add_dry_run_argument, build_context
from siteops.operations import create_pressable_site, run_wp_cli_command, wait_on_site_ssh
from siteops.polling import TimedOut
from siteops.remote.acquire import PressableSessionAcquirer

logger = logging.getLogger(__name__)

DEFAULT_DATACENTER = "DFW"


# ── CLI handlers ───────────────────────────────────────────────────


def handle_create_site(args):
    """CLI handler for 'pressable create-site'."""
    with build_context(args) as ctx:
        site = create_pressable_site(ctx, args.name, args.datacenter)
        if site is None:
            if not args.dry_run:
                sys.exit(1)
            return
        logger.info(f"Site {site.get('name', args.name)} (ID {site['id']}) is ready: {site.get('url', '')}")


def handle_rotate_sftp_password(args):
    """CLI handler for 'pressable rotate-sftp-password'."""
    with build_context(args) as ctx:
        password = pressable.rotate_site_sftp_user_password(ctx, args.site, args.user)
        if args.dry_run:
            return
        if not password:
            logger.error(f"Error: could not rotate the SFTP password of {args.user} on {args.site}.")
            sys.exit(1)
        logger.info(f"New SFTP password for {args.user}: {password}")


def handle_wait_ssh(args):
    """CLI handler for 'pressable wait-ssh'."""
    with build_context(args) as ctx:
        session = wait_on_site_ssh(ctx, PressableSessionAcquirer(ctx), args.site, max_attempts=args.max_attempts)
        if session is None or isinstance(session, TimedOut):
            sys.exit(1)
        session.close()
        logger.info(f"Site {args.site} accepts SSH connections.")


def handle_wp(args):
    """CLI handler for 'pressable wp'."""
    with build_context(args) as ctx:
        result = run_wp_cli_command(ctx, PressableSessionAcquirer(ctx), args.site, args.wp_command)
    if result is None:
        sys.exit(1)
    status, _ = result
    if status != 0:
        sys.exit(status)


def register_pressable_command(subparsers):
    """Register the 'pressable' command and its actions."""
    parser = subparsers.add_parser("pressable", help="Manage Pressable sites")
    actions = parser.add_subparsers(dest="action", required=True)

    create = actions.add_parser("create-site", help="Create a site and wait until it is reachable")
    create.add_argument("name", help="Site name")
    create.add_argument(
        "--datacenter",
        default=DEFAULT_DATACENTER,
        help=f"Datacenter code (default: {DEFAULT_DATACENTER})",
    )
    add_dry_run_argument(create)
    create.set_defaults(func=handle_create_site)

    rotate = actions.add_parser("rotate-sftp-password", help="Rotate the password of an SFTP user")
    rotate.add_argument("site", help="Site ID or URL")
    rotate.add_argument("user", help="SFTP username")
    add_dry_run_argument(rotate)
    rotate.set_defaults(func=handle_rotate_sftp_password)

    wait_ssh = actions.add_parser("wait-ssh", help="Wait until the site accepts SSH shell sessions")
    wait_ssh.add_argument("site", help="Site ID or URL")
    wait_ssh.add_argument("--max-attempts", type=int, default=None, help="Give up after N checks (default: never)")
    wait_ssh.set_defaults(func=handle_wait_ssh)

    wp = actions.add_parser("wp", help="Run a WP-CLI command on the site")
    wp.add_argument("site", help="Site ID or URL")
    wp.add_argument("wp_command", nargs=argparse.REMAINDER, help="WP-CLI arguments, e.g. plugin list")
    wp.set_defaults(func=handle_wp)
