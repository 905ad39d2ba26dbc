#!/usr/bin/env python3
"""Site operations tools: CLI entrypoint."""

import argparse
import logging
import sys

from siteops.commands.jetpack import register_jetpack_command
from siteops.commands.pressable import register_pressable_command
from siteops.commands.wpcom import register_wpcom_command
from siteops.errors import SiteOpsError
from siteops.logging_setup import setup_cli_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Site operations tools")
    parser.add_argument("--config", default=None, help="Path to config.yaml (default: ~/.config/siteops/config.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_pressable_command(subparsers)
    register_wpcom_command(subparsers)
    register_jetpack_command(subparsers)

    args = parser.parse_args(argv)
    setup_cli_logging(args.verbose)
    try:
        args.func(args)
    except SiteOpsError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
