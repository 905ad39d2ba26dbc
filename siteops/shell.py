"""Local process execution helper."""

import logging
import subprocess

from siteops.errors import CommandError

logger = logging.getLogger(__name__)


def run_system_command(command, cwd=None, timeout=600, check=True):
    """Run a local command and return (returncode, stdout, stderr).

    Args:
        command: list of command arguments
        cwd: working directory for the command
        timeout: maximum seconds to wait for the command
        check: raise CommandError when the command exits non-zero

    Raises:
        CommandError: the binary is missing, the command timed out, or it
            exited non-zero while *check* is set.
    """
    try:
        result = subprocess.run(command, cwd=cwd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError as e:
        logger.error(f"Error: '{command[0]}' not found. Is it installed and on PATH?")
        raise CommandError(command, 127, f"'{command[0]}' not found") from e
    except subprocess.TimeoutExpired as e:
        logger.error(f"Command timed out after {timeout}s: {' '.join(command)}")
        raise CommandError(command, 1, "timeout") from e

    if check and result.returncode != 0:
        logger.error(f"Command failed (rc={result.returncode}): {' '.join(command)}")
        if result.stderr:
            logger.error(result.stderr.strip())
        raise CommandError(command, result.returncode, result.stderr)
    return result.returncode, result.stdout, result.stderr
