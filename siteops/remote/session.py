"""Live SSH/SFTP sessions wrapping an authenticated paramiko transport."""

import logging
import time

logger = logging.getLogger(__name__)

RECV_BYTES = 32768
POLL_INTERVAL = 0.05


class _TransportSession:
    def __init__(self, transport, resource_id, host):
        self.transport = transport
        self.resource_id = resource_id
        self.host = host

    @property
    def is_open(self) -> bool:
        return self.transport is not None and self.transport.is_active()

    def close(self):
        """Disconnect. Safe to call more than once."""
        if self.transport is not None:
            if self.transport.is_active():
                logger.debug(f"Disconnecting from {self.host} ({self.resource_id})")
            self.transport.close()
            self.transport = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class ShellSession(_TransportSession):
    """Command execution over an authenticated SSH transport."""

    def run(self, command, timeout=None, log_output=False):
        """Run *command* remotely and return (exit_status, stdout, stderr).

        Args:
            timeout: seconds to wait for the command to finish; None waits forever.
            log_output: also log every stdout/stderr line once collected.

        Raises:
            TimeoutError: the command was still running after *timeout* seconds.
        """
        channel = self.transport.open_session()
        try:
            channel.exec_command(command)
            stdout, stderr = _drain(channel, timeout)
            status = channel.recv_exit_status()
        finally:
            channel.close()

        if log_output:
            for line in stdout.splitlines():
                logger.info(line)
            for line in stderr.splitlines():
                logger.error(line)
        return status, stdout, stderr


def _drain(channel, timeout):
    """Read stdout and stderr as they arrive so neither remote buffer fills up."""
    out, err = [], []
    deadline = time.monotonic() + timeout if timeout is not None else None
    while True:
        idle = True
        if channel.recv_ready():
            out.append(channel.recv(RECV_BYTES))
            idle = False
        if channel.recv_stderr_ready():
            err.append(channel.recv_stderr(RECV_BYTES))
            idle = False
        if not idle:
            continue
        if channel.exit_status_ready():
            break
        if deadline is not None and time.monotonic() >= deadline:
            raise TimeoutError(f"command still running after {timeout}s")
        time.sleep(POLL_INTERVAL)
    return b"".join(out).decode(errors="replace"), b"".join(err).decode(errors="replace")


class FileSession(_TransportSession):
    """SFTP file transfer over an authenticated transport."""

    def __init__(self, transport, resource_id, host, sftp):
        super().__init__(transport, resource_id, host)
        self.sftp = sftp

    def put(self, local_path, remote_path):
        return self.sftp.put(local_path, remote_path)

    def get(self, remote_path, local_path):
        return self.sftp.get(remote_path, local_path)

    def listdir(self, remote_path="."):
        return self.sftp.listdir(remote_path)

    def close(self):
        if self.sftp is not None:
            self.sftp.close()
            self.sftp = None
        super().close()
