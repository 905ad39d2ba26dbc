"""Remote session acquisition: credentials, connect, authenticate, readiness probe.

Shortly after a site is created its SSH server accepts and authenticates
connections but only serves SFTP. A shell session is therefore handed out
only after a probe command has succeeded.
"""

import logging
from contextlib import contextmanager

import paramiko

from siteops.backends import pressable, wpcom
from siteops.errors import CredentialResolutionError
from siteops.redact import register_secret
from siteops.remote.session import FileSession, ShellSession
from siteops.remote.types import AcquireState, Credential, FailureKind, SessionAttempt

logger = logging.getLogger(__name__)

READINESS_PROBE = "ls -la"
SFTP_ONLY_SENTINEL = "This service allows sftp connections only.\n"
DEFAULT_CONNECT_TIMEOUT = 30
DEFAULT_PROBE_TIMEOUT = 30

# paramiko surfaces network trouble as SSHException, socket errors, or EOF
_TRANSPORT_ERRORS = (paramiko.SSHException, OSError, EOFError)


class SessionAcquirer:
    """Hands out authenticated, ready-to-use sessions for one backend.

    Subclasses set the host constants and implement ``resolve_login`` and
    ``rotate_secret``. Credentials are cached on the context per
    (backend, resource id); a rotated password is reused for the rest of the
    run.
    """

    name = None
    SSH_HOST = None
    SFTP_HOST = None
    PORT = 22

    def __init__(
        self,
        ctx,
        transport_factory=paramiko.Transport,
        sftp_factory=None,
        connect_timeout=DEFAULT_CONNECT_TIMEOUT,
        probe_timeout=DEFAULT_PROBE_TIMEOUT,
    ):
        self.ctx = ctx
        self.connect_timeout = connect_timeout
        self.probe_timeout = probe_timeout
        self._transport_factory = transport_factory
        self._sftp_factory = sftp_factory or paramiko.SFTPClient.from_transport

    @property
    def ssh_host(self) -> str:
        return self.ctx.settings.host_for(self.name, "ssh", self.SSH_HOST)

    @property
    def sftp_host(self) -> str:
        return self.ctx.settings.host_for(self.name, "sftp", self.SFTP_HOST)

    # ── Credentials ───────────────────────────────────────────────

    def resolve_login(self, resource_id):
        """Return the username to log in as, or None."""
        raise NotImplementedError

    def rotate_secret(self, resource_id, username):
        """Ask the backend for a fresh password for *username*; None on failure."""
        raise NotImplementedError

    def _rotate_credentials(self, resource_id) -> Credential:
        username = self.resolve_login(resource_id)
        if not username:
            raise CredentialResolutionError(resource_id, f"could not find the {self.name} login user")
        secret = self.rotate_secret(resource_id, username)
        if not secret:
            raise CredentialResolutionError(resource_id, f"could not rotate the password of {username}")
        register_secret(secret)
        return Credential(resource_id=str(resource_id), username=username, secret=secret)

    def get_credentials(self, resource_id) -> Credential | None:
        """Return cached credentials, rotating them on first use.

        Failures are logged and return None; nothing is cached for them.
        """
        key = (self.name, str(resource_id))
        cached = self.ctx.credentials.get(key)
        if cached is not None:
            return cached
        try:
            credential = self._rotate_credentials(resource_id)
        except CredentialResolutionError as e:
            logger.error(f"Credential error: {e}")
            return None
        self.ctx.credentials[key] = credential
        return credential

    # ── Acquisition ───────────────────────────────────────────────

    def acquire(self, resource_id, shell=True) -> SessionAttempt:
        """Walk NEW -> CREDENTIALED -> CONNECTED -> AUTHENTICATED -> READY.

        Any failure yields a FAILED attempt, with the transport closed if one
        was opened. Never raises.
        """
        credential = self.get_credentials(resource_id)
        if credential is None:
            return SessionAttempt(state=AcquireState.FAILED, failure=FailureKind.CREDENTIALS, detail="no credentials")

        host = self.ssh_host if shell else self.sftp_host
        transport = None
        try:
            transport = self._transport_factory((host, self.PORT))
            transport.start_client(timeout=self.connect_timeout)
        except _TRANSPORT_ERRORS as e:
            logger.warning(f"Could not connect to {host}: {e}")
            _disconnect(transport)
            return SessionAttempt(state=AcquireState.FAILED, failure=FailureKind.CONNECT, detail=str(e))

        try:
            transport.auth_password(credential.username, credential.secret)
        except _TRANSPORT_ERRORS as e:
            logger.warning(f"Authentication as {credential.username}@{host} failed: {e}")
            _disconnect(transport)
            return SessionAttempt(state=AcquireState.FAILED, failure=FailureKind.AUTH, detail=str(e))
        if not transport.is_authenticated():
            logger.warning(f"Authentication as {credential.username}@{host} was not accepted.")
            _disconnect(transport)
            return SessionAttempt(state=AcquireState.FAILED, failure=FailureKind.AUTH, detail="not authenticated")

        if not shell:
            try:
                sftp = self._sftp_factory(transport)
            except _TRANSPORT_ERRORS as e:
                logger.warning(f"Could not open SFTP channel on {host}: {e}")
                _disconnect(transport)
                return SessionAttempt(state=AcquireState.FAILED, failure=FailureKind.NOT_READY, detail=str(e))
            return SessionAttempt(FileSession(transport, resource_id, host, sftp), AcquireState.READY)

        session = ShellSession(transport, resource_id, host)
        try:
            status, stdout, stderr = session.run(READINESS_PROBE, timeout=self.probe_timeout)
        except _TRANSPORT_ERRORS as e:
            logger.warning(f"Readiness probe on {host} failed: {e}")
            session.close()
            return SessionAttempt(state=AcquireState.FAILED, failure=FailureKind.NOT_READY, detail=str(e))
        if _sftp_only(stdout, stderr) or status != 0:
            logger.debug(f"{host} is not ready for shell commands yet (rc={status}).")
            session.close()
            return SessionAttempt(state=AcquireState.FAILED, failure=FailureKind.NOT_READY, detail=(stdout + stderr).strip())

        return SessionAttempt(session, AcquireState.READY)

    def get_ssh_session(self, resource_id) -> ShellSession | None:
        return self.acquire(resource_id, shell=True).session

    def get_sftp_session(self, resource_id) -> FileSession | None:
        return self.acquire(resource_id, shell=False).session

    @contextmanager
    def shell(self, resource_id):
        """Scoped shell session: yields the session (or None) and always disconnects."""
        session = self.get_ssh_session(resource_id)
        try:
            yield session
        finally:
            if session is not None:
                session.close()

    @contextmanager
    def sftp(self, resource_id):
        """Scoped SFTP session: yields the session (or None) and always disconnects."""
        session = self.get_sftp_session(resource_id)
        try:
            yield session
        finally:
            if session is not None:
                session.close()


def _sftp_only(stdout, stderr):
    # the sentinel may arrive on either stream
    return SFTP_ONLY_SENTINEL in (stdout, stderr, stdout + stderr)


def _disconnect(transport):
    if transport is not None:
        transport.close()


class PressableSessionAcquirer(SessionAcquirer):
    """Pressable sites, logged in as the concierge SFTP user."""

    name = "pressable"
    SSH_HOST = "ssh.atomicsites.net"
    SFTP_HOST = "sftp.pressable.com"

    def resolve_login(self, resource_id):
        user = pressable.get_site_sftp_user_by_email(self.ctx, resource_id, self.ctx.settings.concierge_email)
        return user.get("username") if user else None

    def rotate_secret(self, resource_id, username):
        return pressable.rotate_site_sftp_user_password(self.ctx, resource_id, username)


class WPCOMSessionAcquirer(SessionAcquirer):
    """WordPress.com Atomic sites, logged in as the site's SSH user."""

    name = "wpcom"
    SSH_HOST = "ssh.atomicsites.net"
    SFTP_HOST = "sftp.wp.com"

    def resolve_login(self, resource_id):
        return wpcom.get_site_ssh_username(self.ctx, resource_id)

    def rotate_secret(self, resource_id, username):
        return wpcom.rotate_site_sftp_user_password(self.ctx, resource_id, username)

