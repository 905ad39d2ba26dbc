"""Shared pytest fixtures for all test modules."""

import json
import os
import subprocess
import sys

import httpx
import paramiko
import pytest

import siteops.redact as redact_module
from siteops.config import Settings
from siteops.context import OpsContext


PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))
BASE_URL = "https://ops.test/wp-json/wpcomsp/"


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the siteops CLI as a subprocess."""

    def _run(*args, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "siteops.siteops", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env={**os.environ, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture(autouse=True)
def _reset_redaction():
    """Keep runtime-registered secrets from leaking between tests."""
    redact_module._registered.clear()
    redact_module._patterns = None
    yield
    redact_module._registered.clear()
    redact_module._patterns = None


# ── REST fakes ──────────────────────────────────────────────────────


class Replies:
    """Replies consumed one per call; the last one repeats. The caller's values are not mutated."""

    def __init__(self, *replies):
        self._replies = replies
        self._index = 0

    def next(self):
        reply = self._replies[min(self._index, len(self._replies) - 1)]
        self._index += 1
        return reply


class FakeApi:
    """Routes ``(method, endpoint)`` to canned replies and records every request.

    A route value is an ``httpx.Response``, a JSON-able object (sent whole as a
    200 body, lists included), an exception instance (raised from the
    transport), or ``Replies`` holding a sequence of those.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def add(self, method, endpoint, reply):
        self.routes[(method, endpoint)] = reply

    def calls(self, method=None, endpoint=None):
        return [
            r
            for r in self.requests
            if (method is None or r["method"] == method) and (endpoint is None or r["endpoint"] == endpoint)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        endpoint = str(request.url).removeprefix(BASE_URL)
        body = json.loads(request.content) if request.content else None
        self.requests.append({"method": request.method, "endpoint": endpoint, "body": body, "headers": request.headers})

        reply = self.routes.get((request.method, endpoint))
        if reply is None:
            return httpx.Response(404, json={"message": "no route"})
        if isinstance(reply, Replies):
            reply = reply.next()
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)


@pytest.fixture
def settings():
    return Settings(base_url=BASE_URL, api_username="svc-bot", api_password="svc-password-123", agency_id=42)


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def make_ctx(settings, fake_api):
    """Return a factory for OpsContexts wired to ``fake_api``."""
    created = []

    def _make(dry_run=False, notify=None, api=None):
        api = api or fake_api
        client = httpx.Client(transport=httpx.MockTransport(api.handler))
        ctx = OpsContext.create(settings, client=client, dry_run=dry_run, notify=notify)
        created.append(ctx)
        return ctx

    yield _make
    for ctx in created:
        ctx.close()


@pytest.fixture
def ctx(make_ctx):
    return make_ctx()


# ── SSH fakes ───────────────────────────────────────────────────────


class FakeChannel:
    """Channel whose output is picked by the first matching command prefix.

    Output is handed out in small chunks so readers must loop. A status of
    ``None`` means the command never finishes.
    """

    CHUNK = 4

    def __init__(self, outputs):
        self._outputs = outputs
        self._stdout, self._stderr, self.status = b"", b"", 0
        self.command = None
        self.closed = False

    def exec_command(self, command):
        self.command = command
        for prefix, (stdout, stderr, status) in self._outputs.items():
            if command.startswith(prefix):
                self._stdout, self._stderr, self.status = stdout.encode(), stderr.encode(), status
                return

    def recv_ready(self):
        return bool(self._stdout)

    def recv(self, nbytes):
        chunk, self._stdout = self._stdout[: self.CHUNK], self._stdout[self.CHUNK :]
        return chunk

    def recv_stderr_ready(self):
        return bool(self._stderr)

    def recv_stderr(self, nbytes):
        chunk, self._stderr = self._stderr[: self.CHUNK], self._stderr[self.CHUNK :]
        return chunk

    def exit_status_ready(self):
        return self.status is not None

    def recv_exit_status(self):
        return self.status

    def close(self):
        self.closed = True


class FakeTransport:
    """In-memory stand-in for ``paramiko.Transport``.

    Args:
        connect_error: raised from ``start_client``.
        auth_ok: whether ``auth_password`` succeeds.
        outputs: ``{command_prefix: (stdout, stderr, status)}``; unknown
            commands succeed with empty output.
    """

    def __init__(self, address, connect_error=None, auth_ok=True, outputs=None):
        self.address = address
        self.connect_error = connect_error
        self.auth_ok = auth_ok
        self.outputs = outputs or {}
        self.active = False
        self.authenticated = False
        self.closed = False
        self.auth_calls = []
        self.channels = []

    def start_client(self, timeout=None):
        if self.connect_error is not None:
            raise self.connect_error
        self.active = True

    def auth_password(self, username, password):
        self.auth_calls.append((username, password))
        if not self.auth_ok:
            raise paramiko.AuthenticationException("Authentication failed.")
        self.authenticated = True

    def is_authenticated(self):
        return self.authenticated

    def is_active(self):
        return self.active

    def open_session(self):
        channel = FakeChannel(self.outputs)
        self.channels.append(channel)
        return channel

    def close(self):
        self.active = False
        self.closed = True


class TransportFactory:
    """Callable ``transport_factory`` that hands out scripted FakeTransports.

    Each entry of *scripts* is a dict of FakeTransport keyword arguments used
    for one connection; the last one repeats.
    """

    def __init__(self, *scripts):
        self.scripts = list(scripts) or [{}]
        self.created = []

    def __call__(self, address):
        script = self.scripts.pop(0) if len(self.scripts) > 1 else self.scripts[0]
        transport = FakeTransport(address, **script)
        self.created.append(transport)
        return transport


class FakeSFTP:
    def __init__(self):
        self.files = {}
        self.closed = False

    def listdir(self, path="."):
        return sorted(self.files)

    def put(self, local_path, remote_path):
        self.files[remote_path] = local_path

    def close(self):
        self.closed = True


@pytest.fixture
def transport_factory():
    """Factory of TransportFactory instances, e.g. ``transport_factory({"auth_ok": False})``."""
    return TransportFactory


@pytest.fixture
def fake_sftp():
    return FakeSFTP()


@pytest.fixture
def replies():
    """The ``Replies`` class, for routes that answer differently on each call."""
    return Replies
