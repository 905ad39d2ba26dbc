"""CLI tests: argument wiring and exit codes for each subcommand."""

import functools

import pytest

from siteops import siteops as cli
from siteops.remote.acquire import PressableSessionAcquirer


@pytest.fixture
def run_main(monkeypatch, ctx):
    """Run ``main(argv)`` in-process against the fake API; returns the exit code."""
    monkeypatch.setattr(cli, "setup_cli_logging", lambda verbose=False: None)
    for module in ("pressable", "wpcom", "jetpack"):
        monkeypatch.setattr(f"siteops.commands.{module}.build_context", lambda args: ctx)

    def _run(*argv):
        try:
            cli.main(list(argv))
        except SystemExit as e:
            return e.code
        return 0

    return _run


# ── Subprocess ──────────────────────────────────────────────────


def test_help(run_cli):
    rc, stdout, _ = run_cli("--help")
    assert rc == 0
    for command in ("pressable", "wpcom", "jetpack"):
        assert command in stdout


def test_missing_credentials_exit_1(run_cli, tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("")
    rc, stdout, _ = run_cli(
        "wpcom",
        "sites-batch",
        "1",
        env={"SITEOPS_CONFIG": str(config), "SITEOPS_API_USERNAME": "", "SITEOPS_API_PASSWORD": ""},
    )
    assert rc == 1
    assert "API username required" in stdout


def test_unknown_action(run_cli):
    rc, _, stderr = run_cli("pressable", "explode")
    assert rc == 2
    assert "invalid choice" in stderr


# ── wpcom ───────────────────────────────────────────────────────


def test_wpcom_sites_batch_ok(run_main, fake_api, caplog):
    fake_api.add("POST", "wpcom/v1/sites/batch", {"1": {"URL": "https://one.test"}})
    with caplog.at_level("INFO"):
        assert run_main("wpcom", "sites-batch", "1") == 0
    assert "1: https://one.test" in caplog.text


def test_wpcom_sites_batch_item_error(run_main, fake_api, caplog):
    fake_api.add("POST", "wpcom/v1/sites/batch", {"1": {"URL": "https://one.test"}, "2": {"errors": "unknown"}})
    with caplog.at_level("INFO"):
        assert run_main("wpcom", "sites-batch", "1", "2") == 1
    assert "2: lookup failed" in caplog.text


def test_wpcom_sites_batch_request_failure(run_main):
    assert run_main("wpcom", "sites-batch", "1") == 1


def test_wpcom_deploy_failure(run_main, fake_api):
    assert run_main("wpcom", "deploy", "77", "9") == 1


# ── jetpack ─────────────────────────────────────────────────────


def test_jetpack_modules_batch(run_main, fake_api):
    fake_api.add("POST", "jetpack/v1/modules/batch", {"1": {"stats": {}}})
    assert run_main("jetpack", "modules-batch", "1") == 0
    assert fake_api.requests[0]["body"] == {"sites": ["1"]}


# ── pressable ───────────────────────────────────────────────────


def test_pressable_rotate_sftp_password(run_main, fake_api, caplog):
    fake_api.add("POST", "pressable/v1/site-sftp-users/9/bob/rotate-password", {"password": "brand-new-pass"})
    with caplog.at_level("INFO"):
        assert run_main("pressable", "rotate-sftp-password", "9", "bob") == 0
    assert "brand-new-pass" in caplog.text


def test_pressable_rotate_sftp_password_failure(run_main):
    assert run_main("pressable", "rotate-sftp-password", "9", "bob") == 1


def test_pressable_wp_propagates_exit_status(run_main, fake_api, monkeypatch, transport_factory):
    fake_api.add("GET", "pressable/v1/site-sftp-users/9", [{"username": "concierge", "email": "concierge@wordpress.com"}])
    fake_api.add("POST", "pressable/v1/site-sftp-users/9/concierge/rotate-password", {"password": "fresh-password-42"})
    factory = transport_factory({"outputs": {"wp option get home": ("", "Error: nope\n", 1)}})
    monkeypatch.setattr(
        "siteops.commands.pressable.PressableSessionAcquirer",
        functools.partial(PressableSessionAcquirer, transport_factory=factory),
    )

    assert run_main("pressable", "wp", "9", "option", "get", "home") == 1
    assert factory.created[0].channels[-1].command == "wp option get home"


def test_pressable_wait_ssh_gives_up(run_main, monkeypatch, transport_factory):
    monkeypatch.setattr("siteops.polling.time.sleep", lambda seconds: None)
    assert run_main("pressable", "wait-ssh", "9", "--max-attempts", "2") == 1
