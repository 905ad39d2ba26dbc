"""Tests for siteops.config: YAML loading, env overrides, password resolution."""

import sys

import pytest
import yaml

from siteops.config import DEFAULT_BASE_URL, Settings, load_settings, resolve_api_password
from siteops.errors import ConfigError
from siteops.redact import redact_secrets


def _write_config(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(data))
    return str(path)


# ── load_settings ───────────────────────────────────────────────


def test_load_settings_from_yaml(tmp_path):
    path = _write_config(
        tmp_path,
        {
            "api": {"base_url": "https://ops.test/", "username": "bot", "timeout": 30},
            "agency_id": "42",
            "hosts": {"pressable": {"ssh": "ssh.test"}},
        },
    )
    settings = load_settings(path, environ={})

    assert settings.base_url == "https://ops.test/"
    assert settings.api_username == "bot"
    assert settings.timeout == 30
    assert settings.agency_id == 42
    assert settings.host_for("pressable", "ssh", "default") == "ssh.test"
    assert settings.host_for("pressable", "sftp", "default") == "default"


def test_load_settings_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    settings = load_settings(environ={})
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.concierge_email == "concierge@wordpress.com"


def test_env_overrides_file(tmp_path):
    path = _write_config(tmp_path, {"api": {"username": "file-user", "timeout": 30}})
    settings = load_settings(
        path,
        environ={"SITEOPS_API_USERNAME": "env-user", "SITEOPS_TIMEOUT": "5", "SITEOPS_API_PASSWORD": "pw-from-env"},
    )
    assert settings.api_username == "env-user"
    assert settings.timeout == 5
    assert settings.api_password == "pw-from-env"


def test_config_path_from_env(tmp_path):
    path = _write_config(tmp_path, {"api": {"username": "from-env-path"}})
    assert load_settings(environ={"SITEOPS_CONFIG": path}).api_username == "from-env-path"


def test_bad_integer_override(tmp_path):
    with pytest.raises(ConfigError, match="SITEOPS_TIMEOUT"):
        load_settings(_write_config(tmp_path, {}), environ={"SITEOPS_TIMEOUT": "soon"})


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_settings(str(tmp_path / "nope.yaml"), environ={})


def test_malformed_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("api: [unclosed\n")
    with pytest.raises(ConfigError, match="Error parsing YAML"):
        load_settings(str(path), environ={})


def test_password_hidden_from_repr():
    assert "topsecret" not in repr(Settings(api_password="topsecret"))


# ── resolve_api_password ────────────────────────────────────────


def test_resolve_requires_username():
    with pytest.raises(ConfigError, match="username"):
        resolve_api_password(Settings(api_password="pw"))


def test_resolve_requires_some_password():
    with pytest.raises(ConfigError, match="password"):
        resolve_api_password(Settings(api_username="bot"))


def test_resolve_runs_password_command():
    settings = Settings(
        api_username="bot",
        password_command=[sys.executable, "-c", "print('cmd-password-123')"],
    )
    assert resolve_api_password(settings) == "cmd-password-123"
    assert settings.api_password == "cmd-password-123"
    assert redact_secrets("auth cmd-password-123") == "auth ***"


def test_resolve_password_command_empty_output():
    settings = Settings(api_username="bot", password_command=[sys.executable, "-c", "pass"])
    with pytest.raises(ConfigError, match="no output"):
        resolve_api_password(settings)


def test_password_command_string_keeps_quoted_arguments(tmp_path):
    path = _write_config(
        tmp_path,
        {"api": {"username": "bot", "password_command": "op read 'op://Team Vault/ops api/password'"}},
    )
    settings = load_settings(path, environ={})
    assert settings.password_command == ["op", "read", "op://Team Vault/ops api/password"]
