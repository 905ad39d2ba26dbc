"""Configuration loading: YAML file plus environment overrides."""

import logging
import os
import shlex
from dataclasses import dataclass, field

import yaml

from siteops.errors import ConfigError
from siteops.redact import register_secret
from siteops.shell import run_system_command

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://opsoasis.wpspecialprojects.com/wp-json/wpcomsp/"
DEFAULT_CONFIG_PATH = "~/.config/siteops/config.yaml"
DEFAULT_CONCIERGE_EMAIL = "concierge@wordpress.com"

_ENV_OVERRIDES = {
    "SITEOPS_BASE_URL": "base_url",
    "SITEOPS_API_USERNAME": "api_username",
    "SITEOPS_API_PASSWORD": "api_password",
    "SITEOPS_TIMEOUT": "timeout",
    "SITEOPS_AGENCY_ID": "agency_id",
}


@dataclass
class Settings:
    """Process configuration for one orchestration run."""

    base_url: str = DEFAULT_BASE_URL
    api_username: str = ""
    api_password: str = field(default="", repr=False)
    password_command: list[str] = field(default_factory=list)
    timeout: int = 60
    concierge_email: str = DEFAULT_CONCIERGE_EMAIL
    agency_id: int | None = None
    hosts: dict[str, dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> "Settings":
        """Build Settings from a config mapping, ignoring unknown keys."""
        api = d.get("api", {}) or {}
        password_command = api.get("password_command", [])
        if isinstance(password_command, str):
            password_command = shlex.split(password_command)
        agency_id = d.get("agency_id")
        return cls(
            base_url=api.get("base_url", DEFAULT_BASE_URL),
            api_username=api.get("username", ""),
            api_password=api.get("password", ""),
            password_command=list(password_command),
            timeout=int(api.get("timeout", 60)),
            concierge_email=d.get("concierge_email", DEFAULT_CONCIERGE_EMAIL),
            agency_id=int(agency_id) if agency_id is not None else None,
            hosts=d.get("hosts", {}) or {},
        )

    def host_for(self, backend: str, kind: str, default: str) -> str:
        """Return the configured ``ssh``/``sftp`` host for *backend*, or *default*."""
        return self.hosts.get(backend, {}).get(kind) or default


def _read_yaml(config_path: str) -> dict:
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file '{config_path}' not found.") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML config '{config_path}': {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{config_path}' must contain a mapping.")
    return data


def load_settings(config_path: str | None = None, environ=None) -> Settings:
    """Load settings from YAML and apply environment overrides.

    The file is *config_path*, else ``$SITEOPS_CONFIG``, else the default
    path when it exists. An explicitly requested file must exist.
    """
    environ = os.environ if environ is None else environ
    explicit = config_path or environ.get("SITEOPS_CONFIG")
    path = os.path.expanduser(explicit or DEFAULT_CONFIG_PATH)

    data = {}
    if explicit or os.path.exists(path):
        data = _read_yaml(path)
        logger.debug(f"Loaded config from {path}")
    settings = Settings.from_dict(data)

    for var, attr in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if not value:
            continue
        if attr in ("timeout", "agency_id"):
            try:
                value = int(value)
            except ValueError as e:
                raise ConfigError(f"{var} must be an integer, got '{value}'") from e
        setattr(settings, attr, value)
    return settings


def resolve_api_password(settings: Settings) -> str:
    """Return the service-account password, running ``password_command`` if needed.

    Raises:
        ConfigError: no username, or no password could be resolved.
    """
    if not settings.api_username:
        raise ConfigError("API username required. Set SITEOPS_API_USERNAME or api.username in the config file.")
    if settings.api_password:
        return settings.api_password
    if not settings.password_command:
        raise ConfigError("API password required. Set SITEOPS_API_PASSWORD, api.password or api.password_command.")

    _, stdout, _ = run_system_command(settings.password_command)
    password = stdout.strip()
    if not password:
        raise ConfigError(f"Password command returned no output: {' '.join(settings.password_command)}")
    register_secret(password)
    settings.api_password = password
    return password
