"""Configuration management for goaccess-monitor host settings.

Settings are paths and GoAccess options that rarely change between hosts.
Defaults match a stock CloudPanel/Debian install; any of them can be
overridden from a YAML file.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from goaccess_monitor.errors import ValidationError

CONFIG_ENV_VAR = "GOACCESS_MONITOR_CONFIG"


@dataclass(frozen=True)
class Settings:
    """Host layout and GoAccess runtime options."""

    # GoAccess
    goaccess_conf_dir: str = "/etc/goaccess"
    goaccess_log_dir: str = "/var/log/goaccess"
    goaccess_db_dir: str = "/var/lib/goaccess"
    goaccess_binary: str = "/usr/bin/goaccess"
    goaccess_apt_repo: str = "https://deb.goaccess.io/"
    goaccess_gpg_key_url: str = "https://deb.goaccess.io/gnugpg.key"
    port: int = 7890
    keep_last: int = 30
    report_title: str = "Web Server Analytics"
    time_format: str = "%T"
    date_format: str = "%d/%b/%Y"
    service_user: str = "www-data"

    # Log collection
    remote_logs_dir: str = "/var/log/remote-servers"
    collector_home: str = "/home/web-monitor"
    collector_user: str = "web-monitor"

    # Host paths
    systemd_unit_path: str = "/etc/systemd/system/goaccess.service"
    update_script_path: str = "/usr/local/bin/update-server-monitoring.sh"
    credentials_path: str = "/root/goaccess_monitor_credentials.txt"
    nginx_sites_enabled: str = "/etc/nginx/sites-enabled"
    nginx_sites_available: str = "/etc/nginx/sites-available"
    nginx_conf_path: str = "/etc/nginx/nginx.conf"
    letsencrypt_dir: str = "/etc/letsencrypt"
    home_root: str = "/home"

    # Seconds to wait after domain cleanup before verifying
    cleanup_settle_seconds: float = 3.0

    @property
    def goaccess_conf_path(self) -> str:
        return f"{self.goaccess_conf_dir}/goaccess.conf"

    @property
    def servers_path(self) -> str:
        return f"{self.goaccess_conf_dir}/monitored_servers"

    @property
    def collector_key_path(self) -> str:
        return f"{self.collector_home}/.ssh/id_ed25519"

    @property
    def reverse_proxy_url(self) -> str:
        return f"http://localhost:{self.port}"


def _resolve_path(path: Path | str | None) -> Path | None:
    if path is not None:
        return Path(path).expanduser()
    env_config = os.getenv(CONFIG_ENV_VAR)
    if env_config:
        return Path(env_config).expanduser().resolve()
    return None


def load_settings(path: Path | str | None = None) -> Settings:
    """Load settings, applying overrides from a YAML file if one is given.

    The file is taken from ``path`` or, failing that, the
    ``GOACCESS_MONITOR_CONFIG`` environment variable. No file means defaults.

    Raises:
        ValidationError: If the file is unreadable, not a mapping, or names
            keys that are not settings.
    """
    config_path = _resolve_path(path)
    if config_path is None:
        return Settings()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ValidationError(f"Cannot read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError(f"Config file {config_path} must contain a mapping")

    return apply_overrides(Settings(), data)


def apply_overrides(settings: Settings, data: dict[str, Any]) -> Settings:
    """Return a copy of ``settings`` with ``data`` applied.

    Values must match the field type. Integers are accepted for float
    fields; booleans are never accepted as numbers.

    Raises:
        ValidationError: On unknown keys or mistyped values.
    """
    types = {f.name: f.type for f in fields(Settings)}
    unknown = sorted(set(data) - set(types))
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(unknown)}")

    overrides: dict[str, Any] = {}
    for name, value in data.items():
        expected = types[name]
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        if (isinstance(value, bool) and expected is not bool) or not isinstance(value, expected):
            raise ValidationError(
                f"Setting '{name}' must be {expected.__name__}, got {type(value).__name__}: {value!r}"
            )
        overrides[name] = value
    return replace(settings, **overrides)
