"""Tests for domain validation, site-user naming and domain cleanup."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import failed, ok
from goaccess_monitor.actions.cloudpanel import CloudPanelClient
from goaccess_monitor.actions.domain import (
    DomainManager,
    derive_site_user,
    generate_password,
    validate_domain,
)
from goaccess_monitor.connector.local import LocalRunner


@pytest.mark.parametrize("domain", ["stats.example.com", "example.io", "a-b.c-d.example.co.uk"])
def test_valid_domains(domain):
    assert validate_domain(domain)


@pytest.mark.parametrize("domain", ["localhost", "exa mple.com", "example.c", "", "example.123", "https://x.com"])
def test_invalid_domains(domain):
    assert not validate_domain(domain)


@pytest.mark.parametrize(
    "domain,user",
    [
        ("stats.octahexa.com", "octahexa-stats"),
        ("www.example.com", "example"),
        ("example.com", "example"),
        ("a.b.example.org", "example-a"),
    ],
)
def test_derive_site_user(domain, user):
    assert derive_site_user(domain) == user


def test_generate_password():
    password = generate_password()
    assert len(password) == 12
    assert password.isalnum()
    assert generate_password(20) != generate_password(20)
    assert len(generate_password(32)) == 32


class TestDomainManager:
    def _manager(self, runner, settings, sites=""):
        cloudpanel = MagicMock(spec=CloudPanelClient)
        cloudpanel.site_exists.side_effect = lambda domain: domain in sites
        cloudpanel.delete_site.return_value = ok()
        return DomainManager(runner, cloudpanel, settings), cloudpanel

    def test_exists_via_cloudpanel(self, mock_runner, settings):
        manager, _ = self._manager(mock_runner, settings, sites="stats.example.com")
        assert manager.exists("stats.example.com")

    def test_exists_via_vhost_file(self, settings):
        vhost = Path(settings.nginx_sites_enabled) / "stats.example.com.conf"
        vhost.parent.mkdir(parents=True)
        vhost.write_text("server {}")

        manager, _ = self._manager(LocalRunner(), settings)
        assert manager.exists("stats.example.com")
        assert not manager.exists("other.example.com")

    def test_cleanup_removes_everything(self, settings):
        domain = "stats.example.com"
        paths = [
            Path(settings.nginx_sites_enabled) / f"{domain}.conf",
            Path(settings.nginx_sites_available) / f"{domain}.conf",
            Path(settings.letsencrypt_dir) / "live" / domain / "cert.pem",
            Path(settings.home_root) / "example-stats" / "htdocs" / domain / "public" / "index.html",
        ]
        for path in paths:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x")

        runner = LocalRunner()
        runner.run = MagicMock(return_value=ok())
        manager, cloudpanel = self._manager(runner, settings)

        assert manager.cleanup(domain) is True
        assert not any(p.exists() for p in paths)
        commands = [c.args[0] for c in runner.run.call_args_list]
        assert ["systemctl", "stop", "nginx"] in commands
        assert ["systemctl", "start", "nginx"] in commands
        cloudpanel.delete_site.assert_not_called()

    def test_cleanup_tolerates_step_failures(self, mock_runner, settings):
        mock_runner.run.return_value = failed()
        manager, cloudpanel = self._manager(mock_runner, settings, sites="")
        assert manager.cleanup("stats.example.com") is True

    def test_cleanup_reports_leftover_site(self, mock_runner, settings):
        manager, cloudpanel = self._manager(mock_runner, settings, sites="stats.example.com")
        cloudpanel.delete_site.return_value = failed("site busy")

        assert manager.cleanup("stats.example.com") is False
        cloudpanel.delete_site.assert_called_once_with("stats.example.com")
