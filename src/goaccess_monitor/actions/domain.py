"""Domain Action - Validation, naming and cleanup of the dashboard domain.

CONTRACT:
- read_only: False (cleanup deletes the site, vhost files and certificates)
- reversible: False
- prerequisites: ["run as root"]
"""

import logging
import re
import secrets
import string
import time

from goaccess_monitor.actions import ActionContract
from goaccess_monitor.actions.cloudpanel import CloudPanelClient
from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import LocalRunner

logger = logging.getLogger(__name__)

DOMAIN_RE = re.compile(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PASSWORD_ALPHABET = string.ascii_letters + string.digits


def validate_domain(domain: str) -> bool:
    """Check that ``domain`` looks like a fully qualified host name."""
    return bool(DOMAIN_RE.match(domain))


def derive_site_user(domain: str) -> str:
    """Derive the CloudPanel site user from the domain.

    ``www.example.com`` and ``example.com`` map to ``example``; any other
    subdomain is appended: ``stats.example.com`` -> ``example-stats``.
    """
    labels = domain.split(".")
    if len(labels) < 2:
        return labels[0]
    main, first = labels[-2], labels[0]
    if first in ("www", main):
        return main
    return f"{main}-{first}"


def generate_password(length: int = 12) -> str:
    """Random alphanumeric password."""
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class DomainManager:
    """Detects and removes an existing site for the dashboard domain."""

    CONTRACT = ActionContract(
        read_only=False,
        reversible=False,
        prerequisites=["run as root"],
    )

    def __init__(self, runner: LocalRunner, cloudpanel: CloudPanelClient, settings: Settings) -> None:
        self.runner = runner
        self.cloudpanel = cloudpanel
        self.settings = settings

    def _vhost_paths(self, domain: str) -> list[str]:
        return [
            f"{self.settings.nginx_sites_enabled}/{domain}.conf",
            f"{self.settings.nginx_sites_available}/{domain}.conf",
        ]

    def exists(self, domain: str) -> bool:
        """Domain is known to CloudPanel or has an enabled Nginx vhost."""
        if self.cloudpanel.site_exists(domain):
            return True
        return self.runner.file_exists(f"{self.settings.nginx_sites_enabled}/{domain}.conf")

    def cleanup(self, domain: str) -> bool:
        """Remove every trace of the domain, then verify.

        Individual step failures are logged and tolerated; the final
        verification decides the outcome.

        Returns:
            True if the domain is gone afterwards.
        """
        if not self.runner.run(["systemctl", "stop", "nginx"]).success:
            logger.warning("Could not stop nginx, continuing cleanup")

        if self.cloudpanel.site_exists(domain):
            result = self.cloudpanel.delete_site(domain)
            if not result.success:
                logger.warning("clpctl site:delete failed: %s", result.stderr.strip())

        le_dir = self.settings.letsencrypt_dir
        site_dir = f"{self.settings.home_root}/{derive_site_user(domain)}/htdocs/{domain}"
        for path in self._vhost_paths(domain) + [
            f"{le_dir}/live/{domain}",
            f"{le_dir}/archive/{domain}",
            site_dir,
        ]:
            try:
                self.runner.remove(path)
            except OSError as e:
                logger.warning("Could not remove %s: %s", path, e)

        if not self.runner.run(["systemctl", "start", "nginx"]).success:
            logger.warning("Could not start nginx after cleanup")

        if self.runner.dry_run:
            return True

        time.sleep(self.settings.cleanup_settle_seconds)

        if self.cloudpanel.site_exists(domain):
            return False
        return not any(self.runner.file_exists(p) for p in self._vhost_paths(domain))
