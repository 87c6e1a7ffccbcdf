"""CloudPanel Action - Site and certificate management through clpctl.

CONTRACT:
- read_only: False (creates and deletes CloudPanel sites)
- reversible: True (site:delete)
- prerequisites: ["clpctl on PATH", "run as root"]
"""

import logging
import re

from goaccess_monitor.actions import ActionContract
from goaccess_monitor.connector.local import CommandResult, LocalRunner
from goaccess_monitor.errors import InstallError

logger = logging.getLogger(__name__)


class CloudPanelClient:
    """Thin wrapper over the ``clpctl`` control-plane CLI."""

    CONTRACT = ActionContract(
        read_only=False,
        reversible=True,
        prerequisites=["clpctl on PATH", "run as root"],
    )

    BINARY = "clpctl"

    def __init__(self, runner: LocalRunner) -> None:
        self.runner = runner

    def is_available(self) -> bool:
        return self.runner.which(self.BINARY) is not None

    def list_sites(self) -> str:
        """Raw ``clpctl site:list`` output, empty if the call fails."""
        result = self.runner.run([self.BINARY, "site:list"], mutating=False)
        return result.stdout if result.success else ""

    def site_exists(self, domain: str) -> bool:
        """Whether CloudPanel lists a site for exactly this domain."""
        pattern = re.compile(rf"(?<![\w.-]){re.escape(domain)}(?![\w.-])")
        return bool(pattern.search(self.list_sites()))

    def add_reverse_proxy(self, domain: str, proxy_url: str, site_user: str, password: str) -> None:
        """Create a reverse-proxy site pointing at the GoAccess websocket server.

        Raises:
            InstallError: If clpctl reports failure.
        """
        logger.info("Creating CloudPanel site for %s -> %s", domain, proxy_url)
        result = self.runner.run([
            self.BINARY,
            "site:add:reverse-proxy",
            f"--domainName={domain}",
            f"--reverseProxyUrl={proxy_url}",
            f"--siteUser={site_user}",
            f"--siteUserPassword={password}",
        ])
        if not result.success:
            raise InstallError(f"Failed to create CloudPanel site: {_error_text(result)}")

    def delete_site(self, domain: str) -> CommandResult:
        logger.info("Removing %s from CloudPanel", domain)
        return self.runner.run([self.BINARY, "site:delete", f"--domainName={domain}", "--force"])

    def install_certificate(self, domain: str) -> bool:
        """Request a Let's Encrypt certificate. Returns False on failure."""
        logger.info("Installing SSL certificate for %s", domain)
        result = self.runner.run(
            [self.BINARY, "lets-encrypt:install:certificate", f"--domainName={domain}"],
            timeout=600,
        )
        if not result.success:
            logger.warning("SSL certificate installation failed: %s", _error_text(result))
        return result.success


def _error_text(result: CommandResult) -> str:
    return (result.stderr or result.stdout).strip() or f"exit code {result.exit_code}"
