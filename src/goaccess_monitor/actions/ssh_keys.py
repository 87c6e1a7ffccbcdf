"""SSH key bootstrap for the log collector account."""

import logging
import os

from goaccess_monitor.actions import ActionContract
from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import LocalRunner
from goaccess_monitor.errors import InstallError

logger = logging.getLogger(__name__)


class SSHKeyManager:
    """Ensure the collector has an ed25519 key pair with sane permissions."""

    CONTRACT = ActionContract(
        read_only=False,
        reversible=False,
        prerequisites=["ssh-keygen on PATH"],
    )

    def __init__(self, runner: LocalRunner, settings: Settings) -> None:
        self.runner = runner
        self.settings = settings

    @property
    def key_path(self) -> str:
        return self.settings.collector_key_path

    @property
    def public_key_path(self) -> str:
        return f"{self.key_path}.pub"

    def ensure_user(self) -> None:
        """Create the collector system account if it doesn't exist."""
        user = self.settings.collector_user
        if self.runner.run(["id", "-u", user], mutating=False).success:
            return
        logger.info("Creating collector user %s", user)
        result = self.runner.run(
            ["useradd", "--create-home", "--home-dir", self.settings.collector_home, "--shell", "/bin/bash", user]
        )
        if not result.success:
            raise InstallError(f"useradd {user} failed: {result.stderr.strip()}")

    def ensure_key(self) -> str:
        """Create the key pair if missing and fix ownership.

        Returns:
            Path of the private key.
        """
        self.ensure_user()
        ssh_dir = os.path.dirname(self.key_path)
        self.runner.make_dirs(ssh_dir)

        if not self.runner.file_exists(self.key_path):
            logger.info("Generating SSH key %s", self.key_path)
            result = self.runner.run(
                ["ssh-keygen", "-t", "ed25519", "-f", self.key_path, "-N", "", "-C", "goaccess-monitor"]
            )
            if not result.success:
                raise InstallError(f"ssh-keygen failed: {result.stderr.strip()}")

        self.runner.chmod(ssh_dir, 0o700)
        for path in (self.key_path, self.public_key_path):
            if self.runner.dry_run or self.runner.file_exists(path):
                self.runner.chmod(path, 0o600)

        owner = f"{self.settings.collector_user}:{self.settings.collector_user}"
        result = self.runner.run(["chown", "-R", owner, ssh_dir])
        if not result.success:
            logger.warning("Could not chown %s: %s", ssh_dir, result.stderr.strip())
        return self.key_path

    def public_key(self) -> str | None:
        content = self.runner.read_file(self.public_key_path)
        return content.strip() if content else None
