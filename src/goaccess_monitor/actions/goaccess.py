"""GoAccess Action - Package installation and configuration file.

CONTRACT:
- read_only: False (apt repository, package, /etc/goaccess)
- reversible: True (remove())
- prerequisites: ["Debian/Ubuntu with apt", "run as root"]
"""

import logging
import shlex

from goaccess_monitor.actions import ActionContract
from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import LocalRunner
from goaccess_monitor.errors import InstallError
from goaccess_monitor.model.install import InstallConfig
from goaccess_monitor.templating import render

logger = logging.getLogger(__name__)

APT_SOURCES_PATH = "/etc/apt/sources.list.d/goaccess.list"
APT_KEYRING_PATH = "/etc/apt/trusted.gpg.d/goaccess.gpg"


class GoAccessInstaller:
    """Install, configure and remove GoAccess on the dashboard host."""

    CONTRACT = ActionContract(
        read_only=False,
        reversible=True,
        prerequisites=["Debian/Ubuntu with apt", "run as root"],
    )

    def __init__(self, runner: LocalRunner, settings: Settings) -> None:
        self.runner = runner
        self.settings = settings

    def is_installed(self) -> bool:
        return self.runner.which("goaccess") is not None

    def _distro_codename(self) -> str:
        result = self.runner.run(["lsb_release", "-cs"], mutating=False)
        if result.success and result.stdout.strip():
            return result.stdout.strip()

        os_release = self.runner.read_file("/etc/os-release") or ""
        for line in os_release.splitlines():
            if line.startswith("VERSION_CODENAME="):
                return line.split("=", 1)[1].strip().strip('"')
        raise InstallError("Cannot determine distribution codename for the GoAccess repository")

    def install(self) -> None:
        """Install GoAccess from the official repository and prepare directories.

        Raises:
            InstallError: If the key import or any apt step fails.
        """
        logger.info("Installing GoAccess...")
        codename = self._distro_codename()
        self.runner.write_file(APT_SOURCES_PATH, f"deb {self.settings.goaccess_apt_repo} {codename} main\n")

        key_cmd = (
            f"wget -qO - {shlex.quote(self.settings.goaccess_gpg_key_url)}"
            f" | gpg --dearmor --yes -o {APT_KEYRING_PATH}"
        )
        steps = [
            ("import repository key", lambda: self.runner.run_shell(key_cmd)),
            ("apt-get update", lambda: self.runner.run(["apt-get", "update"], timeout=600)),
            (
                "apt-get install goaccess",
                lambda: self.runner.run(["apt-get", "install", "-y", "goaccess"], timeout=900),
            ),
        ]
        for label, step in steps:
            result = step()
            if not result.success:
                raise InstallError(f"GoAccess install failed at '{label}': {result.stderr.strip()}")

        self.prepare_directories()

    def prepare_directories(self) -> None:
        s = self.settings
        self.runner.make_dirs(s.goaccess_log_dir, s.goaccess_db_dir, s.remote_logs_dir)
        owner = f"{s.service_user}:{s.service_user}"
        result = self.runner.run(["chown", "-R", owner, s.goaccess_log_dir, s.goaccess_db_dir])
        if not result.success:
            logger.warning("Could not chown GoAccess directories: %s", result.stderr.strip())

    def remove(self) -> None:
        """Stop the service and purge the package and its configuration."""
        logger.info("Removing existing GoAccess installation...")
        self.runner.run(["systemctl", "stop", "goaccess"])
        self.runner.run(["systemctl", "disable", "goaccess"])
        self.runner.remove(self.settings.systemd_unit_path)

        for args in (["apt-get", "remove", "-y", "goaccess"], ["apt-get", "purge", "-y", "goaccess"]):
            result = self.runner.run(args, timeout=600)
            if not result.success:
                raise InstallError(f"{shlex.join(args)} failed: {result.stderr.strip()}")

        self.runner.remove(self.settings.goaccess_conf_dir)
        self.runner.run(["systemctl", "daemon-reload"])
        logger.info("GoAccess removed")

    def render_config(self, config: InstallConfig) -> str:
        return render("goaccess.conf.j2", config=config, settings=self.settings)

    def write_config(self, config: InstallConfig) -> None:
        self.runner.make_dirs(self.settings.goaccess_conf_dir)
        self.runner.write_file(self.settings.goaccess_conf_path, self.render_config(config))
        logger.info("Wrote %s", self.settings.goaccess_conf_path)
