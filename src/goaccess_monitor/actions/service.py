"""Service Action - systemd unit for the GoAccess real-time server."""

import logging

from goaccess_monitor.actions import ActionContract
from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import LocalRunner
from goaccess_monitor.errors import InstallError
from goaccess_monitor.templating import render

logger = logging.getLogger(__name__)


class ServiceManager:
    """Write, enable and supervise ``goaccess.service``."""

    CONTRACT = ActionContract(
        read_only=False,
        reversible=True,
        prerequisites=["systemd", "run as root"],
    )

    UNIT = "goaccess"

    def __init__(self, runner: LocalRunner, settings: Settings) -> None:
        self.runner = runner
        self.settings = settings

    def render_unit(self) -> str:
        return render("goaccess.service.j2", settings=self.settings)

    def is_active(self) -> bool:
        return self.runner.run(["systemctl", "is-active", "--quiet", self.UNIT], mutating=False).success

    def setup(self) -> None:
        """Write the unit, reload systemd, enable and start the service.

        Raises:
            InstallError: If any systemctl step fails or the service is not
                active afterwards.
        """
        self.runner.write_file(self.settings.systemd_unit_path, self.render_unit())

        for args in (
            ["systemctl", "daemon-reload"],
            ["systemctl", "enable", self.UNIT],
            ["systemctl", "start", self.UNIT],
        ):
            result = self.runner.run(args)
            if not result.success:
                raise InstallError(f"{' '.join(args)} failed: {result.stderr.strip()}")

        if not self.runner.dry_run and not self.is_active():
            raise InstallError("Failed to start GoAccess service")
        logger.info("GoAccess service is running")

    def restart(self) -> None:
        result = self.runner.run(["systemctl", "restart", self.UNIT])
        if not result.success:
            raise InstallError(f"Failed to restart GoAccess service: {result.stderr.strip()}")
