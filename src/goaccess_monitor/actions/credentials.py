"""Credentials file with the generated password and operator instructions."""

import logging

from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import LocalRunner
from goaccess_monitor.model.install import InstallConfig
from goaccess_monitor.templating import render

logger = logging.getLogger(__name__)


def render_credentials(config: InstallConfig, settings: Settings) -> str:
    return render("credentials.txt.j2", config=config, settings=settings)


def write_credentials(runner: LocalRunner, config: InstallConfig, settings: Settings) -> str:
    """Write the root-only credentials file and return its path."""
    runner.write_file(settings.credentials_path, render_credentials(config, settings), mode=0o600)
    logger.info("Credentials saved to %s", settings.credentials_path)
    return settings.credentials_path
