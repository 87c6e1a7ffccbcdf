"""Inventory Action - The list of monitored servers and its update hook.

The list lives in a flat file, one ``user@hostname`` per line, so that the
shell update script can read it without this package installed.
"""

import logging

from goaccess_monitor import __version__
from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import LocalRunner
from goaccess_monitor.errors import ValidationError
from goaccess_monitor.model.install import RemoteServer
from goaccess_monitor.templating import render

logger = logging.getLogger(__name__)


class ServerInventory:
    """Load, edit and persist the monitored-server list."""

    HEADER = "# Monitored servers (user@hostname), one per line\n"

    def __init__(self, runner: LocalRunner, settings: Settings) -> None:
        self.runner = runner
        self.settings = settings

    @property
    def path(self) -> str:
        return self.settings.servers_path

    def load(self) -> list[RemoteServer]:
        """Read the inventory. Malformed entries are skipped with a warning."""
        content = self.runner.read_file(self.path)
        if not content:
            return []
        return parse_servers(content)

    def save(self, servers: list[RemoteServer] | tuple[RemoteServer, ...]) -> None:
        body = "".join(f"{server}\n" for server in servers)
        self.runner.write_file(self.path, self.HEADER + body)

    def add(self, value: str) -> bool:
        """Add a server. Returns False if it is already listed.

        Raises:
            ValidationError: If the value is not user@hostname.
        """
        server = RemoteServer.parse(value)
        servers = self.load()
        if server in servers:
            return False
        servers.append(server)
        self.save(servers)
        logger.info("Added %s to %s", server, self.path)
        return True

    def remove(self, value: str) -> bool:
        """Remove a server. Returns False if it was not listed."""
        server = RemoteServer.parse(value)
        servers = self.load()
        if server not in servers:
            return False
        servers.remove(server)
        self.save(servers)
        logger.info("Removed %s from %s", server, self.path)
        return True

    def write_update_script(self) -> None:
        """Write the shell hook that re-reads the inventory and restarts GoAccess."""
        script = render("update-server-monitoring.sh.j2", settings=self.settings, version=__version__)
        self.runner.write_file(self.settings.update_script_path, script, mode=0o755)


def parse_servers(content: str) -> list[RemoteServer]:
    """Parse inventory text.

    Blank lines and ``#`` comments are ignored. Several whitespace-separated
    entries on one line are accepted as well. Duplicates are dropped.
    """
    servers: list[RemoteServer] = []
    for line_number, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        for entry in stripped.split():
            try:
                server = RemoteServer.parse(entry)
            except ValidationError:
                logger.warning("Ignoring invalid server entry on line %d: %s", line_number, entry)
                continue
            if server not in servers:
                servers.append(server)
    return servers
