"""Connectors - the only places that touch the host or remote servers."""

from goaccess_monitor.connector.local import CommandResult, LocalRunner
from goaccess_monitor.connector.ssh import SSHConfig, SSHConnector

__all__ = ["CommandResult", "LocalRunner", "SSHConfig", "SSHConnector"]
