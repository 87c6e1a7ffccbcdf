"""SSH Connector - Key-based access checks against monitored servers.

The dashboard host pulls logs from each monitored server with the
collector's ed25519 key. This module verifies that access works before
the operator wires up rsync.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path

import paramiko
from paramiko.ssh_exception import AuthenticationException, SSHException

from goaccess_monitor.connector.local import CommandResult
from goaccess_monitor.model.install import RemoteServer


@dataclass
class SSHConfig:
    """SSH connection configuration."""

    host: str
    user: str = "root"
    port: int = 22
    key_path: str | None = None
    timeout: int = 15

    @classmethod
    def for_server(cls, server: RemoteServer, key_path: str | None = None, port: int = 22) -> "SSHConfig":
        return cls(host=server.host, user=server.user, port=port, key_path=key_path)


class SSHConnector:
    """SSH connection to a monitored server.

    Example:
        >>> config = SSHConfig(host="web1.example.com", user="deploy")
        >>> with SSHConnector(config) as ssh:
        ...     ssh.file_readable("/var/log/nginx/access.log")
    """

    def __init__(self, config: SSHConfig) -> None:
        self.config = config
        self._client: paramiko.SSHClient | None = None

    def connect(self) -> None:
        """Establish SSH connection.

        Raises:
            ConnectionError: On authentication or transport failure.
        """
        self._client = paramiko.SSHClient()
        self._client.load_system_host_keys()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_kwargs: dict = {
            "hostname": self.config.host,
            "port": self.config.port,
            "username": self.config.user,
            "timeout": self.config.timeout,
        }
        if self.config.key_path:
            key_path = Path(self.config.key_path).expanduser()
            if key_path.exists():
                connect_kwargs["key_filename"] = str(key_path)
                connect_kwargs["look_for_keys"] = False

        try:
            self._client.connect(**connect_kwargs)
        except AuthenticationException as e:
            raise ConnectionError(f"Authentication failed: {e}") from e
        except (SSHException, OSError) as e:
            raise ConnectionError(f"SSH error: {e}") from e

    def disconnect(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "SSHConnector":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.disconnect()

    def run(self, command: str, timeout: float | None = None) -> CommandResult:
        """Execute a command on the remote server."""
        if not self._client:
            raise RuntimeError("Not connected. Use 'with SSHConnector(config):' context.")

        cmd_timeout = timeout if timeout is not None else self.config.timeout
        try:
            _, stdout, stderr = self._client.exec_command(command, timeout=cmd_timeout)
            exit_code = stdout.channel.recv_exit_status()
            return CommandResult(
                command=command,
                stdout=stdout.read().decode("utf-8", errors="replace"),
                stderr=stderr.read().decode("utf-8", errors="replace"),
                exit_code=exit_code,
            )
        except (SSHException, OSError) as e:
            return CommandResult(
                command=command,
                stdout="",
                stderr=f"SSH Execution Error: {e}",
                exit_code=255,
            )

    def file_readable(self, path: str) -> bool:
        """Check that the login user can read a remote file."""
        return self.run(f"test -r {shlex.quote(path)}").success
