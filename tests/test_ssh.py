"""Tests for the paramiko SSH connector."""

from unittest.mock import MagicMock, patch

import pytest
from paramiko.ssh_exception import AuthenticationException, SSHException

from goaccess_monitor.connector.ssh import SSHConfig, SSHConnector
from goaccess_monitor.model.install import RemoteServer


@pytest.fixture
def mock_client():
    with patch("goaccess_monitor.connector.ssh.paramiko.SSHClient") as MockClient:
        yield MockClient.return_value


def _exec_result(stdout=b"", stderr=b"", exit_code=0):
    out = MagicMock()
    out.read.return_value = stdout
    out.channel.recv_exit_status.return_value = exit_code
    err = MagicMock()
    err.read.return_value = stderr
    return (MagicMock(), out, err)


def test_config_for_server():
    cfg = SSHConfig.for_server(RemoteServer("deploy", "web1.example.com"), key_path="/k", port=2222)
    assert (cfg.host, cfg.user, cfg.port, cfg.key_path) == ("web1.example.com", "deploy", 2222, "/k")


def test_connect_uses_key(mock_client, tmp_path):
    key = tmp_path / "id_ed25519"
    key.write_text("key")
    with SSHConnector(SSHConfig(host="h.example.com", user="deploy", key_path=str(key))):
        pass

    kwargs = mock_client.connect.call_args.kwargs
    assert kwargs["hostname"] == "h.example.com"
    assert kwargs["username"] == "deploy"
    assert kwargs["key_filename"] == str(key)
    mock_client.close.assert_called_once()


def test_auth_failure_is_connection_error(mock_client):
    mock_client.connect.side_effect = AuthenticationException("denied")
    with pytest.raises(ConnectionError, match="Authentication failed"):
        SSHConnector(SSHConfig(host="h")).connect()


def test_transport_failure_is_connection_error(mock_client):
    mock_client.connect.side_effect = SSHException("no route")
    with pytest.raises(ConnectionError, match="SSH error"):
        SSHConnector(SSHConfig(host="h")).connect()


def test_file_readable(mock_client):
    mock_client.exec_command.side_effect = [_exec_result(exit_code=0), _exec_result(exit_code=1)]
    with SSHConnector(SSHConfig(host="h")) as ssh:
        assert ssh.file_readable("/var/log/nginx/access.log")
        assert not ssh.file_readable("/var/log/nginx/other log")

    second = mock_client.exec_command.call_args_list[1].args[0]
    assert second == "test -r '/var/log/nginx/other log'"


def test_run_requires_connection():
    with pytest.raises(RuntimeError):
        SSHConnector(SSHConfig(host="h")).run("true")
