"""Tests for LocalRunner."""

import logging
import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from goaccess_monitor.connector.local import CommandResult, LocalRunner, redact
from goaccess_monitor.errors import InstallError


def test_command_result_success_flag():
    assert CommandResult(command="x", stdout="", stderr="", exit_code=0).success
    assert not CommandResult(command="x", stdout="", stderr="", exit_code=2).success


def test_run_captures_output():
    completed = MagicMock(returncode=0, stdout="active\n", stderr="")
    with patch("goaccess_monitor.connector.local.subprocess.run", return_value=completed) as mock_run:
        result = LocalRunner().run(["systemctl", "is-active", "goaccess"])

    assert result.success
    assert result.stdout == "active\n"
    assert result.command == "systemctl is-active goaccess"
    assert mock_run.call_args.args[0] == ["systemctl", "is-active", "goaccess"]


def test_dry_run_skips_mutating_commands():
    with patch("goaccess_monitor.connector.local.subprocess.run") as mock_run:
        result = LocalRunner(dry_run=True).run(["apt-get", "install", "-y", "goaccess"])

    assert result.success
    mock_run.assert_not_called()


def test_dry_run_still_runs_queries():
    completed = MagicMock(returncode=0, stdout="bookworm\n", stderr="")
    with patch("goaccess_monitor.connector.local.subprocess.run", return_value=completed) as mock_run:
        result = LocalRunner(dry_run=True).run(["lsb_release", "-cs"], mutating=False)

    assert result.stdout == "bookworm\n"
    mock_run.assert_called_once()


def test_missing_binary_is_failed_result():
    with patch("goaccess_monitor.connector.local.subprocess.run", side_effect=FileNotFoundError("clpctl")):
        result = LocalRunner().run(["clpctl", "site:list"])
    assert result.exit_code == 127
    assert not result.success


def test_timeout_is_failed_result():
    with patch(
        "goaccess_monitor.connector.local.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="apt-get", timeout=1),
    ):
        result = LocalRunner().run(["apt-get", "update"], timeout=1)
    assert result.exit_code == 124


def test_run_shell_uses_pipefail():
    with patch.object(LocalRunner, "run") as mock_run:
        LocalRunner().run_shell("wget -qO - x | gpg --dearmor")
    assert mock_run.call_args.args[0][:3] == ["bash", "-o", "pipefail"]


def test_write_file_with_mode(tmp_path):
    target = tmp_path / "deep" / "secret.txt"
    LocalRunner().write_file(str(target), "password", mode=0o600)

    assert target.read_text() == "password"
    assert os.stat(target).st_mode & 0o777 == 0o600


def test_dry_run_writes_nothing(tmp_path):
    runner = LocalRunner(dry_run=True)
    runner.write_file(str(tmp_path / "a.conf"), "x")
    runner.make_dirs(str(tmp_path / "dir"))
    (tmp_path / "keep").write_text("x")
    runner.remove(str(tmp_path / "keep"))

    assert not (tmp_path / "a.conf").exists()
    assert not (tmp_path / "dir").exists()
    assert (tmp_path / "keep").exists()


def test_remove_file_and_tree(tmp_path):
    (tmp_path / "tree" / "sub").mkdir(parents=True)
    (tmp_path / "tree" / "sub" / "f").write_text("x")
    (tmp_path / "file").write_text("x")

    runner = LocalRunner()
    runner.remove(str(tmp_path / "tree"))
    runner.remove(str(tmp_path / "file"))
    runner.remove(str(tmp_path / "never-existed"))

    assert not (tmp_path / "tree").exists()
    assert not (tmp_path / "file").exists()


def test_read_file_missing(tmp_path):
    assert LocalRunner().read_file(str(tmp_path / "nope")) is None


def test_redact_masks_password_flags():
    assert redact(["clpctl", "site:add:reverse-proxy", "--siteUser=stats", "--siteUserPassword=Hunter2abc"]) == (
        "clpctl site:add:reverse-proxy --siteUser=stats '--siteUserPassword=***'"
    )


def test_dry_run_log_hides_password(caplog):
    caplog.set_level(logging.INFO, logger="goaccess_monitor")
    result = LocalRunner(dry_run=True).run(["clpctl", "site:add:reverse-proxy", "--siteUserPassword=SECRET123"])

    assert "SECRET123" not in caplog.text
    assert "SECRET123" not in result.command
    assert "--siteUserPassword=***" in caplog.text


def test_debug_log_hides_password(caplog):
    caplog.set_level(logging.DEBUG, logger="goaccess_monitor")
    completed = MagicMock(returncode=1, stdout="", stderr="site exists")
    with patch("goaccess_monitor.connector.local.subprocess.run", return_value=completed) as mock_run:
        LocalRunner().run(["clpctl", "site:add:reverse-proxy", "--siteUserPassword=SECRET123"])

    assert "SECRET123" not in caplog.text
    # the real argument still reaches clpctl
    assert "--siteUserPassword=SECRET123" in mock_run.call_args.args[0]


def test_write_under_regular_file_raises_install_error(tmp_path):
    blocker = tmp_path / "goaccess"
    blocker.write_text("not a directory")

    runner = LocalRunner()
    with pytest.raises(InstallError, match="Cannot write"):
        runner.write_file(str(blocker / "monitored_servers"), "a@b.example.com\n")
    with pytest.raises(InstallError, match="Cannot create directory"):
        runner.make_dirs(str(blocker / "sub"))
    with pytest.raises(InstallError, match="Cannot read"):
        runner.read_file(str(blocker / "monitored_servers"))


def test_chmod_missing_path_raises_install_error(tmp_path):
    with pytest.raises(InstallError, match="Cannot chmod"):
        LocalRunner().chmod(str(tmp_path / "missing"), 0o600)
