"""Pytest configuration and fixtures for goaccess-monitor tests."""

from unittest.mock import MagicMock

import pytest
from rich.console import Console

from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import CommandResult, LocalRunner
from goaccess_monitor.prompts import Prompter


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(command="test", stdout=stdout, stderr="", exit_code=0)


def failed(stderr: str = "boom", exit_code: int = 1) -> CommandResult:
    return CommandResult(command="test", stdout="", stderr=stderr, exit_code=exit_code)


@pytest.fixture
def mock_runner():
    """Create a mock LocalRunner for testing."""
    runner = MagicMock(spec=LocalRunner)
    runner.dry_run = False

    # Default behavior: commands succeed, nothing on disk
    runner.run.return_value = ok()
    runner.run_shell.return_value = ok()
    runner.which.return_value = None
    runner.file_exists.return_value = False
    runner.dir_exists.return_value = False
    runner.read_file.return_value = None

    return runner


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temporary directory."""
    return Settings(
        goaccess_conf_dir=str(tmp_path / "etc" / "goaccess"),
        goaccess_log_dir=str(tmp_path / "var" / "log" / "goaccess"),
        goaccess_db_dir=str(tmp_path / "var" / "lib" / "goaccess"),
        remote_logs_dir=str(tmp_path / "var" / "log" / "remote-servers"),
        collector_home=str(tmp_path / "home" / "web-monitor"),
        systemd_unit_path=str(tmp_path / "etc" / "systemd" / "goaccess.service"),
        update_script_path=str(tmp_path / "bin" / "update-server-monitoring.sh"),
        credentials_path=str(tmp_path / "root" / "credentials.txt"),
        nginx_sites_enabled=str(tmp_path / "nginx" / "sites-enabled"),
        nginx_sites_available=str(tmp_path / "nginx" / "sites-available"),
        letsencrypt_dir=str(tmp_path / "letsencrypt"),
        home_root=str(tmp_path / "home"),
        cleanup_settle_seconds=0,
    )


class ScriptedPrompter(Prompter):
    """Prompter that replays canned answers instead of reading stdin."""

    def __init__(self, texts=(), confirms=(), choices=(), servers=None):
        super().__init__(Console(quiet=True))
        self.texts = list(texts)
        self.confirms = list(confirms)
        self.choices = list(choices)
        self.servers = servers
        self.asked: list[str] = []

    def ask_text(self, question, default=""):
        self.asked.append(question)
        return self.texts.pop(0) if self.texts else default

    def ask_choice(self, question, choices, default=None):
        self.asked.append(question)
        return self.choices.pop(0)

    def confirm(self, question, default=False):
        self.asked.append(question)
        return self.confirms.pop(0) if self.confirms else default

    def ask_validated(self, question, validator, error):
        self.asked.append(question)
        while self.texts:
            answer = self.texts.pop(0)
            if validator(answer):
                return answer
        raise AssertionError(f"No valid scripted answer for: {question}")

    def ask_servers(self):
        self.asked.append("servers")
        return list(self.servers or [])


@pytest.fixture
def quiet_console():
    return Console(quiet=True)
