"""Local Connector - Runs commands and writes files on the dashboard host.

Every installer step goes through LocalRunner so that a dry run can show
what would change without touching the system.
"""

import logging
import os
import re
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from goaccess_monitor.errors import InstallError

logger = logging.getLogger(__name__)

# --siteUserPassword=..., --db-password=... and similar flags
SECRET_ARG_RE = re.compile(r"^(--[\w-]*password=).+", re.IGNORECASE)


def redact(command: list[str]) -> str:
    """Render a command for logs with password values masked."""
    return shlex.join(SECRET_ARG_RE.sub(r"\1***", arg) for arg in command)


@dataclass
class CommandResult:
    """Result of a command execution."""

    command: str
    stdout: str
    stderr: str
    exit_code: int
    success: bool = field(init=False)

    def __post_init__(self) -> None:
        self.success = self.exit_code == 0


class LocalRunner:
    """Execute host commands and file operations.

    Commands that only read state pass ``mutating=False`` so they still run
    during a dry run; everything else is logged and reported as successful.

    Example:
        >>> runner = LocalRunner(dry_run=True)
        >>> runner.run(["systemctl", "restart", "goaccess"]).success
        True
    """

    def __init__(self, *, dry_run: bool = False, timeout: float = 300) -> None:
        self.dry_run = dry_run
        self.timeout = timeout

    def run(
        self,
        command: list[str],
        *,
        mutating: bool = True,
        timeout: float | None = None,
        input_text: str | None = None,
    ) -> CommandResult:
        """Execute a command without a shell.

        Args:
            command: Argument vector.
            mutating: Whether the command changes the system.
            timeout: Seconds before the command is killed. Defaults to runner timeout.
            input_text: Optional data written to stdin.

        Returns:
            CommandResult. Missing binaries and timeouts are reported as
            failed results (exit 127 / 124), not exceptions.
        """
        display = redact(command)
        if self.dry_run and mutating:
            logger.info("[dry-run] %s", display)
            return CommandResult(command=display, stdout="", stderr="", exit_code=0)

        logger.debug("$ %s", display)
        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                input=input_text,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except FileNotFoundError as e:
            return CommandResult(command=display, stdout="", stderr=str(e), exit_code=127)
        except subprocess.TimeoutExpired:
            return CommandResult(
                command=display, stdout="", stderr=f"Timed out: {display}", exit_code=124
            )

        result = CommandResult(
            command=display,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            exit_code=proc.returncode,
        )
        if not result.success:
            logger.debug("exit %d: %s", result.exit_code, result.stderr.strip())
        return result

    def run_shell(self, script: str, *, mutating: bool = True, timeout: float | None = None) -> CommandResult:
        """Execute a shell pipeline (``bash -o pipefail -c``)."""
        return self.run(["bash", "-o", "pipefail", "-c", script], mutating=mutating, timeout=timeout)

    def which(self, name: str) -> str | None:
        """Locate an executable on PATH."""
        return shutil.which(name)

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def dir_exists(self, path: str) -> bool:
        return Path(path).is_dir()

    def read_file(self, path: str) -> str | None:
        """Read a file, or None if it doesn't exist.

        Raises:
            InstallError: If the file exists but cannot be read.
        """
        try:
            return Path(path).read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise InstallError(f"Cannot read {path}: {e.strerror or e}") from e

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def write_file(self, path: str, content: str, *, mode: int | None = None) -> None:
        """Write content to a file, creating parent directories.

        The mode is applied before content is written so secrets are never
        world-readable.

        Raises:
            InstallError: If the file or its parent directory cannot be written.
        """
        if self.dry_run:
            logger.info("[dry-run] write %s (%d bytes)", path, len(content))
            return

        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if mode is not None:
                target.touch(mode=mode)
                os.chmod(target, mode)
            target.write_text(content)
        except OSError as e:
            raise InstallError(f"Cannot write {path}: {e.strerror or e}") from e
        logger.debug("wrote %s", path)

    def make_dirs(self, *paths: str) -> None:
        for path in paths:
            if self.dry_run:
                logger.info("[dry-run] mkdir -p %s", path)
                continue
            try:
                Path(path).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise InstallError(f"Cannot create directory {path}: {e.strerror or e}") from e

    def chmod(self, path: str, mode: int) -> None:
        if self.dry_run:
            logger.info("[dry-run] chmod %o %s", mode, path)
            return
        try:
            os.chmod(path, mode)
        except OSError as e:
            raise InstallError(f"Cannot chmod {path}: {e.strerror or e}") from e

    def remove(self, path: str) -> None:
        """Delete a file or directory tree. Missing paths are ignored."""
        if self.dry_run:
            logger.info("[dry-run] rm -rf %s", path)
            return

        target = Path(path)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
        except OSError as e:
            raise InstallError(f"Cannot remove {path}: {e.strerror or e}") from e
