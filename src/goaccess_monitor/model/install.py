"""Installation model - immutable values passed to every installer step."""

import re
from dataclasses import dataclass, field
from enum import Enum

from goaccess_monitor.errors import ValidationError


class LogFormatChoice(Enum):
    """Which log layout the dashboard parses."""

    STANDARD = "standard"
    CLOUDFLARE = "cloudflare"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Preset GoAccess formats for CloudPanel's Nginx vhost logs.
PRESET_FORMATS: dict[LogFormatChoice, str] = {
    LogFormatChoice.STANDARD: '%h - %^ [%d:%t %^] "%r" %s %b "%R" "%u" "%v"',
    LogFormatChoice.CLOUDFLARE: '%v - %^ [%d:%t %^] "%r" %s %b "%R" "%u" "%v"',
}


@dataclass(frozen=True)
class RemoteServer:
    """A monitored server, addressed as user@hostname."""

    user: str
    host: str

    PATTERN = re.compile(r"^[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+$")

    @classmethod
    def parse(cls, value: str) -> "RemoteServer":
        """Parse ``user@hostname``.

        Raises:
            ValidationError: If the value is not in user@hostname form.
        """
        value = value.strip()
        if not cls.PATTERN.match(value):
            raise ValidationError(f"Invalid server format: {value!r} (expected user@hostname)")
        user, host = value.split("@", 1)
        return cls(user=user, host=host)

    def __str__(self) -> str:
        return f"{self.user}@{self.host}"


@dataclass(frozen=True)
class InstallConfig:
    """Everything the operator decided during the prompts.

    Attributes:
        domain: Dashboard domain served through CloudPanel.
        site_user: CloudPanel site user derived from the domain.
        site_password: Generated password for the site user.
        log_format: GoAccess log-format directive string.
        log_format_name: Human label (Standard, Cloudflare, Custom).
        servers: Remote servers whose logs will be collected.
    """

    domain: str
    site_user: str
    site_password: str
    log_format: str
    log_format_name: str = LogFormatChoice.STANDARD.label
    servers: tuple[RemoteServer, ...] = field(default_factory=tuple)

    @property
    def site_home(self) -> str:
        return f"/home/{self.site_user}"

    @property
    def report_output(self) -> str:
        return f"{self.site_home}/htdocs/{self.domain}/public/index.html"

    @property
    def dashboard_url(self) -> str:
        return f"https://{self.domain}"
