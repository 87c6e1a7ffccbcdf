"""Installer - Orders the installation steps.

IMPORTANT: This module only ORCHESTRATES. Every step that touches the host
lives in its own action class; every question goes through the Prompter.

Flow:
1. Preflight (root, CloudPanel)
2. Existing GoAccess install: reconfigure / reinstall / abort
3. Domain, site user, password; optional cleanup of an existing site
4. Log format (preset or translated custom Nginx format)
5. Monitored servers
6. Summary + confirmation
7. Provision: package, CloudPanel site, certificate, config, inventory,
   SSH key, credentials, update script, systemd service
"""

import logging
import os
from dataclasses import dataclass, field

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from goaccess_monitor.actions.cloudpanel import CloudPanelClient
from goaccess_monitor.actions.credentials import write_credentials
from goaccess_monitor.actions.domain import (
    DomainManager,
    derive_site_user,
    generate_password,
    validate_domain,
)
from goaccess_monitor.actions.goaccess import GoAccessInstaller
from goaccess_monitor.actions.inventory import ServerInventory
from goaccess_monitor.actions.service import ServiceManager
from goaccess_monitor.actions.ssh_keys import SSHKeyManager
from goaccess_monitor.config import Settings
from goaccess_monitor.connector.local import LocalRunner
from goaccess_monitor.errors import InstallAborted, InstallError, PreflightError, ValidationError
from goaccess_monitor.model.install import PRESET_FORMATS, InstallConfig, LogFormatChoice, RemoteServer
from goaccess_monitor.parser.log_format import (
    LogFormatTranslator,
    extract_log_formats,
    select_log_format,
)
from goaccess_monitor.prompts import Prompter

logger = logging.getLogger(__name__)

EXISTING_ACTIONS = {"1": "reconfigure", "2": "reinstall", "3": "abort"}
FORMAT_MENU = {
    "1": LogFormatChoice.STANDARD,
    "2": LogFormatChoice.CLOUDFLARE,
    "3": LogFormatChoice.CUSTOM,
}


@dataclass(frozen=True)
class InstallOptions:
    """Answers supplied up front (CLI flags). Anything left None is prompted."""

    domain: str | None = None
    log_format: LogFormatChoice | None = None
    nginx_format: str | None = None
    nginx_conf: str | None = None  # read nginx_format_name from this file
    nginx_format_name: str | None = None
    servers: tuple[str, ...] = field(default_factory=tuple)
    existing: str | None = None  # reconfigure | reinstall | abort
    recreate_existing_site: bool = False
    assume_yes: bool = False


class Installer:
    """Interactive GoAccess dashboard installation."""

    def __init__(
        self,
        runner: LocalRunner,
        settings: Settings,
        prompter: Prompter,
        console: Console | None = None,
        options: InstallOptions | None = None,
    ) -> None:
        self.runner = runner
        self.settings = settings
        self.prompter = prompter
        self.console = console or prompter.console
        self.options = options or InstallOptions()

        self.cloudpanel = CloudPanelClient(runner)
        self.domains = DomainManager(runner, self.cloudpanel, settings)
        self.goaccess = GoAccessInstaller(runner, settings)
        self.service = ServiceManager(runner, settings)
        self.inventory = ServerInventory(runner, settings)
        self.ssh_keys = SSHKeyManager(runner, settings)
        self.translator = LogFormatTranslator()

    def run(self) -> InstallConfig:
        """Run the full flow.

        Raises:
            PreflightError: Host is not suitable.
            InstallAborted: Operator declined at a prompt.
            InstallError: A provisioning step failed.
        """
        self.console.print(Panel.fit("[bold]GoAccess Multi-Server Monitoring[/]", border_style="cyan"))
        self.preflight()
        self.handle_existing_install()

        config = self.collect_config()
        self.show_summary(config)

        if not (self.options.assume_yes or self.prompter.confirm("Confirm installation?")):
            raise InstallAborted("Installation cancelled by user.")

        self.provision(config)
        return config

    # =========================================================================
    # PRE-INSTALL
    # =========================================================================

    def preflight(self) -> None:
        if os.geteuid() != 0:
            if not self.runner.dry_run:
                raise PreflightError("Please run as root")
            logger.warning("Not running as root; dry run only")
        if not self.cloudpanel.is_available():
            raise PreflightError(
                "CloudPanel is not installed. This installer requires a pre-installed CloudPanel."
            )

    def handle_existing_install(self) -> None:
        if not self.goaccess.is_installed():
            return

        action = self.options.existing
        if action is None:
            self.console.print("\n[yellow]GoAccess is already installed.[/]")
            self.console.print("1. Reconfigure existing installation")
            self.console.print("2. Remove and reinstall")
            self.console.print("3. Abort installation")
            action = EXISTING_ACTIONS[self.prompter.ask_choice("Choose an option", list(EXISTING_ACTIONS))]

        if action == "abort":
            raise InstallAborted("Installation aborted by user.")
        if action == "reinstall":
            self.goaccess.remove()
            logger.info("Proceeding with fresh installation...")
        else:
            logger.info("Proceeding with reconfiguration...")

    def collect_config(self) -> InstallConfig:
        domain = self.ask_domain()
        self.ensure_domain_free(domain)
        choice, log_format = self.ask_log_format()
        servers = self.ask_servers()

        return InstallConfig(
            domain=domain,
            site_user=derive_site_user(domain),
            site_password=generate_password(),
            log_format=log_format,
            log_format_name=choice.label,
            servers=tuple(servers),
        )

    def ask_domain(self) -> str:
        if self.options.domain is not None:
            if not validate_domain(self.options.domain):
                raise ValidationError(f"Invalid domain name: {self.options.domain}")
            return self.options.domain
        return self.prompter.ask_validated(
            "Enter domain for GoAccess monitoring (e.g., stats.example.com)",
            validate_domain,
            "Please enter a valid domain name.",
        )

    def ensure_domain_free(self, domain: str) -> None:
        logger.info("Checking if domain already exists...")
        if not self.domains.exists(domain):
            return

        self.console.print(f"[yellow]Domain '{domain}' already exists.[/]")
        recreate = self.options.recreate_existing_site or self.prompter.confirm(
            "Do you want to delete and recreate the site?", default=False
        )
        if not recreate:
            raise InstallAborted("Installation aborted by user - domain exists")

        logger.info("Deleting existing site for domain '%s'...", domain)
        if not self.domains.cleanup(domain):
            raise InstallError("Failed to fully clean up domain. Please remove manually and try again.")
        logger.info("Domain cleanup completed successfully.")

    def ask_log_format(self) -> tuple[LogFormatChoice, str]:
        choice = self.options.log_format
        if choice is None:
            self.console.print("\n[bold]Log Format Configuration[/]")
            self.console.print("1. Standard Nginx Log Format")
            self.console.print("2. Cloudflare Nginx Log Format")
            self.console.print("3. Enter custom Nginx log format")
            answer = self.prompter.ask_text("Choose an option (1-3)", default="1").strip()
            choice = FORMAT_MENU.get(answer, LogFormatChoice.STANDARD)

        if choice is not LogFormatChoice.CUSTOM:
            return choice, PRESET_FORMATS[choice]

        nginx_format = self.options.nginx_format
        if nginx_format is None and (self.options.nginx_conf or self.options.nginx_format_name):
            nginx_format = self.read_nginx_format(
                self.options.nginx_conf or self.settings.nginx_conf_path,
                self.options.nginx_format_name,
            )
        if nginx_format is None:
            nginx_format = self.offer_host_formats()
        if nginx_format is None:
            nginx_format = self.prompter.ask_validated(
                "Enter your Nginx log format (e.g., '$remote_addr - $remote_user [$time_local] \"$request\"')",
                lambda value: bool(value.strip()),
                "The log format cannot be empty.",
            )
        if not nginx_format.strip():
            raise ValidationError("Custom Nginx log format is empty")

        converted = self.translator.translate(nginx_format)
        self.console.print(f"Converted GoAccess Log Format: [cyan]{escape(converted)}[/]", highlight=False)
        skipped = self.translator.unmapped_variables(nginx_format)
        if skipped:
            logger.warning("No GoAccess field for: %s (skipped as %%^)", ", ".join(skipped))
        return choice, converted

    def offer_host_formats(self) -> str | None:
        """Let the operator reuse a log_format already defined in nginx.conf."""
        text = self.runner.read_file(self.settings.nginx_conf_path)
        formats = extract_log_formats(text) if text else {}
        if not formats:
            return None

        self.console.print(f"log_format directives in {self.settings.nginx_conf_path}: {escape(', '.join(formats))}")
        name = self.prompter.ask_text("Use one of them (leave blank to type a format)", default="").strip()
        if not name:
            return None
        if name not in formats:
            self.console.print(f"[yellow]Unknown log_format '{escape(name)}', enter the format manually.[/]")
            return None
        return formats[name]

    def read_nginx_format(self, path: str, name: str | None) -> str:
        """Take a log_format from the host's Nginx config (first one if no name)."""
        text = self.runner.read_file(path)
        if text is None:
            raise ValidationError(f"Nginx config not found: {path}")
        try:
            nginx_format = select_log_format(text, name)
        except ValidationError as e:
            raise ValidationError(f"{e} in {path}") from e
        logger.info("Using log_format %s from %s", name or "(first)", path)
        return nginx_format

    def ask_servers(self) -> list[RemoteServer]:
        if self.options.servers:
            return [RemoteServer.parse(value) for value in self.options.servers]
        return self.prompter.ask_servers()

    def show_summary(self, config: InstallConfig) -> None:
        table = Table(title="Configuration Summary", show_header=False)
        table.add_column("Setting", style="bold")
        table.add_column("Value")
        table.add_row("Monitoring Domain", config.domain)
        table.add_row("Site User", config.site_user)
        table.add_row("Log Format", config.log_format_name)
        table.add_row("Servers to Monitor", "\n".join(str(s) for s in config.servers))
        self.console.print(table)

    # =========================================================================
    # PROVISIONING
    # =========================================================================

    def provision(self, config: InstallConfig) -> None:
        logger.info("Starting GoAccess Multi-Server Monitoring installation...")

        if not self.goaccess.is_installed():
            self.goaccess.install()
        else:
            self.goaccess.prepare_directories()

        self.cloudpanel.add_reverse_proxy(
            config.domain,
            self.settings.reverse_proxy_url,
            config.site_user,
            config.site_password,
        )
        if not self.cloudpanel.install_certificate(config.domain):
            self.console.print("[yellow]WARNING: SSL Certificate installation failed[/]")

        self.goaccess.write_config(config)
        self.inventory.save(config.servers)
        self.ssh_keys.ensure_key()
        credentials_path = write_credentials(self.runner, config, self.settings)
        self.inventory.write_update_script()
        self.service.setup()

        logger.info("GoAccess Multi-Server Monitoring installation completed successfully!")
        self.console.print(f"\n[bold green]Access the monitoring dashboard at:[/] {config.dashboard_url}")
        self.console.print(f"Credentials and configuration saved in: {credentials_path}")
