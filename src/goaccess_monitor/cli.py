"""
Click-based CLI for goaccess-monitor.

IMPORTANT: This module only ORCHESTRATES. It never reasons or makes decisions.
- Loads settings
- Builds runner / prompter
- Invokes actions
- Formats output
"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from goaccess_monitor import __version__
from goaccess_monitor.actions.goaccess import GoAccessInstaller
from goaccess_monitor.actions.installer import Installer, InstallOptions
from goaccess_monitor.actions.inventory import ServerInventory
from goaccess_monitor.actions.service import ServiceManager
from goaccess_monitor.config import load_settings
from goaccess_monitor.connector.local import LocalRunner
from goaccess_monitor.connector.ssh import SSHConfig, SSHConnector
from goaccess_monitor.errors import GoAccessMonitorError, InstallAborted
from goaccess_monitor.logging_config import setup_logging
from goaccess_monitor.model.install import LogFormatChoice, RemoteServer
from goaccess_monitor.parser.log_format import LogFormatTranslator, select_log_format
from goaccess_monitor.prompts import Prompter

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="goaccess-monitor")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help="YAML settings file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """GoAccess multi-server monitoring for CloudPanel hosts.

    Installs a real-time GoAccess dashboard behind a CloudPanel reverse proxy
    and manages the list of servers it collects logs from.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(config_path)
    except GoAccessMonitorError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


@main.command()
@click.option("--domain", "-d", help="Dashboard domain (e.g. stats.example.com)")
@click.option(
    "--log-format",
    "log_format",
    type=click.Choice([c.value for c in LogFormatChoice]),
    help="Log format preset, or 'custom' to translate an Nginx log_format",
)
@click.option("--nginx-format", help="Nginx log_format string (with --log-format custom)")
@click.option(
    "--nginx-conf",
    type=click.Path(exists=True, dir_okay=False),
    help="Take the custom format from this Nginx config (implies --log-format custom)",
)
@click.option("--nginx-format-name", help="log_format name to take from nginx.conf (default: first found)")
@click.option("--server", "-s", "servers", multiple=True, help="Server to monitor (user@hostname), repeatable")
@click.option(
    "--existing",
    type=click.Choice(["reconfigure", "reinstall", "abort"]),
    help="What to do if GoAccess is already installed",
)
@click.option("--recreate-site", is_flag=True, help="Delete and recreate the site if the domain exists")
@click.option("--yes", "-y", is_flag=True, help="Skip the final confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would change without changing anything")
@click.pass_context
def install(
    ctx: click.Context,
    domain: str | None,
    log_format: str | None,
    nginx_format: str | None,
    nginx_conf: str | None,
    nginx_format_name: str | None,
    servers: tuple[str, ...],
    existing: str | None,
    recreate_site: bool,
    yes: bool,
    dry_run: bool,
) -> None:
    """Install and configure the GoAccess dashboard.

    ⚠️  WARNING: This modifies the server (unless --dry-run)!
    """
    if nginx_format and (nginx_conf or nginx_format_name):
        raise click.UsageError("--nginx-format cannot be combined with --nginx-conf or --nginx-format-name")

    choice = LogFormatChoice(log_format) if log_format else None
    if choice is None and (nginx_format or nginx_conf or nginx_format_name):
        choice = LogFormatChoice.CUSTOM

    options = InstallOptions(
        domain=domain,
        log_format=choice,
        nginx_format=nginx_format,
        nginx_conf=nginx_conf,
        nginx_format_name=nginx_format_name,
        servers=servers,
        existing=existing,
        recreate_existing_site=recreate_site,
        assume_yes=yes,
    )
    installer = Installer(
        LocalRunner(dry_run=dry_run),
        ctx.obj["settings"],
        Prompter(console),
        console=console,
        options=options,
    )
    try:
        installer.run()
    except InstallAborted as e:
        console.print(f"[yellow]{e}[/]")
        sys.exit(0)
    except GoAccessMonitorError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


@main.command()
@click.argument("nginx_format", required=False)
@click.option("--nginx-conf", type=click.Path(exists=True, dir_okay=False), help="Read log_format from an Nginx config file")
@click.option("--name", "-n", help="log_format name to convert (default: first found)")
def convert(nginx_format: str | None, nginx_conf: str | None, name: str | None) -> None:
    """Translate an Nginx log_format into a GoAccess log-format.

    Pass the format string directly, or point --nginx-conf at nginx.conf.
    """
    if nginx_format is not None and nginx_conf:
        raise click.UsageError("Give either NGINX_FORMAT or --nginx-conf, not both")
    if nginx_format is None:
        if not nginx_conf:
            console.print("[bold red]Error:[/] Provide a format string or --nginx-conf")
            sys.exit(2)
        try:
            nginx_format = select_log_format(Path(nginx_conf).read_text(), name)
        except GoAccessMonitorError as e:
            console.print(f"[bold red]Error:[/] {e} in {nginx_conf}")
            sys.exit(1)

    translator = LogFormatTranslator()
    # Plain click.echo so the result can be piped into a config file
    click.echo(translator.translate(nginx_format))

    skipped = translator.unmapped_variables(nginx_format)
    if skipped:
        Console(stderr=True).print(
            f"[dim]Skipped (no GoAccess field): {escape(', '.join(skipped))}[/]", highlight=False
        )


@main.group()
def servers() -> None:
    """Manage the list of monitored servers."""
    pass


def _inventory(ctx: click.Context) -> ServerInventory:
    return ServerInventory(LocalRunner(), ctx.obj["settings"])


def _load_servers(ctx: click.Context) -> list[RemoteServer]:
    try:
        return _inventory(ctx).load()
    except GoAccessMonitorError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


@servers.command("list")
@click.pass_context
def servers_list(ctx: click.Context) -> None:
    """List monitored servers."""
    entries = _load_servers(ctx)
    if not entries:
        console.print("[dim]No servers configured yet.[/]")
        return
    for server in entries:
        console.print(f"[bold green]{server.host}[/] ({server.user})")


@servers.command("add")
@click.argument("server")
@click.option("--no-restart", is_flag=True, help="Don't restart GoAccess afterwards")
@click.pass_context
def servers_add(ctx: click.Context, server: str, no_restart: bool) -> None:
    """Add a server (user@hostname)."""
    try:
        added = _inventory(ctx).add(server)
        if not added:
            console.print(f"[yellow]{server} is already monitored.[/]")
            return
        console.print(f"[bold green]✓ Added server:[/] {server}")
        if not no_restart:
            ServiceManager(LocalRunner(), ctx.obj["settings"]).restart()
    except GoAccessMonitorError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


@servers.command("remove")
@click.argument("server")
@click.option("--no-restart", is_flag=True, help="Don't restart GoAccess afterwards")
@click.pass_context
def servers_remove(ctx: click.Context, server: str, no_restart: bool) -> None:
    """Remove a server (user@hostname)."""
    try:
        if not _inventory(ctx).remove(server):
            console.print(f"[bold red]Error:[/] Server {server} not found.")
            sys.exit(1)
        console.print(f"[bold green]✓ Removed server:[/] {server}")
        if not no_restart:
            ServiceManager(LocalRunner(), ctx.obj["settings"]).restart()
    except GoAccessMonitorError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


@servers.command("check")
@click.option("--log-path", default="/var/log/nginx/access.log", help="Remote access log to test")
@click.option("--port", "-p", default=22, help="SSH port")
@click.pass_context
def servers_check(ctx: click.Context, log_path: str, port: int) -> None:
    """Verify key-based SSH access and log readability on every server."""
    settings = ctx.obj["settings"]
    entries = _load_servers(ctx)
    if not entries:
        console.print("[dim]No servers configured yet.[/]")
        return

    table = Table(title="Server Access")
    table.add_column("Server")
    table.add_column("SSH")
    table.add_column("Log readable")

    failures = 0
    for server in entries:
        cfg = SSHConfig.for_server(server, key_path=settings.collector_key_path, port=port)
        try:
            with SSHConnector(cfg) as ssh:
                readable = ssh.file_readable(log_path)
        except ConnectionError as e:
            failures += 1
            table.add_row(str(server), f"[red]{escape(str(e))}[/]", "-")
            continue
        if not readable:
            failures += 1
        table.add_row(str(server), "[green]ok[/]", "[green]yes[/]" if readable else "[red]no[/]")

    console.print(table)
    sys.exit(1 if failures else 0)


@main.command()
@click.pass_context
def update(ctx: click.Context) -> None:
    """Reload the server list and restart GoAccess."""
    settings = ctx.obj["settings"]
    for server in _load_servers(ctx):
        console.print(f"Configuring monitoring for {server}...")
    try:
        ServiceManager(LocalRunner(), settings).restart()
    except GoAccessMonitorError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)
    console.print("[bold green]✓ GoAccess restarted[/]")


@main.command()
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be removed")
@click.pass_context
def uninstall(ctx: click.Context, yes: bool, dry_run: bool) -> None:
    """Remove GoAccess, its service and configuration.

    The CloudPanel site is left in place.
    """
    if not yes and not dry_run and not click.confirm("Remove GoAccess and /etc/goaccess?"):
        console.print("[dim]Aborted.[/]")
        return
    try:
        GoAccessInstaller(LocalRunner(dry_run=dry_run), ctx.obj["settings"]).remove()
    except GoAccessMonitorError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)
    console.print("[bold green]✓ GoAccess removed[/]")


if __name__ == "__main__":
    main()
