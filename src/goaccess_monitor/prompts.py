"""Interactive prompts.

The installer never reads stdin directly; it asks a Prompter for validated
values. Tests swap in a scripted prompter.
"""

from typing import Callable

from rich.console import Console
from rich.prompt import Confirm, Prompt

from goaccess_monitor.errors import ValidationError
from goaccess_monitor.model.install import RemoteServer


class Prompter:
    """Rich-based terminal prompts with validation loops."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def ask_text(self, question: str, default: str = "") -> str:
        return Prompt.ask(question, default=default, show_default=bool(default), console=self.console)

    def ask_choice(self, question: str, choices: list[str], default: str | None = None) -> str:
        """Ask until the answer is one of ``choices``."""
        return Prompt.ask(question, choices=choices, default=default, console=self.console)

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(question, default=default, console=self.console)

    def ask_validated(self, question: str, validator: Callable[[str], bool], error: str) -> str:
        """Ask until ``validator`` accepts the answer."""
        while True:
            answer = Prompt.ask(question, console=self.console).strip()
            if validator(answer):
                return answer
            self.console.print(f"[red]{error}[/]")

    def ask_servers(self) -> list[RemoteServer]:
        """Collect user@hostname entries until a blank line; at least one."""
        self.console.print("\n[bold]Server Configuration[/]")
        self.console.print("Enter remote servers to monitor (leave blank to finish)")
        self.console.print("[dim]Format: user@hostname[/]")

        servers: list[RemoteServer] = []
        while True:
            answer = Prompt.ask("Enter server", default="", show_default=False, console=self.console).strip()
            if not answer:
                if servers:
                    return servers
                self.console.print("[yellow]At least one server must be configured.[/]")
                continue
            try:
                server = RemoteServer.parse(answer)
            except ValidationError:
                self.console.print("[red]Invalid server format. Please use format: user@hostname[/]")
                continue
            if server in servers:
                self.console.print(f"[dim]Already added: {server}[/]")
                continue
            servers.append(server)
            self.console.print(f"[green]Server added:[/] {server}")
