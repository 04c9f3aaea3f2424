"""
Reset commands for mcpjson CLI.
"""

import click
from rich.console import Console

from mcpjson.cli.helpers import handle_errors

console = Console()


def reset_commands(cli_context):
    """Add reset commands to the CLI."""

    def _report(count: int, label: str) -> None:
        if count:
            console.print(f"[green]✓[/green] Deleted {count} {label}")
        else:
            console.print(f"[dim]No {label} deleted[/dim]")

    @click.group()
    def reset():
        """Delete stored profiles and/or server templates."""
        pass

    @reset.command("all")
    @click.option("--force", is_flag=True, help="Delete without asking")
    @handle_errors
    def reset_all(force: bool):
        """Delete all profiles and server templates."""
        _report(cli_context.get_profile_store().reset(force=force), "profile(s)")
        _report(cli_context.get_template_store().reset(force=force), "server template(s)")

    @reset.command("profiles")
    @click.option("--force", is_flag=True, help="Delete without asking")
    @handle_errors
    def reset_profiles(force: bool):
        """Delete all profiles."""
        _report(cli_context.get_profile_store().reset(force=force), "profile(s)")

    @reset.command("servers")
    @click.option("--force", is_flag=True, help="Delete without asking")
    @handle_errors
    def reset_servers(force: bool):
        """Delete all server templates."""
        _report(cli_context.get_template_store().reset(force=force), "server template(s)")

    return [reset]
