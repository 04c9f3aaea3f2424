"""
Display helper functions for CLI commands.
"""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from mcpjson.core.models import MCPConfig, Profile, ServerTemplate
from mcpjson.core.storage import RecordFailure

console = Console()


def print_json(data: Dict[str, Any]) -> None:
    """Print a document as indented JSON without markup processing."""
    console.print(json.dumps(data, indent=2, ensure_ascii=False), markup=False, highlight=False,
                  soft_wrap=True)


def _format_env(env: Optional[Dict[str, str]]) -> str:
    if not env:
        return "-"
    return ", ".join(f"{key}={value}" for key, value in env.items())


def print_template_table(templates: List[ServerTemplate], detail: bool = False) -> None:
    """Show server templates as a table."""
    if not templates:
        console.print("[yellow]No server templates found[/yellow]")
        return

    table = Table(
        title=f"Server Templates ({len(templates)})",
        show_header=True,
        header_style="bold cyan",
        title_style="bold cyan",
    )
    table.add_column("Name", style="green")
    table.add_column("Command", style="white")
    if detail:
        table.add_column("Args", style="dim")
        table.add_column("Env", style="dim")
        table.add_column("Description", style="dim")
        table.add_column("Created", style="dim")

    for template in templates:
        config = template.server_config
        row = [template.name, config.command]
        if detail:
            row.extend([
                " ".join(config.args or []) or "-",
                _format_env(config.env),
                template.description or "-",
                template.created_at.strftime("%Y-%m-%d %H:%M"),
            ])
        table.add_row(*row)

    console.print(table)


def print_profile_table(profiles: List[Profile], detail: bool = False) -> None:
    """Show profiles as a table."""
    if not profiles:
        console.print("[yellow]No profiles found[/yellow]")
        return

    table = Table(
        title=f"Profiles ({len(profiles)})",
        show_header=True,
        header_style="bold cyan",
        title_style="bold cyan",
    )
    table.add_column("Name", style="green")
    table.add_column("Servers", style="cyan", justify="right")
    table.add_column("Description", style="white")
    if detail:
        table.add_column("Server References", style="dim")
        table.add_column("Updated", style="dim")

    for profile in profiles:
        row = [profile.name, str(len(profile.servers)), profile.description or "-"]
        if detail:
            refs = [
                ref.name if ref.name == ref.template else f"{ref.name} ({ref.template})"
                for ref in profile.servers
            ]
            row.extend([
                ", ".join(refs) or "-",
                profile.updated_at.strftime("%Y-%m-%d %H:%M"),
            ])
        table.add_row(*row)

    console.print(table)


def print_resolved_config(config: MCPConfig) -> None:
    """Show a resolved MCP configuration."""
    table = Table(title="Resolved Servers", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Command", style="white")
    table.add_column("Args", style="dim")
    table.add_column("Env", style="dim")

    for name, server in config.mcp_servers.items():
        table.add_row(name, server.command, " ".join(server.args or []) or "-",
                      _format_env(server.env))

    console.print(table)


def print_record_failures(failures: List[RecordFailure], resource_type: str) -> None:
    """Warn about records that could not be loaded during a listing."""
    for failure in failures:
        console.print(
            f"[yellow]⚠[/yellow] Skipped {resource_type} '{failure.name}': {failure.error.message}",
            highlight=False,
        )
