"""
Server template commands for mcpjson CLI.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from mcpjson.cli.helpers import (
    handle_errors, print_json, print_record_failures, print_template_table,
)
from mcpjson.core.exceptions import NotFoundError
from mcpjson.core.mcp_config import load_mcp_config
from mcpjson.utils.validators import load_env_file, parse_args, parse_env_vars

console = Console()


def server_commands(cli_context):
    """Add server template commands to the CLI."""

    @click.group()
    def server():
        """Manage server templates and profile server references."""
        pass

    @server.command("save")
    @click.argument("name")
    @click.option("--from", "from_path", type=click.Path(dir_okay=False),
                  help="MCP configuration file to copy the server from")
    @click.option("--server", "server_name", help="Server entry in --from (defaults to NAME)")
    @click.option("--command", "-c", default="", help="Command to run the server")
    @click.option("--args", "-a", "args_str", default=None,
                  help='Comma separated arguments; "" clears them')
    @click.option("--env", "-e", "env_str", default=None,
                  help="KEY=VALUE,KEY2=VALUE2; an empty value deletes the key")
    @click.option("--env-file", type=click.Path(dir_okay=False),
                  help="File of KEY=VALUE lines merged into --env")
    @click.option("--description", "-d", default=None, help="Template description")
    @click.option("--timeout", type=int, default=None, help="Timeout in seconds")
    @click.option("--transport-type", default=None, help="Transport type")
    @click.option("--force", is_flag=True, help="Overwrite without asking")
    @handle_errors
    def save_server(name: str, from_path: Optional[str], server_name: Optional[str],
                    command: str, args_str: Optional[str], env_str: Optional[str],
                    env_file: Optional[str], description: Optional[str],
                    timeout: Optional[int], transport_type: Optional[str], force: bool):
        """Create or update server template NAME."""
        store = cli_context.get_template_store()

        if from_path:
            template = store.save_from_file(
                name, server_name or name, Path(from_path).expanduser(), force
            )
            console.print(
                f"[green]✓[/green] Saved server template '{template.name}' "
                f"from '{server_name or name}' in {from_path}"
            )
            return

        env = parse_env_vars(env_str)
        if env_file:
            file_env = load_env_file(Path(env_file).expanduser())
            file_env.update(env or {})
            env = file_env

        existed = store.exists(name)
        template = store.save_manual(
            name,
            command=command,
            args=parse_args(args_str),
            env=env,
            force=force,
            description=description,
            timeout=timeout,
            transport_type=transport_type,
        )
        action = "Updated" if existed else "Created"
        console.print(f"[green]✓[/green] {action} server template '{template.name}'")

    @server.command("list")
    @click.option("--detail", is_flag=True, help="Show args, env and descriptions")
    @handle_errors
    def list_servers(detail: bool):
        """List server templates."""
        templates, failures = cli_context.get_template_store().list_templates()
        print_template_table(templates, detail=detail)
        print_record_failures(failures, "server template")

    @server.command("detail")
    @click.argument("name")
    @handle_errors
    def detail_server(name: str):
        """Show server template NAME as JSON."""
        template = cli_context.get_template_store().load(name)
        print_json(template.to_dict())

        used_by = cli_context.get_profile_store().find_profiles_using_template(name)
        if used_by:
            console.print(f"[dim]Used by profiles: {', '.join(used_by)}[/dim]")

    @server.command("show")
    @click.argument("name", required=False)
    @click.option("--from", "from_path", type=click.Path(dir_okay=False),
                  help="MCP configuration file (defaults to the configured target)")
    @handle_errors
    def show_server(name: Optional[str], from_path: Optional[str]):
        """Show servers of an MCP configuration file."""
        path = Path(from_path).expanduser() if from_path else \
            cli_context.get_settings().get_default_mcp_config_path()
        mcp_config = load_mcp_config(path)

        if name:
            server_entry = mcp_config.mcp_servers.get(name)
            if server_entry is None:
                raise NotFoundError("MCP server", name,
                                    message=f"MCP server '{name}' not found in {path}")
            print_json(server_entry.to_dict())
            return

        if not mcp_config.mcp_servers:
            console.print(f"[yellow]No servers in {path}[/yellow]")
            return

        table = Table(
            title=f"MCP Servers in {path}",
            show_header=True,
            header_style="bold cyan",
            title_style="bold cyan",
        )
        table.add_column("Name", style="green")
        table.add_column("Command", style="white")
        table.add_column("Args", style="dim")

        for server_key, entry in mcp_config.mcp_servers.items():
            table.add_row(server_key, entry.command, " ".join(entry.args or []) or "-")

        console.print(table)

    @server.command("delete")
    @click.argument("name")
    @click.option("--force", is_flag=True, help="Delete and strip references without asking")
    @handle_errors
    def delete_server(name: str, force: bool):
        """Delete server template NAME."""
        result = cli_context.get_template_store().delete(
            name, force=force, profile_lookup=cli_context.get_profile_store()
        )

        if result.referenced_by:
            console.print(
                f"[yellow]⚠[/yellow] '{name}' is used by profiles: "
                f"{', '.join(result.referenced_by)}"
            )

        if not result.deleted:
            console.print("[yellow]Deletion cancelled[/yellow]")
            return

        console.print(f"[green]✓[/green] Deleted server template '{name}'")
        if result.references_removed_from:
            console.print(
                f"[green]✓[/green] Removed references from: "
                f"{', '.join(result.references_removed_from)}"
            )
        elif result.referenced_by:
            console.print("[dim]Profile references were kept and will fail on apply[/dim]")

    @server.command("rename")
    @click.argument("old")
    @click.argument("new")
    @click.option("--force", is_flag=True, help="Overwrite an existing template")
    @handle_errors
    def rename_server(old: str, new: str, force: bool):
        """Rename server template OLD to NEW."""
        cli_context.get_template_store().rename(old, new, force=force)
        console.print(f"[green]✓[/green] Renamed server template '{old}' to '{new}'")

    @server.command("copy")
    @click.argument("src")
    @click.argument("dest")
    @click.option("--force", is_flag=True, help="Overwrite an existing template")
    @handle_errors
    def copy_server(src: str, dest: str, force: bool):
        """Copy server template SRC to DEST."""
        cli_context.get_template_store().copy(src, dest, force=force)
        console.print(f"[green]✓[/green] Copied server template '{src}' to '{dest}'")

    @server.command("path")
    @click.argument("name")
    @handle_errors
    def server_path(name: str):
        """Print the file backing server template NAME."""
        click.echo(str(cli_context.get_template_store().path(name)))

    @server.command("add")
    @click.argument("template")
    @click.option("--to", "-t", "profile", required=True, help="Profile to add the server to")
    @click.option("--as", "-a", "instance_name", default=None,
                  help="Instance name (defaults to the template name)")
    @click.option("--env", "-e", "env_str", default=None, help="Env overrides KEY=VALUE,...")
    @handle_errors
    def add_server(template: str, profile: str, instance_name: Optional[str],
                   env_str: Optional[str]):
        """Add a reference to TEMPLATE to a profile."""
        overrides = parse_env_vars(env_str)
        ref = cli_context.get_profile_store().add_server(
            profile, template, instance_name=instance_name, env_overrides=overrides
        )
        console.print(f"[green]✓[/green] Added server '{ref.name}' to profile '{profile}'")

        if not cli_context.get_template_store().exists(template):
            console.print(
                f"[yellow]⚠[/yellow] Server template '{template}' does not exist yet; "
                "create it before applying the profile"
            )

    @server.command("remove")
    @click.argument("name")
    @click.option("--from", "-f", "profile", required=True, help="Profile to remove from")
    @handle_errors
    def remove_server(name: str, profile: str):
        """Remove server NAME from a profile."""
        cli_context.get_profile_store().remove_server(profile, name)
        console.print(f"[green]✓[/green] Removed server '{name}' from profile '{profile}'")

    return [server]
