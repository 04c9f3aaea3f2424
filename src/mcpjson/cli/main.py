"""
Main CLI interface for mcpjson.

Profile commands live at the top level; server template commands are
grouped under ``server`` and bulk deletion under ``reset``.
"""

from pathlib import Path
from typing import Optional, Sequence, Tuple

import click
from rich.console import Console

from mcpjson import __version__
from mcpjson.core.exceptions import ValidationError
from mcpjson.core.profiles import ProfileStore
from mcpjson.core.resolver import apply_profile, preview_profile
from mcpjson.core.templates import TemplateStore
from mcpjson.utils.config import Settings, get_config, reload_config
from mcpjson.utils.interaction import Confirmer, RichConfirmer
from mcpjson.utils.logging import get_logger, setup_logging

from mcpjson.cli.helpers import (
    handle_errors, print_json, print_profile_table, print_record_failures,
    print_resolved_config,
)
from mcpjson.cli.commands.reset import reset_commands
from mcpjson.cli.commands.server import server_commands

console = Console()
logger = get_logger(__name__)


class CLIContext:
    """CLI context for passing state between commands."""

    def __init__(self, confirmer: Optional[Confirmer] = None):
        self.settings: Optional[Settings] = None
        self.confirmer: Confirmer = confirmer or RichConfirmer(console)
        self.template_store: Optional[TemplateStore] = None
        self.profile_store: Optional[ProfileStore] = None

    def configure(self, config_dir: Optional[str] = None) -> Settings:
        """Reload settings and drop stores built from the previous ones."""
        self.settings = reload_config(config_dir=config_dir)
        self.template_store = None
        self.profile_store = None
        return self.settings

    def get_settings(self) -> Settings:
        if self.settings is None:
            self.settings = get_config()
        return self.settings

    def get_template_store(self) -> TemplateStore:
        """Get template store instance."""
        if self.template_store is None:
            settings = self.get_settings()
            settings.ensure_directories()
            self.template_store = TemplateStore(settings.servers_dir, self.confirmer)
        return self.template_store

    def get_profile_store(self) -> ProfileStore:
        """Get profile store instance."""
        if self.profile_store is None:
            settings = self.get_settings()
            settings.ensure_directories()
            self.profile_store = ProfileStore(settings.profiles_dir, self.confirmer)
        return self.profile_store

    def profile_name(self, name: Optional[str]) -> str:
        return name or self.get_settings().default_profile


# Global CLI context
cli_context = CLIContext()


def _split_names(names: Sequence[str], command: str) -> Tuple[str, str]:
    """Interpret ``[FIRST] SECOND`` where FIRST defaults to the default profile."""
    if len(names) == 1:
        return cli_context.profile_name(None), names[0]
    if len(names) == 2:
        return names[0], names[1]
    raise ValidationError(f"'{command}' takes one or two profile names, got {len(names)}",
                          error_code="ARGUMENT")


@click.group()
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug logging"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, dir_okay=True),
    help="Configuration directory path (default: ~/.mcpjson)"
)
@click.version_option(version=__version__, prog_name="mcpjson")
@handle_errors
def cli(debug: bool, verbose: bool, config_dir: Optional[str]):
    """
    Manage MCP server configurations with templates and profiles.

    Server templates hold reusable server definitions; profiles list
    references to templates and are applied to an MCP configuration file.
    """
    settings = cli_context.configure(config_dir)

    log_config = settings.logging
    console_level = "DEBUG" if debug else "INFO" if verbose else log_config.console_level
    setup_logging(
        level="DEBUG" if debug else log_config.level,
        console_level=console_level,
        log_file=settings.get_log_file(),
        format_type=log_config.format_type,
        enable_rich=log_config.enable_rich,
        force=True,
    )
    logger.debug(f"Using configuration directory {settings.get_config_dir()}")


@cli.command()
@click.argument("profile", required=False)
@click.option("--path", "-p", "target", type=click.Path(dir_okay=False),
              help="MCP configuration file to write (default: ~/.mcp.json)")
@click.option("--dry-run", is_flag=True, help="Show the result without writing it")
@handle_errors
def apply(profile: Optional[str], target: Optional[str], dry_run: bool):
    """Write PROFILE to an MCP configuration file."""
    name = cli_context.profile_name(profile)
    target_path = Path(target).expanduser() if target else \
        cli_context.get_settings().get_default_mcp_config_path()

    profile_store = cli_context.get_profile_store()
    template_store = cli_context.get_template_store()

    if dry_run:
        config, missing = preview_profile(profile_store.load(name), template_store)
        print_json(config.to_dict())
        for resolution in missing:
            console.print(
                f"[yellow]⚠[/yellow] Server '{resolution.instance_name}' references "
                f"missing template '{resolution.missing_template}'"
            )
        console.print(f"[dim]Dry run: {target_path} was not written[/dim]")
        return

    config = apply_profile(name, target_path, profile_store, template_store)
    console.print(
        f"[green]✓[/green] Applied profile '{name}' to {target_path} "
        f"({len(config.mcp_servers)} servers)"
    )


@cli.command()
@click.argument("profile", required=False)
@click.option("--from", "-f", "source", type=click.Path(dir_okay=False),
              help="MCP configuration file to read (default: ~/.mcp.json)")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
@handle_errors
def save(profile: Optional[str], source: Optional[str], force: bool):
    """Save an MCP configuration file as PROFILE."""
    name = cli_context.profile_name(profile)
    source_path = Path(source).expanduser() if source else \
        cli_context.get_settings().get_default_mcp_config_path()

    saved = cli_context.get_profile_store().save_from_mcp_config(
        name, source_path, cli_context.get_template_store(), force=force
    )
    console.print(
        f"[green]✓[/green] Saved profile '{saved.name}' with {len(saved.servers)} servers"
    )


@cli.command()
@click.argument("profile", required=False)
@click.option("--description", "-d", default="", help="Profile description")
@handle_errors
def create(profile: Optional[str], description: str):
    """Create an empty profile."""
    created = cli_context.get_profile_store().create(
        cli_context.profile_name(profile), description
    )
    console.print(f"[green]✓[/green] Created profile '{created.name}'")


@cli.command("list")
@click.option("--detail", is_flag=True, help="Show server references")
@handle_errors
def list_cmd(detail: bool):
    """List profiles."""
    profiles, failures = cli_context.get_profile_store().list_profiles()
    print_profile_table(profiles, detail=detail)
    print_record_failures(failures, "profile")


@cli.command()
@click.argument("profile")
@click.option("--resolved", is_flag=True, help="Show the servers the profile resolves to")
@handle_errors
def detail(profile: str, resolved: bool):
    """Show PROFILE as JSON."""
    loaded = cli_context.get_profile_store().load(profile)
    print_json(loaded.to_dict())

    if resolved:
        config, missing = preview_profile(loaded, cli_context.get_template_store())
        print_resolved_config(config)
        for resolution in missing:
            console.print(
                f"[yellow]⚠[/yellow] Missing template '{resolution.missing_template}'"
            )


@cli.command()
@click.argument("profile", required=False)
@click.option("--force", is_flag=True, help="Delete without asking")
@handle_errors
def delete(profile: Optional[str], force: bool):
    """Delete a profile."""
    name = cli_context.profile_name(profile)
    if cli_context.get_profile_store().delete(name, force=force):
        console.print(f"[green]✓[/green] Deleted profile '{name}'")
    else:
        console.print("[yellow]Deletion cancelled[/yellow]")


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
@handle_errors
def rename(names: Tuple[str, ...], force: bool):
    """Rename a profile: rename [OLD] NEW."""
    old, new = _split_names(names, "rename")
    cli_context.get_profile_store().rename(old, new, force=force)
    console.print(f"[green]✓[/green] Renamed profile '{old}' to '{new}'")


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
@handle_errors
def copy(names: Tuple[str, ...], force: bool):
    """Copy a profile: copy [SRC] DEST."""
    src, dest = _split_names(names, "copy")
    cli_context.get_profile_store().copy(src, dest, force=force)
    console.print(f"[green]✓[/green] Copied profile '{src}' to '{dest}'")


@cli.command()
@click.argument("dest")
@click.argument("sources", nargs=-1)
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
@handle_errors
def merge(dest: str, sources: Tuple[str, ...], force: bool):
    """Merge SOURCES into a new profile DEST."""
    merged = cli_context.get_profile_store().merge(dest, list(sources), force=force)
    console.print(
        f"[green]✓[/green] Merged {', '.join(sources)} into '{dest}' "
        f"({len(merged.servers)} servers)"
    )


@cli.command()
@click.argument("profile", required=False)
@handle_errors
def path(profile: Optional[str]):
    """Print the file backing a profile."""
    click.echo(str(cli_context.get_profile_store().path(cli_context.profile_name(profile))))


def register_commands():
    """Register all command groups."""
    # Server template commands
    for cmd in server_commands(cli_context):
        cli.add_command(cmd)

    # Reset commands
    for cmd in reset_commands(cli_context):
        cli.add_command(cmd)


# Register all commands
register_commands()


def main():
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
