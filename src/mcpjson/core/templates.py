"""
Server template management.

Handles creation, update, copy, rename and deletion of reusable server
templates, one JSON file per template in the servers directory.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, Union

from mcpjson.core.exceptions import (
    MissingCommandError, NotFoundError, OverwriteCancelledError,
)
from mcpjson.core.mcp_config import load_mcp_config
from mcpjson.core.models import MCPServer, ServerConfig, ServerTemplate
from mcpjson.core.storage import JsonRecordStore, RecordFailure
from mcpjson.utils.logging import get_logger
from mcpjson.utils.validators import validate_name

logger = get_logger(__name__)

RESOURCE_TYPE = "server template"


class ProfileLookup(Protocol):
    """What template deletion needs from the profile store."""

    def find_profiles_using_template(self, template_name: str) -> List[str]:
        ...

    def remove_template_references_from_all_profiles(self, template_name: str) -> List[str]:
        ...


@dataclass
class TemplateDeletion:
    """Outcome of deleting a server template."""

    name: str
    deleted: bool
    referenced_by: List[str] = field(default_factory=list)
    references_removed_from: List[str] = field(default_factory=list)


def fresh_timestamp_after(previous: datetime) -> datetime:
    """Current time, nudged forward if needed so it is later than ``previous``."""
    now = datetime.now(previous.tzinfo)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def apply_args_update(config: ServerConfig, args: Optional[List[str]]) -> None:
    """
    Update args in place.

    ``None`` leaves args alone, ``[""]`` clears them, anything else replaces them.
    """
    if args is None:
        return
    if len(args) == 1 and args[0] == "":
        config.args = None
    else:
        config.args = list(args)


def apply_env_update(config: ServerConfig, env: Optional[Dict[str, str]]) -> None:
    """
    Merge env changes in place.

    ``None`` leaves env alone and ``{}`` clears it. Otherwise each key is
    set, or deleted when its value is the empty string; unmentioned keys
    are kept. A variable therefore cannot be set to "" this way.
    """
    if env is None:
        return
    if not env:
        config.env = None
        return

    merged = dict(config.env or {})
    for key, value in env.items():
        if value == "":
            merged.pop(key, None)
        else:
            merged[key] = value
    config.env = merged or None


class TemplateStore(JsonRecordStore[ServerTemplate]):
    """Manages server templates stored as ``<servers_dir>/<name>.json``."""

    resource_type = RESOURCE_TYPE
    model = ServerTemplate

    def _confirm_overwrite(self, name: str, force: bool) -> None:
        if force or not self.exists(name):
            return
        if not self.confirmer.confirm(
            f"Server template '{name}' already exists. Overwrite?"
        ):
            raise OverwriteCancelledError(RESOURCE_TYPE, name)

    def save_manual(
        self,
        name: str,
        command: str = "",
        args: Optional[List[str]] = None,
        env: Optional[Dict[str, str]] = None,
        force: bool = False,
        description: Optional[str] = None,
        timeout: Optional[int] = None,
        transport_type: Optional[str] = None,
    ) -> ServerTemplate:
        """
        Create a server template or update an existing one.

        On update, an empty command keeps the current command and ``None``
        for any other field leaves it unchanged. See ``apply_args_update``
        and ``apply_env_update`` for the args and env rules.

        Args:
            name: Template name
            command: Server command (required when creating)
            args: Command arguments
            env: Environment variable changes
            force: Overwrite without asking
            description: Template description
            timeout: Timeout in seconds
            transport_type: Transport type

        Returns:
            The saved template

        Raises:
            OverwriteCancelledError: If the user declined to overwrite
            MissingCommandError: If creating a template without a command
        """
        validate_name(name, RESOURCE_TYPE)

        existing = self.exists(name)
        self._confirm_overwrite(name, force)

        if existing:
            template = self.load(name)
            if command:
                template.server_config.command = command
        else:
            if not command:
                raise MissingCommandError(name)
            template = ServerTemplate(name=name, server_config=ServerConfig(command=command))

        apply_args_update(template.server_config, args)
        apply_env_update(template.server_config, env)

        if description is not None:
            template.description = description or None
        if timeout is not None:
            template.server_config.timeout = timeout
        if transport_type is not None:
            template.server_config.transport_type = transport_type or None

        self._save(template)
        logger.info(f"{'Updated' if existing else 'Created'} server template '{name}'")
        return template

    def save_from_config(self, name: str, server: MCPServer) -> ServerTemplate:
        """Create or replace a template from an MCP configuration entry, without prompting."""
        template = ServerTemplate(name=name, server_config=server.to_server_config())
        self._save(template)
        logger.info(f"Saved server template '{name}' from MCP configuration")
        return template

    def save_from_file(
        self,
        template_name: str,
        server_name: str,
        mcp_config_path: Union[str, Path],
        force: bool = False,
    ) -> ServerTemplate:
        """
        Save one server of an MCP configuration file as a template.

        Raises:
            OverwriteCancelledError: If the user declined to overwrite
            NotFoundError: If the server is not in the configuration file
        """
        validate_name(template_name, RESOURCE_TYPE)
        self._confirm_overwrite(template_name, force)

        mcp_config = load_mcp_config(mcp_config_path)
        server = mcp_config.mcp_servers.get(server_name)
        if server is None:
            available = sorted(mcp_config.mcp_servers)
            raise NotFoundError(
                "MCP server",
                server_name,
                message=(
                    f"MCP server '{server_name}' not found in {mcp_config_path}. "
                    f"Available servers: {', '.join(available) or '(none)'}"
                ),
                details={"available": available},
            )

        return self.save_from_config(template_name, server)

    def list_templates(self) -> Tuple[List[ServerTemplate], List[RecordFailure]]:
        """List templates; see ``JsonRecordStore.list_records``."""
        return self.list_records()

    def delete(
        self,
        name: str,
        force: bool = False,
        profile_lookup: Optional[ProfileLookup] = None,
    ) -> TemplateDeletion:
        """
        Delete a server template.

        Profiles referencing the template are reported. Without ``force``
        the deletion is confirmed and, if the template is referenced, a
        second prompt offers to strip those references; declining keeps
        the (now dangling) references. With ``force`` references are
        always stripped.

        Raises:
            NotFoundError: If the template does not exist
        """
        if not self.exists(name):
            raise NotFoundError(RESOURCE_TYPE, name)

        referenced_by: List[str] = []
        if profile_lookup is not None:
            referenced_by = profile_lookup.find_profiles_using_template(name)
        if referenced_by:
            logger.warning(
                f"Server template '{name}' is used by profiles: {', '.join(referenced_by)}"
            )

        result = TemplateDeletion(name=name, deleted=False, referenced_by=referenced_by)

        if not force and not self.confirmer.confirm(f"Delete server template '{name}'?"):
            logger.info(f"Deletion of server template '{name}' cancelled")
            return result

        self._remove(name)
        result.deleted = True
        logger.info(f"Deleted server template '{name}'")

        if referenced_by and profile_lookup is not None:
            strip = force or self.confirmer.confirm(
                f"Also remove references to '{name}' from {', '.join(referenced_by)}?"
            )
            if strip:
                result.references_removed_from = (
                    profile_lookup.remove_template_references_from_all_profiles(name)
                )

        return result

    def copy(self, src: str, dest: str, force: bool = False) -> ServerTemplate:
        """
        Copy a template under a new name with a fresh creation time.

        Raises:
            ValidationError: If a name is empty or both names are equal
            NotFoundError: If the source does not exist
            AlreadyExistsError: If the destination exists and force is False
        """
        self._check_transfer(src, dest, force)
        validate_name(dest, RESOURCE_TYPE)

        source = self.load(src)
        copied = source.model_copy(deep=True)
        copied.name = dest
        copied.created_at = fresh_timestamp_after(source.created_at)

        self._save(copied)
        logger.info(f"Copied server template '{src}' to '{dest}'")
        return copied

    def rename(self, old: str, new: str, force: bool = False) -> ServerTemplate:
        """
        Rename a template.

        Raises:
            ValidationError: If a name is empty or both names are equal
            NotFoundError: If the template does not exist
            AlreadyExistsError: If the new name exists and force is False
            FileError: If the old file could not be removed after saving
        """
        self._check_transfer(old, new, force)
        validate_name(new, RESOURCE_TYPE)

        template = self.load(old)
        template.name = new
        self._replace_key(template, old)

        logger.info(f"Renamed server template '{old}' to '{new}'")
        return template
