"""
Profile resolution.

Turns a profile's server references into a flat MCP configuration by
loading each referenced template and layering the reference's env
overrides on top of the template's env.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from mcpjson.core.exceptions import NotFoundError, TemplateNotFoundError, ValidationError
from mcpjson.core.mcp_config import save_mcp_config
from mcpjson.core.models import MCPConfig, Profile, ResolvedServer, ServerRef
from mcpjson.core.profiles import ProfileStore
from mcpjson.core.templates import TemplateStore
from mcpjson.utils.logging import get_logger

logger = get_logger(__name__)


class Resolution:
    """Result of resolving one server reference: a server or a missing template."""

    def __init__(self, instance_name: str, server: Optional[ResolvedServer] = None,
                 missing_template: Optional[str] = None):
        self.instance_name = instance_name
        self.server = server
        self.missing_template = missing_template

    @classmethod
    def ok(cls, instance_name: str, server: ResolvedServer) -> "Resolution":
        return cls(instance_name, server=server)

    @classmethod
    def missing(cls, instance_name: str, template_name: str) -> "Resolution":
        return cls(instance_name, missing_template=template_name)

    @property
    def is_ok(self) -> bool:
        return self.server is not None

    def __repr__(self) -> str:
        if self.is_ok:
            return f"Resolution.ok({self.instance_name!r})"
        return f"Resolution.missing({self.instance_name!r}, {self.missing_template!r})"


def merge_env(
    base: Optional[Dict[str, str]], overrides: Optional[Dict[str, str]]
) -> Dict[str, str]:
    """Template env with override keys replacing or adding; inputs are not modified."""
    env = dict(base or {})
    env.update(overrides or {})
    return env


def resolve_server(ref: ServerRef, template_store: TemplateStore) -> Resolution:
    """Resolve one server reference against the template store."""
    try:
        template = template_store.load(ref.template)
    except (NotFoundError, ValidationError):
        return Resolution.missing(ref.name, ref.template)

    config = template.server_config
    env = merge_env(config.env, ref.overrides.env)

    server = ResolvedServer(
        command=config.command,
        args=list(config.args) if config.args is not None else None,
        env=env or None,
        timeout=config.timeout,
        env_file=config.env_file,
        transport_type=config.transport_type,
    )
    return Resolution.ok(ref.name, server)


def _insert(servers: Dict[str, ResolvedServer], resolution: Resolution) -> None:
    # Insert-or-overwrite: a later reference with the same instance name wins
    if resolution.instance_name in servers:
        logger.warning(
            f"Duplicate server name '{resolution.instance_name}'; the later entry wins"
        )
    servers[resolution.instance_name] = resolution.server


def resolve_profile(profile: Profile, template_store: TemplateStore) -> MCPConfig:
    """
    Resolve every reference of a profile.

    Raises:
        TemplateNotFoundError: On the first reference whose template is missing
    """
    servers: Dict[str, ResolvedServer] = {}

    for ref in profile.servers:
        resolution = resolve_server(ref, template_store)
        if not resolution.is_ok:
            raise TemplateNotFoundError(resolution.missing_template, profile.name)
        _insert(servers, resolution)

    return MCPConfig(mcp_servers=servers)


def preview_profile(
    profile: Profile, template_store: TemplateStore
) -> Tuple[MCPConfig, List[Resolution]]:
    """
    Resolve what can be resolved.

    Returns:
        Tuple of (config with the resolvable servers, unresolved references)
    """
    servers: Dict[str, ResolvedServer] = {}
    missing: List[Resolution] = []

    for ref in profile.servers:
        resolution = resolve_server(ref, template_store)
        if resolution.is_ok:
            _insert(servers, resolution)
        else:
            missing.append(resolution)

    return MCPConfig(mcp_servers=servers), missing


def apply_profile(
    profile_name: str,
    target_path: Union[str, Path],
    profile_store: ProfileStore,
    template_store: TemplateStore,
) -> MCPConfig:
    """
    Write a profile's resolved configuration to ``target_path``.

    Resolution completes before anything is written, so a missing
    template leaves the target untouched.

    Raises:
        NotFoundError: If the profile does not exist
        TemplateNotFoundError: If a referenced template is missing
        FileError: If the target cannot be written
    """
    profile = profile_store.load(profile_name)
    config = resolve_profile(profile, template_store)

    save_mcp_config(target_path, config)
    logger.info(
        f"Applied profile '{profile_name}' to {target_path} "
        f"({len(config.mcp_servers)} servers)"
    )
    return config
