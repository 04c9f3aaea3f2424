"""
Data models for mcpjson.

Defines Pydantic models for server templates, profiles and the MCP
configuration document, with camelCase aliases matching the JSON files
on disk.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class JsonRecord(BaseModel):
    """Base model accepting both field names and on-disk aliases."""

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON document written to disk."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ServerConfig(JsonRecord):
    """Launch configuration of an MCP server."""

    command: str = Field(default="", description="Command to run the server")
    args: Optional[List[str]] = Field(default=None, description="Command arguments")
    env: Optional[Dict[str, str]] = Field(default=None, description="Environment variables")
    timeout: Optional[int] = Field(default=None, description="Timeout in seconds")
    env_file: Optional[str] = Field(default=None, alias="envFile", description="Env file path")
    transport_type: Optional[str] = Field(
        default=None, alias="transportType", description="Transport type"
    )


class ServerTemplate(JsonRecord):
    """Reusable, named server definition."""

    name: str = Field(description="Template name, also the file stem")
    description: Optional[str] = Field(default=None, description="Template description")
    created_at: datetime = Field(
        default_factory=datetime.now, alias="createdAt", description="Creation time"
    )
    server_config: ServerConfig = Field(
        default_factory=ServerConfig, alias="serverConfig", description="Server configuration"
    )

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name} ({self.server_config.command})"


class ServerOverrides(JsonRecord):
    """Per-reference overrides applied on top of a template."""

    env: Optional[Dict[str, str]] = Field(default=None, description="Environment overrides")

    def is_empty(self) -> bool:
        return not self.env


class ServerRef(JsonRecord):
    """Reference from a profile to a server template."""

    name: str = Field(description="Instance name used as the key in the MCP config")
    template: str = Field(description="Name of the referenced server template")
    overrides: ServerOverrides = Field(default_factory=ServerOverrides)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, omitting empty overrides."""
        data: Dict[str, Any] = {"name": self.name, "template": self.template}
        if not self.overrides.is_empty():
            data["overrides"] = self.overrides.to_dict()
        return data


class Profile(JsonRecord):
    """Named, ordered list of server references."""

    name: str = Field(description="Profile name")
    description: str = Field(default="", description="Profile description")
    created_at: datetime = Field(
        default_factory=datetime.now, alias="createdAt", description="Creation time"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now, alias="updatedAt", description="Last update time"
    )
    servers: List[ServerRef] = Field(default_factory=list, description="Server references")

    def find_server(self, instance_name: str) -> Optional[ServerRef]:
        """Get the first server reference with the given instance name."""
        for ref in self.servers:
            if ref.name == instance_name:
                return ref
        return None

    def references_template(self, template_name: str) -> bool:
        return any(ref.template == template_name for ref in self.servers)

    def touch(self) -> None:
        """Mark the profile as updated now."""
        self.updated_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"servers"})
        data["servers"] = [ref.to_dict() for ref in self.servers]
        return data

    def __str__(self) -> str:
        return f"Profile('{self.name}', {len(self.servers)} servers)"


class MCPServer(ServerConfig):
    """Server entry of an MCP configuration document.

    Shares its shape with ServerConfig; a resolved server is written as
    one of these.
    """

    @classmethod
    def from_server_config(cls, config: ServerConfig) -> "MCPServer":
        return cls.model_validate(config.model_dump())

    def to_server_config(self) -> ServerConfig:
        return ServerConfig.model_validate(self.model_dump())


ResolvedServer = MCPServer


class MCPConfig(JsonRecord):
    """MCP configuration document consumed by the external tool."""

    mcp_servers: Dict[str, MCPServer] = Field(default_factory=dict, alias="mcpServers")
