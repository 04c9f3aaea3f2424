"""
mcpjson - MCP server configuration manager.

Keeps reusable server templates and named profiles that reference them,
and writes a profile out as an MCP configuration file.
"""

__version__ = "1.0.0"
__description__ = "MCP server configuration manager built on templates and profiles"

# Public API
from mcpjson.core.exceptions import MCPJsonError
from mcpjson.core.models import MCPConfig, Profile, ServerRef, ServerTemplate

__all__ = [
    "__version__",
    "__description__",
    "MCPJsonError",
    "MCPConfig",
    "Profile",
    "ServerRef",
    "ServerTemplate",
]
