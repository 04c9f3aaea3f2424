"""
Reading and writing MCP configuration documents.

An MCP configuration is a JSON object whose ``mcpServers`` field maps
instance names to server definitions.
"""

from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from mcpjson.core.exceptions import FormatError
from mcpjson.core.models import MCPConfig
from mcpjson.utils.files import load_json, save_json
from mcpjson.utils.logging import get_logger

logger = get_logger(__name__)


def load_mcp_config(path: Union[str, Path]) -> MCPConfig:
    """
    Load an MCP configuration file.

    Raises:
        FileError: If the file cannot be read
        FormatError: If the document is not a valid MCP configuration
    """
    data = load_json(path)
    if not isinstance(data, dict):
        raise FormatError(f"MCP configuration {path} is not a JSON object", str(path))

    try:
        config = MCPConfig.model_validate(data)
    except PydanticValidationError as e:
        raise FormatError(f"Invalid MCP configuration {path}: {e}", str(path))

    logger.debug(f"Loaded {len(config.mcp_servers)} servers from {path}")
    return config


def save_mcp_config(path: Union[str, Path], config: MCPConfig) -> None:
    """Write an MCP configuration file atomically, omitting absent fields."""
    save_json(path, config.to_dict())
    logger.info(f"Wrote {len(config.mcp_servers)} servers to {path}")


def candidate_mcp_config_paths() -> List[Path]:
    """Common MCP configuration locations, in lookup order."""
    home = Path.home()
    return [
        home / ".mcp.json",
        home / ".config" / "claude" / "mcp.json",
        home / ".config" / "mcp.json",
        Path("mcp.json"),
    ]


def find_mcp_config_path() -> Optional[Path]:
    """Return the first existing MCP configuration file, if any."""
    for path in candidate_mcp_config_paths():
        if path.exists():
            return path
    return None
