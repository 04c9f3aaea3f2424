"""
Utility modules for mcpjson.
"""

from mcpjson.utils.config import get_config, load_config
from mcpjson.utils.logging import get_logger, setup_logging

__all__ = [
    "get_config",
    "load_config",
    "get_logger",
    "setup_logging",
]
