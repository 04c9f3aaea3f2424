"""
CLI command modules for mcpjson.
"""

from .reset import reset_commands
from .server import server_commands

__all__ = [
    'reset_commands',
    'server_commands',
]
