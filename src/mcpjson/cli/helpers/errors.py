"""
Error handling utilities for CLI commands.
"""

import functools
import sys

from rich.console import Console

from mcpjson.core.exceptions import MCPJsonError
from mcpjson.utils.logging import get_logger

console = Console(stderr=True)
logger = get_logger(__name__)


def handle_errors(func):
    """Decorator turning mcpjson errors into a message and an exit code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            sys.exit(1)
        except MCPJsonError as e:
            logger.debug("Command failed", exc_info=True)
            console.print(f"[red]Error: {e.message}[/red]", highlight=False)
            sys.exit(e.exit_code)

    return wrapper
