"""
Validation and parsing utilities for mcpjson.

Provides name validation for profiles and server templates, and the
parsers used by the CLI for ``--env``, ``--args`` and ``--env-file``.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from mcpjson.core.exceptions import (
    EmptyNameError, FileError, FormatError, InvalidCharactersError,
    NameTooLongError, ReservedWordError, ValidationError,
)
from mcpjson.utils.logging import get_logger

logger = get_logger(__name__)

MAX_NAME_LENGTH = 50

RESERVED_WORDS = frozenset({
    "help", "version", "list", "server", "apply", "save",
    "create", "delete", "rename", "add", "remove", "show",
})

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_ENV_KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_name(name: str, resource_type: str = "profile") -> bool:
    """
    Validate a profile or server template name.

    Args:
        name: Name to validate
        resource_type: Label used in error messages

    Returns:
        True if valid

    Raises:
        EmptyNameError: If name is empty
        NameTooLongError: If name is longer than MAX_NAME_LENGTH characters
        InvalidCharactersError: If name has characters outside [A-Za-z0-9_-]
        ReservedWordError: If name is a reserved command word
    """
    if name == "":
        raise EmptyNameError(resource_type)

    # len() counts code points, not encoded bytes
    if len(name) > MAX_NAME_LENGTH:
        raise NameTooLongError(resource_type, MAX_NAME_LENGTH)

    if not _NAME_PATTERN.match(name) or not name.isascii():
        raise InvalidCharactersError(resource_type)

    if name in RESERVED_WORDS:
        raise ReservedWordError(resource_type, name)

    return True


def parse_env_vars(env_str: Optional[str]) -> Optional[Dict[str, str]]:
    """
    Parse ``KEY=VALUE,KEY2=VALUE2`` into a dictionary.

    An empty value is kept; on template update it removes the key.

    Raises:
        ValidationError: If a pair has no ``=`` or the key is not a valid
            environment variable name
    """
    if not env_str:
        return None

    env: Dict[str, str] = {}
    for pair in env_str.split(","):
        if "=" not in pair:
            raise ValidationError(f"Invalid environment variable format: '{pair}'")

        key, value = pair.split("=", 1)
        key = key.strip()
        if not _ENV_KEY_PATTERN.match(key):
            raise ValidationError(f"Invalid environment variable name: '{key}'")

        env[key] = value.strip()

    return env


def parse_args(args_str: Optional[str]) -> Optional[List[str]]:
    """
    Parse comma separated command arguments.

    ``None`` means the option was not given. An empty string is returned
    as ``[""]``, the marker that clears a template's args.
    """
    if args_str is None:
        return None
    if args_str.strip() == "":
        return [""]
    return [arg.strip() for arg in args_str.split(",") if arg.strip()]


def load_env_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Load ``KEY=VALUE`` lines from an env file.

    Blank lines and ``#`` comments are skipped; surrounding quotes on
    values are stripped.

    Raises:
        FileError: If the file cannot be read
        FormatError: If a line has no ``=``
    """
    env_path = Path(path)
    try:
        lines = env_path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise FileError(f"Cannot read env file '{env_path}': {e}", str(env_path))

    env: Dict[str, str] = {}
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            raise FormatError(
                f"Invalid env file format: '{env_path}' line {line_number}", str(env_path)
            )

        key, value = line.split("=", 1)
        env[key.strip()] = value.strip().strip("\"'")

    logger.debug(f"Loaded {len(env)} variables from {env_path}")
    return env
