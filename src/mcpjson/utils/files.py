"""
JSON document persistence.

Every record and every generated MCP configuration is written through
``save_json``, which writes a temporary sibling file and renames it over
the destination so a failed write never leaves a truncated document.
"""

import json
import os
from pathlib import Path
from typing import Any, Union

from mcpjson.core.exceptions import FileError, FormatError
from mcpjson.utils.logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def load_json(path: PathLike) -> Any:
    """
    Load a JSON document.

    Raises:
        FileError: If the file is missing or unreadable
        FormatError: If the content is not valid JSON
    """
    file_path = Path(path)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise FileError(f"File not found: {file_path}", str(file_path))
    except json.JSONDecodeError as e:
        raise FormatError(f"Invalid JSON in {file_path}: {e}", str(file_path))
    except OSError as e:
        raise FileError(f"Failed to read {file_path}: {e}", str(file_path))


def save_json(path: PathLike, data: Any) -> None:
    """
    Save a JSON document using an atomic write.

    Raises:
        FileError: If the document cannot be written
    """
    file_path = Path(path)
    temp_path = file_path.with_name(f".{file_path.name}.tmp")

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(temp_path, file_path)
    except (OSError, TypeError, ValueError) as e:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.warning(f"Failed to remove temporary file {temp_path}")
        raise FileError(f"Failed to write {file_path}: {e}", str(file_path))

    logger.debug(f"Saved {file_path}")


def remove_file(path: PathLike) -> None:
    """
    Delete a file.

    Raises:
        FileError: If the file cannot be removed
    """
    file_path = Path(path)
    try:
        file_path.unlink()
    except OSError as e:
        raise FileError(f"Failed to delete {file_path}: {e}", str(file_path))
