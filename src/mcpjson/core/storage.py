"""
One-JSON-file-per-record storage shared by the template and profile stores.
"""

from pathlib import Path
from typing import Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from mcpjson.core.exceptions import (
    AlreadyExistsError, FileError, FormatError, MCPJsonError, NotFoundError,
    ValidationError,
)
from mcpjson.core.models import JsonRecord
from mcpjson.utils.config import FILE_EXTENSION
from mcpjson.utils.files import load_json, remove_file, save_json
from mcpjson.utils.interaction import Confirmer, StaticConfirmer
from mcpjson.utils.logging import get_logger
from mcpjson.utils.validators import validate_name

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=JsonRecord)


class RecordFailure:
    """A record that could not be loaded while listing a collection."""

    def __init__(self, name: str, error: MCPJsonError):
        self.name = name
        self.error = error

    def __repr__(self) -> str:
        return f"RecordFailure(name={self.name!r}, error={self.error})"


class JsonRecordStore(Generic[RecordT]):
    """Stores records of one model type as ``<directory>/<name>.json``."""

    resource_type = "record"
    model: Type[RecordT]

    def __init__(self, directory: Path, confirmer: Optional[Confirmer] = None):
        """
        Initialize the store.

        Args:
            directory: Directory holding one JSON file per record
            confirmer: Answers interactive prompts; declines everything by default
        """
        self.directory = Path(directory)
        self.confirmer = confirmer or StaticConfirmer(False)
        self.directory.mkdir(parents=True, exist_ok=True)

    def record_path(self, name: str) -> Path:
        """
        File backing the record ``name``.

        Raises:
            ValidationError: If ``name`` is not a valid record name, so that
                no name can resolve outside the store directory
        """
        validate_name(name, self.resource_type)
        return self.directory / f"{name}{FILE_EXTENSION}"

    def exists(self, name: str) -> bool:
        return self.record_path(name).is_file()

    def path(self, name: str) -> Path:
        """Absolute path of an existing record's file."""
        if not self.exists(name):
            raise NotFoundError(self.resource_type, name)
        return self.record_path(name).resolve()

    def names(self) -> List[str]:
        """Names of all stored records, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name[: -len(FILE_EXTENSION)]
            for p in self.directory.iterdir()
            if p.is_file() and p.name.endswith(FILE_EXTENSION) and not p.name.startswith(".")
        )

    def load(self, name: str) -> RecordT:
        """
        Load a record by name.

        Raises:
            NotFoundError: If no record with this name exists
            FormatError: If the stored document is malformed
        """
        path = self.record_path(name)
        if not path.is_file():
            raise NotFoundError(self.resource_type, name)

        data = load_json(path)
        try:
            return self.model.model_validate(data)
        except PydanticValidationError as e:
            raise FormatError(f"Invalid {self.resource_type} '{name}' in {path}: {e}", str(path))

    def list_records(self) -> Tuple[List[RecordT], List[RecordFailure]]:
        """
        Load every record, skipping ones that fail.

        Returns:
            Tuple of (records, failures)
        """
        records: List[RecordT] = []
        failures: List[RecordFailure] = []

        for name in self.names():
            try:
                records.append(self.load(name))
            except (FileError, FormatError, ValidationError) as e:
                logger.error(f"Failed to load {self.resource_type} '{name}': {e}")
                failures.append(RecordFailure(name, e))

        return records, failures

    def _save(self, record: RecordT) -> None:
        save_json(self.record_path(record.name), record.to_dict())

    def _remove(self, name: str) -> None:
        remove_file(self.record_path(name))

    def _check_transfer(self, src: str, dest: str, force: bool) -> None:
        """Preconditions shared by copy and rename."""
        if not src:
            raise ValidationError(
                f"Source {self.resource_type} name is required", error_code="EMPTY_SOURCE_NAME"
            )
        if not dest:
            raise ValidationError(
                f"Destination {self.resource_type} name is required", error_code="EMPTY_DEST_NAME"
            )
        if src == dest:
            raise ValidationError(
                f"Source and destination {self.resource_type} names are the same: '{src}'",
                error_code="SAME_NAME",
            )
        if not self.exists(src):
            raise NotFoundError(self.resource_type, src)
        if self.exists(dest) and not force:
            raise AlreadyExistsError(self.resource_type, dest)

    def _replace_key(self, record: RecordT, old_name: str) -> None:
        """Save ``record`` under its (new) name, then drop the old file."""
        self._save(record)
        try:
            self._remove(old_name)
        except FileError as e:
            raise FileError(
                f"Renamed {self.resource_type} to '{record.name}' but failed to remove "
                f"'{old_name}': {e.message}",
                e.path,
            )

    def reset(self, force: bool = False) -> int:
        """
        Delete every record with one aggregate confirmation.

        Returns:
            Number of records deleted (0 when nothing existed or the user declined)
        """
        names = self.names()
        if not names:
            logger.info(f"No {self.resource_type}s to delete")
            return 0

        if not force:
            listing = ", ".join(names)
            if not self.confirmer.confirm(
                f"Delete all {len(names)} {self.resource_type}s ({listing})?"
            ):
                logger.info(f"Reset of {self.resource_type}s cancelled")
                return 0

        deleted = 0
        for name in names:
            try:
                self._remove(name)
                deleted += 1
            except FileError as e:
                logger.warning(f"Failed to delete {self.resource_type} '{name}': {e}")

        logger.info(f"Deleted {deleted} {self.resource_type}s")
        return deleted
