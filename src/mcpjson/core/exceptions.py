"""
Exception classes for mcpjson.

Defines the exception hierarchy for errors raised by the template store,
the profile store and the reference resolver. Every error carries an
exit code used by the CLI when it terminates a command.
"""

from typing import Any, Dict, List, Optional


class MCPJsonError(Exception):
    """Base exception for all mcpjson errors."""

    exit_code = 1

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize MCPJsonError.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        """String representation of the error."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFoundError(MCPJsonError):
    """A named template, profile or server reference does not exist."""

    exit_code = 2

    def __init__(self, resource_type: str, name: str, message: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.resource_type = resource_type
        self.name = name
        super().__init__(
            message or f"{resource_type} '{name}' not found",
            error_code="NOT_FOUND",
            details=details,
        )


class AlreadyExistsError(MCPJsonError):
    """Name collision without force."""

    exit_code = 2

    def __init__(self, resource_type: str, name: str, force_hint: bool = True):
        self.resource_type = resource_type
        self.name = name
        message = f"{resource_type} '{name}' already exists"
        if force_hint:
            message += ". Choose a different name or use --force to overwrite"
        super().__init__(message, error_code="ALREADY_EXISTS")


class DuplicateInstanceNameError(MCPJsonError):
    """A server reference with the same instance name is already in the profile."""

    exit_code = 2

    def __init__(self, instance_name: str, profile_name: str):
        self.instance_name = instance_name
        self.profile_name = profile_name
        super().__init__(
            f"Server '{instance_name}' already exists in profile '{profile_name}'. "
            "Pick another name with --as <name>",
            error_code="DUPLICATE_INSTANCE",
        )


class OverwriteCancelledError(MCPJsonError):
    """The user declined an interactive overwrite prompt."""

    def __init__(self, resource_type: str, name: str):
        self.resource_type = resource_type
        self.name = name
        super().__init__(
            f"Overwrite of {resource_type} '{name}' cancelled",
            error_code="CANCELLED",
        )


class ValidationError(MCPJsonError):
    """Data validation errors."""

    exit_code = 7

    def __init__(self, message: str, error_code: Optional[str] = "VALIDATION",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code=error_code, details=details)


class EmptyNameError(ValidationError):
    """Name is the empty string."""

    def __init__(self, resource_type: str):
        super().__init__(f"{resource_type} name is required", error_code="EMPTY_NAME")


class NameTooLongError(ValidationError):
    """Name exceeds the maximum length."""

    def __init__(self, resource_type: str, max_length: int):
        super().__init__(
            f"{resource_type} name must be at most {max_length} characters",
            error_code="NAME_TOO_LONG",
        )


class InvalidCharactersError(ValidationError):
    """Name contains characters outside [A-Za-z0-9_-]."""

    def __init__(self, resource_type: str):
        super().__init__(
            f"{resource_type} name contains invalid characters "
            "(allowed: letters, digits, hyphen, underscore)",
            error_code="INVALID_CHARACTERS",
        )


class ReservedWordError(ValidationError):
    """Name is a reserved command word."""

    def __init__(self, resource_type: str, word: str):
        self.word = word
        super().__init__(
            f"'{word}' is a reserved word and cannot be used as a {resource_type} name",
            error_code="RESERVED_WORD",
        )


class MissingCommandError(ValidationError):
    """A new template was requested without a command."""

    def __init__(self, name: str):
        super().__init__(
            f"A command is required to create server template '{name}'",
            error_code="MISSING_COMMAND",
        )


class TemplateNotFoundError(MCPJsonError):
    """A profile references a template that does not exist."""

    exit_code = 8

    def __init__(self, template_name: str, profile_name: str,
                 missing: Optional[List[str]] = None):
        self.template_name = template_name
        self.profile_name = profile_name
        super().__init__(
            f"Server template '{template_name}' referenced by profile "
            f"'{profile_name}' not found",
            error_code="TEMPLATE_NOT_FOUND",
            details={"missing": missing or [template_name]},
        )


class FileError(MCPJsonError):
    """Underlying storage I/O failure."""

    exit_code = 3

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message, error_code="FILE_ERROR",
                         details={"path": path} if path else None)


class FormatError(MCPJsonError):
    """Malformed stored document."""

    exit_code = 4

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message, error_code="FORMAT_ERROR",
                         details={"path": path} if path else None)
