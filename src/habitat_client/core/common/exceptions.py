"""
Common exception classes for the Habitat client.

This module defines custom exception classes used throughout the package
for better error handling and categorization.
"""

from __future__ import annotations

from typing import Any


class HabError(Exception):
    """Base exception class for all Habitat client errors."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        **kwargs: Any,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        # Attach any extra attributes provided by callers
        for key, value in (kwargs or {}).items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        error_dict = {
            "message": self.message,
            "type": self.__class__.__name__,
            "details": self.details,
        }

        # Include any additional attributes that were set via kwargs
        for attr_name in dir(self):
            if (
                not attr_name.startswith("_")
                and attr_name not in ["message", "details", "args"]
                and not callable(getattr(self, attr_name))
            ):
                error_dict[attr_name] = getattr(self, attr_name)

        return {"error": error_dict}


class UnsupportedArgumentError(HabError):
    """Raised when exec() receives an argument it cannot marshal."""

    def __init__(
        self,
        message: str = "Unsupported exec argument",
        argument: Any = None,
        details: dict | None = None,
        **kwargs: Any,
    ):
        det = details.copy() if details else {}
        det.setdefault("argument_type", type(argument).__name__)
        super().__init__(message, det, **kwargs)
        self.argument = argument


class CommandExecutionError(HabError):
    """Raised when the binary cannot be launched or exits non-zero."""

    def __init__(
        self,
        message: str = "Command execution failed",
        details: dict | None = None,
        *,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
        **kwargs: Any,
    ):
        super().__init__(message, details, **kwargs)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class OutputLimitExceededError(CommandExecutionError):
    """Raised when buffered output grows past the configured ceiling."""

    def __init__(
        self,
        message: str = "Command output exceeded buffer limit",
        details: dict | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, details, **kwargs)


class CommandTimeoutError(CommandExecutionError):
    """Raised when a buffered invocation outlives its timeout."""

    def __init__(
        self,
        message: str = "Command timed out",
        details: dict | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, details, **kwargs)


class SpawnedProcessError(HabError):
    """Raised when a spawned process exits non-zero while waited on or captured."""

    def __init__(
        self,
        message: str = "Spawned process failed",
        details: dict | None = None,
        *,
        code: int | None = None,
        output: str | None = None,
        stderr: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, details, **kwargs)
        self.code = code
        self.output = output
        self.stderr = stderr


class VersionRequirementError(HabError):
    """Raised when the installed binary does not satisfy a version range."""

    def __init__(
        self,
        message: str = "Habitat version requirement not satisfied",
        required_range: str | None = None,
        reported_version: str | None = None,
        details: dict | None = None,
        **kwargs: Any,
    ):
        det = details.copy() if details else {}
        det.setdefault("required_range", required_range)
        det.setdefault("reported_version", reported_version)
        super().__init__(message, det, **kwargs)
        self.required_range = required_range
        self.reported_version = reported_version


class SupervisorApiError(HabError):
    """Raised when the supervisor HTTP API answers with an error status."""

    def __init__(
        self,
        message: str = "Supervisor API request failed",
        details: dict | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, details, **kwargs)
        self.status_code = status_code


class SupervisorUnavailableError(SupervisorApiError):
    """Raised when the supervisor HTTP API cannot be reached."""

    def __init__(
        self,
        message: str = "Supervisor API unavailable",
        details: dict | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, details, **kwargs)


class ConfigurationError(HabError):
    """Raised when there's a configuration issue."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, details, **kwargs)
