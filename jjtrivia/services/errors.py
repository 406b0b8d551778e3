"""Error handling module for the jjtrivia game library.

This module provides:
- Exception classes for the failure kinds of the ingestion pipeline
  (network, file system, parsing, validation, configuration, library)
- User-friendly error messages with suggested actions
- A centralized error handling service that logs technical details
"""

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    NETWORK = "network"
    FILE_SYSTEM = "file_system"
    PARSING = "parsing"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    LIBRARY = "library"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class UserFriendlyError:
    """User-friendly error representation with suggested actions."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str]
    technical_details: str | None = None
    recoverable: bool = True


class AppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        suggested_actions: list[str] | None = None,
        technical_details: str | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.suggested_actions = suggested_actions or []
        self.technical_details = technical_details
        self.recoverable = recoverable

    def to_user_friendly(self) -> UserFriendlyError:
        """Convert to user-friendly error representation."""
        return UserFriendlyError(
            message=self.message,
            category=self.category,
            severity=self.severity,
            suggested_actions=self.suggested_actions,
            technical_details=self.technical_details,
            recoverable=self.recoverable,
        )


def _describe(original_error: Exception | None) -> str | None:
    if original_error is None:
        return None
    return f"{type(original_error).__name__}: {original_error}"


class NetworkError(AppError):
    """Exception for image fetch and other network errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        suggested_actions = [
            "Check your internet connection",
            "Verify the image URL is still reachable",
        ]
        if status_code == 404:
            suggested_actions = ["The image no longer exists at its original location"]
        elif status_code is not None and status_code >= 500:
            suggested_actions = ["The image server is experiencing issues", "Try again later"]

        details = [part for part in (
            f"Status: {status_code}" if status_code else None,
            f"URL: {url}" if url else None,
            _describe(original_error),
        ) if part]

        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details="\n".join(details) or None,
        )
        self.original_error = original_error
        self.url = url
        self.status_code = status_code


class FileSystemError(AppError):
    """Exception for file system errors."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        path: str | None = None,
        operation: str | None = None,
    ) -> None:
        if isinstance(original_error, PermissionError):
            suggested_actions = [
                "Check file/directory permissions",
                "Choose a different location",
            ]
        elif isinstance(original_error, FileNotFoundError):
            suggested_actions = [
                "Verify the file path is correct",
                "Check if the file was moved or deleted",
            ]
        else:
            suggested_actions = [
                "Check the file path and permissions",
                "Ensure sufficient disk space",
            ]

        details = [part for part in (f"Path: {path}" if path else None, _describe(original_error)) if part]

        super().__init__(
            message=message,
            category=ErrorCategory.FILE_SYSTEM,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details="\n".join(details) or None,
        )
        self.original_error = original_error
        self.path = path
        self.operation = operation


class ParsingError(AppError):
    """Exception for game files whose structure cannot be parsed."""

    def __init__(self, message: str, file_path: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.PARSING,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Make sure the file is a supported game file",
                "Export the game again from its source",
            ],
            technical_details=f"File: {file_path}" if file_path else None,
        )
        self.file_path = file_path


class CategoryMismatchError(ParsingError):
    """A question cell refers to a category missing from the header row."""

    def __init__(self, category: str, known_categories: list[str], file_path: str | None = None) -> None:
        super().__init__(f'Category "{category}" is not found in the game header', file_path)
        self.category = category
        self.known_categories = known_categories


class ValidationError(AppError):
    """Exception for invalid input values."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        details = []
        if field:
            details.append(f"Field: {field}")
        if value is not None:
            details.append(f"Value: {str(value)[:100]}")
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.WARNING,
            suggested_actions=["Review the input requirements"],
            technical_details="\n".join(details) or None,
        )
        self.field = field
        self.value = value


class ConfigurationError(AppError):
    """Exception for configuration errors."""

    def __init__(self, message: str, setting: str | None = None) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Check the configuration settings",
                "Reset to default values if needed",
            ],
            technical_details=f"Setting: {setting}" if setting else None,
        )
        self.setting = setting


class LibraryError(AppError):
    """Exception for game library operations that could not complete."""

    def __init__(
        self,
        message: str,
        game_name: str | None = None,
        path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        details = [part for part in (
            f"Game: {game_name}" if game_name else None,
            f"Path: {path}" if path else None,
            _describe(original_error),
        ) if part]
        super().__init__(
            message=message,
            category=ErrorCategory.LIBRARY,
            severity=ErrorSeverity.ERROR,
            suggested_actions=[
                "Check the library directory permissions",
                "Reload the library",
            ],
            technical_details="\n".join(details) or None,
        )
        self.game_name = game_name
        self.path = path
        self.original_error = original_error


class ErrorHandlingService:
    """Centralized error handling: classification, logging and history."""

    def __init__(self, max_history_size: int = 100) -> None:
        self._error_history: list[tuple[float, AppError]] = []
        self._max_history_size = max_history_size
        log.info("Error handling service initialized")

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Handle an error and return a user-friendly representation.

        Args:
            error: The exception that occurred
            operation: The operation being performed
            component: The component where the error occurred
            context: Additional context information (``url``, ``path``...)

        Returns:
            User-friendly error representation
        """
        app_error = self.convert_to_app_error(error, operation, context)
        self._log_error(app_error, operation, component, context)

        self._error_history.append((time.time(), app_error))
        if len(self._error_history) > self._max_history_size:
            self._error_history.pop(0)

        return app_error.to_user_friendly()

    def convert_to_app_error(
        self,
        error: Exception,
        operation: str,
        context: dict[str, Any] | None = None,
    ) -> AppError:
        """Convert a standard exception to an AppError."""
        context = context or {}

        if isinstance(error, AppError):
            return error

        if isinstance(error, httpx.TimeoutException):
            return NetworkError(
                message="The image download timed out.",
                original_error=error,
                url=context.get("url"),
            )
        if isinstance(error, httpx.HTTPStatusError):
            return NetworkError(
                message=f"The image server returned HTTP {error.response.status_code}.",
                original_error=error,
                url=str(error.request.url),
                status_code=error.response.status_code,
            )
        if isinstance(error, httpx.RequestError):
            return NetworkError(
                message="A network error occurred while downloading an image.",
                original_error=error,
                url=context.get("url"),
            )

        if isinstance(error, PermissionError):
            return FileSystemError(
                message="Permission denied. You don't have access to this file or directory.",
                original_error=error,
                path=context.get("path"),
                operation=operation,
            )
        if isinstance(error, FileNotFoundError):
            return FileSystemError(
                message="The file or directory was not found.",
                original_error=error,
                path=context.get("path"),
                operation=operation,
            )
        if isinstance(error, OSError):
            return FileSystemError(
                message=f"A file system error occurred: {error}",
                original_error=error,
                path=context.get("path"),
                operation=operation,
            )

        if isinstance(error, json.JSONDecodeError):
            return ConfigurationError(message="Invalid JSON format. The settings could not be parsed.")
        if isinstance(error, ValueError):
            return ValidationError(message=str(error), field=context.get("field"), value=context.get("value"))

        return AppError(
            message="An unexpected error occurred. Please try again.",
            technical_details=_describe(error),
        )

    def _log_error(
        self,
        error: AppError,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> None:
        log_method = log.warning if error.severity == ErrorSeverity.WARNING else log.error
        log_method(
            "Error occurred",
            error_message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            operation=operation,
            component=component,
            technical_details=error.technical_details,
            context=context,
        )

    def get_recent_errors(self, count: int = 10) -> list[AppError]:
        recent = self._error_history[-count:] if self._error_history else []
        return [error for _, error in recent]

    def create_user_message(self, error: UserFriendlyError, include_suggestions: bool = True) -> str:
        """Create a formatted user message from an error."""
        parts = [error.message]
        if include_suggestions and error.suggested_actions:
            parts.append("\nSuggested actions:")
            for action in error.suggested_actions[:3]:
                parts.append(f"  • {action}")
        return "\n".join(parts)


_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Get the global error handling service instance."""
    global _error_service
    if _error_service is None:
        _error_service = ErrorHandlingService()
    return _error_service


def handle_error(
    error: Exception,
    operation: str,
    component: str,
    context: dict[str, Any] | None = None,
) -> UserFriendlyError:
    """Convenience function to handle errors using the global service."""
    return get_error_service().handle_error(error, operation, component, context)
