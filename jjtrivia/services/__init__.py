"""Service layer: parsing, validation, image migration and the game library."""

from .config import ConfigurationService, ValidationResult
from .errors import (
    AppError,
    CategoryMismatchError,
    ConfigurationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    FileSystemError,
    LibraryError,
    NetworkError,
    ParsingError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .filesystem import FileSystemService
from .game_data import GameDataService
from .html_parser import HtmlGameParser
from .http_client import HttpClientService
from .image_cache import ImageCacheService
from .image_migration import ImageMigrationService
from .library import DEFAULT_GAMES_DIRECTORY, DeletePolicy, LibraryStore, seed_default_games
from .native_parser import NativeGameParser
from .validator import GameValidator

__all__ = [
    "DEFAULT_GAMES_DIRECTORY",
    "AppError",
    "CategoryMismatchError",
    "ConfigurationError",
    "ConfigurationService",
    "DeletePolicy",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FileSystemError",
    "FileSystemService",
    "GameDataService",
    "GameValidator",
    "HtmlGameParser",
    "HttpClientService",
    "ImageCacheService",
    "ImageMigrationService",
    "LibraryError",
    "LibraryStore",
    "NativeGameParser",
    "NetworkError",
    "ParsingError",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "get_error_service",
    "handle_error",
    "seed_default_games",
]
