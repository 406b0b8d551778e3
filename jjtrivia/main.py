"""Main entry point for the jjtrivia command line tool.

This module provides:
- Command-line argument parsing (validate a game file, manage the library)
- Application initialization and lazy service construction
- Reporting of parsing results and library operations
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from jjtrivia import __version__
from jjtrivia.models import FULL_PROGRESS, AppConfig, ParsingResult
from jjtrivia.services.config import DEFAULT_LOG_LEVEL, ConfigurationService
from jjtrivia.services.errors import AppError, get_error_service, handle_error
from jjtrivia.services.filesystem import FileSystemService
from jjtrivia.services.game_data import GameDataService
from jjtrivia.services.http_client import HttpClientService
from jjtrivia.services.image_cache import ImageCacheService
from jjtrivia.services.image_migration import ImageMigrationService
from jjtrivia.services.library import DEFAULT_GAMES_DIRECTORY, DeletePolicy, LibraryStore
from jjtrivia.services.logging import setup_logging

log = structlog.stdlib.get_logger()


class LoggingProgressSink:
    """Progress sink that reports image migration progress to the log."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.progress = 0

    def increment_progress(self, value: int) -> None:
        self.progress = min(FULL_PROGRESS, self.progress + value)
        log.info("Image migration progress", game=self.label, progress=self.progress)


class ApplicationContext:
    """Container for application services, built on first use."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path

        self._config_service: ConfigurationService | None = None
        self._config: AppConfig | None = None
        self._http_client: HttpClientService | None = None
        self._filesystem: FileSystemService | None = None
        self._game_data: GameDataService | None = None
        self._library: LibraryStore | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = self.config_service.config
        return self._config

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.read_timeout,
            )
        return self._http_client

    @property
    def filesystem(self) -> FileSystemService:
        if self._filesystem is None:
            self._filesystem = FileSystemService()
        return self._filesystem

    @property
    def game_data(self) -> GameDataService:
        if self._game_data is None:
            self._game_data = GameDataService(limits=self.config.limits)
        return self._game_data

    @property
    def library(self) -> LibraryStore:
        """The game library, loaded on first access; a new library gets the default games."""
        if self._library is None:
            image_cache = ImageCacheService(self.config_service.image_cache_directory(), self.http_client)
            self._library = LibraryStore.open(
                self.config_service.library_directory(create=False),
                self.game_data,
                self.filesystem,
                ImageMigrationService(image_cache, self.filesystem),
                default_games_directory=DEFAULT_GAMES_DIRECTORY,
            )
        return self._library

    async def cleanup(self) -> None:
        """Close network connections."""
        if self._http_client is not None:
            await self._http_client.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jjtrivia",
        description="Validate trivia game files and manage the local game library",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jjtrivia validate quiz.xml            Check a game file and print the report
  jjtrivia library add export.html      Import an HTML export into the library
  jjtrivia library list                 List the games in the library
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/jjtrivia/config.json)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: log_level from the configuration file)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: console only)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not log to the console (log files are still written)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    validate = commands.add_parser("validate", help="Parse and validate a game file or bundle")
    validate.add_argument("path", type=Path, help="Native .xml file, .jj bundle or HTML export")

    library = commands.add_parser("library", help="Manage the game library")
    library_commands = library.add_subparsers(dest="library_command", required=True)
    library_commands.add_parser("list", help="List the games in the library")
    add = library_commands.add_parser("add", help="Add a game file or bundle to the library")
    add.add_argument("path", type=Path, help="Native .xml file, .jj bundle or HTML export")
    remove = library_commands.add_parser("remove", help="Remove a game from the library")
    remove.add_argument("name", help="Name of the game to remove")
    remove.add_argument(
        "--atomic",
        action="store_true",
        help="Keep the game listed if its files cannot be deleted",
    )

    return parser


def print_result(result: ParsingResult) -> None:
    print(result.title_long)
    for message in result.error_messages:
        print(f"  error: {message}")
    for message in result.warning_messages:
        print(f"  warning: {message}")
    for message in result.info_messages:
        print(f"  info: {message}")


def run_validate(context: ApplicationContext, path: Path) -> int:
    _, result = context.game_data.load_game(path)
    print_result(result)
    return 0 if result.game_data_usable else 1


def run_library_list(context: ApplicationContext) -> int:
    games = context.library.games
    if not games:
        print("The library is empty")
    for game in games:
        flag = " (some images are missing)" if game.image_download_failure else ""
        print(f"{game.name}\t{game.file_or_bundle_path}{flag}")
    return 0


async def run_library_add(context: ApplicationContext, path: Path) -> int:
    game, result = context.game_data.load_game(path)
    if not game.usable:
        print_result(result)
        return 1

    library = context.library
    if library.exists(game):
        print(f"{game.name} is already in the library")
        return 0

    failed_urls = await library.add(game, LoggingProgressSink(game.name or path.name))
    print(f"Added {game.name} to the library")
    if failed_urls:
        print("These images could not be downloaded:")
        for url in failed_urls:
            print(f"  {url}")
    return 0


def run_library_remove(context: ApplicationContext, name: str, atomic: bool) -> int:
    game = context.library.find_by_name(name)
    if game is None:
        print(f"No game named {name} in the library", file=sys.stderr)
        return 1
    policy = DeletePolicy.ATOMIC if atomic else DeletePolicy.BEST_EFFORT
    context.library.remove(game, policy)
    print(f"Removed {name} from the library")
    return 0


async def run_command(context: ApplicationContext, args: argparse.Namespace) -> int:
    try:
        if args.command == "validate":
            return run_validate(context, args.path)
        if args.library_command == "list":
            return run_library_list(context)
        if args.library_command == "add":
            return await run_library_add(context, args.path)
        return run_library_remove(context, args.name, args.atomic)
    finally:
        await context.cleanup()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    context = ApplicationContext(config_path=args.config)

    # Loading the settings logs, so logging is set up before and after reading them
    setup_logging(log_level=args.log_level or DEFAULT_LOG_LEVEL, log_dir=args.log_dir, quiet=args.quiet)
    if args.log_level is None:
        setup_logging(log_level=context.config.log_level, log_dir=args.log_dir, quiet=args.quiet)
    log.info("Starting jjtrivia", version=__version__, command=args.command)

    try:
        exit_code = asyncio.run(run_command(context, args))

    except KeyboardInterrupt:
        log.info("Interrupted by user")
        exit_code = 130

    except AppError as e:
        error = handle_error(e, operation=args.command, component="cli")
        print(get_error_service().create_user_message(error), file=sys.stderr)
        exit_code = 1

    except Exception as e:
        error = handle_error(e, operation=args.command, component="cli")
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(get_error_service().create_user_message(error), file=sys.stderr)
        exit_code = 1

    log.info("Exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
