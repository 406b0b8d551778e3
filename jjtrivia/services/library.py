"""Game library: an on-disk directory of games mirrored by a sorted in-memory index."""

from collections.abc import Callable
from enum import Enum
from pathlib import Path

import structlog

from ..models import GameDescription, ProgressSink, ProgressTracker
from .errors import LibraryError
from .filesystem import FileSystemService
from .game_data import GameDataService, find_manifest
from .image_migration import ImageMigrationService
from .native_format import BUNDLE_EXTENSION, NATIVE_EXTENSION, write_game_file

log = structlog.stdlib.get_logger()

# Bundles shipped with the package, one .jj directory per game
DEFAULT_GAMES_DIRECTORY = Path(__file__).resolve().parent.parent / "default_games"


class DeletePolicy(Enum):
    """What remove() does when the game cannot be deleted from disk."""
    BEST_EFFORT = "best_effort"  # drop from the index anyway
    ATOMIC = "atomic"  # keep the index entry and raise LibraryError


def _snapshot(game: GameDescription) -> Callable[[], None]:
    """Capture the fields add() rewrites; calling the result puts them back."""
    file_path, bundle_path = game.file_path, game.bundle_path
    image_download_failure = game.image_download_failure
    images = [(question, question.question_image, question.answer_image) for question in game.all_questions()]

    def restore() -> None:
        game.set_file_paths(file_path, bundle_path)
        game.image_download_failure = image_download_failure
        for question, question_image, answer_image in images:
            question.question_image = question_image
            question.answer_image = answer_image

    return restore


def seed_default_games(library_directory: Path, defaults_directory: Path, file_system: FileSystemService) -> bool:
    """Copy the bundled default games into a library that does not exist yet.

    An existing library directory is taken as already seeded and left alone,
    so games the user removed do not come back.

    Returns:
        True if the library was seeded by this call
    """
    if library_directory.exists():
        return False

    file_system.ensure_directory(library_directory)
    try:
        bundles = [entry for entry in file_system.list_entries(defaults_directory) if entry.is_dir()]
        for bundle in bundles:
            file_system.copy_directory_files(bundle, library_directory / bundle.name)
    except OSError as e:
        log.warning("Unable to copy default games", source=str(defaults_directory), error=str(e))
        return False

    log.info("Library seeded with default games", directory=str(library_directory), games=len(bundles))
    return True


class LibraryStore:
    """Tracks the games stored in the library directory.

    Each game is either a native file or a ``.jj`` bundle directory directly
    under the library root. The index is sorted by game name after every
    change. Calls are expected from a single controlling task; there is no
    internal locking.
    """

    def __init__(
        self,
        library_directory: Path,
        game_data: GameDataService,
        file_system: FileSystemService,
        image_migration: ImageMigrationService | None = None,
    ) -> None:
        self.library_directory = library_directory
        self.game_data = game_data
        self.file_system = file_system
        self.image_migration = image_migration
        self._games: list[GameDescription] = []

    @classmethod
    def open(
        cls,
        library_directory: Path,
        game_data: GameDataService,
        file_system: FileSystemService,
        image_migration: ImageMigrationService | None = None,
        default_games_directory: Path | None = None,
    ) -> "LibraryStore":
        """Create a store for library_directory and load the games found there.

        A library directory that does not exist yet is first seeded with the
        bundles under default_games_directory, when one is given.
        """
        if default_games_directory is not None:
            seed_default_games(library_directory, default_games_directory, file_system)
        file_system.ensure_directory(library_directory)
        store = cls(library_directory, game_data, file_system, image_migration)
        store.load_all()
        return store

    @property
    def games(self) -> list[GameDescription]:
        """Snapshot of the index, sorted by name."""
        return list(self._games)

    def find_by_name(self, name: str) -> GameDescription | None:
        for game in self._games:
            if game.name == name:
                return game
        return None

    def library_path_for(self, game: GameDescription) -> Path:
        """Where game lives, or would live, inside the library directory."""
        if not game.native:
            return self.library_directory / f"{game.file_path.stem}{BUNDLE_EXTENSION}"
        if game.bundle_path is not None:
            return self.library_directory / game.bundle_path.name
        return self.library_directory / game.file_path.name

    def exists(self, game: GameDescription) -> bool:
        """Whether the library already holds an entry with this game's file or bundle name.

        Non-native games are looked up by the name of the bundle they would
        be promoted to.
        """
        path = self.library_path_for(game)
        if game.native and game.bundle_path is None:
            return path.is_file()
        return path.is_dir()

    async def add(self, game: GameDescription, progress: ProgressSink | None = None) -> list[str]:
        """Copy game into the library and register it in the index.

        Does nothing for games that already exist or are not usable.
        Non-native games are promoted to a native bundle: remote images are
        migrated into it (reporting to progress) and a manifest is written.

        On failure the partial library entry is deleted and the description's
        paths and image references are restored, so the same game can be
        added again later.

        Returns:
            Image URLs that could not be migrated; empty for native games

        Raises:
            LibraryError: If the game files cannot be copied or written
        """
        if not game.usable:
            log.warning("Not adding unusable game to library", path=str(game.file_path))
            return []
        if self.exists(game):
            log.info("Game already in library", name=game.name, path=str(self.library_path_for(game)))
            return []

        destination = self.library_path_for(game)
        restore_game = _snapshot(game)

        failed_urls: list[str] = []
        try:
            if not game.native:
                failed_urls = await self._add_non_native(game, progress or ProgressTracker())
            elif game.bundle_path is not None:
                self._add_native_bundle(game, game.bundle_path)
            else:
                self._add_native_file(game)
        except Exception as e:
            # Nothing was at destination before this call, so whatever is there now is partial
            self._discard_partial_entry(destination)
            restore_game()
            if isinstance(e, LibraryError):
                raise
            raise LibraryError(
                "Unable to copy the game into the library",
                game_name=game.name,
                path=str(destination),
                original_error=e,
            ) from e

        self._insert(game)
        log.info("Game added to library", name=game.name, path=str(game.file_or_bundle_path),
                 failed_images=len(failed_urls))
        return failed_urls

    def _add_native_file(self, game: GameDescription) -> None:
        destination = self.library_path_for(game)
        self.file_system.copy_file(game.file_path, destination)
        game.set_file_paths(destination, None)

    def _discard_partial_entry(self, destination: Path) -> None:
        if not destination.exists():
            return
        try:
            if destination.is_dir():
                self.file_system.delete_directory(destination)
            else:
                self.file_system.delete_file(destination)
            log.info("Partial library entry removed", path=str(destination))
        except OSError as e:
            log.error("Unable to remove partial library entry", path=str(destination), error=str(e))

    def _add_native_bundle(self, game: GameDescription, bundle_path: Path) -> None:
        destination = self.library_path_for(game)
        copied = self.file_system.copy_directory_files(bundle_path, destination)
        manifest = next((path for path in copied if path.suffix.lower() == NATIVE_EXTENSION), None)
        game.set_file_paths(manifest or destination / game.file_path.name, destination)

    async def _add_non_native(self, game: GameDescription, progress: ProgressSink) -> list[str]:
        if self.image_migration is None:
            raise LibraryError("Image migration is not available", game_name=game.name)

        bundle = self.library_path_for(game)
        self.file_system.ensure_directory(bundle)
        game.set_file_paths(bundle / f"{game.file_path.stem}{NATIVE_EXTENSION}", bundle)

        failed_urls = await self.image_migration.migrate_images(game, progress)
        if failed_urls:
            game.image_download_failure = True

        write_game_file(game, game.file_path)
        game.change_to_native()
        return failed_urls

    def remove(self, game: GameDescription, policy: DeletePolicy = DeletePolicy.BEST_EFFORT) -> None:
        """Delete game from disk and drop it from the index.

        Raises:
            LibraryError: With DeletePolicy.ATOMIC, if the disk delete fails
        """
        path = game.file_or_bundle_path
        try:
            if game.bundle_path is not None:
                self.file_system.delete_directory(path)
            else:
                self.file_system.delete_file(path)
        except OSError as e:
            if policy is DeletePolicy.ATOMIC:
                raise LibraryError(
                    "Unable to delete the game from the library",
                    game_name=game.name,
                    path=str(path),
                    original_error=e,
                ) from e
            log.warning("Game files could not be deleted, removing from index", path=str(path), error=str(e))

        self._games = [entry for entry in self._games if entry is not game]
        self._sort()
        log.info("Game removed from library", name=game.name, path=str(path))

    def load_all(self) -> None:
        """Rebuild the index from the library directory, keeping usable games only."""
        games = []
        for entry in self.file_system.list_entries(self.library_directory):
            game = self._parse_entry(entry)
            if game is None:
                continue
            game, result = self.game_data.validator.validate(game)
            if game.usable:
                games.append(game)
            else:
                log.warning("Skipping unusable library entry", path=str(entry), errors=result.error_messages)

        self._games = games
        self._sort()
        log.info("Library loaded", directory=str(self.library_directory), games=len(self._games))

    def _parse_entry(self, entry: Path) -> GameDescription | None:
        if entry.is_dir():
            manifest = find_manifest(entry)
            if manifest is None:
                log.debug("Skipping directory without game file", path=str(entry))
                return None
            return self.game_data.native_parser.parse(manifest, entry)
        if entry.is_file() and entry.suffix.lower() == NATIVE_EXTENSION:
            return self.game_data.native_parser.parse(entry)
        log.debug("Skipping non-game library entry", path=str(entry))
        return None

    def _insert(self, game: GameDescription) -> None:
        self._games.append(game)
        self._sort()

    def _sort(self) -> None:
        self._games.sort(key=lambda game: game.sort_key)
