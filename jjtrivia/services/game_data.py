"""Game file loading: format dispatch, validation, the current game and its players."""

from pathlib import Path

import structlog

from ..models import GameDescription, GameLimits, ParsingResult, Player
from .errors import ValidationError
from .html_parser import HtmlGameParser
from .native_format import BUNDLE_EXTENSION, NATIVE_EXTENSION
from .native_parser import NativeGameParser
from .validator import GameValidator

log = structlog.stdlib.get_logger()

HTML_EXTENSIONS = {".html", ".htm"}


def find_manifest(bundle_path: Path) -> Path | None:
    """First native game file inside a bundle directory, by name."""
    try:
        candidates = sorted(
            entry for entry in bundle_path.iterdir()
            if entry.is_file() and entry.suffix.lower() == NATIVE_EXTENSION
        )
    except OSError as e:
        log.warning("Unable to list bundle directory", path=str(bundle_path), error=str(e))
        return None
    return candidates[0] if candidates else None


class GameDataService:
    """Parses and validates game files, and holds the game in play with its players."""

    def __init__(
        self,
        limits: GameLimits | None = None,
        native_parser: NativeGameParser | None = None,
        html_parser: HtmlGameParser | None = None,
        validator: GameValidator | None = None,
    ) -> None:
        self.limits = limits or GameLimits()
        self.native_parser = native_parser or NativeGameParser(self.limits)
        self.html_parser = html_parser or HtmlGameParser()
        self.validator = validator or GameValidator(self.limits)
        self._current_game: GameDescription | None = None
        self._players: list[Player] = []

    def parse_game_file_or_bundle(self, path: Path) -> GameDescription:
        """Parse path with the parser its type calls for. Never raises.

        A directory is a bundle and its manifest is parsed; a ``.xml`` file
        inside a ``.jj`` directory is also treated as a bundle. Unknown file
        types come back as an unread, non-native description.
        """
        if path.is_dir():
            manifest = find_manifest(path)
            if manifest is None:
                log.warning("No game file found in bundle", path=str(path))
                return GameDescription(file_path=path, bundle_path=path, native=True)
            return self.native_parser.parse(manifest, path)

        suffix = path.suffix.lower()
        if suffix == NATIVE_EXTENSION:
            bundle = path.parent if path.parent.name.lower().endswith(BUNDLE_EXTENSION) else None
            return self.native_parser.parse(path, bundle)
        if suffix in HTML_EXTENSIONS:
            return self.html_parser.parse(path)

        log.warning("Unsupported game file type", path=str(path))
        return GameDescription(file_path=path, native=False)

    def load_game(self, path: Path) -> tuple[GameDescription, ParsingResult]:
        """Parse and validate a game file or bundle."""
        log.info("Loading game", path=str(path))
        return self.validator.validate(self.parse_game_file_or_bundle(path))

    @property
    def has_current_game(self) -> bool:
        return self._current_game is not None

    @property
    def current_game(self) -> GameDescription | None:
        return self._current_game

    def set_current_game(self, game: GameDescription) -> None:
        """Make game the one in play.

        Raises:
            ValidationError: If the game was not validated as usable
        """
        if not game.usable:
            raise ValidationError(
                "Only a usable game can be played",
                field="usable",
                value=game.usable,
            )
        self._current_game = game
        # A game without a full roster keeps the players already entered
        if len(game.player_names) >= self.limits.min_players:
            self.update_current_players(game.player_names)
        log.info("Current game set", name=game.name, players=len(self._players))

    def clear_current_game(self) -> None:
        self._current_game = None

    @property
    def current_players(self) -> list[Player]:
        return list(self._players)

    def update_current_players(self, player_names: list[str]) -> None:
        """Replace the roster with fresh zero-score players, at most max_players of them."""
        self._players = [
            Player(name, index) for index, name in enumerate(player_names[:self.limits.max_players])
        ]

    def add_to_player_score(self, player_index: int, value: int) -> None:
        """Add value (possibly negative) to a player's score.

        Raises:
            IndexError: If there is no player at player_index
        """
        self._players[player_index].adjust_score(value)

    def reset_player_scores(self) -> None:
        for player in self._players:
            player.reset_score()

    @property
    def winner(self) -> Player | None:
        """Player with the highest score; the earliest one wins a tie."""
        if not self._players:
            return None
        return max(self._players, key=lambda player: player.score)

    @property
    def is_game_ready(self) -> bool:
        """True when there are enough players and a usable current game."""
        if len(self._players) < self.limits.min_players:
            return False
        return self._current_game is not None and self._current_game.usable
