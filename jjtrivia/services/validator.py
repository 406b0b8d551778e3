"""Structural validation of parsed game descriptions."""

import structlog

from ..models import GameDescription, GameLimits, Message, ParsingResult

log = structlog.stdlib.get_logger()


class GameValidator:
    """Decides whether a parsed game description is usable.

    Fatal rules run in a fixed order and stop at the first failure, so a
    result carries at most one error. Player and bonus question checks only
    ever warn: offending players or bonus questions are dropped from the
    description and the game stays usable.
    """

    def __init__(self, limits: GameLimits | None = None) -> None:
        self.limits = limits or GameLimits()

    def validate(self, game: GameDescription) -> tuple[GameDescription, ParsingResult]:
        """Validate game in place and report what was found.

        Sets ``game.usable``; may drop players and bonus questions. Never
        touches the file system.
        """
        result = ParsingResult(file_name=game.file_or_bundle_path.name)

        if not game.file_data_acquired:
            result.add_error(Message.PARSING, "the file could not be read")
        elif game.parse_error:
            result.add_error(Message.PARSING, game.parse_error)
        elif self._check_structure(game, result):
            result.add_info(Message.QUESTIONS_PARSED, game.questions_count, len(game.categories))

        if game.file_data_acquired:
            self._check_players(game, result)
            self._check_bonus_questions(game, result)

        game.usable = not result.errors
        result.game_data_usable = game.usable

        log.info(
            "Game validated",
            file=result.file_name,
            usable=game.usable,
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        return game, result

    def _check_structure(self, game: GameDescription, result: ParsingResult) -> bool:
        limits = self.limits

        if not game.name or not game.name.strip():
            result.add_error(Message.MISSING_NAME)
            return False

        count = len(game.categories)
        if count == 0:
            result.add_error(Message.NO_CATEGORIES)
            return False
        if count < limits.min_categories:
            result.add_error(Message.NOT_ENOUGH_CATEGORIES, count, limits.min_categories)
            return False
        if count > limits.max_categories:
            result.add_error(Message.TOO_MANY_CATEGORIES, count, limits.max_categories)
            return False

        expected = game.categories[0].questions_count
        for number, category in enumerate(game.categories, start=1):
            if not category.name.strip():
                result.add_error(Message.BLANK_CATEGORY_NAME, number)
                return False

            found = category.questions_count
            if found == 0:
                result.add_error(Message.NO_QUESTIONS, category.name)
                return False
            if found < limits.min_questions:
                result.add_error(Message.NOT_ENOUGH_QUESTIONS, category.name, found, limits.min_questions)
                return False
            if found > limits.max_questions:
                result.add_error(Message.TOO_MANY_QUESTIONS, category.name, found, limits.max_questions)
                return False
            if found != expected:
                result.add_error(Message.NOT_MATCHING_QUESTIONS, category.name, found, expected)
                return False

        return True

    def _check_players(self, game: GameDescription, result: ParsingResult) -> None:
        count = len(game.player_names)
        if count == 0:
            return
        if count < self.limits.min_players:
            result.add_warning(Message.TOO_FEW_PLAYERS, count, self.limits.min_players)
            game.player_names = []
            return
        if count > self.limits.max_players:
            result.add_warning(Message.TOO_MANY_PLAYERS, count, self.limits.max_players)
            game.player_names = game.player_names[:self.limits.max_players]
        result.add_info(Message.PLAYERS_PARSED, len(game.player_names))

    def _check_bonus_questions(self, game: GameDescription, result: ParsingResult) -> None:
        count = len(game.bonus_questions)
        if count == 0:
            return
        players = len(game.player_names)
        if count < players:
            result.add_warning(Message.TOO_FEW_BONUS_QUESTIONS, count, players)
            game.bonus_questions = []
            return
        result.add_info(Message.BONUS_QUESTIONS_PARSED, count)
