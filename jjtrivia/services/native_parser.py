"""Parser for native (XML properties) game files."""

import itertools
from collections.abc import Callable, Iterator
from pathlib import Path

import structlog

from ..models import Category, GameDescription, GameLimits, Question
from . import native_format as fmt

log = structlog.stdlib.get_logger()

Properties = dict[str, str]


def consecutive_numbers(properties: Properties, keys_for: Callable[[int], tuple[str, ...]]) -> Iterator[int]:
    """Yield 1, 2, 3... while at least one of the keys for that number is present.

    The sequence ends at the first gap, so anything defined past a missing
    number is ignored.
    """
    for number in itertools.count(1):
        if not any(key in properties for key in keys_for(number)):
            return
        yield number


def _value(properties: Properties, key: str) -> str | None:
    """Trimmed value for key, or None when absent or blank."""
    value = properties.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _image(properties: Properties, key: str) -> str | None:
    return _value(properties, key) or _value(properties, fmt.legacy_image_key(key))


def _with_legacy(*image_keys: str) -> tuple[str, ...]:
    return image_keys + tuple(fmt.legacy_image_key(key) for key in image_keys)


class NativeGameParser:
    """Reads a native game file into an unvalidated GameDescription."""

    def __init__(self, limits: GameLimits | None = None) -> None:
        self.limits = limits or GameLimits()

    def parse(self, file_path: Path, bundle_path: Path | None = None) -> GameDescription:
        """Parse a native game file.

        Never raises for unreadable or malformed input: the returned
        description then has ``file_data_acquired`` unset and no content.

        Args:
            file_path: Path to the native game file
            bundle_path: Bundle directory holding the file, or None for a standalone file
        """
        game = GameDescription(file_path=file_path, bundle_path=bundle_path, native=True)

        try:
            properties = fmt.read_properties(file_path)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            log.error("Unable to open or parse game file", path=str(file_path), error=str(e))
            return game
        game.file_data_acquired = True

        game.name = _value(properties, fmt.NAME_KEY)
        if game.name is None:
            log.warning("Game name is blank", path=str(file_path))
        game.description = _value(properties, fmt.DESCRIPTION_KEY)

        game.categories = self._parse_categories(properties)
        game.player_names = self._parse_players(properties)
        game.bonus_questions = self._parse_bonus_questions(properties)

        failure = _value(properties, fmt.IMAGE_FAILURE_KEY) or _value(properties, fmt.LEGACY_IMAGE_FAILURE_KEY)
        game.image_download_failure = (failure or "").lower() == "true"

        log.info(
            "Native game file parsed",
            path=str(file_path),
            name=game.name,
            categories=len(game.categories),
            questions=game.questions_count,
            players=len(game.player_names),
            bonus_questions=len(game.bonus_questions),
        )
        return game

    def _parse_categories(self, properties: Properties) -> list[Category]:
        categories = []
        for number in consecutive_numbers(properties, lambda n: (fmt.category_name_key(n),)):
            name = _value(properties, fmt.category_name_key(number))
            if name is None:
                log.warning("Category name is blank", category=number)
            categories.append(Category(name or "", self._parse_questions(properties, number)))
        return categories

    def _parse_questions(self, properties: Properties, category: int) -> list[Question]:
        def keys_for(n: int) -> tuple[str, ...]:
            return (
                fmt.question_text_key(category, n),
                fmt.answer_text_key(category, n),
                *_with_legacy(fmt.question_image_key(category, n), fmt.answer_image_key(category, n)),
            )

        questions = []
        for number in consecutive_numbers(properties, keys_for):
            question = Question(
                question=_value(properties, fmt.question_text_key(category, number)),
                question_image=_image(properties, fmt.question_image_key(category, number)),
                answer=_value(properties, fmt.answer_text_key(category, number)),
                answer_image=_image(properties, fmt.answer_image_key(category, number)),
                points=self._points(properties, fmt.question_points_key(number),
                                    number * self.limits.question_points_multiplier),
            )
            if question.is_askable:
                questions.append(question)
            else:
                log.debug("Skipping incomplete question", category=category, question=number)
        return questions

    def _parse_players(self, properties: Properties) -> list[str]:
        players = []
        for number in consecutive_numbers(properties, lambda n: (fmt.player_name_key(n),)):
            name = _value(properties, fmt.player_name_key(number))
            if name is not None:
                players.append(name)
        return players

    def _parse_bonus_questions(self, properties: Properties) -> list[Question]:
        def keys_for(n: int) -> tuple[str, ...]:
            return (
                fmt.bonus_question_key(n),
                fmt.bonus_answer_key(n),
                *_with_legacy(fmt.bonus_question_image_key(n), fmt.bonus_answer_image_key(n)),
            )

        points = self._points(properties, fmt.BONUS_POINTS_KEY, self.limits.bonus_question_points)
        questions = []
        for number in consecutive_numbers(properties, keys_for):
            question = Question(
                question=_value(properties, fmt.bonus_question_key(number)),
                question_image=_image(properties, fmt.bonus_question_image_key(number)),
                answer=_value(properties, fmt.bonus_answer_key(number)),
                answer_image=_image(properties, fmt.bonus_answer_image_key(number)),
                points=points,
            )
            if question.is_askable:
                questions.append(question)
        return questions

    @staticmethod
    def _points(properties: Properties, key: str, default: int) -> int:
        raw = _value(properties, key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            log.warning("Invalid points value, using default", key=key, value=raw, default=default)
            return default
