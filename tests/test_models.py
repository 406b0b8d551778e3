"""Tests for the game and parsing result models."""

from pathlib import Path

import pytest

from jjtrivia.models import (
    Category,
    GameDescription,
    Message,
    ParsingResult,
    Player,
    ProgressTracker,
    Question,
)


@pytest.mark.parametrize("question,question_image,answer,answer_image,askable", [
    ("Q", None, "A", None, True),
    (None, "q.png", None, "a.png", True),
    ("  ", None, "A", None, False),
    ("Q", None, None, " ", False),
    (None, None, None, None, False),
])
def test_question_is_askable(question, question_image, answer, answer_image, askable: bool) -> None:
    assert Question(question, question_image, answer, answer_image, 100).is_askable is askable


def test_games_sort_by_name() -> None:
    games = [GameDescription(file_path=Path(f"/{n}.xml"), name=n) for n in ("b", "B", "a")]
    games.append(GameDescription(file_path=Path("/none.xml")))

    assert [g.name for g in sorted(games)] == [None, "B", "a", "b"]


def test_equality_is_identity() -> None:
    first = GameDescription(file_path=Path("/quiz.xml"), name="Quiz")
    second = GameDescription(file_path=Path("/quiz.xml"), name="Quiz")

    assert first != second
    assert first == first


def test_all_questions_lists_bonus_last() -> None:
    game = GameDescription(file_path=Path("/quiz.xml"))
    game.categories = [Category("One", [Question("1", None, "a", None, 100)]),
                       Category("Two", [Question("2", None, "b", None, 100)])]
    game.bonus_questions = [Question("bonus", None, "c", None, 1000)]

    assert [q.question for q in game.all_questions()] == ["1", "2", "bonus"]
    assert game.questions_count == 2


def test_promotion_to_native() -> None:
    game = GameDescription(file_path=Path("/in/party.html"), native=False)

    game.set_file_paths(Path("/lib/party.jj/party.xml"), Path("/lib/party.jj"))
    game.change_to_native()

    assert game.native
    assert game.is_bundle
    assert game.file_or_bundle_path == Path("/lib/party.jj")


def test_parsing_result_groups_messages() -> None:
    result = ParsingResult(file_name="quiz.xml")
    result.add_warning(Message.TOO_MANY_PLAYERS, 8, 6)
    result.add_error(Message.MISSING_NAME)
    result.add_info(Message.PLAYERS_PARSED, 6)

    assert result.error_messages == ["Game name is missing or blank"]
    assert result.warning_messages == ["Too many players (8), only the first 6 were kept"]
    assert result.info_messages == ["Parsed 6 players"]
    assert [m.kind for m in result.messages] == [
        Message.TOO_MANY_PLAYERS, Message.MISSING_NAME, Message.PLAYERS_PARSED,
    ]


def test_progress_tracker() -> None:
    tracker = ProgressTracker()
    tracker.increment_progress(60)
    assert not tracker.is_complete

    tracker.increment_progress(60)

    assert tracker.progress == 100
    assert tracker.is_complete
    assert tracker.updates == [60, 60]


def test_player_score() -> None:
    player = Player("Ann", 0)

    player.adjust_score(400)
    player.adjust_score(-100)
    assert player.score == 300

    player.reset_score()
    assert player.score == 0
