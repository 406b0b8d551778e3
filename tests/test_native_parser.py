"""Tests for native game file parsing and writing."""

from pathlib import Path

from hypothesis import given, settings, strategies as st

from conftest import game_entries, native_xml
from jjtrivia.models import Category, GameDescription, Question
from jjtrivia.services.native_format import entry_sort_key, read_properties, write_game_file
from jjtrivia.services.native_parser import NativeGameParser, consecutive_numbers


def test_parses_complete_game(write_native) -> None:
    """A well-formed file yields name, categories and default points."""
    entries = game_entries()
    entries["game.description"] = "  A short quiz  "
    path = write_native(entries)

    game = NativeGameParser().parse(path)

    assert game.file_data_acquired
    assert game.native
    assert game.bundle_path is None
    assert game.name == "Quiz"
    assert game.description == "A short quiz"
    assert [c.name for c in game.categories] == ["Category 1", "Category 2", "Category 3"]
    assert [q.points for q in game.categories[0].questions] == [100, 200, 300]
    assert game.categories[1].questions[2].question == "Question 2.3"
    assert game.categories[1].questions[2].answer == "Answer 2.3"


@given(
    present=st.integers(min_value=0, max_value=8),
    beyond=st.lists(st.integers(min_value=2, max_value=6), max_size=3),
)
@settings(deadline=None)
def test_numbering_stops_at_first_missing_category(present: int, beyond: list[int]) -> None:
    """
    Categories 1..N are returned in order; anything defined after the gap at
    N+1 is ignored.
    """
    properties = {f"category.{n}.name": f"Cat {n}" for n in range(1, present + 1)}
    for offset in beyond:
        properties[f"category.{present + offset}.name"] = "Unreachable"

    numbers = list(consecutive_numbers(properties, lambda n: (f"category.{n}.name",)))

    assert numbers == list(range(1, present + 1))


def test_categories_after_gap_are_ignored(write_native) -> None:
    entries = game_entries(questions_per_category=[3, 3, 3, 3])
    del entries["category.3.name"]
    path = write_native(entries)

    game = NativeGameParser().parse(path)

    assert [c.name for c in game.categories] == ["Category 1", "Category 2"]


def test_incomplete_questions_are_dropped_but_category_kept(write_native) -> None:
    entries = game_entries(questions_per_category=[3, 3, 1])
    del entries["category.3.answer.1"]
    entries["category.3.answer.1.image"] = "   "
    path = write_native(entries)

    game = NativeGameParser().parse(path)

    assert len(game.categories) == 3
    assert game.categories[2].questions == []


def test_image_only_question_is_kept(write_native) -> None:
    entries = game_entries()
    del entries["category.1.question.1"]
    entries["category.1.question.1.image"] = "picture.png"
    path = write_native(entries)

    question = NativeGameParser().parse(path).categories[0].questions[0]

    assert question.question is None
    assert question.question_image == "picture.png"


def test_legacy_image_keys_are_read(write_native) -> None:
    entries = game_entries()
    entries["category.2.answer.3.img"] = "old.jpg"
    entries["bonus.1.question"] = "Bonus?"
    entries["bonus.1.answer.img"] = "bonus.gif"
    entries["game.image.failure"] = "TRUE"
    path = write_native(entries)

    game = NativeGameParser().parse(path)

    assert game.categories[1].questions[2].answer_image == "old.jpg"
    assert game.bonus_questions[0].answer_image == "bonus.gif"
    assert game.image_download_failure


def test_point_overrides(write_native) -> None:
    entries = game_entries()
    entries["question.2.points"] = "250"
    entries["question.3.points"] = "lots"
    path = write_native(entries)

    game = NativeGameParser().parse(path)

    assert [q.points for q in game.categories[2].questions] == [100, 250, 300]


def test_players_and_bonus_questions(write_native) -> None:
    entries = game_entries(players=["Ann", " ", "Bob"], bonus_questions=2)
    path = write_native(entries)

    game = NativeGameParser().parse(path)

    assert game.player_names == ["Ann", "Bob"]
    assert len(game.bonus_questions) == 2
    assert all(q.points == 1000 for q in game.bonus_questions)


def test_bonus_points_override(write_native) -> None:
    entries = game_entries(bonus_questions=1)
    entries["bonus.question.points"] = "2000"
    path = write_native(entries)

    assert NativeGameParser().parse(path).bonus_questions[0].points == 2000


def test_blank_name_is_not_a_parse_failure(write_native) -> None:
    path = write_native(game_entries(name="   "))

    game = NativeGameParser().parse(path)

    assert game.file_data_acquired
    assert game.name is None
    assert len(game.categories) == 3


def test_missing_file_is_not_acquired(tmp_path: Path) -> None:
    game = NativeGameParser().parse(tmp_path / "missing.xml")

    assert not game.file_data_acquired
    assert game.categories == []


def test_non_properties_content_is_not_acquired(tmp_path: Path) -> None:
    path = tmp_path / "notes.xml"
    path.write_text("<notes><note>hello</note></notes>", encoding="utf-8")

    assert not NativeGameParser().parse(path).file_data_acquired


def test_bundle_path_is_recorded(write_native, tmp_path: Path) -> None:
    bundle = tmp_path / "quiz.jj"
    path = write_native(game_entries(), directory=bundle)

    game = NativeGameParser().parse(path, bundle)

    assert game.bundle_path == bundle
    assert game.file_or_bundle_path == bundle


def test_written_file_reads_back(tmp_path: Path) -> None:
    """A game written to disk parses back to the same content."""
    game = GameDescription(file_path=tmp_path / "out.xml", name="Written & <Read>", description="Desc")
    for number in range(1, 4):
        game.categories.append(Category(f"Cat {number}", [
            Question(f"Q{number}.{k}", None, f"A{number}.{k}", f"{number}{k}.png" if k == 2 else None, k * 200)
            for k in range(1, 4)
        ]))
    game.bonus_questions = [Question("Final?", None, "Yes", None, 1500)]
    game.player_names = ["Ann", "Bob"]
    game.image_download_failure = True

    write_game_file(game, game.file_path)
    parsed = NativeGameParser().parse(game.file_path)

    assert parsed.name == "Written & <Read>"
    assert parsed.description == "Desc"
    assert [c.name for c in parsed.categories] == ["Cat 1", "Cat 2", "Cat 3"]
    assert parsed.categories[1].questions[1].answer_image == "22.png"
    assert [q.points for q in parsed.categories[0].questions] == [200, 400, 600]
    assert parsed.bonus_questions[0].points == 1500
    assert parsed.player_names == ["Ann", "Bob"]
    assert parsed.image_download_failure
    assert not (tmp_path / "out.xml.tmp").exists()


def test_written_file_uses_current_keys(tmp_path: Path) -> None:
    game = GameDescription(file_path=tmp_path / "out.xml", name="Quiz")
    game.categories.append(Category("Cat", [Question("Q", "q.png", "A", None, 100)]))
    game.image_download_failure = True

    write_game_file(game, game.file_path)
    properties = read_properties(game.file_path)

    assert properties["category.1.question.1.image"] == "q.png"
    assert properties["image.download.failure"] == "true"
    assert "game.description" not in properties


def test_entry_order_follows_board_layout() -> None:
    keys = [
        "player.1.name",
        "category.2.name",
        "category.1.answer.1",
        "category.1.question.2",
        "category.1.question.1",
        "game.name",
        "question.1.points",
        "bonus.1.question",
    ]

    assert sorted(keys, key=entry_sort_key) == [
        "game.name",
        "question.1.points",
        "category.1.question.1",
        "category.1.answer.1",
        "category.1.question.2",
        "category.2.name",
        "bonus.1.question",
        "player.1.name",
    ]


def test_native_xml_helper_escapes_values(tmp_path: Path) -> None:
    path = tmp_path / "escaped.xml"
    path.write_text(native_xml({"game.name": "Tom & Jerry <3"}), encoding="utf-8")

    assert read_properties(path)["game.name"] == "Tom & Jerry <3"
