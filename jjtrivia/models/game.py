"""Game-related data models."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass
class Question:
    """A single question/answer pair; either side may be text, an image, or both."""
    question: str | None
    question_image: str | None
    answer: str | None
    answer_image: str | None
    points: int

    @property
    def is_askable(self) -> bool:
        """False when the question side or the answer side has neither text nor image."""
        has_question = not _is_blank(self.question) or not _is_blank(self.question_image)
        has_answer = not _is_blank(self.answer) or not _is_blank(self.answer_image)
        return has_question and has_answer


@dataclass
class Category:
    """Named column of questions."""
    name: str
    questions: list[Question] = field(default_factory=list)

    @property
    def questions_count(self) -> int:
        return len(self.questions)


@dataclass
class Player:
    """A player in the current game and their running score."""
    name: str
    index: int
    score: int = 0

    def adjust_score(self, value: int) -> None:
        self.score += value

    def reset_score(self) -> None:
        self.score = 0


@dataclass(eq=False)
class GameDescription:
    """Root aggregate for one game, as parsed from a native file, bundle or HTML export.

    Parsers fill it in without enforcing structural rules; only the validator
    sets ``usable``. Equality is identity.
    """
    file_path: Path
    bundle_path: Path | None = None
    native: bool = True
    name: str | None = None
    description: str | None = None
    categories: list[Category] = field(default_factory=list)
    bonus_questions: list[Question] = field(default_factory=list)
    player_names: list[str] = field(default_factory=list)
    file_data_acquired: bool = False
    image_download_failure: bool = False
    usable: bool = False
    parse_error: str | None = None

    def __lt__(self, other: "GameDescription") -> bool:
        return self.sort_key < other.sort_key

    @property
    def sort_key(self) -> str:
        """Natural ordering key: the game name, case-sensitive."""
        return self.name or ""

    @property
    def is_bundle(self) -> bool:
        return self.bundle_path is not None

    @property
    def file_or_bundle_path(self) -> Path:
        return self.bundle_path if self.bundle_path is not None else self.file_path

    @property
    def questions_count(self) -> int:
        """Total number of regular (non-bonus) questions."""
        return sum(category.questions_count for category in self.categories)

    def all_questions(self) -> Iterator[Question]:
        """Iterate regular questions category by category, then bonus questions."""
        for category in self.categories:
            yield from category.questions
        yield from self.bonus_questions

    def set_file_paths(self, file_path: Path, bundle_path: Path | None) -> None:
        self.file_path = file_path
        self.bundle_path = bundle_path

    def change_to_native(self) -> None:
        """Mark the game as stored in the native format. There is no way back."""
        self.native = True
