"""Native game file format: key grammar, reading and writing.

A native game file is an XML properties document::

    <properties>
      <entry key="game.name">Quiz</entry>
      <entry key="category.1.name">History</entry>
      <entry key="category.1.question.1">Who ...?</entry>
      ...
    </properties>

Keys are order-insensitive. Category, question, player and bonus numbers
start at 1.
"""

import re
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

import structlog
from bs4 import BeautifulSoup

from ..models import GameDescription, Question

log = structlog.stdlib.get_logger()

NATIVE_EXTENSION = ".xml"
BUNDLE_EXTENSION = ".jj"

NAME_KEY = "game.name"
DESCRIPTION_KEY = "game.description"
BONUS_POINTS_KEY = "bonus.question.points"
IMAGE_FAILURE_KEY = "image.download.failure"

# Keys written by earlier versions of the format; accepted on read only.
LEGACY_IMAGE_FAILURE_KEY = "game.image.failure"
LEGACY_IMAGE_SUFFIX = ".img"
IMAGE_SUFFIX = ".image"

_CATEGORY_LINE = re.compile(r"^category\.(\d+)\.(question|answer)\.(\d+)(.*)$")
_CATEGORY_NAME = re.compile(r"^category\.(\d+)\.name$")
_POINTS = re.compile(r"^question\.(\d+)\.points$")
_BONUS_LINE = re.compile(r"^bonus\.(\d+)\.(question|answer)(.*)$")
_PLAYER = re.compile(r"^player\.(\d+)\.name$")

_XML_HEADER = (
    '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
    '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">\n'
)


def category_name_key(category: int) -> str:
    return f"category.{category}.name"


def question_points_key(question: int) -> str:
    return f"question.{question}.points"


def question_text_key(category: int, question: int) -> str:
    return f"category.{category}.question.{question}"


def answer_text_key(category: int, question: int) -> str:
    return f"category.{category}.answer.{question}"


def question_image_key(category: int, question: int) -> str:
    return question_text_key(category, question) + IMAGE_SUFFIX


def answer_image_key(category: int, question: int) -> str:
    return answer_text_key(category, question) + IMAGE_SUFFIX


def player_name_key(player: int) -> str:
    return f"player.{player}.name"


def bonus_question_key(question: int) -> str:
    return f"bonus.{question}.question"


def bonus_answer_key(question: int) -> str:
    return f"bonus.{question}.answer"


def bonus_question_image_key(question: int) -> str:
    return bonus_question_key(question) + IMAGE_SUFFIX


def bonus_answer_image_key(question: int) -> str:
    return bonus_answer_key(question) + IMAGE_SUFFIX


def legacy_image_key(image_key: str) -> str:
    """Map an image key to the name older files used for it."""
    return image_key.removesuffix(IMAGE_SUFFIX) + LEGACY_IMAGE_SUFFIX


def entry_sort_key(key: str) -> tuple[int, int, int, int, str]:
    """Order entries so that a written file reads top to bottom like the game board."""
    if key == NAME_KEY:
        return (0, 0, 0, 0, "")
    if key == DESCRIPTION_KEY:
        return (1, 0, 0, 0, "")
    if match := _POINTS.match(key):
        return (2, int(match.group(1)), 0, 0, "")
    if match := _CATEGORY_NAME.match(key):
        return (3, int(match.group(1)), 0, 0, "")
    if match := _CATEGORY_LINE.match(key):
        side = 0 if match.group(2) == "question" else 1
        return (3, int(match.group(1)), int(match.group(3)), side, match.group(4))
    if key == BONUS_POINTS_KEY:
        return (4, 0, 0, 0, "")
    if match := _BONUS_LINE.match(key):
        side = 0 if match.group(2) == "question" else 1
        return (4, int(match.group(1)), side, 0, match.group(3))
    if match := _PLAYER.match(key):
        return (5, int(match.group(1)), 0, 0, "")
    return (6, 0, 0, 0, key)


def read_properties(path: Path) -> dict[str, str]:
    """Load a native game file into an ordered key -> value map.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not UTF-8 text
        ValueError: If the content is not a properties document
    """
    content = path.read_text(encoding="utf-8")
    soup = BeautifulSoup(content, "html.parser")
    root = soup.find("properties")
    if root is None:
        raise ValueError(f"Not a properties document: {path}")

    properties: dict[str, str] = {}
    for entry in root.find_all("entry"):
        key = entry.get("key")
        if isinstance(key, list):
            key = key[0]
        if key:
            properties[key] = entry.get_text()
    log.debug("Properties loaded", path=str(path), count=len(properties))
    return properties


def game_to_properties(game: GameDescription) -> dict[str, str]:
    """Flatten a game description into native format key/value pairs."""
    properties: dict[str, str] = {NAME_KEY: game.name or ""}
    if game.description and game.description.strip():
        properties[DESCRIPTION_KEY] = game.description

    # Per-level points come from the first category
    if game.categories:
        for index, question in enumerate(game.categories[0].questions, start=1):
            properties[question_points_key(index)] = str(question.points)

    for category_number, category in enumerate(game.categories, start=1):
        properties[category_name_key(category_number)] = category.name
        for number, question in enumerate(category.questions, start=1):
            _put_question(
                properties,
                question,
                question_text_key(category_number, number),
                answer_text_key(category_number, number),
            )

    if game.bonus_questions:
        properties[BONUS_POINTS_KEY] = str(game.bonus_questions[0].points)
        for number, question in enumerate(game.bonus_questions, start=1):
            _put_question(properties, question, bonus_question_key(number), bonus_answer_key(number))

    for number, player_name in enumerate(game.player_names, start=1):
        properties[player_name_key(number)] = player_name

    if game.image_download_failure:
        properties[IMAGE_FAILURE_KEY] = "true"

    return properties


def _put_question(properties: dict[str, str], question: Question, question_key: str, answer_key: str) -> None:
    if question.question is not None:
        properties[question_key] = question.question
    if question.question_image is not None:
        properties[question_key + IMAGE_SUFFIX] = question.question_image
    if question.answer is not None:
        properties[answer_key] = question.answer
    if question.answer_image is not None:
        properties[answer_key + IMAGE_SUFFIX] = question.answer_image


def write_game_file(game: GameDescription, path: Path) -> None:
    """Serialize a game description into a native game file at path.

    Raises:
        OSError: If the file cannot be written
    """
    properties = game_to_properties(game)
    generated = datetime.now().strftime("%m/%d/%Y %I:%M:%S %p")

    lines = [_XML_HEADER + "<properties>", f"<comment>{escape(f'Game file generated on {generated}')}</comment>"]
    for key in sorted(properties, key=entry_sort_key):
        lines.append(f"<entry key={quoteattr(key)}>{escape(properties[key])}</entry>")
    lines.append("</properties>\n")

    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    temp_path.write_text("\n".join(lines), encoding="utf-8")
    temp_path.replace(path)
    log.info("Game file written", path=str(path), entries=len(properties))
