"""Parser for third-party HTML game exports (jeopardylabs.com page layout)."""

import re
from pathlib import Path
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag

from ..models import Category, GameDescription, Question
from .errors import CategoryMismatchError, ParsingError

log = structlog.stdlib.get_logger()

BASE_URL = "https://jeopardylabs.com"
MAX_DESCRIPTION_LENGTH = 250
ELLIPSIS = "..."

_WHITESPACE = re.compile(r"\s+")


def sanitize(value: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return _WHITESPACE.sub(" ", value).strip()


def truncate_description(value: str) -> str:
    if len(value) <= MAX_DESCRIPTION_LENGTH:
        return value
    return value[:MAX_DESCRIPTION_LENGTH - len(ELLIPSIS)] + ELLIPSIS


class HtmlGameParser:
    """Scrapes the game grid of an exported HTML page into a GameDescription.

    Expected layout: ``div.grid`` whose first child row holds
    ``role="columnheader"`` elements (category names) and whose following rows
    hold ``role="cell"`` elements. Each cell has an element carrying a
    ``data-category`` attribute with the points as its text, a ``.front``
    element with the question and a ``.back`` element with the answer. Images
    are only referenced by URL here; they are fetched during library import.
    """

    def __init__(self, base_url: str = BASE_URL) -> None:
        self.base_url = base_url

    def parse(self, file_path: Path) -> GameDescription:
        """Parse an HTML export.

        A cell that names a category missing from the header row aborts the
        parse: the description keeps the categories that already received
        questions and ``parse_error`` describes the mismatch.
        """
        game = GameDescription(file_path=file_path, bundle_path=None, native=False)
        log.info("Parsing HTML file", path=str(file_path))

        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.error("Unable to open HTML file", path=str(file_path), error=str(e))
            return game
        game.file_data_acquired = True

        soup = BeautifulSoup(content, "html.parser")
        game.name = self._extract_name(soup)
        game.description = self._extract_description(soup)

        rows = soup.select("div.grid > div")
        if len(rows) < 2:
            log.error("Game grid doesn't have enough rows", path=str(file_path), rows=len(rows))
            return game

        category_names = [self._text(header) for header in rows[0].find_all(attrs={"role": "columnheader"})]
        questions_map: dict[str, list[Question]] = {name: [] for name in category_names}

        try:
            for row in rows[1:]:
                for cell in row.find_all(attrs={"role": "cell"}):
                    self._parse_cell(cell, questions_map, file_path)
        except ParsingError as e:
            log.error("Unable to parse HTML game grid", path=str(file_path), error=e.message)
            game.parse_error = e.message
            game.categories = [
                Category(name, questions_map[name]) for name in category_names if questions_map[name]
            ]
            return game

        game.categories = [Category(name, questions_map[name]) for name in category_names]
        log.info(
            "HTML game file parsed",
            path=str(file_path),
            name=game.name,
            categories=len(game.categories),
            questions=game.questions_count,
        )
        return game

    def _parse_cell(self, cell: Tag, questions_map: dict[str, list[Question]], file_path: Path) -> None:
        category_el = cell.find(attrs={"data-category": True})
        if not isinstance(category_el, Tag):
            raise ParsingError("Question cell has no category association", str(file_path))

        raw_category = category_el.get("data-category")
        if isinstance(raw_category, list):
            raw_category = " ".join(raw_category)
        category = sanitize(raw_category or "")

        points_text = self._text(category_el)
        try:
            points = int(points_text)
        except ValueError:
            log.warning("Unable to parse question points", text=points_text)
            points = 0

        if category not in questions_map:
            raise CategoryMismatchError(category, list(questions_map), str(file_path))

        front = cell.find(class_="front")
        back = cell.find(class_="back")
        questions_map[category].append(Question(
            question=self._text_or_none(front),
            question_image=self._image_or_none(front),
            answer=self._text_or_none(back),
            answer_image=self._image_or_none(back),
            points=points,
        ))

    @staticmethod
    def _text(element: Tag) -> str:
        return sanitize(element.get_text())

    def _text_or_none(self, element: Tag | None) -> str | None:
        if not isinstance(element, Tag):
            return None
        return self._text(element) or None

    def _image_or_none(self, element: Tag | None) -> str | None:
        if not isinstance(element, Tag):
            return None
        img = element.find("img")
        if not isinstance(img, Tag):
            return None
        src = img.get("src")
        if isinstance(src, list):
            src = src[0] if src else None
        if not src or not src.strip():
            return None
        return urljoin(self.base_url, src.strip())

    def _extract_name(self, soup: BeautifulSoup) -> str | None:
        title = soup.find("title")
        if not isinstance(title, Tag):
            return None
        return self._text(title) or None

    def _extract_description(self, soup: BeautifulSoup) -> str | None:
        for meta in soup.find_all("meta"):
            name = meta.get("name")
            content = meta.get("content")
            if isinstance(name, str) and name.lower() == "description" and isinstance(content, str):
                description = sanitize(content)
                return truncate_description(description) if description else None
        return None
