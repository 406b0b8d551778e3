"""Shared fixtures: game file builders and an offline HTTP transport."""

import io
import struct
import zlib
from collections.abc import Callable
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

import httpx
import pytest
from PIL import Image


def native_xml(entries: dict[str, str]) -> str:
    """Render a native game file from raw key/value entries."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>',
        '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">',
        "<properties>",
    ]
    lines += [f"<entry key={quoteattr(key)}>{escape(value)}</entry>" for key, value in entries.items()]
    lines.append("</properties>")
    return "\n".join(lines)


def game_entries(
    name: str = "Quiz",
    questions_per_category: list[int] | None = None,
    players: list[str] | None = None,
    bonus_questions: int = 0,
) -> dict[str, str]:
    """Entries of a well-formed game; three categories of three questions by default."""
    counts = questions_per_category if questions_per_category is not None else [3, 3, 3]
    entries = {"game.name": name}
    for category, count in enumerate(counts, start=1):
        entries[f"category.{category}.name"] = f"Category {category}"
        for question in range(1, count + 1):
            entries[f"category.{category}.question.{question}"] = f"Question {category}.{question}"
            entries[f"category.{category}.answer.{question}"] = f"Answer {category}.{question}"
    for number, player in enumerate(players or [], start=1):
        entries[f"player.{number}.name"] = player
    for number in range(1, bonus_questions + 1):
        entries[f"bonus.{number}.question"] = f"Bonus question {number}"
        entries[f"bonus.{number}.answer"] = f"Bonus answer {number}"
    return entries


def html_export(title: str, headers: list[str], cells: list[tuple[str, int, str, str]],
                description: str | None = None) -> str:
    """Render an HTML export page.

    Each cell is (category, points, front markup, back markup); cells are laid
    out one row per header-width chunk.
    """
    head = f"<title>{escape(title)}</title>"
    if description is not None:
        head += f'<meta name="description" content={quoteattr(description)}>'

    header_row = "".join(f'<div role="columnheader">{escape(h)}</div>' for h in headers)
    rows = [f"<div>{header_row}</div>"]
    width = max(len(headers), 1)
    for start in range(0, len(cells), width):
        row = "".join(
            f'<div role="cell"><span data-category={quoteattr(category)}>{points}</span>'
            f'<div class="front">{front}</div><div class="back">{back}</div></div>'
            for category, points, front, back in cells[start:start + width]
        )
        rows.append(f"<div>{row}</div>")

    return f'<html><head>{head}</head><body><div class="grid">{"".join(rows)}</div></body></html>'


def image_bytes(image_format: str = "PNG") -> bytes:
    """A tiny real image in the given Pillow format."""
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2), color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


def oversized_png(width: int = 20000, height: int = 20000) -> bytes:
    """A PNG whose header declares more pixels than Pillow agrees to open."""
    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b"")


class CountingTransport(httpx.MockTransport):
    """MockTransport serving canned responses and counting requests per URL."""

    def __init__(self, responses: dict[str, tuple[int, bytes]]) -> None:
        self.responses = responses
        self.calls: list[str] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        status, content = self.responses.get(url, (404, b""))
        return httpx.Response(status, content=content)


@pytest.fixture
def write_native(tmp_path: Path) -> Callable[..., Path]:
    """Write a native game file and return its path."""
    def _write(entries: dict[str, str], name: str = "game.xml", directory: Path | None = None) -> Path:
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_text(native_xml(entries), encoding="utf-8")
        return path
    return _write
