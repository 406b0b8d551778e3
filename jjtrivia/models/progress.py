"""Progress tracking data models."""

from dataclasses import dataclass
from typing import Protocol

from .game import Question

FULL_PROGRESS = 100


class ProgressSink(Protocol):
    """Receives progress increments on a 0-100 scale; never read back."""

    def increment_progress(self, value: int) -> None: ...


class ProgressTracker:
    """Accumulating progress sink, clamped to FULL_PROGRESS."""

    def __init__(self) -> None:
        self.progress: int = 0
        self.updates: list[int] = []

    def increment_progress(self, value: int) -> None:
        self.updates.append(value)
        self.progress = min(FULL_PROGRESS, self.progress + value)

    @property
    def is_complete(self) -> bool:
        return self.progress >= FULL_PROGRESS


@dataclass(frozen=True)
class ImageTask:
    """One remote image to migrate and where its rewritten name goes."""
    url: str
    question: Question
    for_question: bool  # False means the answer-side image
