"""Data models for the jjtrivia game library."""

from .config import AppConfig, GameLimits
from .game import Category, GameDescription, Player, Question
from .parsing import Message, MessageSeverity, ParsingMessage, ParsingResult
from .progress import FULL_PROGRESS, ImageTask, ProgressSink, ProgressTracker

__all__ = [
    "AppConfig",
    "Category",
    "FULL_PROGRESS",
    "GameDescription",
    "GameLimits",
    "ImageTask",
    "Message",
    "MessageSeverity",
    "ParsingMessage",
    "ParsingResult",
    "Player",
    "ProgressSink",
    "ProgressTracker",
    "Question",
]
