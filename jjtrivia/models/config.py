"""Configuration data models."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class GameLimits:
    """Structural bounds enforced by the validator."""
    min_categories: int = 3
    max_categories: int = 7
    min_questions: int = 3
    max_questions: int = 7
    min_players: int = 2
    max_players: int = 6
    question_points_multiplier: int = 100
    bonus_question_points: int = 1000


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    settings_directory: Path
    log_level: str
    connect_timeout: float = 2.0  # Image fetch connect timeout, seconds
    read_timeout: float = 10.0  # Image fetch read timeout, seconds
    limits: GameLimits = field(default_factory=GameLimits)
