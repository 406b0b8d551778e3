"""Configuration service: settings persistence and verified library paths."""

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

import structlog

from ..models import AppConfig, GameLimits

log = structlog.stdlib.get_logger()

LIBRARY_DIRECTORY_NAME = "games"
IMAGE_CACHE_DIRECTORY_NAME = "images"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
DEFAULT_LOG_LEVEL = "WARNING"


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Loads and saves AppConfig as JSON and hands out the library directories."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or Path.home() / ".config" / "jjtrivia" / "config.json"
        self._config: AppConfig | None = None
        log.info("Configuration service initialized", config_path=str(self.config_path))

    @property
    def config(self) -> AppConfig:
        """Current configuration, loaded on first access."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return self._get_default_config()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)

            config = self._dict_to_config(data)
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
                return self._get_default_config()

            log.info("Configuration loaded successfully")
            return config

        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self._get_default_config()

    def save_config(self, config: AppConfig) -> None:
        """Save configuration to file."""
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ValueError(f"Invalid configuration: {', '.join(validation_result.errors)}")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self._config_to_dict(config), f, indent=2, ensure_ascii=False)
            self._config = config
            log.info("Configuration saved successfully")

        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        if not isinstance(config.settings_directory, Path):
            errors.append("settings_directory must be a Path object")
        elif not config.settings_directory.is_absolute():
            errors.append("settings_directory must be an absolute path")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}")

        for name in ("connect_timeout", "read_timeout"):
            value = getattr(config, name)
            if not isinstance(value, (int, float)) or value <= 0:
                errors.append(f"{name} must be a positive number")

        limits = config.limits
        for low, high in (
            ("min_categories", "max_categories"),
            ("min_questions", "max_questions"),
            ("min_players", "max_players"),
        ):
            low_value, high_value = getattr(limits, low), getattr(limits, high)
            if low_value < 1:
                errors.append(f"{low} must be at least 1")
            if high_value < low_value:
                errors.append(f"{high} must not be less than {low}")
        if limits.question_points_multiplier < 1 or limits.bonus_question_points < 1:
            errors.append("question points must be positive")

        return ValidationResult(len(errors) == 0, errors)

    def library_directory(self, create: bool = True) -> Path:
        """Absolute path of the game library root, created if missing unless create is False."""
        return self._verified_directory(LIBRARY_DIRECTORY_NAME, create)

    def image_cache_directory(self) -> Path:
        """Absolute path of the temporary image cache, created if missing."""
        return self._verified_directory(IMAGE_CACHE_DIRECTORY_NAME)

    def _verified_directory(self, name: str, create: bool = True) -> Path:
        path = (self.config.settings_directory / name).resolve()
        if create:
            path.mkdir(parents=True, exist_ok=True)
        return path

    def _get_default_config(self) -> AppConfig:
        return AppConfig(
            settings_directory=Path.home() / ".jjtrivia",
            log_level=DEFAULT_LOG_LEVEL,
        )

    def _config_to_dict(self, config: AppConfig) -> dict[str, Any]:
        return {
            "settings_directory": str(config.settings_directory),
            "log_level": config.log_level,
            "connect_timeout": config.connect_timeout,
            "read_timeout": config.read_timeout,
            "limits": asdict(config.limits),
        }

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        limits_raw = data.get("limits") or {}
        if not isinstance(limits_raw, dict):
            raise TypeError("limits must be an object")
        known = {f.name for f in fields(GameLimits)}
        limits = GameLimits(**{k: int(v) for k, v in limits_raw.items() if k in known})

        return AppConfig(
            settings_directory=Path(str(data["settings_directory"])),
            log_level=str(data.get("log_level", DEFAULT_LOG_LEVEL)),
            connect_timeout=float(data.get("connect_timeout", 2.0)),
            read_timeout=float(data.get("read_timeout", 10.0)),
            limits=limits,
        )
