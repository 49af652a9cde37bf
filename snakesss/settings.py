"""Game settings: the configuration provider for sessions and question pools."""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class DifficultyMode(str, Enum):
    """Difficulty preference; MIXED draws a weighted blend."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MIXED = "mixed"


ROUND_COUNT_OPTIONS = (3, 6, 9)
TIMER_DURATION_OPTIONS = (60, 90, 120, 180)

ALL_CATEGORIES = (
    "Science",
    "History",
    "Geography",
    "Nature",
    "Sports",
    "Culture",
    "Food & Drink",
    "Technology",
)

DEFAULT_ROUNDS = 6
DEFAULT_DISCUSSION_SECONDS = 120


class GameSettings(BaseModel):
    """Player-facing options. Invalid values fall back to the defaults."""

    model_config = ConfigDict(validate_assignment=True)

    rounds_per_game: int = DEFAULT_ROUNDS
    discussion_seconds: int = DEFAULT_DISCUSSION_SECONDS
    enabled_categories: set[str] = Field(default_factory=lambda: set(ALL_CATEGORIES))
    difficulty_mode: DifficultyMode = DifficultyMode.MIXED
    sound_enabled: bool = True
    haptics_enabled: bool = True
    tick_seconds: float = 1.0

    @field_validator("rounds_per_game", mode="before")
    @classmethod
    def _valid_round_count(cls, value: Any) -> int:
        if value in ROUND_COUNT_OPTIONS:
            return int(value)
        logger.warning("Invalid round count %r, using %d", value, DEFAULT_ROUNDS)
        return DEFAULT_ROUNDS

    @field_validator("discussion_seconds", mode="before")
    @classmethod
    def _valid_timer_duration(cls, value: Any) -> int:
        if value in TIMER_DURATION_OPTIONS:
            return int(value)
        logger.warning("Invalid discussion time %r, using %d", value, DEFAULT_DISCUSSION_SECONDS)
        return DEFAULT_DISCUSSION_SECONDS

    @field_validator("enabled_categories", mode="before")
    @classmethod
    def _non_empty_categories(cls, value: Any) -> set[str]:
        categories = {str(c) for c in value or ()}
        if not categories:
            logger.warning("No categories enabled, enabling all")
            return set(ALL_CATEGORIES)
        return categories

    @field_validator("difficulty_mode", mode="before")
    @classmethod
    def _valid_difficulty(cls, value: Any) -> DifficultyMode:
        try:
            return DifficultyMode(value)
        except ValueError:
            logger.warning("Invalid difficulty %r, using mixed", value)
            return DifficultyMode.MIXED

    @field_validator("tick_seconds")
    @classmethod
    def _positive_tick(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("tick_seconds must be positive")
        return value

    def reset_to_defaults(self) -> None:
        """Restore every option to its default value in place."""
        for name, value in GameSettings().model_dump().items():
            setattr(self, name, value)


def timer_label(seconds: int) -> str:
    """Short label for a discussion duration."""
    labels = {60: "1 min", 90: "1:30", 120: "2 min", 180: "3 min"}
    return labels.get(seconds, f"{seconds}s")


def load_settings(path: Union[str, Path]) -> GameSettings:
    """Load settings from a YAML file.

    The file may hold the fields at top level or under a ``settings`` key.
    A missing file gives the defaults.
    """
    path = Path(path)
    if not path.exists():
        logger.info("Settings file %s not found, using defaults", path)
        return GameSettings()

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if "settings" in data:
        data = data["settings"] or {}
    return GameSettings.model_validate(data)


def save_settings(settings: GameSettings, path: Union[str, Path]) -> None:
    """Write settings to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(mode="json")
    data["enabled_categories"] = sorted(settings.enabled_categories)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
