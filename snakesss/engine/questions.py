"""Trivia questions and the per-round question pool."""

import logging
import random
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Protocol, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from ..settings import DifficultyMode
from ..storage import MemoryUsedQuestionStore, UsedQuestionStore

logger = logging.getLogger(__name__)

DEFAULT_CORPUS_PATH = Path(__file__).resolve().parent.parent / "data" / "questions.yaml"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Upper bounds (exclusive) of a 0-99 roll for each difficulty in mixed mode
MIXED_ROLL_THRESHOLDS: tuple[tuple[int, Difficulty], ...] = (
    (30, Difficulty.EASY),
    (80, Difficulty.MEDIUM),
    (100, Difficulty.HARD),
)


class Choices(BaseModel):
    """The three labelled answers."""
    model_config = ConfigDict(frozen=True)

    a: str
    b: str
    c: str


class Question(BaseModel):
    """A single trivia question. Immutable once loaded."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    question: str
    choices: Choices
    answer: str
    fun_fact: Optional[str] = Field(default=None, alias="funFact")
    category: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM

    @property
    def answer_text(self) -> Optional[str]:
        """Text of the correct choice, or None if the letter is not a/b/c."""
        return getattr(self.choices, self.answer.strip().lower(), None)


class PoolSettings(Protocol):
    """The live settings the pool reads on every draw."""
    enabled_categories: Iterable[str]
    difficulty_mode: Union[DifficultyMode, str]
    rounds_per_game: int


def load_questions(path: Optional[Union[str, Path]] = None) -> list[Question]:
    """Load a question corpus from a YAML (or JSON) file.

    Args:
        path: Corpus file. Defaults to the packaged sample corpus.

    Returns:
        The parsed questions; empty if the file does not exist.
    """
    corpus_path = Path(path) if path else DEFAULT_CORPUS_PATH
    if not corpus_path.exists():
        logger.warning("Question corpus not found: %s", corpus_path)
        return []

    with open(corpus_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("questions", [])

    questions = [Question.model_validate(entry) for entry in data]
    logger.info("Loaded %d questions from %s", len(questions), corpus_path)
    return questions


class QuestionPool:
    """Owns the corpus and picks one question per round without repeats.

    Used ids are persisted through a ``UsedQuestionStore`` so questions are
    not repeated across games either.
    """

    def __init__(
        self,
        questions: list[Question],
        settings: PoolSettings,
        store: Optional[UsedQuestionStore] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the pool.

        Args:
            questions: Static question corpus.
            settings: Live settings (categories, difficulty, rounds per game).
            store: Persistence for used question ids. Defaults to in-memory.
            rng: Random source.
        """
        self.questions = list(questions)
        self.settings = settings
        self.store = store or MemoryUsedQuestionStore()
        self.rng = rng or random.Random()
        self._used: set[str] = set(self.store.load())

    @property
    def used_question_ids(self) -> frozenset[str]:
        return frozenset(self._used)

    @property
    def remaining_count(self) -> int:
        """Number of questions in the filtered pool not used yet."""
        return sum(1 for q in self._filtered_pool() if q.id not in self._used)

    def _category_pool(self) -> list[Question]:
        enabled = set(self.settings.enabled_categories)
        pool = [q for q in self.questions if q.category is None or q.category in enabled]
        if not pool and self.questions:
            logger.warning("No questions match categories %s, using full corpus", sorted(enabled))
            return list(self.questions)
        return pool

    def _filtered_pool(self) -> list[Question]:
        pool = self._category_pool()
        mode = DifficultyMode(self.settings.difficulty_mode)
        if mode is DifficultyMode.MIXED:
            return pool

        matching = [q for q in pool if q.difficulty.value == mode.value]
        if len(matching) < self.settings.rounds_per_game:
            logger.info(
                "Only %d %s questions for a %d-round game, ignoring difficulty",
                len(matching), mode.value, self.settings.rounds_per_game,
            )
            return pool
        return matching

    def roll_mixed_difficulty(self) -> Difficulty:
        """Roll the target difficulty for mixed mode (30/50/20 split)."""
        roll = self.rng.randrange(100)
        for upper, difficulty in MIXED_ROLL_THRESHOLDS:
            if roll < upper:
                return difficulty
        return Difficulty.HARD

    def get_question(self) -> Optional[Question]:
        """Draw the next question and mark it used.

        Returns:
            A question, or None only when the corpus is empty.
        """
        pool = self._filtered_pool()
        available = [q for q in pool if q.id not in self._used]

        if not available:
            # Recycle this pool only; other category/difficulty combinations keep their history
            pool_ids = {q.id for q in pool}
            if self._used & pool_ids:
                logger.info("Question pool exhausted, recycling %d questions", len(pool_ids))
                self._used -= pool_ids
                self._persist()
            available = pool

        if not available:
            return None

        if DifficultyMode(self.settings.difficulty_mode) is DifficultyMode.MIXED:
            target = self.roll_mixed_difficulty()
            candidates = [q for q in available if q.difficulty is target] or available
        else:
            candidates = available

        question = self.rng.choice(candidates)
        self.mark_used(question.id)
        return question

    def mark_used(self, question_id: str) -> None:
        self._used.add(question_id)
        self._persist()

    def reset_pool(self) -> None:
        """Forget every used id, across all categories."""
        self._used.clear()
        self._persist()

    def _persist(self) -> None:
        self.store.save(set(self._used))
