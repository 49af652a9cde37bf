"""Game phase definitions."""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


class GamePhase(Enum):
    """Phases of a Snakesss round."""
    SETUP = auto()                  # Before the first round
    ROLE_REVEAL = auto()            # Phone passed around, one role at a time
    MONGOOSE_ANNOUNCEMENT = auto()  # Mongoose identity made public
    QUESTION = auto()               # Trivia question shown to everyone
    SNAKE_REVEAL = auto()           # Each snake privately sees the answer
    DISCUSSION = auto()             # Timed open discussion
    VOTING = auto()                 # Phone passed around, one ballot at a time
    ROUND_RESULTS = auto()          # Scores for the round
    GAME_END = auto()               # Terminal


# Phases that carry a player/snake index
INDEXED_PHASES = frozenset({GamePhase.ROLE_REVEAL, GamePhase.SNAKE_REVEAL, GamePhase.VOTING})


@dataclass(frozen=True)
class PhaseState:
    """Current phase, with the index for pass-and-play phases.

    For ROLE_REVEAL and VOTING the index is a position in the player list;
    for SNAKE_REVEAL it is a position in the round's snake list.
    """
    phase: GamePhase
    index: Optional[int] = None

    def __post_init__(self):
        if (self.phase in INDEXED_PHASES) != (self.index is not None):
            raise ValueError(f"Phase {self.phase.name} index mismatch: {self.index!r}")

    @classmethod
    def setup(cls) -> "PhaseState":
        return cls(GamePhase.SETUP)

    @classmethod
    def role_reveal(cls, player_index: int) -> "PhaseState":
        return cls(GamePhase.ROLE_REVEAL, player_index)

    @classmethod
    def mongoose_announcement(cls) -> "PhaseState":
        return cls(GamePhase.MONGOOSE_ANNOUNCEMENT)

    @classmethod
    def question(cls) -> "PhaseState":
        return cls(GamePhase.QUESTION)

    @classmethod
    def snake_reveal(cls, snake_index: int) -> "PhaseState":
        return cls(GamePhase.SNAKE_REVEAL, snake_index)

    @classmethod
    def discussion(cls) -> "PhaseState":
        return cls(GamePhase.DISCUSSION)

    @classmethod
    def voting(cls, player_index: int) -> "PhaseState":
        return cls(GamePhase.VOTING, player_index)

    @classmethod
    def round_results(cls) -> "PhaseState":
        return cls(GamePhase.ROUND_RESULTS)

    @classmethod
    def game_end(cls) -> "PhaseState":
        return cls(GamePhase.GAME_END)

    def is_(self, phase: GamePhase, index: Optional[int] = None) -> bool:
        """Check the phase kind, and the index too when one is given."""
        if self.phase != phase:
            return False
        return index is None or self.index == index

    @property
    def phase_name(self) -> str:
        """Get a readable phase name, e.g. ``role_reveal_2``."""
        name = self.phase.name.lower()
        if self.index is not None:
            return f"{name}_{self.index}"
        return name

    def __str__(self) -> str:
        return self.phase_name
