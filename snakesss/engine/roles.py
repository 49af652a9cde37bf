"""Role and vote definitions, plus per-round role distribution."""

import logging
import random
from enum import Enum
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """A secret role, dealt fresh every round."""

    HUMAN = "human"
    SNAKE = "snake"
    MONGOOSE = "mongoose"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def emoji(self) -> str:
        return _ROLE_EMOJI[self]

    @property
    def flavor_text(self) -> str:
        """One-line briefing shown when the role is revealed."""
        return _ROLE_FLAVOR[self]

    def __str__(self) -> str:
        return self.display_name


class Vote(str, Enum):
    """A ballot. SNAKE is only offered to players holding the snake role."""

    A = "a"
    B = "b"
    C = "c"
    SNAKE = "snake"

    @classmethod
    def from_answer(cls, answer: str) -> "Vote":
        """Parse an answer letter ("A", "b", ...) into a choice vote.

        Anything that is not a/b/c falls back to A.
        """
        normalized = (answer or "").strip().lower()
        if normalized in ("a", "b", "c"):
            return cls(normalized)
        logger.warning("Unparseable answer letter %r, defaulting to A", answer)
        return cls.A

    @classmethod
    def choices(cls) -> list["Vote"]:
        """Answer ballots, i.e. everything except SNAKE."""
        return [cls.A, cls.B, cls.C]


_ROLE_EMOJI = {
    Role.HUMAN: "\U0001F464",
    Role.SNAKE: "\U0001F40D",
    Role.MONGOOSE: "\U0001F9A6",
}

_ROLE_FLAVOR = {
    Role.HUMAN: "You don't know the answer. Find the truth.",
    Role.SNAKE: "You know the answer. Lead them astray.",
    Role.MONGOOSE: "You don't know the answer. Your identity is public.",
}


# (humans, snakes, mongoose) keyed by player count
ROLE_DISTRIBUTION: dict[int, tuple[int, int, int]] = {
    4: (1, 2, 1),
    5: (2, 2, 1),
    6: (2, 3, 1),
    7: (3, 3, 1),
    8: (3, 4, 1),
}

MIN_PLAYERS = min(ROLE_DISTRIBUTION)
MAX_PLAYERS = max(ROLE_DISTRIBUTION)


class RoleAssigning(Protocol):
    """Anything that can deal a round's roles."""

    def assign_roles(self, player_count: int) -> list[Role]: ...


class RoleAssigner:
    """Deals roles from the fixed distribution table."""

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize the assigner.

        Args:
            rng: Random source. Defaults to a fresh unseeded ``random.Random``.
        """
        self.rng = rng or random.Random()

    def role_pool(self, player_count: int) -> list[Role]:
        """Build the unshuffled role multiset for a player count.

        Returns an empty list for unsupported counts.
        """
        if player_count not in ROLE_DISTRIBUTION:
            return []
        humans, snakes, mongoose = ROLE_DISTRIBUTION[player_count]
        return [Role.HUMAN] * humans + [Role.SNAKE] * snakes + [Role.MONGOOSE] * mongoose

    def assign_roles(self, player_count: int) -> list[Role]:
        """Deal one role per seat in a uniformly random order.

        Args:
            player_count: Number of players, 4 to 8 inclusive.

        Returns:
            Shuffled roles, one per player. Empty if ``player_count`` is
            outside the supported range.
        """
        roles = self.role_pool(player_count)
        if not roles:
            logger.error(
                "No role distribution for %d players (supported: %d-%d)",
                player_count, MIN_PLAYERS, MAX_PLAYERS,
            )
            return []
        self.rng.shuffle(roles)
        return roles
