"""Player state held by a game session."""

import uuid
from dataclasses import dataclass, field
from typing import Optional

from .roles import Role, Vote


@dataclass
class Player:
    """A seat at the table. Roles and votes are per round; score is per game."""

    name: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    role: Optional[Role] = None
    total_score: int = 0
    current_vote: Optional[Vote] = None

    def start_round(self, role: Role) -> None:
        """Deal a new role and clear last round's vote."""
        self.role = role
        self.current_vote = None

    def add_points(self, points: int) -> None:
        """Add round points. Scores never go down."""
        if points < 0:
            raise ValueError(f"Points must be non-negative, got {points}")
        self.total_score += points

    @property
    def is_snake(self) -> bool:
        return self.role == Role.SNAKE
