"""Round scoring.

Non-snakes who pick the right answer each earn one point per correct
non-snake voter. Every snake earns one point per non-snake who missed,
whatever the snake itself voted.
"""

import logging
from typing import Sequence

from .player import Player
from .roles import Role, Vote

logger = logging.getLogger(__name__)


def calculate_round_scores(
    players: Sequence[Player],
    roles: dict[int, Role],
    votes: dict[int, Vote],
    correct_answer: str,
) -> dict[int, int]:
    """Compute the points each player earns this round.

    Args:
        players: Players in seat order.
        roles: Role by player index. Missing entries count as human.
        votes: Vote by player index. Missing entries never match the answer.
        correct_answer: Answer letter of the question ("A", "b", ...).

    Returns:
        Points by player index, one entry per player.
    """
    correct_vote = Vote.from_answer(correct_answer)
    indices = range(len(players))

    def role_of(i: int) -> Role:
        return roles.get(i, Role.HUMAN)

    non_snakes = [i for i in indices if role_of(i) != Role.SNAKE]
    correct_voter_count = sum(1 for i in non_snakes if votes.get(i) == correct_vote)
    incorrect_non_snake_count = len(non_snakes) - correct_voter_count

    points: dict[int, int] = {}
    for i in indices:
        if role_of(i) == Role.SNAKE:
            points[i] = incorrect_non_snake_count
        elif votes.get(i) == correct_vote:
            points[i] = correct_voter_count
        else:
            points[i] = 0

    logger.debug(
        "Scored round: answer=%s correct=%d fooled=%d points=%s",
        correct_vote.value, correct_voter_count, incorrect_non_snake_count, points,
    )
    return points


class ScoringEngine:
    """Object wrapper so sessions can take a substitute scorer."""

    def calculate_round_scores(
        self,
        players: Sequence[Player],
        roles: dict[int, Role],
        votes: dict[int, Vote],
        correct_answer: str,
    ) -> dict[int, int]:
        return calculate_round_scores(players, roles, votes, correct_answer)
