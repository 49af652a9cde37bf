"""Game engine - phases, roles, questions, scoring and the session state machine."""

from .roles import Role, Vote, RoleAssigner, ROLE_DISTRIBUTION
from .phases import GamePhase, PhaseState
from .player import Player
from .questions import Difficulty, Question, QuestionPool, load_questions
from .scoring import ScoringEngine, calculate_round_scores
from .timer import DiscussionCountdown
from .game import GameRecord, GameSession, RoundResult

__all__ = [
    "Role",
    "Vote",
    "RoleAssigner",
    "ROLE_DISTRIBUTION",
    "GamePhase",
    "PhaseState",
    "Player",
    "Difficulty",
    "Question",
    "QuestionPool",
    "load_questions",
    "ScoringEngine",
    "calculate_round_scores",
    "DiscussionCountdown",
    "GameRecord",
    "GameSession",
    "RoundResult",
]
