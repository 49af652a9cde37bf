from typing import Optional

import pytest

from snakesss.engine.game import GameSession
from snakesss.engine.phases import GamePhase
from snakesss.engine.player import Player
from snakesss.engine.questions import Question, QuestionPool
from snakesss.engine.roles import Role, Vote
from snakesss.events import GameEvents
from snakesss.settings import GameSettings
from snakesss.storage import MemoryUsedQuestionStore


# Humans first, then snakes, then the mongoose, so indices are predictable
FIXED_ROLES = {
    4: [Role.HUMAN, Role.SNAKE, Role.SNAKE, Role.MONGOOSE],
    5: [Role.HUMAN, Role.HUMAN, Role.SNAKE, Role.SNAKE, Role.MONGOOSE],
    6: [Role.HUMAN, Role.HUMAN, Role.SNAKE, Role.SNAKE, Role.SNAKE, Role.MONGOOSE],
    7: [Role.HUMAN] * 3 + [Role.SNAKE] * 3 + [Role.MONGOOSE],
    8: [Role.HUMAN] * 3 + [Role.SNAKE] * 4 + [Role.MONGOOSE],
}


class StubRoleAssigner:
    """Always deals the same roles in the same order."""

    def __init__(self, roles):
        self.roles = list(roles)
        self.calls = 0

    def assign_roles(self, player_count: int) -> list[Role]:
        self.calls += 1
        return list(self.roles)


class RecordingEvents(GameEvents):
    def __init__(self):
        self.phases = []
        self.votes = []
        self.results = []
        self.warnings = []
        self.ticks = []
        self.finished = 0
        self.unavailable = 0
        self.records = []

    def phase_changed(self, state):
        self.phases.append(state)

    def vote_recorded(self, player_index, vote):
        self.votes.append((player_index, vote))

    def round_scored(self, result):
        self.results.append(result)

    def question_unavailable(self):
        self.unavailable += 1

    def timer_warning(self, remaining):
        self.warnings.append(remaining)

    def timer_tick(self, remaining):
        self.ticks.append(remaining)

    def timer_finished(self):
        self.finished += 1

    def game_ended(self, record):
        self.records.append(record)


class RecordingSink:
    def __init__(self):
        self.records = []

    def record_game(self, record):
        self.records.append(record)


def build_questions(count: int, answer: str = "A", category: Optional[str] = None,
                    difficulty: str = "medium", prefix: str = "q") -> list[Question]:
    return [
        Question(
            id=f"{prefix}-{i}",
            question=f"Test question {i}?",
            choices={"a": "Alpha", "b": "Beta", "c": "Gamma"},
            answer=answer,
            category=category,
            difficulty=difficulty,
        )
        for i in range(count)
    ]


@pytest.fixture()
def make_questions():
    return build_questions


@pytest.fixture()
def events():
    return RecordingEvents()


@pytest.fixture()
def sink():
    return RecordingSink()


@pytest.fixture()
def make_session(events, sink):
    """Session factory with deterministic roles and an in-memory pool."""

    def _make(player_count=4, rounds=6, answer="A", questions=None, roles=None,
              discussion_seconds=60, tick_seconds=1.0):
        settings = GameSettings(
            rounds_per_game=rounds,
            discussion_seconds=discussion_seconds,
            tick_seconds=tick_seconds,
        )
        if questions is None:
            questions = build_questions(max(rounds, 1), answer=answer)
        pool = QuestionPool(questions, settings, store=MemoryUsedQuestionStore())
        players = [Player(name=f"Player {i + 1}") for i in range(player_count)]
        return GameSession(
            players,
            pool,
            settings=settings,
            role_assigner=StubRoleAssigner(roles if roles is not None else FIXED_ROLES[player_count]),
            events=events,
            recorder=sink,
        )

    return _make


def play_round(session: GameSession, vote_for=lambda player: Vote.A) -> None:
    """Drive one round from role_reveal(0) to round_results, skipping the timer."""
    for i in range(len(session.players)):
        session.reveal_next_role(i)
    session.show_question()
    session.start_snake_reveal()
    for i in range(len(session.snake_indices)):
        session.reveal_next_snake(i)
    session.skip_discussion()
    for i, player in enumerate(session.players):
        session.submit_vote(vote_for(player), i)


def correct_or_snake(player: Player) -> Vote:
    return Vote.SNAKE if player.role == Role.SNAKE else Vote.A


def play_game(session: GameSession, vote_for=correct_or_snake) -> None:
    session.start_round()
    while session.phase.phase != GamePhase.GAME_END:
        play_round(session, vote_for)
        session.next_round()


@pytest.fixture()
def play():
    return play_game


@pytest.fixture()
def run_round():
    return play_round
