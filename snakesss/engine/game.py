"""Game session engine for Snakesss."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from ..errors import ConfigurationError, PhaseTransitionError
from ..events import GameEvents
from ..settings import GameSettings
from .phases import GamePhase, PhaseState
from .player import Player
from .questions import Question, QuestionPool
from .roles import MAX_PLAYERS, MIN_PLAYERS, Role, RoleAssigner, RoleAssigning, Vote
from .scoring import ScoringEngine
from .timer import DiscussionCountdown

logger = logging.getLogger(__name__)

# Discussion can be (re)entered only once the question is on screen
_DISCUSSION_ENTRY_PHASES = (GamePhase.QUESTION, GamePhase.SNAKE_REVEAL, GamePhase.DISCUSSION)


@dataclass(frozen=True)
class RoundResult:
    """Snapshot of one scored round. Never modified after creation."""
    round_number: int
    question: Question
    roles: Mapping[int, Role]
    votes: Mapping[int, Vote]
    points_earned: Mapping[int, int]

    def __post_init__(self):
        for name in ("roles", "votes", "points_earned"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))


class GameRecord(BaseModel):
    """Summary of a finished game, handed to the history sink."""
    date: datetime = Field(default_factory=datetime.now)
    player_names: list[str]
    final_scores: list[int]
    winner_names: list[str]
    round_count: int


class GameRecorder(Protocol):
    """Receives the record of each completed game."""

    def record_game(self, record: GameRecord) -> None: ...


@dataclass
class _RoundState:
    """Per-round scratch data, rebuilt on every ``start_round``."""
    roles: list[Role] = field(default_factory=list)
    snake_indices: list[int] = field(default_factory=list)


class GameSession:
    """One game, from the first role reveal to the final scores.

    The driver calls the transition methods in response to taps and timer
    ticks. Calling a transition from the wrong phase raises
    ``PhaseTransitionError`` and leaves the session unchanged.
    """

    def __init__(
        self,
        players: Sequence[Player],
        question_pool: QuestionPool,
        settings: Optional[GameSettings] = None,
        role_assigner: Optional[RoleAssigning] = None,
        scoring: Optional[ScoringEngine] = None,
        events: Optional[GameEvents] = None,
        recorder: Optional[GameRecorder] = None,
        auto_timer: bool = True,
    ):
        """Initialize the session.

        Args:
            players: Players in seat order. The list is owned by the session.
            question_pool: Source of one question per round.
            settings: Round count and discussion length are read once, here.
            role_assigner: Deals roles each round.
            scoring: Round scorer.
            events: Side-effect hooks (audio, haptics, redraws).
            recorder: Completion sink, called once when the game ends.
            auto_timer: Run the discussion countdown on the asyncio loop when
                one is running. Otherwise the driver calls ``tick()``.
        """
        settings = settings or GameSettings()
        self.players: list[Player] = list(players)
        self.question_pool = question_pool
        self.role_assigner = role_assigner or RoleAssigner()
        self.scoring = scoring or ScoringEngine()
        self.events = events or GameEvents()
        self.recorder = recorder
        self.auto_timer = auto_timer

        self.total_rounds: int = settings.rounds_per_game
        self.timer_duration: int = settings.discussion_seconds
        self.tick_seconds: float = settings.tick_seconds

        self.current_round: int = 0
        self.current_question: Optional[Question] = None
        self.countdown: Optional[DiscussionCountdown] = None
        self._phase = PhaseState.setup()
        self._round = _RoundState()
        self._round_results: list[RoundResult] = []
        self._recorded = False

    @classmethod
    def with_player_names(
        cls,
        names: Sequence[str],
        question_pool: QuestionPool,
        **kwargs,
    ) -> "GameSession":
        """Create a session for a fresh set of players.

        Names are trimmed and must be non-empty and unique.

        Raises:
            ConfigurationError: On a bad player count or bad names.
        """
        trimmed = [name.strip() for name in names]
        if not MIN_PLAYERS <= len(trimmed) <= MAX_PLAYERS:
            raise ConfigurationError(
                f"Need {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(trimmed)}"
            )
        if any(not name for name in trimmed):
            raise ConfigurationError("Player names must not be blank")
        if len(set(trimmed)) != len(trimmed):
            raise ConfigurationError(f"Player names must be unique: {trimmed}")
        return cls([Player(name=name) for name in trimmed], question_pool, **kwargs)

    # -- observable state ------------------------------------------------------

    @property
    def phase(self) -> PhaseState:
        return self._phase

    @property
    def round_results(self) -> tuple[RoundResult, ...]:
        return tuple(self._round_results)

    @property
    def discussion_time_remaining(self) -> int:
        if self.countdown is None:
            return self.timer_duration
        return self.countdown.remaining

    @property
    def snake_indices(self) -> list[int]:
        """Player indices holding the snake role this round."""
        return list(self._round.snake_indices)

    @property
    def snake_player_names(self) -> list[str]:
        return [self.players[i].name for i in self._round.snake_indices]

    @property
    def mongoose_player_index(self) -> Optional[int]:
        for i, role in enumerate(self._round.roles):
            if role == Role.MONGOOSE:
                return i
        return None

    @property
    def mongoose_name(self) -> Optional[str]:
        index = self.mongoose_player_index
        return self.players[index].name if index is not None else None

    @property
    def is_last_round(self) -> bool:
        return self.current_round >= self.total_rounds

    @property
    def winners(self) -> list[Player]:
        """Players sharing the highest total score. Final once the game ends."""
        if not self.players:
            return []
        best = max(p.total_score for p in self.players)
        return [p for p in self.players if p.total_score == best]

    # -- transitions -----------------------------------------------------------

    def _set_phase(self, state: PhaseState) -> None:
        self._phase = state
        logger.debug("Round %d: phase -> %s", self.current_round, state)
        self.events.phase_changed(state)

    def _require(self, action: str, phase: GamePhase, index: Optional[int] = None) -> None:
        if not self._phase.is_(phase, index):
            raise PhaseTransitionError(action, self._phase)

    def start_round(self) -> None:
        """Deal roles for a new round and begin the role reveals.

        Raises:
            ConfigurationError: If no roles can be dealt for this player count.
            PhaseTransitionError: If the game has ended.
        """
        if self._phase.phase == GamePhase.GAME_END:
            raise PhaseTransitionError("start a round", self._phase)

        if not MIN_PLAYERS <= len(self.players) <= MAX_PLAYERS:
            raise ConfigurationError(
                f"Need {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(self.players)}"
            )
        roles = self.role_assigner.assign_roles(len(self.players))
        if len(roles) != len(self.players):
            raise ConfigurationError(
                f"Cannot deal roles for {len(self.players)} players "
                f"(supported: {MIN_PLAYERS}-{MAX_PLAYERS})"
            )

        self._cancel_countdown()
        self.countdown = None
        self.current_round += 1
        self.current_question = None
        for player, role in zip(self.players, roles):
            player.start_round(role)
        self._round = _RoundState(
            roles=list(roles),
            snake_indices=[i for i, role in enumerate(roles) if role == Role.SNAKE],
        )
        logger.info(
            "Round %d/%d started: %d snakes", self.current_round, self.total_rounds,
            len(self._round.snake_indices),
        )
        self._set_phase(PhaseState.role_reveal(0))

    def reveal_next_role(self, current_index: int) -> None:
        """Move past ``current_index``'s role reveal."""
        self._require("reveal the next role", GamePhase.ROLE_REVEAL, current_index)
        next_index = current_index + 1
        if next_index < len(self.players):
            self._set_phase(PhaseState.role_reveal(next_index))
        else:
            self._set_phase(PhaseState.mongoose_announcement())

    def show_question(self) -> Optional[Question]:
        """Draw this round's question and show it.

        Returns:
            The question, or None if the corpus is empty. In that case the
            phase does not change and the driver should stop the game.
        """
        self._require("show the question", GamePhase.MONGOOSE_ANNOUNCEMENT)
        question = self.question_pool.get_question()
        if question is None:
            logger.warning("No question available for round %d", self.current_round)
            self.events.question_unavailable()
            return None
        self.current_question = question
        self._set_phase(PhaseState.question())
        return question

    def start_snake_reveal(self) -> None:
        """Begin the snake reveals, or go straight to discussion if there are no snakes."""
        self._require("start the snake reveal", GamePhase.QUESTION)
        if not self._round.snake_indices:
            self.start_discussion()
        else:
            self._set_phase(PhaseState.snake_reveal(0))

    def reveal_next_snake(self, current_snake_index: int) -> None:
        self._require("reveal the next snake", GamePhase.SNAKE_REVEAL, current_snake_index)
        next_index = current_snake_index + 1
        if next_index < len(self._round.snake_indices):
            self._set_phase(PhaseState.snake_reveal(next_index))
        else:
            self.start_discussion()

    def start_discussion(self) -> None:
        """Enter discussion and (re)start the countdown.

        Any countdown already running is cancelled first.

        Raises:
            PhaseTransitionError: Outside question, snake reveal or discussion.
        """
        if self._phase.phase not in _DISCUSSION_ENTRY_PHASES:
            raise PhaseTransitionError("start the discussion", self._phase)
        if self.current_question is None:
            raise PhaseTransitionError("start the discussion without a question", self._phase)
        self._cancel_countdown()
        self.countdown = DiscussionCountdown(
            self.timer_duration,
            on_expire=self._on_countdown_expired,
            events=self.events,
            tick_seconds=self.tick_seconds,
        )
        self._set_phase(PhaseState.discussion())
        if self.auto_timer and _loop_running():
            self.countdown.start()

    def tick(self) -> None:
        """Advance the discussion countdown by one second."""
        self._require("tick the discussion timer", GamePhase.DISCUSSION)
        if self.countdown is not None:
            self.countdown.tick()

    def skip_discussion(self) -> None:
        """End the discussion early and start voting."""
        self._require("skip the discussion", GamePhase.DISCUSSION)
        self._cancel_countdown()
        self._start_voting()

    def _on_countdown_expired(self) -> None:
        if self._phase.phase == GamePhase.DISCUSSION:
            self._start_voting()

    def _start_voting(self) -> None:
        self._set_phase(PhaseState.voting(0))

    def submit_vote(self, vote: Vote, voter_index: int) -> None:
        """Record a vote and pass the phone on.

        The vote is stored as given; offering only role-appropriate choices
        is up to the driver.
        """
        self._require("submit a vote", GamePhase.VOTING, voter_index)
        self.players[voter_index].current_vote = vote
        self.events.vote_recorded(voter_index, vote)

        next_index = voter_index + 1
        if next_index < len(self.players):
            self._set_phase(PhaseState.voting(next_index))
        else:
            self._score_round()

    def _score_round(self) -> None:
        question = self.current_question
        if question is None:
            raise PhaseTransitionError("score a round without a question", self._phase)

        roles = {i: p.role for i, p in enumerate(self.players) if p.role is not None}
        votes = {i: p.current_vote for i, p in enumerate(self.players) if p.current_vote is not None}
        points = self.scoring.calculate_round_scores(self.players, roles, votes, question.answer)

        for i, earned in points.items():
            self.players[i].add_points(earned)

        result = RoundResult(
            round_number=self.current_round,
            question=question,
            roles=roles,
            votes=votes,
            points_earned=points,
        )
        self._round_results.append(result)
        logger.info("Round %d scored: %s", self.current_round, dict(result.points_earned))
        self._set_phase(PhaseState.round_results())
        self.events.round_scored(result)

    def next_round(self) -> None:
        """Start the next round, or end the game after the last one."""
        self._require("go to the next round", GamePhase.ROUND_RESULTS)
        if self.is_last_round:
            self._end_game()
        else:
            self.start_round()

    def _end_game(self) -> None:
        self._cancel_countdown()
        self._set_phase(PhaseState.game_end())
        record = self.build_record()
        logger.info("Game over after %d rounds, winners: %s", record.round_count, record.winner_names)
        if not self._recorded:
            self._recorded = True
            if self.recorder is not None:
                self.recorder.record_game(record)
            self.events.game_ended(record)

    def build_record(self) -> GameRecord:
        return GameRecord(
            player_names=[p.name for p in self.players],
            final_scores=[p.total_score for p in self.players],
            winner_names=[p.name for p in self.winners],
            round_count=self.current_round,
        )

    def cancel_timer(self) -> None:
        """Stop the countdown without changing phase (e.g. driver teardown)."""
        self._cancel_countdown()

    def _cancel_countdown(self) -> None:
        if self.countdown is not None:
            self.countdown.cancel()


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True
