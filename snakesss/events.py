"""Side-effect hooks the engine calls into.

Drivers subclass ``GameEvents`` to play sounds, fire haptics or redraw the
screen. Every hook is a no-op by default.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine.game import GameRecord, RoundResult
    from .engine.phases import PhaseState
    from .engine.roles import Vote


class GameEvents:
    """No-op event sink."""

    def phase_changed(self, state: "PhaseState") -> None:
        pass

    def vote_recorded(self, player_index: int, vote: "Vote") -> None:
        pass

    def round_scored(self, result: "RoundResult") -> None:
        pass

    def question_unavailable(self) -> None:
        pass

    def timer_warning(self, remaining: int) -> None:
        """Called once when 30 seconds are left."""

    def timer_tick(self, remaining: int) -> None:
        """Called every second for the final 10 seconds."""

    def timer_finished(self) -> None:
        pass

    def game_ended(self, record: "GameRecord") -> None:
        pass
