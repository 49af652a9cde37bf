"""Exceptions raised by the game engine."""


class SnakesssError(Exception):
    """Base class for engine errors."""


class ConfigurationError(SnakesssError, ValueError):
    """The game cannot start with the given setup (player count, names)."""


class PhaseTransitionError(SnakesssError, RuntimeError):
    """A transition was requested from a phase that does not allow it."""

    def __init__(self, action: str, phase: object):
        self.action = action
        self.phase = phase
        super().__init__(f"Cannot {action} during phase {phase}")
