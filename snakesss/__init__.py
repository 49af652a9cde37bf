"""Snakesss - pass-and-play social deduction trivia."""

__version__ = "0.1.0"
