"""Markdown logger for finished games and their rounds."""

from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ..engine.game import GameRecord, RoundResult
from ..engine.player import Player


class MarkdownLogger:
    """Writes game setup, round results and final standings to markdown files."""

    def __init__(self, base_dir: str = "games"):
        """Initialize the logger.

        Args:
            base_dir: Base directory for game logs.
        """
        self.base_dir = Path(base_dir)
        self.game_dir: Optional[Path] = None
        self.game_id: Optional[str] = None

    @property
    def game_file(self) -> Path:
        if self.game_dir is None:
            self.start_game()
        return self.game_dir / "game_state.md"

    def start_game(self, game_id: Optional[str] = None) -> Path:
        """Start logging a new game.

        Args:
            game_id: Optional game identifier. If not provided, uses timestamp.

        Returns:
            Path to the game directory.
        """
        if game_id is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
            game_id = f"game_{timestamp}"

        self.game_id = game_id
        self.game_dir = self.base_dir / game_id
        self.game_dir.mkdir(parents=True, exist_ok=True)

        with open(self.game_dir / "game_state.md", "w", encoding="utf-8") as f:
            f.write(f"# Snakesss Game - {self.game_id}\n\n")
            f.write(f"Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")
            f.write("---\n\n")

        return self.game_dir

    def log_setup(self, players: Sequence[Player], total_rounds: int) -> None:
        """Log the seating order.

        Args:
            players: Players in seat order.
            total_rounds: Rounds the game will last.
        """
        with open(self.game_file, "a", encoding="utf-8") as f:
            f.write("## Players\n\n")
            for i, p in enumerate(players, 1):
                f.write(f"{i}. {p.name}\n")
            f.write(f"\nRounds: {total_rounds}\n\n---\n\n")

    def log_round(self, result: RoundResult, players: Sequence[Player]) -> None:
        """Log one scored round.

        Args:
            result: The round's snapshot.
            players: Players in seat order, for names and running totals.
        """
        question = result.question
        with open(self.game_file, "a", encoding="utf-8") as f:
            f.write(f"## Round {result.round_number}\n\n")
            f.write(f"**Q:** {question.question}\n\n")
            for letter in ("a", "b", "c"):
                f.write(f"- {letter.upper()}: {getattr(question.choices, letter)}\n")
            f.write(f"\n**Answer:** {question.answer.upper()}")
            if question.answer_text:
                f.write(f" ({question.answer_text})")
            f.write("\n\n")

            f.write("| Player | Role | Vote | Points | Total |\n")
            f.write("|--------|------|------|--------|-------|\n")
            for i, p in enumerate(players):
                role = result.roles.get(i)
                vote = result.votes.get(i)
                f.write(
                    f"| {p.name} | {role.display_name if role else '-'} | "
                    f"{vote.value.upper() if vote else '-'} | "
                    f"{result.points_earned.get(i, 0)} | {p.total_score} |\n"
                )

            if question.fun_fact:
                f.write(f"\n*{question.fun_fact}*\n")
            f.write("\n")

    def record_game(self, record: GameRecord) -> None:
        """Log the final standings. Called once when the game ends.

        Args:
            record: Summary of the finished game.
        """
        standings = sorted(
            zip(record.player_names, record.final_scores),
            key=lambda x: -x[1],
        )
        with open(self.game_file, "a", encoding="utf-8") as f:
            f.write("---\n\n")
            f.write("# GAME OVER\n\n")
            f.write(f"## Winner{'s' if len(record.winner_names) > 1 else ''}: ")
            f.write(f"{', '.join(record.winner_names)}\n\n")

            f.write("## Final Scores\n\n")
            f.write("| Player | Score |\n")
            f.write("|--------|-------|\n")
            for name, score in standings:
                f.write(f"| {name} | {score} |\n")

            f.write(f"\nRounds played: {record.round_count}\n")
            f.write(f"\nEnded: {record.date.strftime('%Y-%m-%d %H:%M:%S')}\n")
