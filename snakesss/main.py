"""Main entry point: auto-plays a Snakesss game in the terminal."""

import asyncio
import logging
import os
import random
import sys
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from .engine.game import GameSession, RoundResult
from .engine.phases import GamePhase
from .engine.questions import QuestionPool, load_questions
from .engine.roles import Role, RoleAssigner, Vote
from .errors import ConfigurationError
from .events import GameEvents
from .history.markdown_logger import MarkdownLogger
from .settings import GameSettings, timer_label
from .storage import YamlUsedQuestionStore


# Load environment variables
load_dotenv()

console = Console()


def setup_logging() -> None:
    """Route engine logs through rich. Level comes from SNAKESSS_LOG_LEVEL."""
    level = os.getenv("SNAKESSS_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_config(config_path: str = "config/game.yaml") -> dict:
    """Load game configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        console.print(f"[red]Config file not found: {config_path}[/red]")
        sys.exit(1)

    with open(path) as f:
        return yaml.safe_load(f)


class ConsoleEvents(GameEvents):
    """Prints timer cues and writes each scored round to the markdown log."""

    def __init__(self, history: MarkdownLogger):
        self.history = history
        self.session: Optional[GameSession] = None

    def timer_warning(self, remaining: int) -> None:
        console.print(f"[yellow]{remaining} seconds left![/yellow]")

    def timer_finished(self) -> None:
        console.print("[bold yellow]Time's up![/bold yellow]")

    def question_unavailable(self) -> None:
        console.print("[red]No questions left in the corpus.[/red]")

    def round_scored(self, result: RoundResult) -> None:
        self.history.log_round(result, self.session.players)


def display_welcome():
    """Display welcome message."""
    console.print(Panel.fit(
        "[bold green]SNAKESSS[/bold green]\n"
        "[dim]Trust no one. Especially the snakes.[/dim]",
        border_style="green",
    ))
    console.print()


def display_role(session: GameSession, index: int) -> None:
    player = session.players[index]
    role = player.role
    color = "red" if role == Role.SNAKE else "cyan"
    console.print(
        f"[dim]Round {session.current_round}/{session.total_rounds} - "
        f"player {index + 1}/{len(session.players)}[/dim] "
        f"{player.name}: {role.emoji} [{color}]{role.display_name}[/{color}]"
    )


def display_question(session: GameSession) -> None:
    q = session.current_question
    body = (
        f"[bold]{q.question}[/bold]\n\n"
        f"A) {q.choices.a}\nB) {q.choices.b}\nC) {q.choices.c}\n\n"
        f"[dim]{q.category or 'General'} - {q.difficulty.value}[/dim]"
    )
    console.print(Panel(body, title=f"Round {session.current_round}", border_style="magenta"))
    console.print(f"The mongoose is [bold]{session.mongoose_name}[/bold].")


def display_snake(session: GameSession, snake_index: int) -> None:
    player = session.players[session.snake_indices[snake_index]]
    others = [n for n in session.snake_player_names if n != player.name]
    q = session.current_question
    line = f"[red]{player.name}[/red] learns the answer: {q.answer.upper()}"
    if others:
        line += f" [dim](fellow snakes: {', '.join(others)})[/dim]"
    console.print(line)


def display_round_results(session: GameSession) -> None:
    result = session.round_results[-1]
    q = result.question
    table = Table(
        title=f"Round {result.round_number} - answer {q.answer.upper()} ({q.answer_text})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Player", style="cyan")
    table.add_column("Role", style="red")
    table.add_column("Vote")
    table.add_column("Points", justify="right", style="green")
    table.add_column("Total", justify="right")

    for i, player in enumerate(session.players):
        vote = result.votes.get(i)
        table.add_row(
            player.name,
            result.roles[i].display_name,
            vote.value.upper() if vote else "-",
            str(result.points_earned.get(i, 0)),
            str(player.total_score),
        )

    console.print(table)
    if q.fun_fact:
        console.print(f"[dim italic]{q.fun_fact}[/dim italic]")
    console.print()


def display_results(session: GameSession, history: MarkdownLogger):
    """Display game results."""
    winners = [p.name for p in session.winners]
    console.print(Panel(
        f"[bold green]{' & '.join(winners)} WIN{'S' if len(winners) == 1 else ''}![/bold green]",
        border_style="green",
    ))

    table = Table(title="Final Standings", show_header=True, header_style="bold")
    table.add_column("Player", style="cyan")
    table.add_column("Score", justify="right", style="green")
    for player in sorted(session.players, key=lambda p: -p.total_score):
        table.add_row(player.name, str(player.total_score))

    console.print(table)
    console.print()

    if history.game_dir:
        console.print(f"[dim]Game log saved to: {history.game_dir}[/dim]")


async def wait_for_discussion(session: GameSession) -> None:
    """Show the countdown until the timer moves the session to voting."""
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.fields[remaining]}s"),
        console=console,
    ) as progress:
        task = progress.add_task(
            "[yellow]Discussion...[/yellow]",
            total=session.timer_duration,
            remaining=session.timer_duration,
        )
        while session.phase.phase == GamePhase.DISCUSSION:
            remaining = session.discussion_time_remaining
            progress.update(task, completed=session.timer_duration - remaining, remaining=remaining)
            await asyncio.sleep(session.tick_seconds)


def choose_vote(session: GameSession, index: int, rng: random.Random) -> Vote:
    """Snakes must vote SNAKE; everyone else guesses."""
    if session.players[index].role == Role.SNAKE:
        return Vote.SNAKE
    return rng.choice(Vote.choices())


async def play(session: GameSession, rng: random.Random, wait_for_timer: bool = True) -> bool:
    """Drive the session through every phase until the game ends.

    Returns:
        False if the game had to stop because no question was available.
    """
    session.start_round()

    while True:
        state = session.phase
        phase = state.phase

        if phase == GamePhase.ROLE_REVEAL:
            display_role(session, state.index)
            session.reveal_next_role(state.index)

        elif phase == GamePhase.MONGOOSE_ANNOUNCEMENT:
            if session.show_question() is None:
                return False
            display_question(session)

        elif phase == GamePhase.QUESTION:
            session.start_snake_reveal()

        elif phase == GamePhase.SNAKE_REVEAL:
            display_snake(session, state.index)
            session.reveal_next_snake(state.index)

        elif phase == GamePhase.DISCUSSION:
            if wait_for_timer:
                await wait_for_discussion(session)
            else:
                session.skip_discussion()

        elif phase == GamePhase.VOTING:
            session.submit_vote(choose_vote(session, state.index, rng), state.index)

        elif phase == GamePhase.ROUND_RESULTS:
            display_round_results(session)
            session.next_round()

        elif phase == GamePhase.GAME_END:
            return True

        else:
            # Should not reach here
            return False


async def main():
    """Main entry point."""
    setup_logging()
    display_welcome()

    # Load configuration
    config_path = sys.argv[1] if len(sys.argv) > 1 else os.getenv("SNAKESSS_CONFIG", "config/game.yaml")
    console.print(f"[dim]Loading config from: {config_path}[/dim]")
    config_data = load_config(config_path)

    settings = GameSettings.model_validate(config_data.get("settings") or {})
    demo = config_data.get("demo") or {}
    seed: Optional[int] = demo.get("seed")
    rng = random.Random(seed)

    questions = load_questions(demo.get("questions"))
    store = YamlUsedQuestionStore(demo.get("used_questions_file", ".snakesss/used_questions.yaml"))
    pool = QuestionPool(questions, settings, store=store, rng=random.Random(rng.random()))
    console.print(
        f"[cyan]{len(questions)} questions loaded, {pool.remaining_count} unused "
        f"({settings.difficulty_mode.value}). Discussion: {timer_label(settings.discussion_seconds)}[/cyan]"
    )

    history = MarkdownLogger(base_dir=demo.get("history_dir", "games"))
    events = ConsoleEvents(history)
    try:
        session = GameSession.with_player_names(
            config_data.get("players", []),
            pool,
            settings=settings,
            role_assigner=RoleAssigner(random.Random(rng.random())),
            events=events,
            recorder=history,
        )
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    events.session = session

    history.start_game()
    history.log_setup(session.players, session.total_rounds)

    console.print(f"[bold]Game starting with {len(session.players)} players![/bold]")
    console.print()

    try:
        finished = await play(session, rng, wait_for_timer=demo.get("wait_for_timer", True))
    except KeyboardInterrupt:
        session.cancel_timer()
        console.print("\n[yellow]Game interrupted by user.[/yellow]")
        sys.exit(0)

    if finished:
        display_results(session, history)
    else:
        console.print("[red]The game stopped early: add questions to the corpus.[/red]")
        sys.exit(1)


def run():
    """Entry point for the CLI."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
