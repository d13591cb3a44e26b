"""Command line entry point: self-play reports, shuffle checks and a terminal game."""

from __future__ import annotations

import logging
import random
import sys
import time

import click

from gamebox.analysis.arena import SUPPORTED_GAMES, ArenaConfig, run_arena
from gamebox.analysis.shuffle import shuffle_uniformity
from gamebox.config import Difficulty
from gamebox.games import tictactoe
from gamebox.storage import GameId, JsonFileStore, ScoreBook

logger = logging.getLogger(__name__)

DEFAULT_STORE = "gamebox_scores.json"
DIFFICULTY_CHOICE = click.Choice([d.value for d in Difficulty])


def setup_logging(verbose: bool) -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def cli(verbose: bool) -> None:
    """Casual game engines: analysis tools and a terminal opponent."""
    setup_logging(verbose)


@cli.command()
@click.argument("game", type=click.Choice([g.value for g in SUPPORTED_GAMES]))
@click.option("--games", type=int, default=20, help="Games to play, split between seats")
@click.option("-d", "--difficulty", type=DIFFICULTY_CHOICE, default="hard", help="AI difficulty")
@click.option("--seed", type=int, default=None, help="Random seed for reproducibility")
@click.option("--max-turns", type=int, default=500, help="Decisions before a game is a draw")
def arena(game: str, games: int, difficulty: str, seed: int | None, max_turns: int) -> None:
    """Pit the AI of GAME against a random mover."""
    if games < 1:
        raise click.BadParameter("must be at least 1", param_hint="--games")
    config = ArenaConfig(
        games=games,
        difficulty=Difficulty.parse(difficulty),
        seed=seed,
        max_turns=max_turns,
    )
    logger.debug(f"Arena config: {config}")
    start = time.time()
    result = run_arena(game, config)
    elapsed = time.time() - start

    click.echo(f"{result.game.value} ({difficulty}), {result.games} games in {elapsed:.1f}s")
    click.echo(f"  AI wins:      {result.ai_wins} ({result.ai_win_rate:.1%})")
    click.echo(f"    as first:   {result.ai_wins_first}")
    click.echo(f"    as second:  {result.ai_wins_second}")
    click.echo(f"  Random wins:  {result.random_wins}")
    click.echo(f"  Draws:        {result.draws}")
    click.echo(f"  First-player advantage: {result.first_player_advantage:+.2f}")
    click.echo(f"  p-value (AI > 50%):     {result.p_value:.4g}")


@cli.command("shuffle-check")
@click.option("--trials", type=int, default=24_000, help="Number of shuffles")
@click.option("--deck-size", type=int, default=4, help="Cards in the test deck (2-6)")
@click.option("--seed", type=int, default=None, help="Random seed for reproducibility")
def shuffle_check(trials: int, deck_size: int, seed: int | None) -> None:
    """Chi-square test that every ordering of a small deck is equally likely."""
    try:
        report = shuffle_uniformity(trials=trials, deck_size=deck_size, seed=seed)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    click.echo(f"Shuffled {report.deck_size} cards {report.trials} times")
    click.echo(f"  Orderings seen: {report.permutations_seen}")
    click.echo(f"  Chi-square:     {report.chi_square:.2f}")
    click.echo(f"  p-value:        {report.p_value:.4f}")
    click.echo("  Uniform" if report.looks_uniform else "  NOT uniform")
    if not report.looks_uniform:
        sys.exit(1)


def render_board(board: tictactoe.Board) -> str:
    cells = [mark.value if mark else str(i + 1) for i, mark in enumerate(board)]
    rows = [" | ".join(cells[r * 3:r * 3 + 3]) for r in range(3)]
    return "\n---------\n".join(rows)


@cli.group()
def play() -> None:
    """Play a game in the terminal."""


@play.command("tic-tac-toe")
@click.option("-d", "--difficulty", type=DIFFICULTY_CHOICE, default="medium", help="AI difficulty")
@click.option("--seed", type=int, default=None, help="Random seed for reproducibility")
@click.option("--store", type=click.Path(), default=DEFAULT_STORE, help="Score file")
def play_tictactoe(difficulty: str, seed: int | None, store: str) -> None:
    """You are X and move first."""
    rng = random.Random(seed)
    book = ScoreBook(JsonFileStore(store))
    board = tictactoe.create_board()
    start = time.time()

    while tictactoe.check_winner(board) is None and not tictactoe.is_draw(board):
        click.echo(render_board(board))
        if board.count(None) % 2 == 1:
            square = click.prompt("Your move (1-9)", type=click.IntRange(1, 9))
            moved = tictactoe.place_mark(board, square - 1, tictactoe.HUMAN)
            if moved is board:
                click.echo("That square is taken.")
                continue
            board = moved
        else:
            ai_square = tictactoe.get_ai_move(board, difficulty, rng)
            if ai_square is None:
                break
            click.echo(f"AI plays {ai_square + 1}")
            board = tictactoe.place_mark(board, ai_square, tictactoe.AI)
        click.echo("")

    click.echo(render_board(board))
    winner = tictactoe.check_winner(board)
    if winner is tictactoe.HUMAN:
        click.echo("You win!")
    elif winner is tictactoe.AI:
        click.echo("AI wins.")
    else:
        click.echo("Draw.")

    record = book.record_game_result(
        GameId.TIC_TAC_TOE, won=winner is tictactoe.HUMAN, time_seconds=int(time.time() - start)
    )
    click.echo(f"Record: {record.wins}-{record.losses} over {record.games_played} games")


@cli.command()
@click.option("--store", type=click.Path(), default=DEFAULT_STORE, help="Score file")
def stats(store: str) -> None:
    """Show recorded results per game."""
    all_stats = ScoreBook(JsonFileStore(store)).get_all_stats()
    if not all_stats:
        click.echo("No games recorded yet.")
        return
    for game_id, game_stats in sorted(all_stats.items(), key=lambda kv: kv[0].value):
        click.echo(
            f"{game_id.value:<14} played {game_stats.games_played:>4}  "
            f"won {game_stats.wins:>4}  lost {game_stats.losses:>4}  "
            f"win rate {game_stats.win_rate:.0%}"
        )


if __name__ == "__main__":
    cli()
