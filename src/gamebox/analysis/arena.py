"""AI-vs-random self-play for the two-player engines.

Each game is played from both seats so first-player bias cancels out. A
one-sided binomial test tells whether the AI beats a uniformly random mover
more often than chance.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

import numpy as np
from scipy import stats

from gamebox.config import Difficulty
from gamebox.games import backgammon, checkers, connect_four, reversi, tictactoe
from gamebox.storage import GameId

logger = logging.getLogger(__name__)

DRAW = -1


@dataclass
class ArenaConfig:
    """Configuration for an arena run."""

    games: int = 20                  # Split evenly between the two seats
    difficulty: Difficulty = Difficulty.HARD
    seed: Optional[int] = None
    max_turns: int = 500             # Decisions before a game is scored a draw


@dataclass
class ArenaResult:
    """Outcome counts of AI vs random."""

    game: GameId
    games: int
    ai_wins: int
    random_wins: int
    draws: int
    ai_wins_first: int               # AI wins when moving first
    ai_wins_second: int              # AI wins when moving second
    first_player_advantage: float    # 0.0 balanced, 1.0 first seat always wins
    p_value: float                   # Binomial test of AI wins vs 50%

    @property
    def ai_win_rate(self) -> float:
        return self.ai_wins / self.games if self.games else 0.0


@dataclass(frozen=True)
class MatchRules:
    """The handful of callbacks the arena needs to drive one game."""

    new_game: Callable[[random.Random], Any]
    to_move: Callable[[Any], int]
    legal_moves: Callable[[Any], list]
    apply: Callable[[Any, Any, random.Random], Any]
    ai_move: Callable[[Any, Difficulty, random.Random], Any]
    outcome: Callable[[Any], Optional[int]]


def _tictactoe_rules() -> MatchRules:
    def to_move(board: tictactoe.Board) -> int:
        return 0 if board.count(tictactoe.Mark.X) == board.count(tictactoe.Mark.O) else 1

    def mark(board: tictactoe.Board) -> tictactoe.Mark:
        return tictactoe.Mark.X if to_move(board) == 0 else tictactoe.Mark.O

    def outcome(board: tictactoe.Board) -> Optional[int]:
        winner = tictactoe.check_winner(board)
        if winner is not None:
            return 0 if winner is tictactoe.Mark.X else 1
        return DRAW if tictactoe.is_draw(board) else None

    return MatchRules(
        new_game=lambda rng: tictactoe.create_board(),
        to_move=to_move,
        legal_moves=tictactoe.empty_cells,
        apply=lambda board, move, rng: tictactoe.place_mark(board, move, mark(board)),
        ai_move=lambda board, difficulty, rng: tictactoe.get_ai_move(
            board, difficulty, rng, ai=mark(board)
        ),
        outcome=outcome,
    )


def _connect_four_rules() -> MatchRules:
    Disc = connect_four.Disc

    def to_move(board: connect_four.C4Board) -> int:
        reds = sum(row.count(Disc.RED) for row in board)
        yellows = sum(row.count(Disc.YELLOW) for row in board)
        return 0 if reds == yellows else 1

    def disc(board: connect_four.C4Board) -> connect_four.Disc:
        return Disc.RED if to_move(board) == 0 else Disc.YELLOW

    def outcome(board: connect_four.C4Board) -> Optional[int]:
        winner = connect_four.check_winner(board)
        if winner is not None:
            return 0 if winner is Disc.RED else 1
        return DRAW if connect_four.is_board_full(board) else None

    def apply(board: connect_four.C4Board, col: int, rng: random.Random) -> connect_four.C4Board:
        dropped = connect_four.drop_piece(board, col, disc(board))
        return board if dropped is None else dropped

    return MatchRules(
        new_game=lambda rng: connect_four.create_empty_board(),
        to_move=to_move,
        legal_moves=connect_four.get_valid_columns,
        apply=apply,
        ai_move=lambda board, difficulty, rng: connect_four.get_ai_move(
            board, difficulty, rng, ai=disc(board)
        ),
        outcome=outcome,
    )


def _reversi_rules() -> MatchRules:
    def outcome(state: reversi.ReversiState) -> Optional[int]:
        if not state.game_over:
            return None
        if state.winner == reversi.DRAW:
            return DRAW
        return 0 if state.winner is reversi.Disc.BLACK else 1

    return MatchRules(
        new_game=lambda rng: reversi.initialize_game(),
        to_move=lambda state: 0 if state.current_player is reversi.Disc.BLACK else 1,
        legal_moves=lambda state: list(state.valid_moves),
        apply=lambda state, move, rng: reversi.play_move(state, move.row, move.col),
        ai_move=lambda state, difficulty, rng: reversi.choose_move(state, difficulty),
        outcome=outcome,
    )


def _checkers_rules() -> MatchRules:
    first = checkers.CheckersState(board=checkers.initialize_board()).current_player

    def outcome(state: checkers.CheckersState) -> Optional[int]:
        if state.winner is None:
            return None
        return 0 if state.winner is first else 1

    return MatchRules(
        new_game=lambda rng: checkers.initialize_game(),
        to_move=lambda state: 0 if state.current_player is first else 1,
        legal_moves=lambda state: checkers.get_all_valid_moves(state.board, state.current_player),
        apply=lambda state, move, rng: checkers.play_move(state, move),
        ai_move=lambda state, difficulty, rng: checkers.choose_move(state, difficulty, rng),
        outcome=outcome,
    )


def _backgammon_rules() -> MatchRules:
    White = backgammon.CheckerColor.WHITE

    def roll_if_needed(
        state: backgammon.BackgammonState, rng: random.Random
    ) -> backgammon.BackgammonState:
        if state.winner is None and not state.moves_remaining:
            state = backgammon.start_turn(state, backgammon.roll_dice(rng))
        return state

    def legal_moves(state: backgammon.BackgammonState) -> list:
        # A None move forfeits a roll that cannot be played.
        return backgammon.get_valid_moves(state) or [None]

    def apply(
        state: backgammon.BackgammonState,
        move: Optional[backgammon.BackgammonMove],
        rng: random.Random,
    ) -> backgammon.BackgammonState:
        if move is None:
            state = backgammon.pass_turn(state)
        else:
            state = backgammon.perform_move(state, move.source, move.target)
        return roll_if_needed(state, rng)

    def outcome(state: backgammon.BackgammonState) -> Optional[int]:
        if state.winner is None:
            return None
        return 0 if state.winner is White else 1

    return MatchRules(
        new_game=lambda rng: roll_if_needed(backgammon.initialize_backgammon(), rng),
        to_move=lambda state: 0 if state.current_player is White else 1,
        legal_moves=legal_moves,
        apply=apply,
        ai_move=lambda state, difficulty, rng: backgammon.get_ai_move(state, rng),
        outcome=outcome,
    )


SUPPORTED_GAMES: dict[GameId, Callable[[], MatchRules]] = {
    GameId.TIC_TAC_TOE: _tictactoe_rules,
    GameId.CONNECT_FOUR: _connect_four_rules,
    GameId.REVERSI: _reversi_rules,
    GameId.CHECKERS: _checkers_rules,
    GameId.BACKGAMMON: _backgammon_rules,
}


def play_match(
    rules: MatchRules,
    ai_seat: int,
    difficulty: Difficulty,
    rng: random.Random,
    max_turns: int,
) -> int:
    """Play one game; returns the winning seat or DRAW."""
    state = rules.new_game(rng)
    for _ in range(max_turns):
        result = rules.outcome(state)
        if result is not None:
            return result
        moves = rules.legal_moves(state)
        if rules.to_move(state) == ai_seat:
            move = rules.ai_move(state, difficulty, rng)
            if move is None:
                move = moves[0]
        else:
            move = rng.choice(moves)
        state = rules.apply(state, move, rng)
    result = rules.outcome(state)
    return DRAW if result is None else result


def run_arena(game: Union[GameId, str], config: Optional[ArenaConfig] = None) -> ArenaResult:
    """Play config.games games of the AI against a random mover, alternating seats.

    Raises:
        ValueError: If the game has no two-player AI.
    """
    config = config or ArenaConfig()
    game_id = GameId.parse(game)
    if game_id not in SUPPORTED_GAMES:
        supported = ", ".join(g.value for g in SUPPORTED_GAMES)
        raise ValueError(f"No arena for {game_id.value} (supported: {supported})")
    difficulty = Difficulty.parse(config.difficulty)
    rules = SUPPORTED_GAMES[game_id]()
    rng = random.Random(config.seed)

    ai_seats = np.arange(config.games) % 2
    winners = np.array(
        [play_match(rules, int(seat), difficulty, rng, config.max_turns) for seat in ai_seats],
        dtype=np.int64,
    )

    ai_won = winners == ai_seats
    draws = int(np.count_nonzero(winners == DRAW))
    ai_wins = int(np.count_nonzero(ai_won))
    random_wins = config.games - ai_wins - draws
    first_wins = int(np.count_nonzero(winners == 0))
    second_wins = int(np.count_nonzero(winners == 1))
    decisive = first_wins + second_wins

    if ai_wins + random_wins:
        p_value = float(
            stats.binomtest(ai_wins, ai_wins + random_wins, 0.5, alternative="greater").pvalue
        )
    else:
        p_value = 1.0

    result = ArenaResult(
        game=game_id,
        games=config.games,
        ai_wins=ai_wins,
        random_wins=random_wins,
        draws=draws,
        ai_wins_first=int(np.count_nonzero(ai_won & (ai_seats == 0))),
        ai_wins_second=int(np.count_nonzero(ai_won & (ai_seats == 1))),
        first_player_advantage=(first_wins - second_wins) / decisive if decisive else 0.0,
        p_value=p_value,
    )
    logger.info(
        f"{game_id.value}: AI {ai_wins}, random {random_wins}, draws {draws} "
        f"(p={p_value:.4f})"
    )
    return result
