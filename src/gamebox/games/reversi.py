"""Reversi (Othello) rules and a positional alpha-beta opponent."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from gamebox.config import Difficulty
from gamebox.core import grid
from gamebox.core.grid import Grid

logger = logging.getLogger(__name__)

SIZE = 8
DRAW = "draw"

SEARCH_DEPTH = {Difficulty.EASY: 1, Difficulty.MEDIUM: 3, Difficulty.HARD: 5}

# Corners are gold, squares next to them give corners away.
POSITION_WEIGHTS: tuple[tuple[int, ...], ...] = (
    (100, -20, 10, 5, 5, 10, -20, 100),
    (-20, -50, -2, -2, -2, -2, -50, -20),
    (10, -2, -1, -1, -1, -1, -2, 10),
    (5, -2, -1, -1, -1, -1, -2, 5),
    (5, -2, -1, -1, -1, -1, -2, 5),
    (10, -2, -1, -1, -1, -1, -2, 10),
    (-20, -50, -2, -2, -2, -2, -50, -20),
    (100, -20, 10, 5, 5, 10, -20, 100),
)


class Disc(Enum):
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> "Disc":
        return Disc.WHITE if self is Disc.BLACK else Disc.BLACK


ReversiBoard = Grid[Optional[Disc]]
Winner = Union[Disc, str, None]


@dataclass(frozen=True)
class Position:
    row: int
    col: int


@dataclass(frozen=True)
class Move:
    row: int
    col: int
    flips: tuple[Position, ...]


@dataclass(frozen=True)
class PieceCount:
    black: int
    white: int

    def of(self, disc: Disc) -> int:
        return self.black if disc is Disc.BLACK else self.white


@dataclass(frozen=True)
class ReversiState:
    board: ReversiBoard
    current_player: Disc
    valid_moves: tuple[Move, ...]
    game_over: bool = False
    winner: Winner = None
    last_move: Optional[Position] = None
    passed: bool = False

    def copy_with(self, **changes) -> "ReversiState":  # type: ignore
        """Create new ReversiState with changes."""
        return replace(self, **changes)


def initialize_board() -> ReversiBoard:
    board = grid.filled_grid(SIZE, SIZE, None)
    return grid.update_cells(
        board,
        {
            (3, 3): Disc.WHITE,
            (4, 4): Disc.WHITE,
            (3, 4): Disc.BLACK,
            (4, 3): Disc.BLACK,
        },
    )


def get_flips_for_move(
    board: ReversiBoard, row: int, col: int, player: Disc
) -> tuple[Position, ...]:
    """Opponent discs bracketed by a disc placed at (row, col), scanning eight directions."""
    if not grid.in_bounds(board, row, col) or board[row][col] is not None:
        return ()
    flips: list[Position] = []
    for dr, dc in grid.MOORE:
        run: list[Position] = []
        r, c = row + dr, col + dc
        while grid.in_bounds(board, r, c) and board[r][c] is player.opponent:
            run.append(Position(r, c))
            r += dr
            c += dc
        if run and grid.in_bounds(board, r, c) and board[r][c] is player:
            flips.extend(run)
    return tuple(flips)


def get_valid_moves(board: ReversiBoard, player: Disc) -> tuple[Move, ...]:
    moves = []
    for r in range(SIZE):
        for c in range(SIZE):
            flips = get_flips_for_move(board, r, c, player)
            if flips:
                moves.append(Move(r, c, flips))
    return tuple(moves)


def make_move(board: ReversiBoard, move: Move, player: Disc) -> ReversiBoard:
    updates = {(p.row, p.col): player for p in move.flips}
    updates[(move.row, move.col)] = player
    return grid.update_cells(board, updates)


def count_pieces(board: ReversiBoard) -> PieceCount:
    black = grid.count_cells(board, lambda d: d is Disc.BLACK)
    white = grid.count_cells(board, lambda d: d is Disc.WHITE)
    return PieceCount(black=black, white=white)


def is_game_over(board: ReversiBoard) -> bool:
    """Neither side has a legal move."""
    return not get_valid_moves(board, Disc.BLACK) and not get_valid_moves(board, Disc.WHITE)


def get_winner(board: ReversiBoard) -> Winner:
    """Side with more discs, DRAW on a tie, None while the game is running."""
    if not is_game_over(board):
        return None
    counts = count_pieces(board)
    if counts.black > counts.white:
        return Disc.BLACK
    if counts.white > counts.black:
        return Disc.WHITE
    return DRAW


def initialize_game() -> ReversiState:
    board = initialize_board()
    return ReversiState(
        board=board,
        current_player=Disc.BLACK,
        valid_moves=get_valid_moves(board, Disc.BLACK),
    )


def play_move(state: ReversiState, row: int, col: int) -> ReversiState:
    """Place a disc for the side to move.

    The turn passes to the opponent when it has a reply, stays with the mover
    when it does not, and the game ends when neither side can move.
    Illegal coordinates return the state unchanged.
    """
    if state.game_over:
        return state
    move = next((m for m in state.valid_moves if m.row == row and m.col == col), None)
    if move is None:
        return state

    board = make_move(state.board, move, state.current_player)
    opponent = state.current_player.opponent
    opponent_moves = get_valid_moves(board, opponent)
    if opponent_moves:
        return state.copy_with(
            board=board,
            current_player=opponent,
            valid_moves=opponent_moves,
            last_move=Position(row, col),
            passed=False,
        )

    own_moves = get_valid_moves(board, state.current_player)
    if own_moves:
        logger.debug(f"{opponent.value} has no move and passes")
        return state.copy_with(
            board=board,
            valid_moves=own_moves,
            last_move=Position(row, col),
            passed=True,
        )

    winner = get_winner(board)
    logger.debug(f"Reversi over, winner {winner}")
    return state.copy_with(
        board=board,
        valid_moves=(),
        game_over=True,
        winner=winner,
        last_move=Position(row, col),
        passed=False,
    )


def evaluate_board(board: ReversiBoard, player: Disc) -> int:
    """Disc difference + 2x positional weight + 5x mobility difference."""
    counts = count_pieces(board)
    piece_score = counts.of(player) - counts.of(player.opponent)

    position_score = 0
    for r, c, disc in grid.iter_cells(board):
        if disc is player:
            position_score += POSITION_WEIGHTS[r][c]
        elif disc is player.opponent:
            position_score -= POSITION_WEIGHTS[r][c]

    mobility = len(get_valid_moves(board, player)) - len(
        get_valid_moves(board, player.opponent)
    )
    return piece_score + 2 * position_score + 5 * mobility


def minimax(
    board: ReversiBoard,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    player: Disc,
) -> float:
    """Alpha-beta search scored from player's point of view; a side without moves passes."""
    if depth == 0 or is_game_over(board):
        return evaluate_board(board, player)

    mover = player if maximizing else player.opponent
    moves = get_valid_moves(board, mover)
    if not moves:
        return minimax(board, depth - 1, alpha, beta, not maximizing, player)

    if maximizing:
        value = -math.inf
        for move in moves:
            value = max(
                value,
                minimax(make_move(board, move, mover), depth - 1, alpha, beta, False, player),
            )
            alpha = max(alpha, value)
            if beta <= alpha:
                break
        return value

    value = math.inf
    for move in moves:
        value = min(
            value,
            minimax(make_move(board, move, mover), depth - 1, alpha, beta, True, player),
        )
        beta = min(beta, value)
        if beta <= alpha:
            break
    return value


def get_best_move(board: ReversiBoard, player: Disc, depth: int) -> Optional[Move]:
    """Depth 1 greedily takes the most flips; deeper searches use minimax."""
    moves = get_valid_moves(board, player)
    if not moves:
        return None
    if depth <= 1:
        return max(moves, key=lambda m: len(m.flips))

    best_move = moves[0]
    best_score = -math.inf
    for move in moves:
        score = minimax(
            make_move(board, move, player), depth - 1, -math.inf, math.inf, False, player
        )
        if score > best_score:
            best_score = score
            best_move = move
    return best_move


def get_ai_depth(difficulty: Union[Difficulty, str]) -> int:
    return SEARCH_DEPTH[Difficulty.parse(difficulty)]


def choose_move(state: ReversiState, difficulty: Union[Difficulty, str]) -> Optional[Move]:
    if state.game_over:
        return None
    return get_best_move(state.board, state.current_player, get_ai_depth(difficulty))
