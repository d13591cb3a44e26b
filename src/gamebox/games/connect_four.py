"""Connect Four rules and an alpha-beta opponent."""

from __future__ import annotations

import logging
import math
import random
from enum import Enum
from typing import Optional, Union

from gamebox.config import Difficulty
from gamebox.core import grid
from gamebox.core.grid import Grid
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

ROWS = 6
COLS = 7
CONNECT = 4
SEARCH_DEPTH = 4

AI_WIN_SCORE = 100_000_000_000_000
HUMAN_WIN_SCORE = -10_000_000_000_000

# Probability that the AI searches instead of dropping at random.
OPTIMAL_CHANCE = {Difficulty.EASY: 0.3, Difficulty.MEDIUM: 0.6, Difficulty.HARD: 0.9}

_DIRECTIONS = ((0, 1), (1, 0), (1, 1), (1, -1))


class Disc(Enum):
    RED = "R"
    YELLOW = "Y"

    @property
    def opponent(self) -> "Disc":
        return Disc.YELLOW if self is Disc.RED else Disc.RED


HUMAN = Disc.RED
AI = Disc.YELLOW

C4Board = Grid[Optional[Disc]]


def create_empty_board() -> C4Board:
    return grid.filled_grid(ROWS, COLS, None)


def drop_piece(board: C4Board, col: int, disc: Disc) -> Optional[C4Board]:
    """Drop into the lowest empty row of col; None if the column is full or invalid."""
    if not 0 <= col < COLS:
        return None
    for row in range(ROWS - 1, -1, -1):
        if board[row][col] is None:
            return grid.set_cell(board, row, col, disc)
    return None


def check_winner(board: C4Board) -> Optional[Disc]:
    for r, c, disc in grid.iter_cells(board):
        if disc is None:
            continue
        for dr, dc in _DIRECTIONS:
            end_r, end_c = r + dr * (CONNECT - 1), c + dc * (CONNECT - 1)
            if not grid.in_bounds(board, end_r, end_c):
                continue
            if all(board[r + dr * k][c + dc * k] is disc for k in range(1, CONNECT)):
                return disc
    return None


def get_valid_columns(board: C4Board) -> list[int]:
    return [c for c in range(COLS) if board[0][c] is None]


def is_board_full(board: C4Board) -> bool:
    return not get_valid_columns(board)


def minimax(
    board: C4Board,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    ai: Disc = AI,
) -> float:
    """Alpha-beta search; only terminal positions carry a non-zero score.

    Faster wins score higher for the AI and faster losses lower.
    """
    winner = check_winner(board)
    if winner is ai:
        return AI_WIN_SCORE - (SEARCH_DEPTH - depth)
    if winner is ai.opponent:
        return HUMAN_WIN_SCORE + (SEARCH_DEPTH - depth)
    columns = get_valid_columns(board)
    if depth == 0 or not columns:
        return 0

    if maximizing:
        value = -math.inf
        for col in columns:
            child = drop_piece(board, col, ai)
            assert child is not None
            value = max(value, minimax(child, depth - 1, alpha, beta, False, ai))
            alpha = max(alpha, value)
            if alpha >= beta:
                break
        return value

    value = math.inf
    for col in columns:
        child = drop_piece(board, col, ai.opponent)
        assert child is not None
        value = min(value, minimax(child, depth - 1, alpha, beta, True, ai))
        beta = min(beta, value)
        if alpha >= beta:
            break
    return value


def get_best_move(board: C4Board, ai: Disc = AI, depth: int = SEARCH_DEPTH) -> Optional[int]:
    best_col = None
    best_score = -math.inf
    for col in get_valid_columns(board):
        child = drop_piece(board, col, ai)
        assert child is not None
        score = minimax(child, depth - 1, -math.inf, math.inf, False, ai)
        if best_col is None or score > best_score:
            best_score = score
            best_col = col
    return best_col


def get_ai_move(
    board: C4Board,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
    ai: Disc = AI,
) -> Optional[int]:
    """Column to play, or None when the board is full."""
    chance = OPTIMAL_CHANCE[Difficulty.parse(difficulty)]
    rng = ensure_rng(rng)
    columns = get_valid_columns(board)
    if not columns:
        return None
    if rng.random() < chance:
        col = get_best_move(board, ai)
        logger.debug(f"Connect four AI searched column {col}")
        return col
    return rng.choice(columns)
