"""Tic-tac-toe rules and a minimax opponent."""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)


class Mark(Enum):
    X = "X"
    O = "O"  # noqa: E741

    @property
    def opponent(self) -> "Mark":
        return Mark.O if self is Mark.X else Mark.X


Board = tuple[Optional[Mark], ...]

HUMAN = Mark.X
AI = Mark.O

WINNING_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)

# Probability that the AI plays the minimax move instead of a random one.
OPTIMAL_CHANCE = {Difficulty.EASY: 0.2, Difficulty.MEDIUM: 0.55, Difficulty.HARD: 0.85}

WIN_SCORE = 10


def create_board() -> Board:
    return (None,) * 9


def get_winning_line(board: Sequence[Optional[Mark]]) -> Optional[tuple[int, int, int]]:
    for line in WINNING_LINES:
        a, b, c = line
        if board[a] is not None and board[a] == board[b] == board[c]:
            return line
    return None


def check_winner(board: Sequence[Optional[Mark]]) -> Optional[Mark]:
    line = get_winning_line(board)
    return board[line[0]] if line else None


def is_draw(board: Sequence[Optional[Mark]]) -> bool:
    return all(cell is not None for cell in board) and check_winner(board) is None


def empty_cells(board: Sequence[Optional[Mark]]) -> list[int]:
    return [i for i, cell in enumerate(board) if cell is None]


def place_mark(board: Board, index: int, mark: Mark) -> Board:
    """Occupied cells, bad indexes and finished games leave the board unchanged."""
    if not 0 <= index < len(board) or board[index] is not None:
        return board
    if check_winner(board) is not None:
        return board
    return board[:index] + (mark,) + board[index + 1:]


def minimax(board: Board, is_maximizing: bool, ai: Mark = AI, depth: int = 0) -> int:
    """Exhaustive score from ai's point of view; quicker wins score higher."""
    winner = check_winner(board)
    if winner is ai:
        return WIN_SCORE - depth
    if winner is ai.opponent:
        return depth - WIN_SCORE
    moves = empty_cells(board)
    if not moves:
        return 0

    mark = ai if is_maximizing else ai.opponent
    scores = [
        minimax(board[:i] + (mark,) + board[i + 1:], not is_maximizing, ai, depth + 1)
        for i in moves
    ]
    return max(scores) if is_maximizing else min(scores)


def get_best_move(board: Board, ai: Mark = AI) -> Optional[int]:
    best_score = None
    best_move = None
    for i in empty_cells(board):
        score = minimax(board[:i] + (ai,) + board[i + 1:], False, ai, 1)
        if best_score is None or score > best_score:
            best_score = score
            best_move = i
    return best_move


def get_random_move(board: Board, rng: Optional[random.Random] = None) -> Optional[int]:
    moves = empty_cells(board)
    if not moves:
        return None
    return ensure_rng(rng).choice(moves)


def get_ai_move(
    board: Board,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
    optimal_chance: Optional[float] = None,
    ai: Mark = AI,
) -> Optional[int]:
    """Play the minimax move with the difficulty's probability, else a random cell.

    optimal_chance overrides the difficulty table (1.0 gives perfect play).
    """
    chance = OPTIMAL_CHANCE[Difficulty.parse(difficulty)] if optimal_chance is None else optimal_chance
    rng = ensure_rng(rng)
    if not empty_cells(board):
        return None
    if rng.random() < chance:
        move = get_best_move(board, ai)
        logger.debug(f"Minimax move for {ai.value}: {move}")
        return move
    return get_random_move(board, rng)
