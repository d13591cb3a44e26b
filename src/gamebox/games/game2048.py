"""2048 sliding-tile rules."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from gamebox.config import Difficulty
from gamebox.core import grid
from gamebox.core.grid import Grid
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

SIZE = 4
WINNING_TILE = 2048

# Chance that a spawned tile is a 4 instead of a 2.
FOUR_PROBABILITY = {Difficulty.EASY: 0.0, Difficulty.MEDIUM: 0.1, Difficulty.HARD: 0.3}


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


Board2048 = Grid[int]


@dataclass(frozen=True)
class SwipeResult:
    board: Board2048
    score: int
    moved: bool


@dataclass(frozen=True)
class Game2048State:
    board: Board2048
    score: int = 0
    won: bool = False
    over: bool = False

    def copy_with(self, **changes) -> "Game2048State":  # type: ignore
        """Create new Game2048State with changes."""
        return replace(self, **changes)


def empty_board() -> Board2048:
    return grid.filled_grid(SIZE, SIZE, 0)


def add_random_tile(
    board: Board2048,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
) -> Board2048:
    """Spawn a 2 (or sometimes a 4) on a random empty cell; full boards are unchanged."""
    four_chance = FOUR_PROBABILITY[Difficulty.parse(difficulty)]
    rng = ensure_rng(rng)
    empty = grid.find_cells(board, lambda value: value == 0)
    if not empty:
        return board
    row, col = rng.choice(empty)
    value = 4 if rng.random() < four_chance else 2
    return grid.set_cell(board, row, col, value)


def init_board(
    difficulty: Union[Difficulty, str], rng: Optional[random.Random] = None
) -> Board2048:
    rng = ensure_rng(rng)
    board = add_random_tile(empty_board(), difficulty, rng)
    return add_random_tile(board, difficulty, rng)


def _slide_row_left(row: tuple[int, ...]) -> tuple[tuple[int, ...], int]:
    tiles = [v for v in row if v]
    merged: list[int] = []
    score = 0
    i = 0
    while i < len(tiles):
        if i + 1 < len(tiles) and tiles[i] == tiles[i + 1]:
            merged.append(tiles[i] * 2)
            score += tiles[i] * 2
            i += 2
        else:
            merged.append(tiles[i])
            i += 1
    merged.extend([0] * (len(row) - len(merged)))
    return tuple(merged), score


def _transpose(board: Board2048) -> Board2048:
    return tuple(zip(*board))


def _reverse_rows(board: Board2048) -> Board2048:
    return tuple(row[::-1] for row in board)


def swipe(board: Board2048, direction: Direction) -> SwipeResult:
    """Slide every tile toward direction, merging each pair at most once."""
    # Reorient so the swipe is always leftward, then undo.
    if direction is Direction.LEFT:
        oriented = board
    elif direction is Direction.RIGHT:
        oriented = _reverse_rows(board)
    elif direction is Direction.UP:
        oriented = _transpose(board)
    else:
        oriented = _reverse_rows(_transpose(board))

    rows = []
    score = 0
    for row in oriented:
        new_row, gained = _slide_row_left(row)
        rows.append(new_row)
        score += gained
    slid: Board2048 = tuple(rows)

    if direction is Direction.LEFT:
        result = slid
    elif direction is Direction.RIGHT:
        result = _reverse_rows(slid)
    elif direction is Direction.UP:
        result = _transpose(slid)
    else:
        result = _transpose(_reverse_rows(slid))

    return SwipeResult(board=result, score=score, moved=result != board)


def has_won(board: Board2048) -> bool:
    return any(value >= WINNING_TILE for row in board for value in row)


def is_game_over(board: Board2048) -> bool:
    """No empty cell and no two equal neighbours."""
    for r, c, value in grid.iter_cells(board):
        if value == 0:
            return False
        for nr, nc in grid.neighbors(board, r, c, ((0, 1), (1, 0))):
            if board[nr][nc] == value:
                return False
    return True


def new_game(
    difficulty: Union[Difficulty, str], rng: Optional[random.Random] = None
) -> Game2048State:
    return Game2048State(board=init_board(difficulty, rng))


def apply_swipe(
    state: Game2048State,
    direction: Direction,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
) -> Game2048State:
    """Swipe, then spawn a tile only if something moved."""
    if state.over:
        return state
    result = swipe(state.board, direction)
    if not result.moved:
        return state
    board = add_random_tile(result.board, difficulty, rng)
    won = state.won or has_won(board)
    over = is_game_over(board)
    if over:
        logger.debug(f"2048 game over with score {state.score + result.score}")
    return state.copy_with(
        board=board, score=state.score + result.score, won=won, over=over
    )
