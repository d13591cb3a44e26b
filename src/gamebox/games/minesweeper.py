"""Minesweeper board generation, reveal and flag rules."""

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

BASE_SIZE = {Difficulty.EASY: 8, Difficulty.MEDIUM: 12, Difficulty.HARD: 16}
BASE_MINES = {Difficulty.EASY: 10, Difficulty.MEDIUM: 25, Difficulty.HARD: 50}
MAX_SIZE = 24
MAX_MINE_DENSITY = 0.3


class CellState(Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"
    FLAGGED = "flagged"


@dataclass(frozen=True)
class Cell:
    row: int
    col: int
    is_mine: bool = False
    mines_around: int = 0
    state: CellState = CellState.HIDDEN


Board = Grid[Cell]


@dataclass(frozen=True)
class MinesweeperConfig:
    rows: int
    cols: int
    mines: int


def get_game_config(difficulty: Union[Difficulty, str], level: int = 1) -> MinesweeperConfig:
    """Board size and mine count for a difficulty at a given level.

    The board grows by one row and column every ten levels and gains one
    mine per level, capped at 30% of the cells.
    """
    difficulty = Difficulty.parse(difficulty)
    if level < 1:
        raise ValueError(f"Level must be at least 1, got {level}")
    size = min(BASE_SIZE[difficulty] + (level - 1) // 10, MAX_SIZE)
    mines = min(BASE_MINES[difficulty] + level - 1, int(size * size * MAX_MINE_DENSITY))
    return MinesweeperConfig(rows=size, cols=size, mines=mines)


def create_board(
    difficulty: Union[Difficulty, str],
    first_row: int,
    first_col: int,
    level: int = 1,
    rng: Optional[random.Random] = None,
) -> Board:
    """Lay mines after the first click so the clicked 3x3 block is clear.

    Raises:
        ValueError: If the first click is off the board or the mines cannot fit.
    """
    config = get_game_config(difficulty, level)
    return create_board_from_config(config, first_row, first_col, rng)


def create_board_from_config(
    config: MinesweeperConfig,
    first_row: int,
    first_col: int,
    rng: Optional[random.Random] = None,
) -> Board:
    rng = ensure_rng(rng)
    if not (0 <= first_row < config.rows and 0 <= first_col < config.cols):
        raise ValueError(
            f"First click ({first_row}, {first_col}) is outside a "
            f"{config.rows}x{config.cols} board"
        )

    candidates = [
        (r, c)
        for r in range(config.rows)
        for c in range(config.cols)
        if abs(r - first_row) > 1 or abs(c - first_col) > 1
    ]
    if config.mines > len(candidates):
        raise ValueError(
            f"Cannot place {config.mines} mines with only {len(candidates)} free cells"
        )
    mines = set(rng.sample(candidates, config.mines))

    def make_cell(r: int, c: int) -> Cell:
        around = sum(
            1
            for dr in (-1, 0, 1)
            for dc in (-1, 0, 1)
            if (dr or dc) and (r + dr, c + dc) in mines
        )
        return Cell(row=r, col=c, is_mine=(r, c) in mines, mines_around=around)

    logger.debug(f"Created {config.rows}x{config.cols} board with {config.mines} mines")
    return grid.make_grid(config.rows, config.cols, make_cell)


def reveal_cell(board: Board, row: int, col: int) -> Board:
    """Reveal a hidden cell, flooding outward through cells with no adjacent mines.

    Flagged, already revealed or out-of-range cells leave the board unchanged.
    """
    if not grid.in_bounds(board, row, col):
        return board
    if board[row][col].state is not CellState.HIDDEN:
        return board

    updates: dict[tuple[int, int], Cell] = {}
    stack = [(row, col)]
    while stack:
        r, c = stack.pop()
        if (r, c) in updates:
            continue
        current = board[r][c]
        if current.state is not CellState.HIDDEN:
            continue
        updates[(r, c)] = replace(current, state=CellState.REVEALED)
        if current.is_mine or current.mines_around > 0:
            continue
        stack.extend(grid.neighbors(board, r, c))

    return grid.update_cells(board, updates)


def toggle_flag(board: Board, row: int, col: int) -> Board:
    """Flip a hidden cell to flagged and back; revealed cells are immune."""
    if not grid.in_bounds(board, row, col):
        return board
    current = board[row][col]
    if current.state is CellState.HIDDEN:
        new_state = CellState.FLAGGED
    elif current.state is CellState.FLAGGED:
        new_state = CellState.HIDDEN
    else:
        return board
    return grid.set_cell(board, row, col, replace(current, state=new_state))


def check_loss(board: Board) -> bool:
    return any(
        cell.is_mine and cell.state is CellState.REVEALED
        for row in board
        for cell in row
    )


def check_win(board: Board) -> bool:
    """Every non-mine cell revealed and no mine revealed."""
    for row in board:
        for cell in row:
            if cell.is_mine and cell.state is CellState.REVEALED:
                return False
            if not cell.is_mine and cell.state is not CellState.REVEALED:
                return False
    return True


def mine_count(board: Board) -> int:
    return grid.count_cells(board, lambda cell: cell.is_mine)


def flags_remaining(board: Board) -> int:
    """Mines minus flags placed; negative when over-flagged."""
    flags = grid.count_cells(board, lambda cell: cell.state is CellState.FLAGGED)
    return mine_count(board) - flags


def reveal_mines(board: Board) -> Board:
    """Show every mine, as done when the game ends in a loss."""
    updates = {
        (cell.row, cell.col): replace(cell, state=CellState.REVEALED)
        for row in board
        for cell in row
        if cell.is_mine and cell.state is not CellState.REVEALED
    }
    return grid.update_cells(board, updates)
