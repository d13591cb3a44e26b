"""Sudoku generation, validation and solving."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core import grid
from gamebox.core.grid import Grid
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

SIZE = 9
BOX = 3
DIGITS = tuple(range(1, SIZE + 1))

# Number of given cells left in the puzzle.
PREFILLED_CELLS = {Difficulty.EASY: 43, Difficulty.MEDIUM: 33, Difficulty.HARD: 27}


@dataclass(frozen=True)
class SudokuCell:
    value: int = 0
    is_fixed: bool = False


SudokuBoard = Grid[SudokuCell]
NumberGrid = Sequence[Sequence[int]]


@dataclass(frozen=True)
class SudokuPuzzle:
    """A playable board plus the completed grid it was carved from."""

    board: SudokuBoard
    solution: Grid[int]


def get_sudoku_config(difficulty: Union[Difficulty, str]) -> int:
    """Number of prefilled cells for a difficulty."""
    return PREFILLED_CELLS[Difficulty.parse(difficulty)]


def is_valid(grid_values: NumberGrid, row: int, col: int, num: int) -> bool:
    """Whether num can sit at (row, col) without repeating in its row, column or box.

    The cell itself is ignored so the check also works for placed values.
    """
    for i in range(SIZE):
        if i != col and grid_values[row][i] == num:
            return False
        if i != row and grid_values[i][col] == num:
            return False

    box_row = (row // BOX) * BOX
    box_col = (col // BOX) * BOX
    for r in range(box_row, box_row + BOX):
        for c in range(box_col, box_col + BOX):
            if (r, c) != (row, col) and grid_values[r][c] == num:
                return False
    return True


def _solve_in_place(work: list[list[int]], rng: random.Random) -> bool:
    for row in range(SIZE):
        for col in range(SIZE):
            if work[row][col] != 0:
                continue
            digits = list(DIGITS)
            rng.shuffle(digits)
            for num in digits:
                if is_valid(work, row, col, num):
                    work[row][col] = num
                    if _solve_in_place(work, rng):
                        return True
                    work[row][col] = 0
            return False
    return True


def solve_sudoku(
    grid_values: NumberGrid, rng: Optional[random.Random] = None
) -> Optional[Grid[int]]:
    """Fill the empty (zero) cells, returning None when no completion exists.

    Digits are tried in random order, so an empty grid yields a random
    solved grid.
    """
    work = [list(row) for row in grid_values]
    for r in range(SIZE):
        for c in range(SIZE):
            if work[r][c] and not is_valid(work, r, c, work[r][c]):
                return None
    if not _solve_in_place(work, ensure_rng(rng)):
        return None
    return grid.from_lists(work)


def generate_puzzle(
    difficulty: Union[Difficulty, str], rng: Optional[random.Random] = None
) -> SudokuPuzzle:
    """Solve an empty grid at random, then blank cells down to the clue count."""
    clues = get_sudoku_config(difficulty)
    rng = ensure_rng(rng)

    empty = [[0] * SIZE for _ in range(SIZE)]
    solution = solve_sudoku(empty, rng)
    assert solution is not None

    positions = [(r, c) for r in range(SIZE) for c in range(SIZE)]
    removed = set(rng.sample(positions, SIZE * SIZE - clues))

    board = grid.make_grid(
        SIZE,
        SIZE,
        lambda r, c: SudokuCell(0, False) if (r, c) in removed else SudokuCell(solution[r][c], True),
    )
    logger.debug(f"Generated sudoku with {clues} clues")
    return SudokuPuzzle(board=board, solution=solution)


def generate_sudoku(
    difficulty: Union[Difficulty, str], rng: Optional[random.Random] = None
) -> SudokuBoard:
    return generate_puzzle(difficulty, rng).board


def values_grid(board: SudokuBoard) -> Grid[int]:
    return tuple(tuple(cell.value for cell in row) for row in board)


def set_cell_value(board: SudokuBoard, row: int, col: int, value: int) -> SudokuBoard:
    """Write a digit (0 clears). Fixed cells and out-of-range values are rejected.

    Values that conflict with other cells are accepted; use get_conflicts to
    highlight them.
    """
    if not grid.in_bounds(board, row, col) or not 0 <= value <= SIZE:
        return board
    current = board[row][col]
    if current.is_fixed or current.value == value:
        return board
    return grid.set_cell(board, row, col, SudokuCell(value, False))


def is_solved(board: SudokuBoard) -> bool:
    values = values_grid(board)
    return all(
        values[r][c] != 0 and is_valid(values, r, c, values[r][c])
        for r in range(SIZE)
        for c in range(SIZE)
    )


def get_conflicts(board: SudokuBoard, row: int, col: int) -> list[tuple[int, int]]:
    """Cells sharing a row, column or box with (row, col) that hold the same digit."""
    value = board[row][col].value
    if value == 0:
        return []

    peers: set[tuple[int, int]] = set()
    for i in range(SIZE):
        peers.add((row, i))
        peers.add((i, col))
    box_row = (row // BOX) * BOX
    box_col = (col // BOX) * BOX
    for r in range(box_row, box_row + BOX):
        for c in range(box_col, box_col + BOX):
            peers.add((r, c))
    peers.discard((row, col))

    return sorted((r, c) for r, c in peers if board[r][c].value == value)


def get_hint(
    board: SudokuBoard, solution: Grid[int], rng: Optional[random.Random] = None
) -> Optional[tuple[int, int, int]]:
    """Pick an empty or wrong cell and return (row, col, correct_value)."""
    wrong = [
        (r, c)
        for r in range(SIZE)
        for c in range(SIZE)
        if board[r][c].value != solution[r][c]
    ]
    if not wrong:
        return None
    r, c = ensure_rng(rng).choice(wrong)
    return r, c, solution[r][c]
