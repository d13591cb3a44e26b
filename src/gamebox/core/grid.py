"""Immutable two-dimensional grids built from nested tuples.

A grid is ``tuple[tuple[T, ...], ...]`` indexed ``grid[row][col]``. Updates
return a new grid that shares every untouched row with the old one.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, Mapping, Sequence, Tuple, TypeVar

T = TypeVar("T")

Grid = Tuple[Tuple[T, ...], ...]

ORTHOGONAL: tuple[tuple[int, int], ...] = ((-1, 0), (0, 1), (1, 0), (0, -1))
DIAGONAL: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
MOORE: tuple[tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


def make_grid(rows: int, cols: int, factory: Callable[[int, int], T]) -> Grid[T]:
    """Build a rows x cols grid whose cells are factory(row, col).

    Raises:
        ValueError: If either dimension is not positive.
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")
    return tuple(tuple(factory(r, c) for c in range(cols)) for r in range(rows))


def filled_grid(rows: int, cols: int, value: T) -> Grid[T]:
    return make_grid(rows, cols, lambda _r, _c: value)


def dimensions(grid: Grid[T]) -> tuple[int, int]:
    return len(grid), (len(grid[0]) if grid else 0)


def in_bounds(grid: Grid[T], row: int, col: int) -> bool:
    return 0 <= row < len(grid) and 0 <= col < len(grid[row])


def cell(grid: Grid[T], row: int, col: int) -> T:
    return grid[row][col]


def set_cell(grid: Grid[T], row: int, col: int, value: T) -> Grid[T]:
    """Return a grid with one cell replaced."""
    old_row = grid[row]
    new_row = old_row[:col] + (value,) + old_row[col + 1:]
    return grid[:row] + (new_row,) + grid[row + 1:]


def update_cells(grid: Grid[T], updates: Mapping[tuple[int, int], T]) -> Grid[T]:
    """Return a grid with many cells replaced, copying only touched rows."""
    if not updates:
        return grid
    by_row: dict[int, dict[int, T]] = {}
    for (r, c), value in updates.items():
        by_row.setdefault(r, {})[c] = value
    rows = list(grid)
    for r, changes in by_row.items():
        row = list(rows[r])
        for c, value in changes.items():
            row[c] = value
        rows[r] = tuple(row)
    return tuple(rows)


def iter_cells(grid: Grid[T]) -> Iterator[tuple[int, int, T]]:
    """Yield (row, col, value) in row-major order."""
    for r, row in enumerate(grid):
        for c, value in enumerate(row):
            yield r, c, value


def neighbors(
    grid: Grid[T],
    row: int,
    col: int,
    directions: Iterable[tuple[int, int]] = MOORE,
) -> Iterator[tuple[int, int]]:
    """Yield in-bounds coordinates adjacent to (row, col)."""
    for dr, dc in directions:
        r, c = row + dr, col + dc
        if in_bounds(grid, r, c):
            yield r, c


def count_cells(grid: Grid[T], predicate: Callable[[T], bool]) -> int:
    return sum(1 for row in grid for value in row if predicate(value))


def find_cells(grid: Grid[T], predicate: Callable[[T], bool]) -> list[tuple[int, int]]:
    return [(r, c) for r, c, value in iter_cells(grid) if predicate(value)]


def to_lists(grid: Grid[T]) -> list[list[T]]:
    """Mutable copy, for search code that works in place."""
    return [list(row) for row in grid]


def from_lists(rows: Sequence[Sequence[T]]) -> Grid[T]:
    return tuple(tuple(row) for row in rows)
