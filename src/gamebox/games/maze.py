"""Perfect-maze generation and movement."""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from gamebox.config import Difficulty
from gamebox.core import grid
from gamebox.core.grid import Grid
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

BASE_SIZE = {Difficulty.EASY: 8, Difficulty.MEDIUM: 12, Difficulty.HARD: 16}
MAX_SIZE = 30


class MoveDirection(Enum):
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"


_OFFSETS = {
    MoveDirection.UP: (-1, 0),
    MoveDirection.RIGHT: (0, 1),
    MoveDirection.DOWN: (1, 0),
    MoveDirection.LEFT: (0, -1),
}
_WALL_NAME = {
    MoveDirection.UP: "top",
    MoveDirection.RIGHT: "right",
    MoveDirection.DOWN: "bottom",
    MoveDirection.LEFT: "left",
}
_OPPOSITE = {
    MoveDirection.UP: MoveDirection.DOWN,
    MoveDirection.DOWN: MoveDirection.UP,
    MoveDirection.LEFT: MoveDirection.RIGHT,
    MoveDirection.RIGHT: MoveDirection.LEFT,
}


@dataclass(frozen=True)
class Walls:
    top: bool = True
    right: bool = True
    bottom: bool = True
    left: bool = True


@dataclass(frozen=True)
class MazeCell:
    row: int
    col: int
    walls: Walls = Walls()


MazeGrid = Grid[MazeCell]


@dataclass(frozen=True)
class MazeConfig:
    rows: int
    cols: int


def get_maze_config(difficulty: Union[Difficulty, str], level: int = 1) -> MazeConfig:
    """Maze grows by one cell per side every four levels."""
    difficulty = Difficulty.parse(difficulty)
    if level < 1:
        raise ValueError(f"Level must be at least 1, got {level}")
    size = min(BASE_SIZE[difficulty] + (level - 1) // 4, MAX_SIZE)
    return MazeConfig(rows=size, cols=size)


def generate_maze(
    difficulty: Union[Difficulty, str],
    level: int = 1,
    rng: Optional[random.Random] = None,
) -> MazeGrid:
    config = get_maze_config(difficulty, level)
    return carve_maze(config.rows, config.cols, rng)


def carve_maze(rows: int, cols: int, rng: Optional[random.Random] = None) -> MazeGrid:
    """Recursive backtracker from (0, 0); every cell ends up reachable by one path."""
    rng = ensure_rng(rng)
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Maze dimensions must be positive, got {rows}x{cols}")

    open_sides: dict[tuple[int, int], set[str]] = {
        (r, c): set() for r in range(rows) for c in range(cols)
    }
    visited = {(0, 0)}
    stack = [(0, 0)]
    while stack:
        r, c = stack[-1]
        options = []
        for direction, (dr, dc) in _OFFSETS.items():
            nr, nc = r + dr, c + dc
            if 0 <= nr < rows and 0 <= nc < cols and (nr, nc) not in visited:
                options.append((direction, nr, nc))
        if not options:
            stack.pop()
            continue
        direction, nr, nc = rng.choice(options)
        open_sides[(r, c)].add(_WALL_NAME[direction])
        open_sides[(nr, nc)].add(_WALL_NAME[_OPPOSITE[direction]])
        visited.add((nr, nc))
        stack.append((nr, nc))

    def make_cell(r: int, c: int) -> MazeCell:
        opened = open_sides[(r, c)]
        return MazeCell(
            row=r,
            col=c,
            walls=Walls(
                top="top" not in opened,
                right="right" not in opened,
                bottom="bottom" not in opened,
                left="left" not in opened,
            ),
        )

    logger.debug(f"Carved {rows}x{cols} maze")
    return grid.make_grid(rows, cols, make_cell)


def can_move(maze: MazeGrid, row: int, col: int, direction: MoveDirection) -> bool:
    if not grid.in_bounds(maze, row, col):
        return False
    dr, dc = _OFFSETS[direction]
    if not grid.in_bounds(maze, row + dr, col + dc):
        return False
    return not getattr(maze[row][col].walls, _WALL_NAME[direction])


def step(
    maze: MazeGrid, position: tuple[int, int], direction: MoveDirection
) -> tuple[int, int]:
    """Position after moving, or the same position when a wall blocks."""
    row, col = position
    if not can_move(maze, row, col, direction):
        return position
    dr, dc = _OFFSETS[direction]
    return row + dr, col + dc


def has_won(row: int, col: int, rows: int, cols: int) -> bool:
    return row == rows - 1 and col == cols - 1


def shortest_path(
    maze: MazeGrid, start: tuple[int, int], goal: tuple[int, int]
) -> Optional[list[tuple[int, int]]]:
    """Breadth-first path from start to goal, both ends included."""
    parents: dict[tuple[int, int], Optional[tuple[int, int]]] = {start: None}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        if current == goal:
            path = []
            node: Optional[tuple[int, int]] = current
            while node is not None:
                path.append(node)
                node = parents[node]
            return path[::-1]
        for direction in MoveDirection:
            nxt = step(maze, current, direction)
            if nxt != current and nxt not in parents:
                parents[nxt] = current
                queue.append(nxt)
    return None
