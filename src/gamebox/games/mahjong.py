"""Mahjong solitaire: clear a stacked layout by matching pairs of free tiles.

Tiles sit on a stepped pyramid: each layer covers the ring-inset rectangle
of the one below it, so every tile above layer 0 rests on a tile. A tile is
free when nothing lies on top of it and its left or right neighbour in the
same row and layer is missing.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

TILE_KINDS = 36
MAX_LAYERS = 4
MAX_PAIRS = 72
BASE_PAIRS = {Difficulty.EASY: 18, Difficulty.MEDIUM: 24, Difficulty.HARD: 32}


@dataclass(frozen=True)
class MahjongTile:
    id: int
    kind: int
    row: int
    col: int
    layer: int


@dataclass(frozen=True)
class MahjongState:
    tiles: tuple[MahjongTile, ...]
    selected: Optional[int] = None
    pairs_removed: int = 0
    level: int = 1

    def copy_with(self, **changes) -> "MahjongState":  # type: ignore
        """Create new MahjongState with changes."""
        return replace(self, **changes)


def get_pair_count(difficulty: Union[Difficulty, str], level: int = 1) -> int:
    """Base pairs per difficulty, two more every five levels, at most 72."""
    if level < 1:
        raise ValueError(f"Level must be at least 1, got {level}")
    pairs = BASE_PAIRS[Difficulty.parse(difficulty)] + (level - 1) // 5 * 2
    return min(pairs, MAX_PAIRS)


def _layer_of_cell(row: int, col: int, rows: int, cols: int) -> int:
    """Highest layer a pyramid cell reaches, counted from 0."""
    return min(row, col, rows - 1 - row, cols - 1 - col, MAX_LAYERS - 1)


def _capacity(rows: int, cols: int) -> int:
    return sum(
        _layer_of_cell(r, c, rows, cols) + 1 for r in range(rows) for c in range(cols)
    )


def build_layout(tile_count: int) -> list[tuple[int, int, int]]:
    """(row, col, layer) positions for tile_count tiles, filled bottom layer first.

    The base grows one column or row at a time until the pyramid holds
    enough tiles; the top is then left short.
    """
    rows = cols = max(2, math.isqrt(tile_count) // 2)
    while _capacity(rows, cols) < tile_count:
        if cols <= rows:
            cols += 1
        else:
            rows += 1
    positions = [
        (r, c, layer)
        for layer in range(MAX_LAYERS)
        for r in range(rows)
        for c in range(cols)
        if _layer_of_cell(r, c, rows, cols) >= layer
    ]
    return positions[:tile_count]


def initialize_mahjong(
    difficulty: Union[Difficulty, str] = Difficulty.EASY,
    level: int = 1,
    rng: Optional[random.Random] = None,
) -> MahjongState:
    pairs = get_pair_count(difficulty, level)
    kinds = [i % TILE_KINDS for i in range(pairs) for _ in range(2)]
    ensure_rng(rng).shuffle(kinds)
    tiles = tuple(
        MahjongTile(id=i, kind=kind, row=r, col=c, layer=layer)
        for i, (kind, (r, c, layer)) in enumerate(zip(kinds, build_layout(len(kinds))))
    )
    return MahjongState(tiles=tiles, level=level)


def is_tile_free(tile: MahjongTile, tiles: Sequence[MahjongTile]) -> bool:
    occupied = {(t.row, t.col, t.layer) for t in tiles if t.id != tile.id}
    if any((tile.row, tile.col, layer) in occupied for layer in range(tile.layer + 1, MAX_LAYERS)):
        return False
    has_left = (tile.row, tile.col - 1, tile.layer) in occupied
    has_right = (tile.row, tile.col + 1, tile.layer) in occupied
    return not (has_left and has_right)


def _find(state: MahjongState, tile_id: Optional[int]) -> Optional[MahjongTile]:
    for tile in state.tiles:
        if tile.id == tile_id:
            return tile
    return None


def select_tile(state: MahjongState, tile_id: int) -> MahjongState:
    """Select a free tile; selecting a second free tile of the same kind removes both.

    Selecting the selected tile clears the selection, a different kind
    moves the selection, and blocked or missing tiles change nothing.
    """
    tile = _find(state, tile_id)
    if tile is None or not is_tile_free(tile, state.tiles):
        return state
    if state.selected is None:
        return state.copy_with(selected=tile.id)
    if state.selected == tile.id:
        return state.copy_with(selected=None)
    other = _find(state, state.selected)
    if other is None or other.kind != tile.kind:
        return state.copy_with(selected=tile.id)
    remaining = tuple(t for t in state.tiles if t.id not in (tile.id, other.id))
    logger.debug(f"Matched tiles {other.id} and {tile.id}, {len(remaining)} left")
    return state.copy_with(
        tiles=remaining, selected=None, pairs_removed=state.pairs_removed + 1
    )


def get_free_pairs(state: MahjongState) -> list[tuple[int, int]]:
    """Id pairs of free tiles that match, for hints."""
    free = [t for t in state.tiles if is_tile_free(t, state.tiles)]
    return [
        (a.id, b.id)
        for i, a in enumerate(free)
        for b in free[i + 1:]
        if a.kind == b.kind
    ]


def has_moves(state: MahjongState) -> bool:
    return bool(get_free_pairs(state))


def is_won(state: MahjongState) -> bool:
    return not state.tiles


def shuffle_remaining(state: MahjongState, rng: Optional[random.Random] = None) -> MahjongState:
    """Redistribute the remaining kinds over the remaining positions."""
    kinds = [t.kind for t in state.tiles]
    ensure_rng(rng).shuffle(kinds)
    tiles = tuple(replace(t, kind=kind) for t, kind in zip(state.tiles, kinds))
    return state.copy_with(tiles=tiles, selected=None)
