"""Water sort puzzle: pour coloured layers between tubes until each holds one colour."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.rng import ensure_rng

TUBE_CAPACITY = 4
EMPTY_TUBES = 2
COLOR_COUNT = {Difficulty.EASY: 5, Difficulty.MEDIUM: 8, Difficulty.HARD: 11}

# Colours are small ints; index 0 is the bottom layer of a tube.
Tube = tuple[int, ...]


@dataclass(frozen=True)
class WaterSortState:
    tubes: tuple[Tube, ...]
    moves: int = 0

    def copy_with(self, **changes) -> "WaterSortState":  # type: ignore
        """Create new WaterSortState with changes."""
        return replace(self, **changes)


def initialize_water_sort(
    difficulty: Union[Difficulty, str] = Difficulty.EASY,
    rng: Optional[random.Random] = None,
) -> WaterSortState:
    """Shuffle four layers of each colour into full tubes, plus two empty tubes.

    A deal that is already sorted is reshuffled.
    """
    colors = COLOR_COUNT[Difficulty.parse(difficulty)]
    rng = ensure_rng(rng)
    layers = [color for color in range(colors) for _ in range(TUBE_CAPACITY)]
    while True:
        rng.shuffle(layers)
        tubes = tuple(
            tuple(layers[i * TUBE_CAPACITY:(i + 1) * TUBE_CAPACITY]) for i in range(colors)
        ) + ((),) * EMPTY_TUBES
        if not is_win(tubes):
            return WaterSortState(tubes=tubes)


def can_pour(tubes: Sequence[Tube], source: int, target: int) -> bool:
    """Pour onto an empty tube or onto the same colour, while there is room."""
    if source == target or not (0 <= source < len(tubes) and 0 <= target < len(tubes)):
        return False
    from_tube, to_tube = tubes[source], tubes[target]
    if not from_tube or len(to_tube) >= TUBE_CAPACITY:
        return False
    return not to_tube or to_tube[-1] == from_tube[-1]


def _top_run(tube: Tube) -> int:
    color = tube[-1]
    run = 0
    for layer in reversed(tube):
        if layer != color:
            break
        run += 1
    return run


def pour(state: WaterSortState, source: int, target: int) -> WaterSortState:
    """Move as many matching top layers as fit; illegal pours leave the state unchanged."""
    if not can_pour(state.tubes, source, target):
        return state
    from_tube, to_tube = state.tubes[source], state.tubes[target]
    amount = min(_top_run(from_tube), TUBE_CAPACITY - len(to_tube))
    tubes = list(state.tubes)
    tubes[source] = from_tube[:-amount]
    tubes[target] = to_tube + from_tube[-amount:]
    return state.copy_with(tubes=tuple(tubes), moves=state.moves + 1)


def is_win(tubes: Sequence[Tube]) -> bool:
    """Every tube is empty or full of a single colour."""
    return all(
        not tube or (len(tube) == TUBE_CAPACITY and len(set(tube)) == 1)
        for tube in tubes
    )


def get_valid_pours(tubes: Sequence[Tube]) -> list[tuple[int, int]]:
    return [
        (s, t)
        for s in range(len(tubes))
        for t in range(len(tubes))
        if can_pour(tubes, s, t)
    ]
