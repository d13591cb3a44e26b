"""Backgammon movement, hitting and bearing off, with a priority-based opponent.

Points are numbered 0-23. White travels toward 23 and bears off past it;
red travels toward 0. Moves go from a point index or BAR, to a point index
or OFF.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

POINTS = 24
CHECKERS_PER_SIDE = 15
BAR = "bar"
OFF = "off"

Location = Union[int, str]


class CheckerColor(Enum):
    WHITE = "white"
    RED = "red"

    @property
    def opponent(self) -> "CheckerColor":
        return CheckerColor.RED if self is CheckerColor.WHITE else CheckerColor.WHITE

    @property
    def direction(self) -> int:
        return 1 if self is CheckerColor.WHITE else -1

    @property
    def home(self) -> range:
        return range(18, 24) if self is CheckerColor.WHITE else range(0, 6)


_START = {
    0: (CheckerColor.WHITE, 2),
    11: (CheckerColor.WHITE, 5),
    16: (CheckerColor.WHITE, 3),
    18: (CheckerColor.WHITE, 5),
    23: (CheckerColor.RED, 2),
    12: (CheckerColor.RED, 5),
    7: (CheckerColor.RED, 3),
    5: (CheckerColor.RED, 5),
}


@dataclass(frozen=True)
class BackgammonMove:
    source: Location
    target: Location
    die: int


@dataclass(frozen=True)
class BackgammonState:
    points: tuple[tuple[CheckerColor, ...], ...]
    bar: tuple[tuple[CheckerColor, int], ...] = ((CheckerColor.WHITE, 0), (CheckerColor.RED, 0))
    off: tuple[tuple[CheckerColor, int], ...] = ((CheckerColor.WHITE, 0), (CheckerColor.RED, 0))
    current_player: CheckerColor = CheckerColor.WHITE
    dice: tuple[int, ...] = ()
    moves_remaining: tuple[int, ...] = ()
    winner: Optional[CheckerColor] = None

    def bar_count(self, color: CheckerColor) -> int:
        return dict(self.bar)[color]

    def off_count(self, color: CheckerColor) -> int:
        return dict(self.off)[color]

    def copy_with(self, **changes) -> "BackgammonState":  # type: ignore
        """Create new BackgammonState with changes."""
        return replace(self, **changes)


def _with_count(
    counts: tuple[tuple[CheckerColor, int], ...], color: CheckerColor, delta: int
) -> tuple[tuple[CheckerColor, int], ...]:
    return tuple((c, n + delta if c is color else n) for c, n in counts)


def initialize_backgammon(first_player: CheckerColor = CheckerColor.WHITE) -> BackgammonState:
    points = []
    for i in range(POINTS):
        color, count = _START.get(i, (None, 0))
        points.append((color,) * count if color else ())
    return BackgammonState(points=tuple(points), current_player=first_player)


def roll_dice(rng: Optional[random.Random] = None) -> tuple[int, int]:
    rng = ensure_rng(rng)
    return rng.randint(1, 6), rng.randint(1, 6)


def start_turn(state: BackgammonState, dice: Sequence[int]) -> BackgammonState:
    """Set the roll for the side to move; doubles give four moves."""
    if state.winner is not None or state.moves_remaining:
        return state
    if len(dice) != 2 or not all(1 <= d <= 6 for d in dice):
        return state
    d1, d2 = dice
    moves = (d1,) * 4 if d1 == d2 else (d1, d2)
    return state.copy_with(dice=(d1, d2), moves_remaining=moves)


def all_in_home(state: BackgammonState, color: CheckerColor) -> bool:
    if state.bar_count(color):
        return False
    return all(
        i in color.home or color not in point
        for i, point in enumerate(state.points)
    )


def _owner(point: tuple[CheckerColor, ...]) -> Optional[CheckerColor]:
    return point[0] if point else None


def _is_blocked(state: BackgammonState, index: int, color: CheckerColor) -> bool:
    point = state.points[index]
    return _owner(point) is color.opponent and len(point) >= 2


def _entry_point(color: CheckerColor, die: int) -> int:
    return die - 1 if color is CheckerColor.WHITE else POINTS - die


def _bear_off_distance(color: CheckerColor, index: int) -> int:
    return POINTS - index if color is CheckerColor.WHITE else index + 1


def _has_checker_further_back(state: BackgammonState, color: CheckerColor, index: int) -> bool:
    if color is CheckerColor.WHITE:
        behind = range(18, index)
    else:
        behind = range(index + 1, 6)
    return any(color in state.points[i] for i in behind)


def _die_for(state: BackgammonState, source: Location, target: Location) -> Optional[int]:
    """The die that makes source -> target legal for the side to move, if any."""
    color = state.current_player
    dice = sorted(set(state.moves_remaining))
    if not dice:
        return None

    if state.bar_count(color) and source != BAR:
        return None

    if source == BAR:
        if not state.bar_count(color) or not isinstance(target, int):
            return None
        for die in dice:
            if _entry_point(color, die) == target and not _is_blocked(state, target, color):
                return die
        return None

    if not isinstance(source, int) or not 0 <= source < POINTS:
        return None
    if _owner(state.points[source]) is not color:
        return None

    if target == OFF:
        if not all_in_home(state, color):
            return None
        distance = _bear_off_distance(color, source)
        if distance in dice:
            return distance
        if not _has_checker_further_back(state, color, source):
            larger = [d for d in dice if d > distance]
            if larger:
                return larger[0]
        return None

    if not isinstance(target, int) or not 0 <= target < POINTS:
        return None
    distance = (target - source) * color.direction
    if distance in dice and not _is_blocked(state, target, color):
        return distance
    return None


def is_valid_move(state: BackgammonState, source: Location, target: Location) -> bool:
    return state.winner is None and _die_for(state, source, target) is not None


def get_valid_moves(state: BackgammonState) -> list[BackgammonMove]:
    if state.winner is not None or not state.moves_remaining:
        return []
    color = state.current_player
    moves: list[BackgammonMove] = []
    seen: set[tuple[Location, Location]] = set()

    def consider(source: Location, target: Location) -> None:
        if (source, target) in seen:
            return
        die = _die_for(state, source, target)
        if die is not None:
            seen.add((source, target))
            moves.append(BackgammonMove(source, target, die))

    for die in sorted(set(state.moves_remaining)):
        if state.bar_count(color):
            consider(BAR, _entry_point(color, die))
            continue
        for index, point in enumerate(state.points):
            if _owner(point) is not color:
                continue
            target = index + die * color.direction
            if 0 <= target < POINTS:
                consider(index, target)
            else:
                consider(index, OFF)
    return moves


def has_legal_moves(state: BackgammonState) -> bool:
    return bool(get_valid_moves(state))


def _end_turn(state: BackgammonState) -> BackgammonState:
    return state.copy_with(
        current_player=state.current_player.opponent, dice=(), moves_remaining=()
    )


def perform_move(state: BackgammonState, source: Location, target: Location) -> BackgammonState:
    """Move one checker, hitting a lone opposing checker on the landing point.

    The turn passes once the dice are used up or nothing further is legal.
    Illegal moves return the state unchanged.
    """
    if state.winner is not None:
        return state
    die = _die_for(state, source, target)
    if die is None:
        return state

    color = state.current_player
    points = list(state.points)
    bar = state.bar
    off = state.off

    if source == BAR:
        bar = _with_count(bar, color, -1)
    else:
        points[source] = points[source][1:]

    if target == OFF:
        off = _with_count(off, color, 1)
    else:
        landing = points[target]
        if _owner(landing) is color.opponent:
            # Blocked points were rejected above, so this is a single blot.
            points[target] = ()
            bar = _with_count(bar, color.opponent, 1)
        points[target] = points[target] + (color,)

    remaining = list(state.moves_remaining)
    remaining.remove(die)
    new_state = state.copy_with(
        points=tuple(points), bar=bar, off=off, moves_remaining=tuple(remaining)
    )

    if new_state.off_count(color) == CHECKERS_PER_SIDE:
        logger.debug(f"Backgammon won by {color.value}")
        return new_state.copy_with(winner=color, moves_remaining=())
    if not new_state.moves_remaining or not has_legal_moves(new_state):
        return _end_turn(new_state)
    return new_state


def pass_turn(state: BackgammonState) -> BackgammonState:
    """Forfeit a roll that has no legal move."""
    if state.winner is not None or has_legal_moves(state):
        return state
    return _end_turn(state)


def get_ai_move(
    state: BackgammonState, rng: Optional[random.Random] = None
) -> Optional[BackgammonMove]:
    """Enter from the bar first, then bear off, otherwise a random legal move."""
    moves = get_valid_moves(state)
    if not moves:
        return None
    entering = [m for m in moves if m.source == BAR]
    if entering:
        return entering[0]
    bearing_off = [m for m in moves if m.target == OFF]
    if bearing_off:
        return bearing_off[0]
    return ensure_rng(rng).choice(moves)


def pip_count(state: BackgammonState, color: CheckerColor) -> int:
    """Total distance the side still has to travel."""
    total = state.bar_count(color) * (POINTS + 1)
    for index, point in enumerate(state.points):
        if color in point:
            total += len(point) * _bear_off_distance(color, index)
    return total
