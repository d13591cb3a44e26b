"""Draw dominoes with a double-six set against one or more computer players.

Seat 0 is the human. Tiles are laid in a single line; a tile may join either
open end whose pip count it matches. A player who cannot match draws from the
boneyard, and passes only once it is empty. The round ends when a hand
empties or when every seat passes in a row; a blocked game goes to the
lightest hand, ties to the lower seat.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

MAX_PIPS = 6
HAND_SIZE = 7


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"


@dataclass(frozen=True)
class DominoTile:
    side_a: int
    side_b: int

    @property
    def id(self) -> str:
        return f"d-{self.side_a}-{self.side_b}"

    @property
    def pips(self) -> int:
        return self.side_a + self.side_b

    @property
    def is_double(self) -> bool:
        return self.side_a == self.side_b

    def matches(self, value: int) -> bool:
        return value in (self.side_a, self.side_b)


@dataclass(frozen=True)
class PlacedTile:
    """A tile on the line, oriented so left and right face its neighbours."""

    tile: DominoTile
    left: int
    right: int


@dataclass(frozen=True)
class DominoMove:
    tile: DominoTile
    side: Side


@dataclass(frozen=True)
class DominoesState:
    hands: tuple[tuple[DominoTile, ...], ...]
    line: tuple[PlacedTile, ...] = ()
    stock: tuple[DominoTile, ...] = ()
    current_player: int = 0
    consecutive_passes: int = 0
    game_over: bool = False
    winner: Optional[int] = None

    @property
    def num_players(self) -> int:
        return len(self.hands)

    def copy_with(self, **changes) -> "DominoesState":  # type: ignore
        """Create new DominoesState with changes."""
        return replace(self, **changes)


def create_double_six_set() -> tuple[DominoTile, ...]:
    return tuple(
        DominoTile(a, b) for a in range(MAX_PIPS + 1) for b in range(a, MAX_PIPS + 1)
    )


def initialize_dominoes(
    rng: Optional[random.Random] = None, opponents: int = 1
) -> DominoesState:
    """Shuffle the 28 tiles and deal seven to each seat; the rest is the boneyard.

    Raises:
        ValueError: If there are not 1-3 opponents.
    """
    if not 1 <= opponents <= 3:
        raise ValueError(f"Dominoes needs 1-3 opponents, got {opponents}")
    tiles = list(create_double_six_set())
    ensure_rng(rng).shuffle(tiles)
    seats = opponents + 1
    hands = tuple(tuple(tiles[i * HAND_SIZE:(i + 1) * HAND_SIZE]) for i in range(seats))
    return DominoesState(hands=hands, stock=tuple(tiles[seats * HAND_SIZE:]))


def board_ends(line: Sequence[PlacedTile]) -> Optional[tuple[int, int]]:
    """Open pip values (left, right), or None before the first tile."""
    if not line:
        return None
    return line[0].left, line[-1].right


def can_play_tile(tile: DominoTile, line: Sequence[PlacedTile]) -> Optional[Side]:
    ends = board_ends(line)
    if ends is None:
        return Side.BOTH
    left, right = ends
    on_left, on_right = tile.matches(left), tile.matches(right)
    if on_left and on_right:
        return Side.BOTH
    if on_left:
        return Side.LEFT
    if on_right:
        return Side.RIGHT
    return None


def get_playable_moves(state: DominoesState, player: Optional[int] = None) -> list[DominoMove]:
    """Legal placements for a seat's tiles; a tile fitting both ends yields two moves."""
    seat = state.current_player if player is None else player
    moves = []
    for tile in state.hands[seat]:
        side = can_play_tile(tile, state.line)
        if side is Side.BOTH:
            moves.append(DominoMove(tile, Side.LEFT))
            if state.line:
                moves.append(DominoMove(tile, Side.RIGHT))
        elif side is not None:
            moves.append(DominoMove(tile, side))
    return moves


def _attach(line: tuple[PlacedTile, ...], tile: DominoTile, side: Side) -> tuple[PlacedTile, ...]:
    if not line:
        return (PlacedTile(tile, tile.side_a, tile.side_b),)
    if side is Side.LEFT:
        end = line[0].left
        outer = tile.side_b if tile.side_a == end else tile.side_a
        return (PlacedTile(tile, outer, end),) + line
    end = line[-1].right
    outer = tile.side_b if tile.side_a == end else tile.side_a
    return line + (PlacedTile(tile, end, outer),)


def play_tile(state: DominoesState, tile: DominoTile, side: Side = Side.RIGHT) -> DominoesState:
    """Lay a tile from the current player's hand on one end of the line.

    Side.BOTH is not a placement; tiles that fit nowhere, or on the wrong
    end, leave the state unchanged.
    """
    if state.game_over or side is Side.BOTH:
        return state
    seat = state.current_player
    hand = state.hands[seat]
    if tile not in hand:
        return state
    fits = can_play_tile(tile, state.line)
    if fits is None or (fits is not Side.BOTH and fits is not side):
        return state

    hands = list(state.hands)
    hands[seat] = tuple(t for t in hand if t != tile)
    played = state.copy_with(
        hands=tuple(hands),
        line=_attach(state.line, tile, side),
        consecutive_passes=0,
    )
    if not hands[seat]:
        logger.debug(f"Seat {seat} dominoes")
        return played.copy_with(game_over=True, winner=seat)
    return played.copy_with(current_player=(seat + 1) % state.num_players)


def draw_from_stock(state: DominoesState) -> DominoesState:
    """The current player takes a tile from the boneyard while holding no playable tile."""
    if state.game_over or not state.stock or get_playable_moves(state):
        return state
    seat = state.current_player
    hands = list(state.hands)
    hands[seat] = hands[seat] + (state.stock[-1],)
    return state.copy_with(hands=tuple(hands), stock=state.stock[:-1])


def hand_pips(hand: Sequence[DominoTile]) -> int:
    return sum(t.pips for t in hand)


def pass_turn(state: DominoesState) -> DominoesState:
    """Pass when nothing can be played or drawn; a full round of passes blocks the game."""
    if state.game_over or state.stock or get_playable_moves(state):
        return state
    passes = state.consecutive_passes + 1
    if passes >= state.num_players:
        pips = [hand_pips(h) for h in state.hands]
        winner = pips.index(min(pips))
        logger.debug(f"Blocked game, pips {pips}, seat {winner} wins")
        return state.copy_with(consecutive_passes=passes, game_over=True, winner=winner)
    return state.copy_with(
        consecutive_passes=passes,
        current_player=(state.current_player + 1) % state.num_players,
    )


def get_ai_move(
    state: DominoesState, difficulty: Union[Difficulty, str] = Difficulty.EASY
) -> Optional[DominoMove]:
    """Easy plays the first tile that fits; harder levels shed the heaviest tile, doubles first."""
    moves = get_playable_moves(state)
    if not moves:
        return None
    if Difficulty.parse(difficulty) is Difficulty.EASY:
        first = moves[0]
        fits = can_play_tile(first.tile, state.line)
        return DominoMove(first.tile, Side.RIGHT) if fits is Side.BOTH else first
    return max(moves, key=lambda m: (m.tile.pips, m.tile.is_double))


def take_ai_turn(
    state: DominoesState, difficulty: Union[Difficulty, str] = Difficulty.EASY
) -> DominoesState:
    """Play if possible, otherwise draw once, otherwise pass."""
    move = get_ai_move(state, difficulty)
    if move is not None:
        return play_tile(state, move.tile, move.side)
    if state.stock:
        return draw_from_stock(state)
    return pass_turn(state)
