"""Battleship: fleet placement, strikes and a random-firing opponent."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence

from gamebox.core import grid
from gamebox.core.grid import Grid
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

BOARD_SIZE = 10
MAX_PLACEMENT_ATTEMPTS = 1000


class ShipType(Enum):
    CARRIER = "carrier"
    BATTLESHIP = "battleship"
    DESTROYER = "destroyer"
    SUBMARINE = "submarine"
    PATROL_BOAT = "patrol_boat"

    @property
    def size(self) -> int:
        return SHIP_SIZES[self]


SHIP_SIZES = {
    ShipType.CARRIER: 5,
    ShipType.BATTLESHIP: 4,
    ShipType.DESTROYER: 3,
    ShipType.SUBMARINE: 3,
    ShipType.PATROL_BOAT: 2,
}


class GridCellState(Enum):
    EMPTY = "empty"
    SHIP = "ship"
    HIT = "hit"
    MISS = "miss"


class StrikeOutcome(Enum):
    HIT = "hit"
    MISS = "miss"
    SUNK = "sunk"
    REPEAT = "repeat"


class BattleshipPhase(Enum):
    PLACEMENT = "placement"
    PLAYING = "playing"
    FINISHED = "finished"


class Side(Enum):
    PLAYER = "player"
    ENEMY = "enemy"


@dataclass(frozen=True)
class GridCell:
    state: GridCellState = GridCellState.EMPTY
    ship: Optional[ShipType] = None


Board = Grid[GridCell]
Square = tuple[int, int]


@dataclass(frozen=True)
class Ship:
    type: ShipType
    positions: tuple[Square, ...]
    hits: int = 0

    @property
    def sunk(self) -> bool:
        return self.hits >= len(self.positions)


@dataclass(frozen=True)
class StrikeResult:
    board: Board
    ships: tuple[Ship, ...]
    outcome: StrikeOutcome
    sunk_ship: Optional[ShipType] = None


@dataclass(frozen=True)
class BattleshipState:
    player_board: Board
    enemy_board: Board
    player_ships: tuple[Ship, ...] = ()
    enemy_ships: tuple[Ship, ...] = ()
    phase: BattleshipPhase = BattleshipPhase.PLACEMENT
    current_turn: Side = Side.PLAYER
    winner: Optional[Side] = None
    last_outcome: Optional[StrikeOutcome] = None

    def copy_with(self, **changes) -> "BattleshipState":  # type: ignore
        """Create new BattleshipState with changes."""
        return replace(self, **changes)


def create_empty_board(size: int = BOARD_SIZE) -> Board:
    return grid.filled_grid(size, size, GridCell())


def initialize_game() -> BattleshipState:
    return BattleshipState(player_board=create_empty_board(), enemy_board=create_empty_board())


def ship_squares(row: int, col: int, size: int, horizontal: bool) -> tuple[Square, ...]:
    if horizontal:
        return tuple((row, col + i) for i in range(size))
    return tuple((row + i, col) for i in range(size))


def can_place_ship(board: Board, row: int, col: int, size: int, horizontal: bool) -> bool:
    """Inside the board and not overlapping another ship."""
    return all(
        grid.in_bounds(board, r, c) and board[r][c].state is GridCellState.EMPTY
        for r, c in ship_squares(row, col, size, horizontal)
    )


def place_ship(
    board: Board, ship_type: ShipType, row: int, col: int, horizontal: bool
) -> Optional[tuple[Board, Ship]]:
    if not can_place_ship(board, row, col, ship_type.size, horizontal):
        return None
    squares = ship_squares(row, col, ship_type.size, horizontal)
    updated = grid.update_cells(
        board, {sq: GridCell(GridCellState.SHIP, ship_type) for sq in squares}
    )
    return updated, Ship(type=ship_type, positions=squares)


def place_ships_randomly(
    board: Board,
    rng: Optional[random.Random] = None,
    fleet: Sequence[ShipType] = tuple(ShipType),
) -> tuple[Board, tuple[Ship, ...]]:
    """Place the fleet at random positions and orientations.

    Raises:
        ValueError: If a ship cannot be fitted onto the board.
    """
    rng = ensure_rng(rng)
    rows, cols = grid.dimensions(board)
    ships: list[Ship] = []
    for ship_type in fleet:
        for _ in range(MAX_PLACEMENT_ATTEMPTS):
            horizontal = rng.random() < 0.5
            placed = place_ship(
                board, ship_type, rng.randrange(rows), rng.randrange(cols), horizontal
            )
            if placed is not None:
                board, ship = placed
                ships.append(ship)
                break
        else:
            raise ValueError(f"Could not place {ship_type.value} on a {rows}x{cols} board")
    return board, tuple(ships)


def handle_strike(board: Board, ships: Sequence[Ship], row: int, col: int) -> StrikeResult:
    """Resolve a shot. Squares already struck, or off the board, report REPEAT."""
    ships = tuple(ships)
    if not grid.in_bounds(board, row, col):
        return StrikeResult(board, ships, StrikeOutcome.REPEAT)
    target = board[row][col]
    if target.state in (GridCellState.HIT, GridCellState.MISS):
        return StrikeResult(board, ships, StrikeOutcome.REPEAT)

    if target.state is GridCellState.EMPTY:
        return StrikeResult(
            grid.set_cell(board, row, col, GridCell(GridCellState.MISS)),
            ships,
            StrikeOutcome.MISS,
        )

    board = grid.set_cell(board, row, col, replace(target, state=GridCellState.HIT))
    updated = []
    sunk_ship = None
    for ship in ships:
        if (row, col) in ship.positions:
            ship = replace(ship, hits=ship.hits + 1)
            if ship.sunk:
                sunk_ship = ship.type
        updated.append(ship)
    outcome = StrikeOutcome.SUNK if sunk_ship else StrikeOutcome.HIT
    return StrikeResult(board, tuple(updated), outcome, sunk_ship)


def all_ships_sunk(ships: Sequence[Ship]) -> bool:
    return bool(ships) and all(ship.sunk for ship in ships)


def get_enemy_strike(board: Board, rng: Optional[random.Random] = None) -> Optional[Square]:
    """Uniformly random among squares not yet struck."""
    open_squares = grid.find_cells(
        board, lambda c: c.state in (GridCellState.EMPTY, GridCellState.SHIP)
    )
    if not open_squares:
        return None
    return ensure_rng(rng).choice(open_squares)


def place_player_ship(
    state: BattleshipState, ship_type: ShipType, row: int, col: int, horizontal: bool
) -> BattleshipState:
    if state.phase is not BattleshipPhase.PLACEMENT:
        return state
    if any(ship.type is ship_type for ship in state.player_ships):
        return state
    placed = place_ship(state.player_board, ship_type, row, col, horizontal)
    if placed is None:
        return state
    board, ship = placed
    return state.copy_with(player_board=board, player_ships=state.player_ships + (ship,))


def start_battle(state: BattleshipState, rng: Optional[random.Random] = None) -> BattleshipState:
    """Hide the enemy fleet and begin firing once the player's fleet is complete."""
    if state.phase is not BattleshipPhase.PLACEMENT:
        return state
    if len(state.player_ships) != len(ShipType):
        return state
    enemy_board, enemy_ships = place_ships_randomly(create_empty_board(), rng)
    return state.copy_with(
        enemy_board=enemy_board,
        enemy_ships=enemy_ships,
        phase=BattleshipPhase.PLAYING,
        current_turn=Side.PLAYER,
    )


def player_strike(state: BattleshipState, row: int, col: int) -> BattleshipState:
    if state.phase is not BattleshipPhase.PLAYING or state.current_turn is not Side.PLAYER:
        return state
    result = handle_strike(state.enemy_board, state.enemy_ships, row, col)
    if result.outcome is StrikeOutcome.REPEAT:
        return state
    if all_ships_sunk(result.ships):
        logger.debug("Player sank the enemy fleet")
        return state.copy_with(
            enemy_board=result.board,
            enemy_ships=result.ships,
            phase=BattleshipPhase.FINISHED,
            winner=Side.PLAYER,
            last_outcome=result.outcome,
        )
    return state.copy_with(
        enemy_board=result.board,
        enemy_ships=result.ships,
        current_turn=Side.ENEMY,
        last_outcome=result.outcome,
    )


def enemy_turn(state: BattleshipState, rng: Optional[random.Random] = None) -> BattleshipState:
    if state.phase is not BattleshipPhase.PLAYING or state.current_turn is not Side.ENEMY:
        return state
    target = get_enemy_strike(state.player_board, rng)
    if target is None:
        return state
    result = handle_strike(state.player_board, state.player_ships, *target)
    if all_ships_sunk(result.ships):
        logger.debug("Enemy sank the player fleet")
        return state.copy_with(
            player_board=result.board,
            player_ships=result.ships,
            phase=BattleshipPhase.FINISHED,
            winner=Side.ENEMY,
            last_outcome=result.outcome,
        )
    return state.copy_with(
        player_board=result.board,
        player_ships=result.ships,
        current_turn=Side.PLAYER,
        last_outcome=result.outcome,
    )
