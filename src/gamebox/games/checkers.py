"""Checkers (English draughts) rules and an alpha-beta opponent."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from gamebox.config import Difficulty
from gamebox.core import grid
from gamebox.core.grid import Grid
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

SIZE = 8
PIECE_VALUE = 100
KING_BONUS = 50
ADVANCE_WEIGHT = 5
MOBILITY_WEIGHT = 10
NO_MOVES_SCORE = 10_000

SEARCH_DEPTH = {Difficulty.EASY: 2, Difficulty.MEDIUM: 4, Difficulty.HARD: 6}


class PieceColor(Enum):
    BLACK = "black"
    RED = "red"

    @property
    def opponent(self) -> "PieceColor":
        return PieceColor.RED if self is PieceColor.BLACK else PieceColor.BLACK

    @property
    def forward(self) -> int:
        # Black starts on rows 0-2 and moves down the board.
        return 1 if self is PieceColor.BLACK else -1

    @property
    def king_row(self) -> int:
        return SIZE - 1 if self is PieceColor.BLACK else 0


@dataclass(frozen=True)
class Piece:
    color: PieceColor
    is_king: bool = False


Square = tuple[int, int]
CheckersBoard = Grid[Optional[Piece]]


@dataclass(frozen=True)
class Move:
    start: Square
    end: Square
    captures: tuple[Square, ...] = ()
    path: tuple[Square, ...] = ()

    @property
    def is_capture(self) -> bool:
        return bool(self.captures)


@dataclass(frozen=True)
class CheckersState:
    board: CheckersBoard
    current_player: PieceColor = PieceColor.RED
    winner: Optional[PieceColor] = None
    last_move: Optional[Move] = None
    move_count: int = 0

    def copy_with(self, **changes) -> "CheckersState":  # type: ignore
        """Create new CheckersState with changes."""
        return replace(self, **changes)


def _dark(row: int, col: int) -> bool:
    return (row + col) % 2 == 1


def initialize_board() -> CheckersBoard:
    def place(r: int, c: int) -> Optional[Piece]:
        if not _dark(r, c):
            return None
        if r < 3:
            return Piece(PieceColor.BLACK)
        if r > 4:
            return Piece(PieceColor.RED)
        return None

    return grid.make_grid(SIZE, SIZE, place)


def _directions(piece: Piece) -> list[tuple[int, int]]:
    if piece.is_king:
        return list(grid.DIAGONAL)
    return [(piece.color.forward, -1), (piece.color.forward, 1)]


def get_simple_moves(board: CheckersBoard, row: int, col: int) -> list[Move]:
    piece = board[row][col]
    if piece is None:
        return []
    moves = []
    for dr, dc in _directions(piece):
        r, c = row + dr, col + dc
        if grid.in_bounds(board, r, c) and board[r][c] is None:
            moves.append(Move(start=(row, col), end=(r, c), path=((r, c),)))
    return moves


def get_jump_moves(board: CheckersBoard, row: int, col: int) -> list[Move]:
    """Complete jump sequences for the piece at (row, col).

    Only maximal chains are returned; a man that lands on its king row is
    crowned and its turn ends there.
    """
    piece = board[row][col]
    if piece is None:
        return []

    results: list[Move] = []

    def extend(
        r: int,
        c: int,
        current: Piece,
        captured: tuple[Square, ...],
        path: tuple[Square, ...],
    ) -> None:
        found = False
        for dr, dc in _directions(current):
            mid = (r + dr, c + dc)
            land = (r + 2 * dr, c + 2 * dc)
            if not grid.in_bounds(board, *land) or mid in captured:
                continue
            victim = board[mid[0]][mid[1]]
            if victim is None or victim.color is current.color:
                continue
            # The moving piece's origin counts as empty during the chain.
            occupant = board[land[0]][land[1]]
            if occupant is not None and land != (row, col):
                continue
            found = True
            crowned = not current.is_king and land[0] == current.color.king_row
            if crowned:
                results.append(
                    Move((row, col), land, captured + (mid,), path + (land,))
                )
            else:
                extend(land[0], land[1], current, captured + (mid,), path + (land,))
        if not found and captured:
            results.append(Move((row, col), (r, c), captured, path))

    extend(row, col, piece, (), ())
    return results


def get_valid_moves_for_piece(board: CheckersBoard, row: int, col: int) -> list[Move]:
    jumps = get_jump_moves(board, row, col)
    return jumps if jumps else get_simple_moves(board, row, col)


def get_all_valid_moves(board: CheckersBoard, color: PieceColor) -> list[Move]:
    """Every legal move for color; captures are mandatory when any exist."""
    jumps: list[Move] = []
    simple: list[Move] = []
    for r, c, piece in grid.iter_cells(board):
        if piece is None or piece.color is not color:
            continue
        jumps.extend(get_jump_moves(board, r, c))
        if not jumps:
            simple.extend(get_simple_moves(board, r, c))
    return jumps if jumps else simple


def make_move(board: CheckersBoard, move: Move) -> CheckersBoard:
    piece = board[move.start[0]][move.start[1]]
    if piece is None:
        return board
    if move.end[0] == piece.color.king_row and not piece.is_king:
        piece = Piece(piece.color, is_king=True)
    updates: dict[Square, Optional[Piece]] = {square: None for square in move.captures}
    updates[move.start] = None
    updates[move.end] = piece
    return grid.update_cells(board, updates)


def count_pieces(board: CheckersBoard, color: PieceColor) -> int:
    return grid.count_cells(board, lambda p: p is not None and p.color is color)


def get_winner(board: CheckersBoard, to_move: PieceColor) -> Optional[PieceColor]:
    """A side with no pieces, or no legal move on its turn, loses."""
    for color in PieceColor:
        if count_pieces(board, color) == 0:
            return color.opponent
    if not get_all_valid_moves(board, to_move):
        return to_move.opponent
    return None


def initialize_game() -> CheckersState:
    return CheckersState(board=initialize_board())


def play_move(state: CheckersState, move: Move) -> CheckersState:
    """Apply a legal move for the side to move; anything else is ignored."""
    if state.winner is not None:
        return state
    legal = get_all_valid_moves(state.board, state.current_player)
    if move not in legal:
        matches = [m for m in legal if m.start == move.start and m.end == move.end]
        if len(matches) != 1:
            return state
        move = matches[0]

    board = make_move(state.board, move)
    next_player = state.current_player.opponent
    winner = get_winner(board, next_player)
    if winner is not None:
        logger.debug(f"Checkers won by {winner.value} after {state.move_count + 1} moves")
    return state.copy_with(
        board=board,
        current_player=next_player,
        winner=winner,
        last_move=move,
        move_count=state.move_count + 1,
    )


def evaluate_board(board: CheckersBoard, color: PieceColor) -> int:
    """Material, kings, advancement of men and mobility, from color's side."""
    score = 0
    for r, _c, piece in grid.iter_cells(board):
        if piece is None:
            continue
        value = PIECE_VALUE
        if piece.is_king:
            value += KING_BONUS
        else:
            advanced = r if piece.color is PieceColor.BLACK else SIZE - 1 - r
            value += ADVANCE_WEIGHT * advanced
        score += value if piece.color is color else -value

    mobility = len(get_all_valid_moves(board, color)) - len(
        get_all_valid_moves(board, color.opponent)
    )
    return score + MOBILITY_WEIGHT * mobility


def minimax(
    board: CheckersBoard,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    color: PieceColor,
) -> float:
    mover = color if maximizing else color.opponent
    moves = get_all_valid_moves(board, mover)
    if not moves:
        return -NO_MOVES_SCORE if maximizing else NO_MOVES_SCORE
    if depth == 0:
        return evaluate_board(board, color)

    if maximizing:
        value = -math.inf
        for move in moves:
            value = max(value, minimax(make_move(board, move), depth - 1, alpha, beta, False, color))
            alpha = max(alpha, value)
            if beta <= alpha:
                break
        return value

    value = math.inf
    for move in moves:
        value = min(value, minimax(make_move(board, move), depth - 1, alpha, beta, True, color))
        beta = min(beta, value)
        if beta <= alpha:
            break
    return value


def get_best_move(
    board: CheckersBoard,
    color: PieceColor,
    depth: int,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """Shallow depths play a random capture (or random move); deeper ones search."""
    moves = get_all_valid_moves(board, color)
    if not moves:
        return None
    if depth <= 2:
        rng = ensure_rng(rng)
        captures = [m for m in moves if m.is_capture]
        return rng.choice(captures or moves)

    best_move = moves[0]
    best_score = -math.inf
    for move in moves:
        score = minimax(make_move(board, move), depth - 1, -math.inf, math.inf, False, color)
        if score > best_score:
            best_score = score
            best_move = move
    return best_move


def get_ai_depth(difficulty: Union[Difficulty, str]) -> int:
    return SEARCH_DEPTH[Difficulty.parse(difficulty)]


def choose_move(
    state: CheckersState,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    if state.winner is not None:
        return None
    return get_best_move(state.board, state.current_player, get_ai_depth(difficulty), rng)
