"""Chess move generation, legality, game state and an alpha-beta opponent."""

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
CHECK_PENALTY = 50
MATE_SCORE = 50_000

SEARCH_DEPTH = {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 3}


class PieceType(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


class PieceColor(Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "PieceColor":
        return PieceColor.BLACK if self is PieceColor.WHITE else PieceColor.WHITE

    @property
    def pawn_direction(self) -> int:
        # White starts on rows 6-7 and moves toward row 0.
        return -1 if self is PieceColor.WHITE else 1

    @property
    def back_row(self) -> int:
        return 7 if self is PieceColor.WHITE else 0


PIECE_VALUES = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20000,
}

# From white's side; black reads the table mirrored vertically.
PAWN_TABLE = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (10, 10, 20, 30, 30, 20, 10, 10),
    (5, 5, 10, 25, 25, 10, 5, 5),
    (0, 0, 0, 20, 20, 0, 0, 0),
    (5, -5, -10, 0, 0, -10, -5, 5),
    (5, 10, 10, -20, -20, 10, 10, 5),
    (0, 0, 0, 0, 0, 0, 0, 0),
)
KNIGHT_TABLE = (
    (-50, -40, -30, -30, -30, -30, -40, -50),
    (-40, -20, 0, 0, 0, 0, -20, -40),
    (-30, 0, 10, 15, 15, 10, 0, -30),
    (-30, 5, 15, 20, 20, 15, 5, -30),
    (-30, 0, 15, 20, 20, 15, 0, -30),
    (-30, 5, 10, 15, 15, 10, 5, -30),
    (-40, -20, 0, 5, 5, 0, -20, -40),
    (-50, -40, -30, -30, -30, -30, -40, -50),
)
_TABLES = {PieceType.PAWN: PAWN_TABLE, PieceType.KNIGHT: KNIGHT_TABLE}

_KNIGHT_JUMPS = ((-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1))
_SLIDES = {
    PieceType.BISHOP: grid.DIAGONAL,
    PieceType.ROOK: grid.ORTHOGONAL,
    PieceType.QUEEN: grid.MOORE,
}
_PROMOTION_CHOICES = (PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT)


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: PieceColor
    has_moved: bool = False


Square = tuple[int, int]
ChessBoard = Grid[Optional[Piece]]


@dataclass(frozen=True)
class Move:
    start: Square
    end: Square
    captured: Optional[Piece] = None
    is_en_passant: bool = False
    is_castling: bool = False
    promotion: Optional[PieceType] = None


@dataclass(frozen=True)
class ChessState:
    board: ChessBoard
    current_player: PieceColor = PieceColor.WHITE
    en_passant_target: Optional[Square] = None
    is_check: bool = False
    is_checkmate: bool = False
    is_stalemate: bool = False
    captured: tuple[Piece, ...] = ()
    last_move: Optional[Move] = None
    winner: Optional[PieceColor] = None

    @property
    def game_over(self) -> bool:
        return self.is_checkmate or self.is_stalemate

    def copy_with(self, **changes) -> "ChessState":  # type: ignore
        """Create new ChessState with changes."""
        return replace(self, **changes)


_BACK_RANK = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def initialize_board() -> ChessBoard:
    def place(r: int, c: int) -> Optional[Piece]:
        if r == 0:
            return Piece(_BACK_RANK[c], PieceColor.BLACK)
        if r == 1:
            return Piece(PieceType.PAWN, PieceColor.BLACK)
        if r == 6:
            return Piece(PieceType.PAWN, PieceColor.WHITE)
        if r == 7:
            return Piece(_BACK_RANK[c], PieceColor.WHITE)
        return None

    return grid.make_grid(SIZE, SIZE, place)


def _pawn_moves(
    board: ChessBoard, r: int, c: int, piece: Piece, en_passant: Optional[Square]
) -> list[Move]:
    moves: list[Move] = []
    step = piece.color.pawn_direction
    promotion_row = 0 if piece.color is PieceColor.WHITE else SIZE - 1

    def add(end: Square, captured: Optional[Piece] = None, is_en_passant: bool = False) -> None:
        if end[0] == promotion_row:
            for choice in _PROMOTION_CHOICES:
                moves.append(Move((r, c), end, captured, is_en_passant, promotion=choice))
        else:
            moves.append(Move((r, c), end, captured, is_en_passant))

    one = (r + step, c)
    if grid.in_bounds(board, *one) and board[one[0]][one[1]] is None:
        add(one)
        two = (r + 2 * step, c)
        start_row = 6 if piece.color is PieceColor.WHITE else 1
        if r == start_row and board[two[0]][two[1]] is None:
            add(two)

    for dc in (-1, 1):
        target = (r + step, c + dc)
        if not grid.in_bounds(board, *target):
            continue
        occupant = board[target[0]][target[1]]
        if occupant is not None and occupant.color is not piece.color:
            add(target, occupant)
        elif occupant is None and target == en_passant:
            add(target, board[r][c + dc], is_en_passant=True)
    return moves


def _castling_moves(board: ChessBoard, r: int, c: int, piece: Piece) -> list[Move]:
    if piece.has_moved or r != piece.color.back_row or c != 4:
        return []
    if is_square_under_attack(board, (r, c), piece.color.opponent):
        return []
    moves = []
    for rook_col, step in ((7, 1), (0, -1)):
        rook = board[r][rook_col]
        if rook is None or rook.type is not PieceType.ROOK or rook.color is not piece.color or rook.has_moved:
            continue
        between = range(min(c, rook_col) + 1, max(c, rook_col))
        if any(board[r][col] is not None for col in between):
            continue
        # The king may not pass through an attacked square.
        if is_square_under_attack(board, (r, c + step), piece.color.opponent):
            continue
        moves.append(Move((r, c), (r, c + 2 * step), is_castling=True))
    return moves


def get_pseudo_legal_moves(
    board: ChessBoard,
    r: int,
    c: int,
    en_passant: Optional[Square] = None,
    include_castling: bool = True,
) -> list[Move]:
    """Moves that obey piece movement but may leave the own king in check."""
    piece = board[r][c]
    if piece is None:
        return []
    if piece.type is PieceType.PAWN:
        return _pawn_moves(board, r, c, piece, en_passant)

    moves: list[Move] = []
    if piece.type in (PieceType.KNIGHT, PieceType.KING):
        offsets = _KNIGHT_JUMPS if piece.type is PieceType.KNIGHT else grid.MOORE
        for dr, dc in offsets:
            end = (r + dr, c + dc)
            if not grid.in_bounds(board, *end):
                continue
            occupant = board[end[0]][end[1]]
            if occupant is None or occupant.color is not piece.color:
                moves.append(Move((r, c), end, occupant))
        if piece.type is PieceType.KING and include_castling:
            moves.extend(_castling_moves(board, r, c, piece))
        return moves

    for dr, dc in _SLIDES[piece.type]:
        nr, nc = r + dr, c + dc
        while grid.in_bounds(board, nr, nc):
            occupant = board[nr][nc]
            if occupant is None:
                moves.append(Move((r, c), (nr, nc)))
            else:
                if occupant.color is not piece.color:
                    moves.append(Move((r, c), (nr, nc), occupant))
                break
            nr += dr
            nc += dc
    return moves


def is_square_under_attack(board: ChessBoard, square: Square, by: PieceColor) -> bool:
    for r, c, piece in grid.iter_cells(board):
        if piece is None or piece.color is not by:
            continue
        if piece.type is PieceType.PAWN:
            if r + by.pawn_direction == square[0] and abs(c - square[1]) == 1:
                return True
            continue
        for move in get_pseudo_legal_moves(board, r, c, include_castling=False):
            if move.end == square:
                return True
    return False


def find_king(board: ChessBoard, color: PieceColor) -> Optional[Square]:
    for r, c, piece in grid.iter_cells(board):
        if piece is not None and piece.type is PieceType.KING and piece.color is color:
            return r, c
    return None


def is_king_in_check(board: ChessBoard, color: PieceColor) -> bool:
    king = find_king(board, color)
    return king is not None and is_square_under_attack(board, king, color.opponent)


def make_move(board: ChessBoard, move: Move) -> ChessBoard:
    """Apply a move on the board only (no turn or en passant bookkeeping)."""
    piece = board[move.start[0]][move.start[1]]
    if piece is None:
        return board
    moved = Piece(move.promotion or piece.type, piece.color, has_moved=True)
    updates: dict[Square, Optional[Piece]] = {move.start: None, move.end: moved}
    if move.is_en_passant:
        updates[(move.start[0], move.end[1])] = None
    if move.is_castling:
        row = move.start[0]
        if move.end[1] > move.start[1]:
            rook_from, rook_to = (row, 7), (row, 5)
        else:
            rook_from, rook_to = (row, 0), (row, 3)
        rook = board[rook_from[0]][rook_from[1]]
        updates[rook_from] = None
        if rook is not None:
            updates[rook_to] = Piece(rook.type, rook.color, has_moved=True)
    return grid.update_cells(board, updates)


def get_legal_moves(
    board: ChessBoard, r: int, c: int, en_passant: Optional[Square] = None
) -> list[Move]:
    piece = board[r][c]
    if piece is None:
        return []
    return [
        move
        for move in get_pseudo_legal_moves(board, r, c, en_passant)
        if not is_king_in_check(make_move(board, move), piece.color)
    ]


def get_all_legal_moves(
    board: ChessBoard, color: PieceColor, en_passant: Optional[Square] = None
) -> list[Move]:
    moves: list[Move] = []
    for r, c, piece in grid.iter_cells(board):
        if piece is not None and piece.color is color:
            moves.extend(get_legal_moves(board, r, c, en_passant))
    return moves


def _next_en_passant(board: ChessBoard, move: Move) -> Optional[Square]:
    piece = board[move.start[0]][move.start[1]]
    if piece is not None and piece.type is PieceType.PAWN and abs(move.end[0] - move.start[0]) == 2:
        return (move.start[0] + move.end[0]) // 2, move.start[1]
    return None


def initialize_game() -> ChessState:
    return ChessState(board=initialize_board())


def play_move(state: ChessState, move: Move) -> ChessState:
    """Apply a legal move and update check, mate and stalemate flags.

    A move given without a promotion choice promotes to a queen. Illegal
    moves return the state unchanged.
    """
    if state.game_over:
        return state
    piece = state.board[move.start[0]][move.start[1]]
    if piece is None or piece.color is not state.current_player:
        return state
    legal = get_legal_moves(state.board, move.start[0], move.start[1], state.en_passant_target)
    candidates = [m for m in legal if m.end == move.end]
    if not candidates:
        return state
    promotion = move.promotion or PieceType.QUEEN
    chosen = next((m for m in candidates if m.promotion in (None, promotion)), None)
    if chosen is None:
        return state

    board = make_move(state.board, chosen)
    opponent = state.current_player.opponent
    en_passant = _next_en_passant(state.board, chosen)
    in_check = is_king_in_check(board, opponent)
    has_reply = bool(get_all_legal_moves(board, opponent, en_passant))
    checkmate = in_check and not has_reply
    stalemate = not in_check and not has_reply
    if checkmate or stalemate:
        logger.debug(f"Chess over: {'checkmate' if checkmate else 'stalemate'}")

    captured = state.captured + ((chosen.captured,) if chosen.captured else ())
    return state.copy_with(
        board=board,
        current_player=opponent,
        en_passant_target=en_passant,
        is_check=in_check,
        is_checkmate=checkmate,
        is_stalemate=stalemate,
        captured=captured,
        last_move=chosen,
        winner=state.current_player if checkmate else None,
    )


def evaluate_board(board: ChessBoard) -> int:
    """Material plus pawn and knight placement, positive for white."""
    score = 0
    for r, c, piece in grid.iter_cells(board):
        if piece is None:
            continue
        value = PIECE_VALUES[piece.type]
        table = _TABLES.get(piece.type)
        if table is not None:
            value += table[r][c] if piece.color is PieceColor.WHITE else table[SIZE - 1 - r][c]
        score += value if piece.color is PieceColor.WHITE else -value
    if is_king_in_check(board, PieceColor.WHITE):
        score -= CHECK_PENALTY
    if is_king_in_check(board, PieceColor.BLACK):
        score += CHECK_PENALTY
    return score


def minimax(
    board: ChessBoard,
    depth: int,
    alpha: float,
    beta: float,
    to_move: PieceColor,
    en_passant: Optional[Square] = None,
) -> float:
    """Alpha-beta search where white maximises."""
    moves = get_all_legal_moves(board, to_move, en_passant)
    if not moves:
        if is_king_in_check(board, to_move):
            return -MATE_SCORE if to_move is PieceColor.WHITE else MATE_SCORE
        return 0
    if depth == 0:
        return evaluate_board(board)

    maximizing = to_move is PieceColor.WHITE
    value = -math.inf if maximizing else math.inf
    for move in moves:
        child = minimax(
            make_move(board, move),
            depth - 1,
            alpha,
            beta,
            to_move.opponent,
            _next_en_passant(board, move),
        )
        if maximizing:
            value = max(value, child)
            alpha = max(alpha, value)
        else:
            value = min(value, child)
            beta = min(beta, value)
        if beta <= alpha:
            break
    return value


def get_best_move(
    board: ChessBoard,
    color: PieceColor,
    depth: int,
    en_passant: Optional[Square] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """Depth 1 plays a random capture if any, else a random move; deeper depths search."""
    moves = get_all_legal_moves(board, color, en_passant)
    if not moves:
        return None
    if depth <= 1:
        rng = ensure_rng(rng)
        captures = [m for m in moves if m.captured is not None]
        return rng.choice(captures or moves)

    sign = 1 if color is PieceColor.WHITE else -1
    best_move = moves[0]
    best_score = -math.inf
    for move in moves:
        score = sign * minimax(
            make_move(board, move),
            depth - 1,
            -math.inf,
            math.inf,
            color.opponent,
            _next_en_passant(board, move),
        )
        if score > best_score:
            best_score = score
            best_move = move
    return best_move


def get_ai_depth(difficulty: Union[Difficulty, str]) -> int:
    return SEARCH_DEPTH[Difficulty.parse(difficulty)]


def choose_move(
    state: ChessState,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    if state.game_over:
        return None
    return get_best_move(
        state.board,
        state.current_player,
        get_ai_depth(difficulty),
        state.en_passant_target,
        rng,
    )
