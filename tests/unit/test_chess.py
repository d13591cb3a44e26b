"""Tests for chess rules: legality, special moves and game end."""

import random

from gamebox.core import grid
from gamebox.games.chess import (
    ChessState,
    Move,
    Piece,
    PieceColor,
    PieceType,
    choose_move,
    evaluate_board,
    get_all_legal_moves,
    get_legal_moves,
    initialize_board,
    initialize_game,
    is_king_in_check,
    play_move,
)

W = PieceColor.WHITE
B = PieceColor.BLACK


def board_with(pieces: dict) -> tuple:
    return grid.update_cells(grid.filled_grid(8, 8, None), pieces)


def play_all(state: ChessState, moves: list) -> ChessState:
    for start, end in moves:
        after = play_move(state, Move(start, end))
        assert after is not state, f"{start}->{end} rejected"
        state = after
    return state


def test_initial_position() -> None:
    """Test twenty opening moves and a balanced evaluation."""
    board = initialize_board()
    assert len(get_all_legal_moves(board, W)) == 20
    assert len(get_all_legal_moves(board, B)) == 20
    assert evaluate_board(board) == 0


def test_wrong_side_and_illegal_moves_ignored() -> None:
    """Test moves for the side not on turn or off the rules are rejected."""
    state = initialize_game()
    assert play_move(state, Move((1, 4), (3, 4))) is state
    assert play_move(state, Move((6, 4), (3, 4))) is state
    assert play_move(state, Move((7, 0), (5, 0))) is state


def test_fools_mate() -> None:
    """Test the shortest checkmate is detected and scored."""
    state = play_all(
        initialize_game(),
        [((6, 5), (5, 5)), ((1, 4), (3, 4)), ((6, 6), (4, 6)), ((0, 3), (4, 7))],
    )
    assert state.is_check and state.is_checkmate
    assert state.winner is B
    assert state.game_over
    assert play_move(state, Move((6, 0), (5, 0))) is state


def test_en_passant_capture() -> None:
    """Test a pawn captures one that just advanced two squares beside it."""
    state = play_all(
        initialize_game(),
        [((6, 4), (4, 4)), ((1, 0), (2, 0)), ((4, 4), (3, 4)), ((1, 3), (3, 3))],
    )
    assert state.en_passant_target == (2, 3)
    after = play_move(state, Move((3, 4), (2, 3)))
    assert after.board[3][3] is None
    assert after.board[2][3] == Piece(PieceType.PAWN, W, has_moved=True)
    assert after.captured == (Piece(PieceType.PAWN, B, has_moved=True),)


def test_en_passant_expires() -> None:
    """Test the right to capture en passant lasts one move."""
    state = play_all(
        initialize_game(),
        [((6, 4), (4, 4)), ((1, 0), (2, 0)), ((4, 4), (3, 4)), ((1, 3), (3, 3)),
         ((6, 0), (5, 0)), ((2, 0), (3, 0))],
    )
    assert state.en_passant_target is None
    assert play_move(state, Move((3, 4), (2, 3))) is state


def test_kingside_castling_moves_rook() -> None:
    """Test castling relocates king and rook together."""
    board = board_with(
        {(7, 4): Piece(PieceType.KING, W), (7, 7): Piece(PieceType.ROOK, W), (0, 4): Piece(PieceType.KING, B)}
    )
    state = ChessState(board=board)
    moves = get_legal_moves(board, 7, 4)
    assert Move((7, 4), (7, 6), is_castling=True) in moves
    after = play_move(state, Move((7, 4), (7, 6)))
    assert after.board[7][6].type is PieceType.KING
    assert after.board[7][5].type is PieceType.ROOK
    assert after.board[7][7] is None


def test_no_castling_through_or_out_of_check() -> None:
    """Test attacked transit squares and checks forbid castling."""
    base = {(7, 4): Piece(PieceType.KING, W), (7, 7): Piece(PieceType.ROOK, W), (0, 0): Piece(PieceType.KING, B)}
    through = board_with({**base, (0, 5): Piece(PieceType.ROOK, B)})
    assert not any(m.is_castling for m in get_legal_moves(through, 7, 4))
    in_check = board_with({**base, (0, 4): Piece(PieceType.ROOK, B)})
    assert is_king_in_check(in_check, W)
    assert not any(m.is_castling for m in get_legal_moves(in_check, 7, 4))
    moved_rook = board_with({**base, (7, 7): Piece(PieceType.ROOK, W, has_moved=True)})
    assert not any(m.is_castling for m in get_legal_moves(moved_rook, 7, 4))


def test_promotion_defaults_to_queen() -> None:
    """Test promotion without a choice makes a queen, with one honours it."""
    board = board_with(
        {(1, 0): Piece(PieceType.PAWN, W, True), (7, 4): Piece(PieceType.KING, W), (3, 7): Piece(PieceType.KING, B)}
    )
    state = ChessState(board=board)
    queen = play_move(state, Move((1, 0), (0, 0)))
    assert queen.board[0][0] == Piece(PieceType.QUEEN, W, has_moved=True)
    knight = play_move(state, Move((1, 0), (0, 0), promotion=PieceType.KNIGHT))
    assert knight.board[0][0].type is PieceType.KNIGHT
    assert len(get_legal_moves(board, 1, 0)) == 4


def test_pinned_piece_cannot_move() -> None:
    """Test moves that expose the own king are not legal."""
    board = board_with(
        {(7, 4): Piece(PieceType.KING, W), (6, 4): Piece(PieceType.KNIGHT, W),
         (0, 4): Piece(PieceType.ROOK, B), (0, 0): Piece(PieceType.KING, B)}
    )
    assert get_legal_moves(board, 6, 4) == []


def test_stalemate() -> None:
    """Test a side with no legal move and not in check is stalemated."""
    board = board_with(
        {(0, 0): Piece(PieceType.KING, B), (3, 1): Piece(PieceType.QUEEN, W), (7, 7): Piece(PieceType.KING, W)}
    )
    after = play_move(ChessState(board=board), Move((3, 1), (2, 1)))
    assert after.is_stalemate and not after.is_checkmate
    assert after.winner is None
    assert after.game_over


def test_ai_finds_mate_in_one() -> None:
    """Test the searching AI delivers an available mate."""
    state = play_all(initialize_game(), [((6, 5), (5, 5)), ((1, 4), (3, 4)), ((6, 6), (4, 6))])
    move = choose_move(state, "medium")
    assert (move.start, move.end) == ((0, 3), (4, 7))


def test_easy_ai_prefers_captures() -> None:
    """Test the random AI takes a capture when one exists."""
    board = board_with(
        {(7, 4): Piece(PieceType.KING, W), (4, 4): Piece(PieceType.ROOK, W),
         (4, 0): Piece(PieceType.KNIGHT, B), (0, 7): Piece(PieceType.KING, B)}
    )
    move = choose_move(ChessState(board=board), "easy", random.Random(1))
    assert move.captured == Piece(PieceType.KNIGHT, B)
