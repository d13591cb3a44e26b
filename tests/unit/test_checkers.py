"""Tests for checkers move generation, captures and promotion."""

import random

from gamebox.core import grid
from gamebox.games.checkers import (
    Move,
    Piece,
    PieceColor,
    choose_move,
    count_pieces,
    get_all_valid_moves,
    get_ai_depth,
    get_jump_moves,
    get_winner,
    initialize_board,
    initialize_game,
    make_move,
    play_move,
)

BLACK = Piece(PieceColor.BLACK)
RED = Piece(PieceColor.RED)


def board_with(pieces: dict) -> tuple:
    return grid.update_cells(grid.filled_grid(8, 8, None), pieces)


def test_initial_setup() -> None:
    """Test twelve pieces a side on dark squares, red to move."""
    board = initialize_board()
    assert count_pieces(board, PieceColor.BLACK) == 12
    assert count_pieces(board, PieceColor.RED) == 12
    assert all((r + c) % 2 == 1 for r, c, p in grid.iter_cells(board) if p is not None)
    state = initialize_game()
    assert state.current_player is PieceColor.RED
    assert len(get_all_valid_moves(board, PieceColor.RED)) == 7


def test_men_move_forward_only() -> None:
    """Test a red man only moves up the board."""
    board = board_with({(4, 3): RED})
    ends = {m.end for m in get_all_valid_moves(board, PieceColor.RED)}
    assert ends == {(3, 2), (3, 4)}


def test_capture_is_mandatory() -> None:
    """Test simple moves disappear when a jump is available."""
    board = board_with({(5, 2): RED, (4, 3): BLACK, (5, 6): RED})
    moves = get_all_valid_moves(board, PieceColor.RED)
    assert moves == [Move((5, 2), (3, 4), ((4, 3),), ((3, 4),))]


def test_multi_jump_returns_only_full_chain() -> None:
    """Test a double jump is offered as one complete move."""
    board = board_with({(6, 1): RED, (5, 2): BLACK, (3, 4): BLACK})
    jumps = get_jump_moves(board, 6, 1)
    assert len(jumps) == 1
    assert jumps[0].end == (2, 5)
    assert set(jumps[0].captures) == {(5, 2), (3, 4)}
    after = make_move(board, jumps[0])
    assert count_pieces(after, PieceColor.BLACK) == 0


def test_crowning_ends_the_chain() -> None:
    """Test a man reaching the king row stops jumping and is crowned."""
    board = board_with({(2, 1): RED, (1, 2): BLACK, (1, 4): BLACK})
    jumps = get_jump_moves(board, 2, 1)
    assert [j.end for j in jumps] == [(0, 3)]
    after = make_move(board, jumps[0])
    assert after[0][3] == Piece(PieceColor.RED, is_king=True)
    assert after[1][4] == BLACK


def test_king_moves_backwards() -> None:
    """Test kings use all four diagonals."""
    board = board_with({(4, 3): Piece(PieceColor.RED, is_king=True)})
    ends = {m.end for m in get_all_valid_moves(board, PieceColor.RED)}
    assert ends == {(3, 2), (3, 4), (5, 2), (5, 4)}


def test_play_move_by_endpoints_and_illegal() -> None:
    """Test moves are matched by start and end, others ignored."""
    state = initialize_game()
    assert play_move(state, Move((5, 0), (3, 2))) is state
    after = play_move(state, Move((5, 0), (4, 1)))
    assert after.current_player is PieceColor.BLACK
    assert after.board[4][1] == RED
    assert after.move_count == 1


def test_capturing_last_piece_wins() -> None:
    """Test the side left without pieces loses."""
    board = board_with({(5, 2): RED, (4, 3): BLACK})
    state = initialize_game().copy_with(board=board)
    after = play_move(state, Move((5, 2), (3, 4)))
    assert after.winner is PieceColor.RED
    assert play_move(after, Move((3, 4), (2, 3))) is after


def test_blocked_side_loses() -> None:
    """Test a side with pieces but no move loses on its turn."""
    board = board_with({(0, 1): RED, (7, 0): BLACK, (1, 0): BLACK, (1, 2): BLACK, (2, 3): BLACK})
    assert get_winner(board, PieceColor.RED) is PieceColor.BLACK


def test_ai_moves_are_legal() -> None:
    """Test each difficulty returns a legal move."""
    assert [get_ai_depth(d) for d in ("easy", "medium", "hard")] == [2, 4, 6]
    state = initialize_game()
    legal = get_all_valid_moves(state.board, state.current_player)
    for difficulty in ("easy", "medium"):
        assert choose_move(state, difficulty, random.Random(3)) in legal


def test_search_returns_forced_capture() -> None:
    """Test the searching AI plays the mandatory capture."""
    board = board_with({(5, 2): RED, (4, 3): BLACK, (0, 7): BLACK})
    state = initialize_game().copy_with(board=board)
    move = choose_move(state, "medium")
    assert move.captures == ((4, 3),)
