"""Tests for 2048 sliding rules."""

import random

from gamebox.games.game2048 import (
    Direction,
    Game2048State,
    add_random_tile,
    apply_swipe,
    has_won,
    init_board,
    is_game_over,
    swipe,
)


def test_init_board_has_two_tiles() -> None:
    """Test a new board starts with two twos on easy."""
    board = init_board("easy", random.Random(1))
    tiles = [v for row in board for v in row if v]
    assert tiles == [2, 2]


def test_swipe_left_merges_once() -> None:
    """Test a pair merges but the result does not merge again."""
    board = ((2, 2, 4, 0), (0, 0, 0, 0), (0, 0, 0, 0), (0, 0, 0, 0))
    result = swipe(board, Direction.LEFT)
    assert result.board[0] == (4, 4, 0, 0)
    assert result.score == 4
    assert result.moved


def test_swipe_four_equal_tiles() -> None:
    """Test four equal tiles make two merges."""
    board = ((2, 2, 2, 2),) + ((0, 0, 0, 0),) * 3
    assert swipe(board, Direction.RIGHT).board[0] == (0, 0, 4, 4)


def test_swipe_vertical() -> None:
    """Test up and down swipes act on columns."""
    board = ((2, 0, 0, 0), (2, 0, 0, 0), (0, 0, 0, 0), (4, 0, 0, 0))
    up = swipe(board, Direction.UP).board
    assert [row[0] for row in up] == [4, 4, 0, 0]
    down = swipe(board, Direction.DOWN).board
    assert [row[0] for row in down] == [0, 0, 4, 4]


def test_swipe_that_moves_nothing() -> None:
    """Test a blocked swipe reports no movement."""
    board = ((2, 4, 0, 0),) + ((0, 0, 0, 0),) * 3
    result = swipe(board, Direction.LEFT)
    assert not result.moved
    assert result.board == board


def test_game_over_and_win() -> None:
    """Test terminal detection."""
    stuck = ((2, 4, 2, 4), (4, 2, 4, 2), (2, 4, 2, 4), (4, 2, 4, 2))
    assert is_game_over(stuck)
    assert not is_game_over(((2, 2, 4, 8),) + stuck[1:])
    assert has_won(((2048, 0, 0, 0),) + stuck[1:])
    assert not has_won(stuck)


def test_add_random_tile_on_full_board() -> None:
    """Test a full board is unchanged."""
    full = ((2, 4, 2, 4),) * 4
    assert add_random_tile(full, "hard", random.Random(0)) is full


def test_apply_swipe_spawns_only_after_move() -> None:
    """Test a tile appears only when the swipe changed the board."""
    board = ((2, 0, 0, 0),) + ((0, 0, 0, 0),) * 3
    state = Game2048State(board=board)
    assert apply_swipe(state, Direction.LEFT, "easy", random.Random(0)) is state
    moved = apply_swipe(state, Direction.RIGHT, "easy", random.Random(0))
    assert moved.board[0][3] == 2
    assert sum(1 for row in moved.board for v in row if v) == 2
