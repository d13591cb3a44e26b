"""Tests for the dominoes line, drawing, passing and AI play."""

import random

import pytest

from gamebox.games.dominoes import (
    DominoesState,
    DominoMove,
    DominoTile,
    PlacedTile,
    Side,
    board_ends,
    can_play_tile,
    create_double_six_set,
    draw_from_stock,
    get_ai_move,
    get_playable_moves,
    initialize_dominoes,
    pass_turn,
    play_tile,
    take_ai_turn,
)


def line_of(*tiles: tuple) -> tuple:
    return tuple(PlacedTile(DominoTile(a, b), a, b) for a, b in tiles)


def test_double_six_set() -> None:
    """Test the set holds 28 distinct tiles, seven of them doubles."""
    tiles = create_double_six_set()
    assert len(tiles) == 28
    assert len({t.id for t in tiles}) == 28
    assert sum(t.is_double for t in tiles) == 7


def test_deal() -> None:
    """Test seven tiles per seat with the rest left in the boneyard."""
    state = initialize_dominoes(random.Random(1), opponents=2)
    assert [len(h) for h in state.hands] == [7, 7, 7]
    assert len(state.stock) == 7
    assert state.current_player == 0
    with pytest.raises(ValueError):
        initialize_dominoes(random.Random(1), opponents=4)


def test_first_tile_goes_anywhere() -> None:
    """Test an empty line accepts any tile once, as written."""
    tile = DominoTile(3, 5)
    state = DominoesState(hands=((tile, DominoTile(0, 0)), (DominoTile(1, 1),)))
    assert can_play_tile(tile, ()) is Side.BOTH
    assert get_playable_moves(state) == [
        DominoMove(tile, Side.LEFT),
        DominoMove(DominoTile(0, 0), Side.LEFT),
    ]
    played = play_tile(state, tile)
    assert played.line == (PlacedTile(tile, 3, 5),)
    assert played.current_player == 1
    assert board_ends(played.line) == (3, 5)


def test_tiles_turn_to_match_the_end() -> None:
    """Test a joined tile is flipped so its matching pip faces the line."""
    state = DominoesState(
        hands=((DominoTile(5, 6), DominoTile(4, 4)), (DominoTile(1, 3), DominoTile(2, 2))),
        line=line_of((3, 5)),
    )
    state = play_tile(state, DominoTile(5, 6), Side.RIGHT)
    state = play_tile(state, DominoTile(1, 3), Side.LEFT)
    assert state.line == (
        PlacedTile(DominoTile(1, 3), 1, 3),
        PlacedTile(DominoTile(3, 5), 3, 5),
        PlacedTile(DominoTile(5, 6), 5, 6),
    )
    assert board_ends(state.line) == (1, 6)


def test_illegal_plays_leave_state_unchanged() -> None:
    """Test wrong ends, unmatched tiles, foreign tiles and Side.BOTH are refused."""
    state = DominoesState(
        hands=((DominoTile(5, 6), DominoTile(0, 1)), (DominoTile(3, 4),)),
        line=line_of((3, 5)),
    )
    assert play_tile(state, DominoTile(5, 6), Side.LEFT) is state
    assert play_tile(state, DominoTile(0, 1), Side.RIGHT) is state
    assert play_tile(state, DominoTile(3, 4), Side.LEFT) is state
    assert play_tile(state, DominoTile(5, 6), Side.BOTH) is state


def test_emptying_hand_wins() -> None:
    """Test playing the last tile ends the game for that seat."""
    state = DominoesState(
        hands=((DominoTile(5, 6),), (DominoTile(0, 0),)),
        line=line_of((3, 5)),
    )
    won = play_tile(state, DominoTile(5, 6), Side.RIGHT)
    assert won.game_over
    assert won.winner == 0
    assert play_tile(won, DominoTile(0, 0), Side.LEFT) is won


def test_draw_only_when_stuck() -> None:
    """Test drawing needs an unplayable hand and a non-empty boneyard."""
    playable = DominoesState(
        hands=((DominoTile(3, 0),), (DominoTile(1, 1),)),
        line=line_of((3, 5)),
        stock=(DominoTile(2, 2), DominoTile(4, 6)),
    )
    assert draw_from_stock(playable) is playable
    stuck = playable.copy_with(hands=((DominoTile(0, 0),), (DominoTile(1, 1),)))
    drawn = draw_from_stock(stuck)
    assert drawn.hands[0] == (DominoTile(0, 0), DominoTile(4, 6))
    assert drawn.stock == (DominoTile(2, 2),)
    assert drawn.current_player == 0
    assert pass_turn(stuck) is stuck


def test_blocked_game_goes_to_lightest_hand() -> None:
    """Test a full round of passes ends the game; equal pips favour the lower seat."""
    state = DominoesState(
        hands=((DominoTile(6, 6),), (DominoTile(0, 1),)),
        line=line_of((3, 3)),
    )
    state = pass_turn(state)
    assert not state.game_over
    assert state.current_player == 1
    state = pass_turn(state)
    assert state.game_over
    assert state.winner == 1

    tied = DominoesState(hands=((DominoTile(0, 2),), (DominoTile(1, 1),)), line=line_of((3, 3)))
    tied = pass_turn(pass_turn(tied))
    assert tied.winner == 0


def test_ai_move_choice() -> None:
    """Test easy plays the first fit while harder levels shed the heaviest tile."""
    state = DominoesState(
        hands=((DominoTile(0, 3), DominoTile(5, 6), DominoTile(6, 6)), ()),
        line=line_of((3, 6)),
    )
    assert get_ai_move(state, "easy") == DominoMove(DominoTile(0, 3), Side.LEFT)
    assert get_ai_move(state, "hard") == DominoMove(DominoTile(6, 6), Side.RIGHT)
    both = state.copy_with(hands=((DominoTile(3, 6),), ()))
    assert get_ai_move(both, "easy") == DominoMove(DominoTile(3, 6), Side.RIGHT)
    assert get_ai_move(state.copy_with(hands=((DominoTile(1, 1),), ())), "hard") is None


@pytest.mark.parametrize("difficulty", ["easy", "hard"])
def test_ai_games_finish_without_losing_tiles(difficulty: str) -> None:
    """Test all-AI games end and every tile stays in a hand, the line or the boneyard."""
    for seed in range(5):
        state = initialize_dominoes(random.Random(seed), opponents=3)
        for _ in range(500):
            if state.game_over:
                break
            state = take_ai_turn(state, difficulty)
        assert state.game_over
        assert state.winner is not None
        tiles = [t for h in state.hands for t in h] + [p.tile for p in state.line] + list(state.stock)
        assert sorted(t.id for t in tiles) == sorted(t.id for t in create_double_six_set())
