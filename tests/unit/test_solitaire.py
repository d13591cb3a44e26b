"""Tests for Klondike dealing, stock handling and moves."""

import random

from gamebox.core.cards import Card, Rank, Suit
from gamebox.games.solitaire import (
    PileKind,
    PileRef,
    SolitaireState,
    auto_move_to_foundation,
    can_move_to_tableau,
    card_count,
    draw_from_stock,
    get_solitaire_config,
    initialize_game,
    is_game_won,
    try_move,
)

WASTE = PileRef(PileKind.WASTE)


def up(token: str) -> Card:
    return Card(Rank(token[:-1]), Suit(token[-1]), face_up=True)


def down(token: str) -> Card:
    return Card(Rank(token[:-1]), Suit(token[-1]))


def pile(index: int) -> PileRef:
    return PileRef(PileKind.TABLEAU, index)


def table(*piles: tuple, **changes) -> SolitaireState:
    padded = tuple(piles) + ((),) * (7 - len(piles))
    return SolitaireState(stock=(), tableau=padded).copy_with(**changes)


def test_deal() -> None:
    """Test piles of one to seven with only the top card showing."""
    state = initialize_game(random.Random(1))
    assert [len(p) for p in state.tableau] == list(range(1, 8))
    assert all(p[-1].face_up and not any(c.face_up for c in p[:-1]) for p in state.tableau)
    assert len(state.stock) == 24
    assert card_count(state) == 52


def test_configs() -> None:
    """Test draw counts and pass limits per difficulty."""
    assert get_solitaire_config("easy").draw_count == 1
    assert get_solitaire_config("medium").draw_count == 3
    assert get_solitaire_config("hard").passes_allowed == 3
    assert get_solitaire_config("easy").passes_allowed is None


def test_draw_one_and_three() -> None:
    """Test cards turn face up onto the waste in draw-sized groups."""
    state = initialize_game(random.Random(2))
    one = draw_from_stock(state, "easy")
    assert len(one.waste) == 1 and one.waste[0].face_up
    three = draw_from_stock(state, "medium")
    assert three.waste == tuple(c.with_face(True) for c in state.stock[:3])
    assert len(three.stock) == 21


def test_recycle_and_pass_limit() -> None:
    """Test the waste turns back into the stock until the pass limit."""
    waste = (up("2C"), up("3D"), up("4S"))
    state = table(waste=waste)
    recycled = draw_from_stock(state, "hard")
    assert recycled.stock == (down("4S"), down("3D"), down("2C"))
    assert recycled.passes_used == 1
    assert draw_from_stock(state.copy_with(passes_used=1), "hard").passes_used == 2
    assert draw_from_stock(state.copy_with(passes_used=2), "hard").passes_used == 3
    limited = state.copy_with(passes_used=3)
    assert draw_from_stock(limited, "hard") is limited
    assert draw_from_stock(limited, "easy").passes_used == 4
    assert draw_from_stock(table(), "easy") == table()


def test_hard_allows_three_recycles() -> None:
    """Test hard mode recycles the waste exactly three times."""
    state = table(waste=(up("2C"),))
    recycles = 0
    while True:
        if not state.stock:
            recycled = draw_from_stock(state, "hard")
            if recycled is state:
                break
            recycles += 1
            state = recycled
        state = draw_from_stock(state, "hard")
    assert recycles == 3
    assert state.passes_used == 3


def test_only_kings_on_empty_piles() -> None:
    """Test empty piles accept kings only."""
    assert can_move_to_tableau(up("KH"), ())
    assert not can_move_to_tableau(up("QH"), ())
    assert can_move_to_tableau(up("QH"), (up("KS"),))
    assert not can_move_to_tableau(up("QH"), (down("KS"),))


def test_move_flips_exposed_card() -> None:
    """Test moving a run turns the newly exposed card face up."""
    state = table((down("3C"), up("8S"), up("7H")), (up("9D"),))
    moved = try_move(state, pile(0), 1, pile(1))
    assert moved.tableau[1] == (up("9D"), up("8S"), up("7H"))
    assert moved.tableau[0] == (up("3C"),)
    assert moved.moves == 1


def test_face_down_cards_cannot_move() -> None:
    """Test runs must start at a face-up card."""
    state = table((down("8S"), up("7H")), (up("9D"),))
    assert try_move(state, pile(0), 0, pile(1)) is state


def test_waste_and_foundation_moves() -> None:
    """Test the waste gives its top card and foundations build by suit."""
    state = table((up("KS"),), waste=(up("5C"), up("AH")))
    hearts = PileRef(PileKind.FOUNDATION, 0)
    assert try_move(state, WASTE, 0, PileRef(PileKind.FOUNDATION, 1)) is state
    placed = try_move(state, WASTE, 0, hearts)
    assert placed.foundations[0] == (up("AH"),)
    assert placed.waste == (up("5C"),)
    assert try_move(placed, WASTE, 0, hearts) is placed


def test_foundation_card_can_come_back() -> None:
    """Test the top foundation card may return to the tableau."""
    state = table((up("3S"),), foundations=((up("AH"), up("2H")), (), (), ()))
    back = try_move(state, PileRef(PileKind.FOUNDATION, 0), 0, pile(0))
    assert back.tableau[0] == (up("3S"), up("2H"))
    assert back.foundations[0] == (up("AH"),)


def test_auto_move() -> None:
    """Test playable tops cascade onto the foundations."""
    state = table((up("2H"),), (down("9C"), up("AH")), waste=(up("AS"),))
    moved = auto_move_to_foundation(state)
    assert moved.foundations[0] == (up("AH"), up("2H"))
    assert moved.foundations[3] == (up("AS"),)
    assert moved.tableau[1] == (up("9C"),)
    assert card_count(moved) == card_count(state)


def test_game_won() -> None:
    """Test four complete foundations win."""
    foundations = tuple(
        tuple(up(f"{rank.value}{suit.value}") for rank in Rank)
        for suit in (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)
    )
    assert is_game_won(table(foundations=foundations))
    assert not is_game_won(initialize_game(random.Random(3)))
