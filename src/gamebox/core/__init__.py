"""Card and grid primitives shared by the game engines."""

from gamebox.core.cards import (
    Card,
    Color,
    Rank,
    Suit,
    create_deck,
    create_multiple_decks,
    deal_cards,
    shuffle_deck,
    ace_high_value,
    ace_low_value,
    blackjack_value,
    suit_color,
    format_card,
)
from gamebox.core.grid import Grid, make_grid, set_cell, neighbors
from gamebox.core.rng import ensure_rng

__all__ = [
    "Card",
    "Color",
    "Rank",
    "Suit",
    "create_deck",
    "create_multiple_decks",
    "deal_cards",
    "shuffle_deck",
    "ace_high_value",
    "ace_low_value",
    "blackjack_value",
    "suit_color",
    "format_card",
    "Grid",
    "make_grid",
    "set_cell",
    "neighbors",
    "ensure_rng",
]
