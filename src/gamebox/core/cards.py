"""Immutable playing cards and deck operations."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Sequence


class Rank(Enum):
    """Playing card ranks."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"


class Suit(Enum):
    """Playing card suits."""

    HEARTS = "H"
    DIAMONDS = "D"
    CLUBS = "C"
    SPADES = "S"


class Color(Enum):
    RED = "red"
    BLACK = "black"


# Rank order depends on the game, so callers pick one of these explicitly.
ACE_LOW_VALUES = {rank: i + 1 for i, rank in enumerate(Rank)}
ACE_HIGH_VALUES = {**ACE_LOW_VALUES, Rank.ACE: 14}

SUIT_SYMBOLS = {"H": "♥", "D": "♦", "C": "♣", "S": "♠"}

_RED_SUITS = frozenset({Suit.HEARTS, Suit.DIAMONDS})
_FACE_RANKS = frozenset({Rank.JACK, Rank.QUEEN, Rank.KING})


@dataclass(frozen=True)
class Card:
    """Immutable playing card.

    deck_index tells apart otherwise identical cards from a multi-deck shoe.
    """

    rank: Rank
    suit: Suit
    deck_index: int = 0
    face_up: bool = False

    @property
    def id(self) -> str:
        base = f"{self.rank.value}-{self.suit.value}"
        return base if self.deck_index == 0 else f"{base}-{self.deck_index}"

    def with_face(self, face_up: bool) -> "Card":
        """Return this card turned face up or face down."""
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    def __str__(self) -> str:
        return f"{self.rank.value}{self.suit.value}"


def create_deck(deck_index: int = 0) -> tuple[Card, ...]:
    """Create an unshuffled 52-card deck, suit-major then rank order."""
    return tuple(
        Card(rank=rank, suit=suit, deck_index=deck_index)
        for suit in Suit
        for rank in Rank
    )


def create_multiple_decks(count: int) -> tuple[Card, ...]:
    """Concatenate count decks whose cards all carry distinct ids.

    Raises:
        ValueError: If count is less than one.
    """
    if count < 1:
        raise ValueError(f"Deck count must be at least 1, got {count}")
    cards: list[Card] = []
    for i in range(count):
        cards.extend(create_deck(deck_index=i))
    return tuple(cards)


def shuffle_deck(deck: Sequence[Card], rng: Optional[random.Random] = None) -> tuple[Card, ...]:
    """Return a uniformly shuffled copy of deck."""
    cards = list(deck)
    (rng or random.Random()).shuffle(cards)
    return tuple(cards)


def deal_cards(deck: Sequence[Card], count: int) -> tuple[tuple[Card, ...], tuple[Card, ...]]:
    """Split off the first count cards, returning (dealt, remaining)."""
    if count < 0:
        raise ValueError(f"Cannot deal a negative number of cards: {count}")
    cards = tuple(deck)
    return cards[:count], cards[count:]


def ace_high_value(rank: Rank) -> int:
    """2..10, J=11, Q=12, K=13, A=14."""
    return ACE_HIGH_VALUES[rank]


def ace_low_value(rank: Rank) -> int:
    """A=1, 2..10, J=11, Q=12, K=13."""
    return ACE_LOW_VALUES[rank]


def blackjack_value(card: Card, ace_as_eleven: bool = False) -> int:
    """Point value of a card in blackjack; face cards count 10."""
    if card.rank is Rank.ACE:
        return 11 if ace_as_eleven else 1
    if card.rank in _FACE_RANKS:
        return 10
    return ACE_LOW_VALUES[card.rank]


def suit_color(suit: Suit) -> Color:
    return Color.RED if suit in _RED_SUITS else Color.BLACK


def is_red(card: Card) -> bool:
    return card.suit in _RED_SUITS


def is_black(card: Card) -> bool:
    return card.suit not in _RED_SUITS


def sort_hand(cards: Iterable[Card], suit_order: Sequence[Suit]) -> tuple[Card, ...]:
    """Sort by the given suit order, then ace-high rank."""
    position = {suit: i for i, suit in enumerate(suit_order)}
    return tuple(
        sorted(cards, key=lambda c: (position[c.suit], ACE_HIGH_VALUES[c.rank]))
    )


def format_card(card: Card) -> str:
    """Format card with unicode suit symbol."""
    suit_symbol = SUIT_SYMBOLS.get(card.suit.value, card.suit.value)
    return f"{card.rank.value}{suit_symbol}"
