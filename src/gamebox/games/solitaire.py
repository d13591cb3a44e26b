"""Klondike solitaire with draw-one or draw-three stock handling."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.cards import Card, Rank, Suit, ace_low_value, create_deck, is_red, shuffle_deck
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

TABLEAU_PILES = 7
FOUNDATION_SUITS = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)


@dataclass(frozen=True)
class SolitaireConfig:
    draw_count: int
    # None means the waste can be recycled any number of times.
    passes_allowed: Optional[int]


SOLITAIRE_CONFIGS = {
    Difficulty.EASY: SolitaireConfig(draw_count=1, passes_allowed=None),
    Difficulty.MEDIUM: SolitaireConfig(draw_count=3, passes_allowed=None),
    Difficulty.HARD: SolitaireConfig(draw_count=3, passes_allowed=3),
}


class PileKind(Enum):
    WASTE = "waste"
    TABLEAU = "tableau"
    FOUNDATION = "foundation"


@dataclass(frozen=True)
class PileRef:
    kind: PileKind
    index: int = 0


@dataclass(frozen=True)
class SolitaireState:
    stock: tuple[Card, ...]
    tableau: tuple[tuple[Card, ...], ...]
    waste: tuple[Card, ...] = ()
    foundations: tuple[tuple[Card, ...], ...] = ((),) * 4
    passes_used: int = 0
    moves: int = 0

    def copy_with(self, **changes) -> "SolitaireState":  # type: ignore
        """Create new SolitaireState with changes."""
        return replace(self, **changes)


def get_solitaire_config(difficulty: Union[Difficulty, str]) -> SolitaireConfig:
    return SOLITAIRE_CONFIGS[Difficulty.parse(difficulty)]


def initialize_game(rng: Optional[random.Random] = None) -> SolitaireState:
    """Deal piles of 1..7 cards with only the top card face up; the rest is stock."""
    deck = shuffle_deck(create_deck(), ensure_rng(rng))
    piles = []
    pos = 0
    for size in range(1, TABLEAU_PILES + 1):
        pile = deck[pos:pos + size]
        pos += size
        piles.append(pile[:-1] + (pile[-1].with_face(True),))
    return SolitaireState(stock=deck[pos:], tableau=tuple(piles))


def _rank(card: Card) -> int:
    return ace_low_value(card.rank)


def draw_from_stock(state: SolitaireState, difficulty: Union[Difficulty, str]) -> SolitaireState:
    """Turn draw_count cards onto the waste, or recycle the waste when the stock is empty.

    Each recycle counts against passes_allowed; once that many recycles are
    used the stock stays empty.
    """
    config = get_solitaire_config(difficulty)
    if state.stock:
        drawn = state.stock[:config.draw_count]
        return state.copy_with(
            stock=state.stock[config.draw_count:],
            waste=state.waste + tuple(c.with_face(True) for c in drawn),
            moves=state.moves + 1,
        )
    if not state.waste:
        return state
    if config.passes_allowed is not None and state.passes_used >= config.passes_allowed:
        return state
    logger.debug(f"Recycling waste, recycle {state.passes_used + 1}")
    return state.copy_with(
        stock=tuple(c.with_face(False) for c in reversed(state.waste)),
        waste=(),
        passes_used=state.passes_used + 1,
        moves=state.moves + 1,
    )


def can_move_to_foundation(card: Card, foundation: Sequence[Card]) -> bool:
    if not foundation:
        return card.rank is Rank.ACE
    top = foundation[-1]
    return top.suit is card.suit and _rank(card) == _rank(top) + 1


def can_move_to_tableau(card: Card, pile: Sequence[Card]) -> bool:
    """Only a king starts an empty pile; otherwise one lower in the opposite colour."""
    if not pile:
        return card.rank is Rank.KING
    top = pile[-1]
    return top.face_up and is_red(card) != is_red(top) and _rank(card) == _rank(top) - 1


def _is_movable_run(cards: Sequence[Card]) -> bool:
    return all(c.face_up for c in cards) and all(
        is_red(upper) != is_red(lower) and _rank(lower) == _rank(upper) - 1
        for upper, lower in zip(cards, cards[1:])
    )


def _flip_top(pile: tuple[Card, ...]) -> tuple[Card, ...]:
    if pile and not pile[-1].face_up:
        return pile[:-1] + (pile[-1].with_face(True),)
    return pile


def try_move(
    state: SolitaireState, source: PileRef, card_index: int, target: PileRef
) -> SolitaireState:
    """Move cards from source (starting at card_index) onto target.

    The waste only gives its top card; foundations only take single cards.
    Exposed face-down tableau cards are turned up. Illegal moves return the
    state unchanged.
    """
    if source == target:
        return state

    if source.kind is PileKind.WASTE:
        if not state.waste:
            return state
        cards: tuple[Card, ...] = state.waste[-1:]
        lifted = state.copy_with(waste=state.waste[:-1])
    elif source.kind is PileKind.TABLEAU:
        if not 0 <= source.index < TABLEAU_PILES:
            return state
        pile = state.tableau[source.index]
        if not 0 <= card_index < len(pile):
            return state
        cards = pile[card_index:]
        if not _is_movable_run(cards):
            return state
        tableau = list(state.tableau)
        tableau[source.index] = pile[:card_index]
        lifted = state.copy_with(tableau=tuple(tableau))
    elif source.kind is PileKind.FOUNDATION:
        if not 0 <= source.index < len(FOUNDATION_SUITS) or not state.foundations[source.index]:
            return state
        cards = state.foundations[source.index][-1:]
        foundations = list(state.foundations)
        foundations[source.index] = foundations[source.index][:-1]
        lifted = state.copy_with(foundations=tuple(foundations))
    else:
        return state

    if target.kind is PileKind.FOUNDATION:
        if len(cards) != 1 or not 0 <= target.index < len(FOUNDATION_SUITS):
            return state
        foundation = state.foundations[target.index]
        if FOUNDATION_SUITS[target.index] is not cards[0].suit:
            return state
        if not can_move_to_foundation(cards[0], foundation):
            return state
        foundations = list(lifted.foundations)
        foundations[target.index] = foundation + cards
        moved = lifted.copy_with(foundations=tuple(foundations))
    elif target.kind is PileKind.TABLEAU:
        if not 0 <= target.index < TABLEAU_PILES:
            return state
        pile = state.tableau[target.index]
        if not can_move_to_tableau(cards[0], pile):
            return state
        tableau = list(lifted.tableau)
        tableau[target.index] = pile + cards
        moved = lifted.copy_with(tableau=tuple(tableau))
    else:
        return state

    tableau = tuple(_flip_top(p) for p in moved.tableau)
    return moved.copy_with(tableau=tableau, moves=state.moves + 1)


def auto_move_to_foundation(state: SolitaireState) -> SolitaireState:
    """Send every playable waste or tableau top card to its foundation."""
    changed = True
    while changed:
        changed = False
        sources = [PileRef(PileKind.WASTE)] + [
            PileRef(PileKind.TABLEAU, i) for i in range(TABLEAU_PILES)
        ]
        for source in sources:
            pile = state.waste if source.kind is PileKind.WASTE else state.tableau[source.index]
            if not pile:
                continue
            target = PileRef(PileKind.FOUNDATION, FOUNDATION_SUITS.index(pile[-1].suit))
            moved = try_move(state, source, len(pile) - 1, target)
            if moved is not state:
                state = moved
                changed = True
    return state


def is_game_won(state: SolitaireState) -> bool:
    return all(len(f) == 13 for f in state.foundations)


def card_count(state: SolitaireState) -> int:
    return (
        len(state.stock)
        + len(state.waste)
        + sum(len(p) for p in state.tableau)
        + sum(len(f) for f in state.foundations)
    )
