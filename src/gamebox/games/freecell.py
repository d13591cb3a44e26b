"""FreeCell solitaire: eight tableau columns, four free cells, four foundations."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence

from gamebox.core.cards import Card, Rank, Suit, ace_low_value, create_deck, is_red, shuffle_deck
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

TABLEAU_COLUMNS = 8
FREE_CELLS = 4
FOUNDATIONS = 4
FOUNDATION_SUITS = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)


class PileKind(Enum):
    TABLEAU = "tableau"
    FREE_CELL = "free_cell"
    FOUNDATION = "foundation"


@dataclass(frozen=True)
class PileRef:
    kind: PileKind
    index: int


@dataclass(frozen=True)
class FreeCellState:
    tableau: tuple[tuple[Card, ...], ...]
    foundations: tuple[tuple[Card, ...], ...] = ((),) * FOUNDATIONS
    free_cells: tuple[Optional[Card], ...] = (None,) * FREE_CELLS
    moves: int = 0

    def copy_with(self, **changes) -> "FreeCellState":  # type: ignore
        """Create new FreeCellState with changes."""
        return replace(self, **changes)


def initialize_freecell(rng: Optional[random.Random] = None) -> FreeCellState:
    """Deal all 52 cards face up round-robin across the eight columns."""
    deck = shuffle_deck(create_deck(), ensure_rng(rng))
    columns: list[list[Card]] = [[] for _ in range(TABLEAU_COLUMNS)]
    for i, card in enumerate(deck):
        columns[i % TABLEAU_COLUMNS].append(card.with_face(True))
    return FreeCellState(tableau=tuple(tuple(col) for col in columns))


def _rank(card: Card) -> int:
    return ace_low_value(card.rank)


def can_move_to_free_cell(state: FreeCellState) -> bool:
    return any(cell is None for cell in state.free_cells)


def foundation_index(card: Card) -> int:
    return FOUNDATION_SUITS.index(card.suit)


def can_move_to_foundation(card: Card, foundation: Sequence[Card]) -> bool:
    """Foundations build up by suit from the ace."""
    if not foundation:
        return card.rank is Rank.ACE
    top = foundation[-1]
    return top.suit is card.suit and _rank(card) == _rank(top) + 1


def can_move_to_tableau(card: Card, column: Sequence[Card]) -> bool:
    """Any card onto an empty column, otherwise one lower in the opposite colour."""
    if not column:
        return True
    top = column[-1]
    return is_red(card) != is_red(top) and _rank(card) == _rank(top) - 1


def is_valid_sequence(cards: Sequence[Card]) -> bool:
    """Alternating colours, each card one rank below the one above it."""
    return all(
        is_red(upper) != is_red(lower) and _rank(lower) == _rank(upper) - 1
        for upper, lower in zip(cards, cards[1:])
    )


def get_max_movable_cards(free_cells: int, empty_columns: int) -> int:
    """Supermove capacity: (1 + free cells) doubled for each empty column."""
    return (1 + free_cells) * (2 ** empty_columns)


def _empty_free_cells(state: FreeCellState) -> int:
    return sum(1 for cell in state.free_cells if cell is None)


def _empty_columns(state: FreeCellState, excluding: Optional[int] = None) -> int:
    return sum(1 for i, col in enumerate(state.tableau) if not col and i != excluding)


def _take(state: FreeCellState, source: PileRef, card_index: int) -> Optional[tuple[tuple[Card, ...], FreeCellState]]:
    """Lift cards off source, returning (cards, state without them)."""
    if source.kind is PileKind.TABLEAU:
        if not 0 <= source.index < TABLEAU_COLUMNS:
            return None
        column = state.tableau[source.index]
        if not 0 <= card_index < len(column):
            return None
        tableau = list(state.tableau)
        tableau[source.index] = column[:card_index]
        return column[card_index:], state.copy_with(tableau=tuple(tableau))
    if source.kind is PileKind.FREE_CELL:
        if not 0 <= source.index < FREE_CELLS:
            return None
        card = state.free_cells[source.index]
        if card is None:
            return None
        cells = list(state.free_cells)
        cells[source.index] = None
        return (card,), state.copy_with(free_cells=tuple(cells))
    # Foundations are final.
    return None


def try_move(
    state: FreeCellState, source: PileRef, card_index: int, target: PileRef
) -> FreeCellState:
    """Move the cards from card_index down in source onto target.

    Illegal moves return the state unchanged. Legal ones are followed by
    automatic foundation moves.
    """
    if source == target:
        return state
    taken = _take(state, source, card_index)
    if taken is None:
        return state
    cards, lifted = taken

    if target.kind is PileKind.FREE_CELL:
        if len(cards) != 1 or not 0 <= target.index < FREE_CELLS:
            return state
        if state.free_cells[target.index] is not None:
            return state
        cells = list(lifted.free_cells)
        cells[target.index] = cards[0]
        moved = lifted.copy_with(free_cells=tuple(cells))

    elif target.kind is PileKind.FOUNDATION:
        if len(cards) != 1 or not 0 <= target.index < FOUNDATIONS:
            return state
        foundation = state.foundations[target.index]
        if FOUNDATION_SUITS[target.index] is not cards[0].suit:
            return state
        if not can_move_to_foundation(cards[0], foundation):
            return state
        foundations = list(lifted.foundations)
        foundations[target.index] = foundation + cards
        moved = lifted.copy_with(foundations=tuple(foundations))

    else:
        if not 0 <= target.index < TABLEAU_COLUMNS:
            return state
        column = state.tableau[target.index]
        if not is_valid_sequence(cards) or not can_move_to_tableau(cards[0], column):
            return state
        # Capacity is measured before the cards are lifted, and the
        # destination column does not count as free space.
        capacity = get_max_movable_cards(
            _empty_free_cells(state), _empty_columns(state, excluding=target.index)
        )
        if len(cards) > capacity:
            return state
        tableau = list(lifted.tableau)
        tableau[target.index] = column + cards
        moved = lifted.copy_with(tableau=tuple(tableau))

    return auto_move_to_foundation(moved.copy_with(moves=state.moves + 1))


def auto_move_to_foundation(state: FreeCellState) -> FreeCellState:
    """Repeatedly send exposed tableau and free-cell cards to their foundation."""
    changed = True
    while changed:
        changed = False
        for i, column in enumerate(state.tableau):
            if column and can_move_to_foundation(column[-1], state.foundations[foundation_index(column[-1])]):
                state = _to_foundation(state, column[-1], PileRef(PileKind.TABLEAU, i))
                changed = True
        for i, card in enumerate(state.free_cells):
            if card is not None and can_move_to_foundation(card, state.foundations[foundation_index(card)]):
                state = _to_foundation(state, card, PileRef(PileKind.FREE_CELL, i))
                changed = True
    return state


def _to_foundation(state: FreeCellState, card: Card, source: PileRef) -> FreeCellState:
    if source.kind is PileKind.TABLEAU:
        tableau = list(state.tableau)
        tableau[source.index] = tableau[source.index][:-1]
        state = state.copy_with(tableau=tuple(tableau))
    else:
        cells = list(state.free_cells)
        cells[source.index] = None
        state = state.copy_with(free_cells=tuple(cells))
    foundations = list(state.foundations)
    index = foundation_index(card)
    foundations[index] = foundations[index] + (card,)
    return state.copy_with(foundations=tuple(foundations))


def is_game_won(state: FreeCellState) -> bool:
    won = all(len(f) == 13 for f in state.foundations)
    if won:
        logger.debug(f"FreeCell solved in {state.moves} moves")
    return won


def card_count(state: FreeCellState) -> int:
    return (
        sum(len(col) for col in state.tableau)
        + sum(len(f) for f in state.foundations)
        + sum(1 for cell in state.free_cells if cell is not None)
    )
