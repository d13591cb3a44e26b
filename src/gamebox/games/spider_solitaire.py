"""Spider solitaire: 104 cards in one, two or four suits across ten columns."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.cards import Card, Rank, Suit, ace_low_value, shuffle_deck
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

TABLEAU_COLUMNS = 10
DECK_SIZE = 104
INITIAL_DEAL = 54
RUN_LENGTH = 13
RUNS_TO_WIN = DECK_SIZE // RUN_LENGTH

SPIDER_SUITS = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)
SUIT_COUNT = {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 4}


@dataclass(frozen=True)
class SpiderState:
    tableau: tuple[tuple[Card, ...], ...]
    stock: tuple[Card, ...] = ()
    suits: int = 1
    completed_runs: int = 0
    moves: int = 0

    def copy_with(self, **changes) -> "SpiderState":  # type: ignore
        """Create new SpiderState with changes."""
        return replace(self, **changes)


@dataclass(frozen=True)
class SpiderMove:
    source: int
    card_index: int
    target: int


def create_spider_deck(suit_count: int) -> tuple[Card, ...]:
    """104 cards drawn from the first suit_count suits, every copy with its own id.

    Raises:
        ValueError: If suit_count is not 1, 2 or 4.
    """
    if suit_count not in (1, 2, 4):
        raise ValueError(f"Spider uses 1, 2 or 4 suits, got {suit_count}")
    copies = DECK_SIZE // (RUN_LENGTH * suit_count)
    return tuple(
        Card(rank=rank, suit=suit, deck_index=copy)
        for copy in range(copies)
        for suit in SPIDER_SUITS[:suit_count]
        for rank in Rank
    )


def initialize_spider(
    difficulty: Union[Difficulty, str] = Difficulty.EASY,
    rng: Optional[random.Random] = None,
) -> SpiderState:
    """Deal 54 cards round-robin (four columns of six, six of five); the last ten face up."""
    suits = SUIT_COUNT[Difficulty.parse(difficulty)]
    deck = shuffle_deck(create_spider_deck(suits), ensure_rng(rng))
    columns: list[list[Card]] = [[] for _ in range(TABLEAU_COLUMNS)]
    for i, card in enumerate(deck[:INITIAL_DEAL]):
        columns[i % TABLEAU_COLUMNS].append(card.with_face(i >= INITIAL_DEAL - TABLEAU_COLUMNS))
    return SpiderState(
        tableau=tuple(tuple(col) for col in columns),
        stock=deck[INITIAL_DEAL:],
        suits=suits,
    )


def _rank(card: Card) -> int:
    return ace_low_value(card.rank)


def can_move_cards(cards: Sequence[Card]) -> bool:
    """A movable run is face up, one suit, each card one below the card above it."""
    if not cards or not all(c.face_up for c in cards):
        return False
    return all(
        upper.suit is lower.suit and _rank(lower) == _rank(upper) - 1
        for upper, lower in zip(cards, cards[1:])
    )


def can_place_on(card: Card, column: Sequence[Card]) -> bool:
    """Any card goes on an empty column, otherwise one rank lower of any suit."""
    if not column:
        return True
    return _rank(column[-1]) == _rank(card) + 1


def _flip_top(column: tuple[Card, ...]) -> tuple[Card, ...]:
    if column and not column[-1].face_up:
        return column[:-1] + (column[-1].with_face(True),)
    return column


def _is_complete_run(cards: Sequence[Card]) -> bool:
    return (
        len(cards) == RUN_LENGTH
        and cards[0].rank is Rank.KING
        and can_move_cards(cards)
    )


def collect_completed_runs(state: SpiderState) -> SpiderState:
    """Lift every king-to-ace run of one suit off the bottom of its column."""
    tableau = []
    collected = 0
    for column in state.tableau:
        if _is_complete_run(column[-RUN_LENGTH:]):
            column = _flip_top(column[:-RUN_LENGTH])
            collected += 1
        tableau.append(column)
    if not collected:
        return state
    logger.debug(f"Collected {collected} run(s), {state.completed_runs + collected} total")
    return state.copy_with(tableau=tuple(tableau), completed_runs=state.completed_runs + collected)


def move_cards(state: SpiderState, source: int, card_index: int, target: int) -> SpiderState:
    """Move the run starting at card_index from source onto target.

    Illegal moves leave the state unchanged.
    """
    if source == target or not (
        0 <= source < TABLEAU_COLUMNS and 0 <= target < TABLEAU_COLUMNS
    ):
        return state
    column = state.tableau[source]
    if not 0 <= card_index < len(column):
        return state
    moving = column[card_index:]
    if not can_move_cards(moving) or not can_place_on(moving[0], state.tableau[target]):
        return state

    tableau = list(state.tableau)
    tableau[source] = _flip_top(column[:card_index])
    tableau[target] = state.tableau[target] + moving
    moved = state.copy_with(tableau=tuple(tableau), moves=state.moves + 1)
    return collect_completed_runs(moved)


def deal_from_stock(state: SpiderState) -> SpiderState:
    """Deal one face-up card from the stock onto every column."""
    if len(state.stock) < TABLEAU_COLUMNS:
        return state
    dealt = state.stock[-TABLEAU_COLUMNS:]
    tableau = tuple(
        column + (dealt[-1 - i].with_face(True),)
        for i, column in enumerate(state.tableau)
    )
    return collect_completed_runs(
        state.copy_with(
            tableau=tableau,
            stock=state.stock[:-TABLEAU_COLUMNS],
            moves=state.moves + 1,
        )
    )


def get_valid_moves(state: SpiderState) -> list[SpiderMove]:
    """Every legal run move, for hints."""
    moves = []
    for source, column in enumerate(state.tableau):
        for card_index in range(len(column)):
            moving = column[card_index:]
            if not can_move_cards(moving):
                continue
            for target in range(TABLEAU_COLUMNS):
                if target != source and can_place_on(moving[0], state.tableau[target]):
                    moves.append(SpiderMove(source, card_index, target))
    return moves


def is_game_won(state: SpiderState) -> bool:
    return state.completed_runs == RUNS_TO_WIN


def cards_in_play(state: SpiderState) -> int:
    return (
        sum(len(column) for column in state.tableau)
        + len(state.stock)
        + state.completed_runs * RUN_LENGTH
    )
