"""Blackjack against a rule-bound dealer, betting with tokens."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.cards import Card, Rank, blackjack_value, create_multiple_decks, shuffle_deck
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

BLACKJACK = 21
DEALER_STANDS_ON = 17
STARTING_TOKENS = 100
# Reshuffle the discards back in before a hand when the shoe drops below this.
RESHUFFLE_THRESHOLD = 15

DECK_COUNT = {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 6}
HITS_SOFT_17 = {Difficulty.EASY: False, Difficulty.MEDIUM: False, Difficulty.HARD: True}


class BlackjackPhase(Enum):
    BETTING = "betting"
    PLAYING = "playing"
    DEALER = "dealer"
    FINISHED = "finished"


class BlackjackResult(Enum):
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"
    BLACKJACK = "blackjack"


@dataclass(frozen=True)
class BlackjackHand:
    cards: tuple[Card, ...] = ()
    value: int = 0
    is_soft: bool = False
    is_bust: bool = False
    is_blackjack: bool = False


@dataclass(frozen=True)
class BlackjackState:
    deck: tuple[Card, ...]
    player_hand: BlackjackHand = BlackjackHand()
    dealer_hand: BlackjackHand = BlackjackHand()
    discard: tuple[Card, ...] = ()
    phase: BlackjackPhase = BlackjackPhase.BETTING
    bet: int = 0
    tokens: int = STARTING_TOKENS
    result: Optional[BlackjackResult] = None
    difficulty: Difficulty = Difficulty.MEDIUM

    def copy_with(self, **changes) -> "BlackjackState":  # type: ignore
        """Create new BlackjackState with changes."""
        return replace(self, **changes)


def calculate_hand_value(cards: Sequence[Card]) -> tuple[int, bool]:
    """Return (value, is_soft).

    Every ace counts 1, then one ace is promoted to 11 if that does not bust.
    """
    total = sum(blackjack_value(c) for c in cards)
    has_ace = any(c.rank is Rank.ACE for c in cards)
    if has_ace and total + 10 <= BLACKJACK:
        return total + 10, True
    return total, False


def evaluate_hand(cards: Sequence[Card]) -> BlackjackHand:
    value, soft = calculate_hand_value(cards)
    return BlackjackHand(
        cards=tuple(cards),
        value=value,
        is_soft=soft,
        is_bust=value > BLACKJACK,
        is_blackjack=len(cards) == 2 and value == BLACKJACK,
    )


def _new_shoe(difficulty: Difficulty, rng: random.Random) -> tuple[Card, ...]:
    return shuffle_deck(create_multiple_decks(DECK_COUNT[difficulty]), rng)


def initialize_blackjack_game(
    difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
    tokens: int = STARTING_TOKENS,
    rng: Optional[random.Random] = None,
) -> BlackjackState:
    difficulty = Difficulty.parse(difficulty)
    if tokens < 0:
        raise ValueError(f"Token balance cannot be negative, got {tokens}")
    return BlackjackState(
        deck=_new_shoe(difficulty, ensure_rng(rng)),
        tokens=tokens,
        difficulty=difficulty,
    )


def _face_up(cards: Sequence[Card]) -> tuple[Card, ...]:
    return tuple(c.with_face(True) for c in cards)


def reveal_hole_card(hand: BlackjackHand) -> BlackjackHand:
    return evaluate_hand(_face_up(hand.cards))


def _settle(state: BlackjackState, result: BlackjackResult) -> BlackjackState:
    """Pay out, turn the hole card over and finish.

    The stake was taken from tokens when the bet was placed.
    """
    if result is BlackjackResult.BLACKJACK:
        payout = state.bet + (state.bet * 3) // 2
    elif result is BlackjackResult.WIN:
        payout = state.bet * 2
    elif result is BlackjackResult.PUSH:
        payout = state.bet
    else:
        payout = 0
    logger.debug(f"Blackjack hand settled: {result.value}, bet {state.bet}, payout {payout}")
    return state.copy_with(
        dealer_hand=reveal_hole_card(state.dealer_hand),
        phase=BlackjackPhase.FINISHED,
        result=result,
        tokens=state.tokens + payout,
    )


def deal_initial_hand(state: BlackjackState, bet: int) -> BlackjackState:
    """Take the bet and deal player, dealer, player, dealer.

    The dealer's second card is the hole card and stays face down. Naturals
    settle immediately. Bets that are not positive or exceed the token
    balance are rejected.
    """
    if state.phase is not BlackjackPhase.BETTING:
        return state
    if bet <= 0 or bet > state.tokens:
        return state

    deck = state.deck
    if len(deck) < 4:
        return state
    player_cards = _face_up((deck[0], deck[2]))
    dealer_cards = (deck[1].with_face(True), deck[3].with_face(False))
    player = evaluate_hand(player_cards)
    dealer = evaluate_hand(dealer_cards)

    dealt = state.copy_with(
        deck=deck[4:],
        player_hand=player,
        dealer_hand=dealer,
        phase=BlackjackPhase.PLAYING,
        bet=bet,
        tokens=state.tokens - bet,
        result=None,
    )
    if player.is_blackjack and dealer.is_blackjack:
        return _settle(dealt, BlackjackResult.PUSH)
    if player.is_blackjack:
        return _settle(dealt, BlackjackResult.BLACKJACK)
    if dealer.is_blackjack:
        return _settle(dealt, BlackjackResult.LOSS)
    return dealt


def player_hit(state: BlackjackState) -> BlackjackState:
    if state.phase is not BlackjackPhase.PLAYING or not state.deck:
        return state
    hand = evaluate_hand(state.player_hand.cards + (state.deck[0].with_face(True),))
    drawn = state.copy_with(deck=state.deck[1:], player_hand=hand)
    if hand.is_bust:
        return _settle(drawn, BlackjackResult.LOSS)
    return drawn


def player_stand(state: BlackjackState) -> BlackjackState:
    if state.phase is not BlackjackPhase.PLAYING:
        return state
    return state.copy_with(
        dealer_hand=reveal_hole_card(state.dealer_hand), phase=BlackjackPhase.DEALER
    )


def player_double(state: BlackjackState) -> BlackjackState:
    """Double the bet on the first two cards, take one card and stand."""
    if state.phase is not BlackjackPhase.PLAYING:
        return state
    if len(state.player_hand.cards) != 2 or state.tokens < state.bet or not state.deck:
        return state
    doubled = state.copy_with(tokens=state.tokens - state.bet, bet=state.bet * 2)
    hit = player_hit(doubled)
    if hit.phase is BlackjackPhase.FINISHED:
        return hit
    return player_stand(hit)


def dealer_should_hit(hand: BlackjackHand, difficulty: Difficulty) -> bool:
    if hand.value < DEALER_STANDS_ON:
        return True
    return hand.value == DEALER_STANDS_ON and hand.is_soft and HITS_SOFT_17[difficulty]


def dealer_play(state: BlackjackState) -> BlackjackState:
    """Draw for the dealer, then compare hands and settle."""
    if state.phase is not BlackjackPhase.DEALER:
        return state
    deck = state.deck
    dealer = state.dealer_hand
    while dealer_should_hit(dealer, state.difficulty) and deck:
        dealer = evaluate_hand(dealer.cards + (deck[0].with_face(True),))
        deck = deck[1:]

    finished = state.copy_with(deck=deck, dealer_hand=dealer)
    player_value = state.player_hand.value
    if dealer.is_bust or player_value > dealer.value:
        return _settle(finished, BlackjackResult.WIN)
    if player_value < dealer.value:
        return _settle(finished, BlackjackResult.LOSS)
    return _settle(finished, BlackjackResult.PUSH)


def new_round(state: BlackjackState, rng: Optional[random.Random] = None) -> BlackjackState:
    """Clear the table into the discards, reshuffling them in when the shoe runs low."""
    if state.phase is not BlackjackPhase.FINISHED:
        return state
    table = state.player_hand.cards + state.dealer_hand.cards
    discard = state.discard + tuple(c.with_face(False) for c in table)
    deck = state.deck
    if len(deck) < RESHUFFLE_THRESHOLD:
        logger.debug(f"Reshuffling {len(discard)} discards into a {len(deck)}-card shoe")
        deck = shuffle_deck(deck + discard, ensure_rng(rng))
        discard = ()
    return state.copy_with(
        deck=deck,
        discard=discard,
        player_hand=BlackjackHand(),
        dealer_hand=BlackjackHand(),
        phase=BlackjackPhase.BETTING,
        bet=0,
        result=None,
    )


def visible_dealer_cards(state: BlackjackState) -> tuple[Card, ...]:
    """The dealer's face-up cards; the hole card shows once the player stops acting."""
    return tuple(c for c in state.dealer_hand.cards if c.face_up)


def cards_in_play(state: BlackjackState) -> int:
    return (
        len(state.deck)
        + len(state.discard)
        + len(state.player_hand.cards)
        + len(state.dealer_hand.cards)
    )
