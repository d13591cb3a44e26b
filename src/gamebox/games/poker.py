"""Texas Hold'em for one human and three computer players.

Betting is simplified to fold, call and fixed raises. There are no side
pots: an all-in player who wins takes the whole pot.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, replace
from enum import Enum
from itertools import combinations
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.cards import Card, ace_high_value, create_deck, shuffle_deck
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

NUM_PLAYERS = 4
SMALL_BLIND = 5
BIG_BLIND = 10
DEFAULT_RAISE = 20
STARTING_CHIPS = 1000
PLAYER_NAMES = ("You", "Alice", "Bob", "Charlie")

AI_THRESHOLD = {Difficulty.EASY: 0.3, Difficulty.MEDIUM: 0.5, Difficulty.HARD: 0.7}


class HandRank(Enum):
    HIGH_CARD = 1
    ONE_PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10


_DESCRIPTIONS = {
    HandRank.HIGH_CARD: "High Card",
    HandRank.ONE_PAIR: "One Pair",
    HandRank.TWO_PAIR: "Two Pair",
    HandRank.THREE_OF_A_KIND: "Three of a Kind",
    HandRank.STRAIGHT: "Straight",
    HandRank.FLUSH: "Flush",
    HandRank.FULL_HOUSE: "Full House",
    HandRank.FOUR_OF_A_KIND: "Four of a Kind",
    HandRank.STRAIGHT_FLUSH: "Straight Flush",
    HandRank.ROYAL_FLUSH: "Royal Flush",
}


class PokerPhase(Enum):
    PRE_FLOP = "pre_flop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"
    FINISHED = "finished"


_NEXT_PHASE = {
    PokerPhase.PRE_FLOP: (PokerPhase.FLOP, 3),
    PokerPhase.FLOP: (PokerPhase.TURN, 1),
    PokerPhase.TURN: (PokerPhase.RIVER, 1),
    PokerPhase.RIVER: (PokerPhase.SHOWDOWN, 0),
}


class PokerAction(Enum):
    FOLD = "fold"
    CALL = "call"
    RAISE = "raise"


@dataclass(frozen=True)
class PokerHand:
    """Comparable hand strength: rank first, then the tiebreak values."""

    rank_value: int
    tiebreak: tuple[int, ...]
    cards: tuple[Card, ...] = ()
    rank: HandRank = HandRank.HIGH_CARD

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self.rank]


@dataclass(frozen=True)
class PokerPlayer:
    id: int
    name: str
    hole_cards: tuple[Card, ...] = ()
    tokens: int = STARTING_CHIPS
    current_bet: int = 0
    folded: bool = False
    is_human: bool = False

    @property
    def is_all_in(self) -> bool:
        return self.tokens == 0 and not self.folded

    def copy_with(self, **changes) -> "PokerPlayer":  # type: ignore
        """Create new PokerPlayer with changes."""
        return replace(self, **changes)


@dataclass(frozen=True)
class PokerState:
    players: tuple[PokerPlayer, ...]
    deck: tuple[Card, ...] = ()
    community_cards: tuple[Card, ...] = ()
    pot: int = 0
    current_bet: int = 0
    phase: PokerPhase = PokerPhase.PRE_FLOP
    current_player: int = 0
    dealer_index: int = 0
    to_act: tuple[int, ...] = ()
    winners: tuple[int, ...] = ()
    winning_hand: Optional[PokerHand] = None
    round_number: int = 0

    @property
    def active_players(self) -> list[PokerPlayer]:
        return [p for p in self.players if not p.folded]

    def copy_with(self, **changes) -> "PokerState":  # type: ignore
        """Create new PokerState with changes."""
        return replace(self, **changes)


def _straight_high(values: Sequence[int]) -> Optional[int]:
    distinct = sorted(set(values), reverse=True)
    if len(distinct) != 5:
        return None
    if distinct[0] - distinct[4] == 4:
        return distinct[0]
    # The wheel: A-2-3-4-5 plays as five-high.
    if distinct == [14, 5, 4, 3, 2]:
        return 5
    return None


def _rank_five(cards: Sequence[Card]) -> PokerHand:
    values = [ace_high_value(c.rank) for c in cards]
    counts = Counter(values)
    # Group by count then value so pairs outrank kickers.
    grouped = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    ordered = tuple(v for v, _ in grouped)
    shape = sorted(counts.values(), reverse=True)

    flush = len({c.suit for c in cards}) == 1
    straight_high = _straight_high(values)

    if flush and straight_high is not None:
        rank = HandRank.ROYAL_FLUSH if straight_high == 14 else HandRank.STRAIGHT_FLUSH
        tiebreak: tuple[int, ...] = (straight_high,)
    elif shape == [4, 1]:
        rank, tiebreak = HandRank.FOUR_OF_A_KIND, ordered
    elif shape == [3, 2]:
        rank, tiebreak = HandRank.FULL_HOUSE, ordered
    elif flush:
        rank, tiebreak = HandRank.FLUSH, tuple(sorted(values, reverse=True))
    elif straight_high is not None:
        rank, tiebreak = HandRank.STRAIGHT, (straight_high,)
    elif shape == [3, 1, 1]:
        rank, tiebreak = HandRank.THREE_OF_A_KIND, ordered
    elif shape == [2, 2, 1]:
        rank, tiebreak = HandRank.TWO_PAIR, ordered
    elif shape == [2, 1, 1, 1]:
        rank, tiebreak = HandRank.ONE_PAIR, ordered
    else:
        rank, tiebreak = HandRank.HIGH_CARD, tuple(sorted(values, reverse=True))

    return PokerHand(rank_value=rank.value, tiebreak=tiebreak, cards=tuple(cards), rank=rank)


def evaluate_hand(hole_cards: Sequence[Card], community_cards: Sequence[Card] = ()) -> PokerHand:
    """Best five-card hand from the hole and community cards.

    Raises:
        ValueError: If fewer than five cards are available.
    """
    cards = list(hole_cards) + list(community_cards)
    if len(cards) < 5:
        raise ValueError(f"Need at least five cards to evaluate, got {len(cards)}")
    best = None
    for five in combinations(cards, 5):
        hand = _rank_five(five)
        if best is None or (hand.rank_value, hand.tiebreak) > (best.rank_value, best.tiebreak):
            best = hand
    assert best is not None
    return best


def compare_hands(a: PokerHand, b: PokerHand) -> int:
    """Positive if a wins, negative if b wins, zero on a split."""
    key_a = (a.rank_value, a.tiebreak)
    key_b = (b.rank_value, b.tiebreak)
    return (key_a > key_b) - (key_a < key_b)


def initialize_poker_game(
    difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
    initial_chips: int = STARTING_CHIPS,
) -> PokerState:
    Difficulty.parse(difficulty)
    if initial_chips <= BIG_BLIND:
        raise ValueError(f"Initial chips must exceed the big blind, got {initial_chips}")
    players = tuple(
        PokerPlayer(id=i, name=name, tokens=initial_chips, is_human=(i == 0))
        for i, name in enumerate(PLAYER_NAMES)
    )
    # The first start_new_round moves the button onto seat 0.
    return PokerState(players=players, dealer_index=NUM_PLAYERS - 1)


def _seats_from(start: int, players: Sequence[PokerPlayer]) -> list[int]:
    """Seat indexes clockwise starting at start, skipping folded and all-in players."""
    order = [(start + i) % len(players) for i in range(len(players))]
    return [i for i in order if not players[i].folded and players[i].tokens > 0]


def _post(player: PokerPlayer, amount: int) -> tuple[PokerPlayer, int]:
    paid = min(amount, player.tokens)
    return player.copy_with(tokens=player.tokens - paid, current_bet=player.current_bet + paid), paid


def start_new_round(state: PokerState, rng: Optional[random.Random] = None) -> PokerState:
    """Move the button, post blinds and deal two hole cards to every seated player.

    Players without chips sit out the hand.
    """
    if state.round_number and state.phase is not PokerPhase.FINISHED:
        return state
    seated = [p.id for p in state.players if p.tokens > 0]
    if len(seated) < 2:
        return state

    deck = shuffle_deck(create_deck(), ensure_rng(rng))
    players = [
        p.copy_with(hole_cards=(), current_bet=0, folded=p.tokens == 0) for p in state.players
    ]
    dealer = _seats_from(state.dealer_index + 1, players)[0]
    small = _seats_from(dealer + 1, players)[0]
    big = _seats_from(small + 1, players)[0]

    pot = 0
    players[small], paid = _post(players[small], SMALL_BLIND)
    pot += paid
    players[big], paid = _post(players[big], BIG_BLIND)
    pot += paid

    for i in _seats_from(dealer + 1, players) + [
        p.id for p in players if not p.folded and p.tokens == 0
    ]:
        players[i] = players[i].copy_with(hole_cards=deck[:2])
        deck = deck[2:]

    to_act = tuple(_seats_from(big + 1, players))
    dealt = state.copy_with(
        players=tuple(players),
        deck=deck,
        community_cards=(),
        pot=pot,
        current_bet=max(p.current_bet for p in players),
        phase=PokerPhase.PRE_FLOP,
        current_player=to_act[0] if to_act else big,
        dealer_index=dealer,
        to_act=to_act,
        winners=(),
        winning_hand=None,
        round_number=state.round_number + 1,
    )
    if not to_act:
        return advance_phase(dealt)
    return dealt


def call_amount(state: PokerState, player_index: int) -> int:
    player = state.players[player_index]
    return min(state.current_bet - player.current_bet, player.tokens)


def player_action(
    state: PokerState, action: PokerAction, amount: int = DEFAULT_RAISE
) -> PokerState:
    """Act for the current player; out-of-turn or unaffordable actions are ignored."""
    if state.phase in (PokerPhase.SHOWDOWN, PokerPhase.FINISHED) or not state.to_act:
        return state
    index = state.current_player
    player = state.players[index]
    if player.folded or state.to_act[0] != index:
        return state

    players = list(state.players)
    pot = state.pot
    current_bet = state.current_bet
    remaining = [i for i in state.to_act if i != index]

    if action is PokerAction.FOLD:
        players[index] = player.copy_with(folded=True)
    elif action is PokerAction.CALL:
        players[index], paid = _post(player, current_bet - player.current_bet)
        pot += paid
    elif action is PokerAction.RAISE:
        needed = current_bet - player.current_bet + amount
        if amount <= 0 or needed > player.tokens:
            return state
        players[index], paid = _post(player, needed)
        pot += paid
        current_bet = players[index].current_bet
        # Everyone else still in the hand must respond to the raise.
        remaining = [i for i in _seats_from(index + 1, players) if i != index]
    else:
        return state

    acted = state.copy_with(players=tuple(players), pot=pot, current_bet=current_bet)
    if len(acted.active_players) == 1:
        return _award(acted, [acted.active_players[0].id], None)
    remaining = [i for i in remaining if not players[i].folded and players[i].tokens > 0]
    if not remaining:
        return advance_phase(acted)
    return acted.copy_with(to_act=tuple(remaining), current_player=remaining[0])


def advance_phase(state: PokerState) -> PokerState:
    """Deal the next street and open a fresh betting round, or go to showdown."""
    phase, count = _NEXT_PHASE.get(state.phase, (PokerPhase.SHOWDOWN, 0))
    players = tuple(p.copy_with(current_bet=0) for p in state.players)
    community = state.community_cards + state.deck[:count]
    advanced = state.copy_with(
        players=players,
        deck=state.deck[count:],
        community_cards=community,
        current_bet=0,
        phase=phase,
    )
    if phase is PokerPhase.SHOWDOWN:
        return determine_winners(advanced)

    to_act = _seats_from(state.dealer_index + 1, players)
    if len(to_act) < 2:
        # At most one player can still bet, so run out the board.
        return advance_phase(advanced.copy_with(to_act=()))
    return advanced.copy_with(to_act=tuple(to_act), current_player=to_act[0])


def _award(state: PokerState, winners: Sequence[int], hand: Optional[PokerHand]) -> PokerState:
    share, odd = divmod(state.pot, len(winners))
    players = list(state.players)
    for n, i in enumerate(sorted(winners)):
        bonus = share + (1 if n < odd else 0)
        players[i] = players[i].copy_with(tokens=players[i].tokens + bonus)
    logger.debug(f"Pot of {state.pot} to seats {list(winners)}")
    return state.copy_with(
        players=tuple(players),
        pot=0,
        phase=PokerPhase.FINISHED,
        to_act=(),
        winners=tuple(sorted(winners)),
        winning_hand=hand,
    )


def determine_winners(state: PokerState) -> PokerState:
    """Split the pot between the best hands among players who did not fold."""
    contenders = state.active_players
    if len(contenders) == 1:
        return _award(state, [contenders[0].id], None)
    hands = {p.id: evaluate_hand(p.hole_cards, state.community_cards) for p in contenders}
    best = max(hands.values(), key=lambda h: (h.rank_value, h.tiebreak))
    winners = [i for i, h in hands.items() if compare_hands(h, best) == 0]
    return _award(state, winners, best)


def hand_strength(state: PokerState, player_index: int) -> float:
    """Rough 0-1 strength from the made hand, or the hole cards before the flop."""
    player = state.players[player_index]
    cards = list(player.hole_cards) + list(state.community_cards)
    if len(cards) >= 5:
        return evaluate_hand(player.hole_cards, state.community_cards).rank_value / 10
    values = sorted((ace_high_value(c.rank) for c in player.hole_cards), reverse=True)
    if len(values) == 2 and values[0] == values[1]:
        return HandRank.ONE_PAIR.value / 10
    return HandRank.HIGH_CARD.value / 10 + (values[0] if values else 0) / 100


def get_ai_action(
    state: PokerState,
    player_index: int,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
) -> tuple[PokerAction, int]:
    """Fold weak hands facing a real bet, raise strong ones, otherwise call."""
    threshold = AI_THRESHOLD[Difficulty.parse(difficulty)]
    strength = hand_strength(state, player_index) + ensure_rng(rng).random() * 0.2
    to_call = call_amount(state, player_index)
    player = state.players[player_index]

    if strength < threshold - 0.2 and to_call > 2 * BIG_BLIND:
        return PokerAction.FOLD, 0
    if strength > threshold + 0.2 and player.tokens > to_call + DEFAULT_RAISE:
        return PokerAction.RAISE, DEFAULT_RAISE
    return PokerAction.CALL, 0


def total_chips(state: PokerState) -> int:
    return state.pot + sum(p.tokens for p in state.players)
