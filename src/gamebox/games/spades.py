"""Four-player partnership Spades: bidding, trick play with spades trumps, team scoring.

Seats 0 and 2 (the human and their partner) form team 0; seats 1 and 3 form
team 1. Seat 0 bids first and leads the first trick of every round.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.cards import Card, Rank, Suit, ace_high_value, create_deck, shuffle_deck, sort_hand
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

NUM_PLAYERS = 4
TRICKS_PER_ROUND = 13
MAX_BID = 13
WINNING_SCORE = 250
BAG_LIMIT = 10
BAG_PENALTY = 100
PLAYER_NAMES = ("You", "Bob", "Partner", "Dave")

HAND_SUIT_ORDER = (Suit.CLUBS, Suit.DIAMONDS, Suit.HEARTS, Suit.SPADES)


class SpadesPhase(Enum):
    BIDDING = "bidding"
    PLAYING = "playing"
    ROUND_END = "round_end"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class SpadesPlayer:
    id: int
    name: str
    cards: tuple[Card, ...] = ()
    bid: Optional[int] = None
    tricks_won: int = 0
    is_human: bool = False

    @property
    def team(self) -> int:
        return self.id % 2

    def copy_with(self, **changes) -> "SpadesPlayer":  # type: ignore
        """Create new SpadesPlayer with changes."""
        return replace(self, **changes)


@dataclass(frozen=True)
class TrickCard:
    player_id: int
    card: Card


@dataclass(frozen=True)
class Trick:
    cards: tuple[TrickCard, ...] = ()
    lead_suit: Optional[Suit] = None
    winner: Optional[int] = None


@dataclass(frozen=True)
class SpadesState:
    players: tuple[SpadesPlayer, ...]
    phase: SpadesPhase = SpadesPhase.BIDDING
    current_trick: Trick = Trick()
    completed_tricks: tuple[Trick, ...] = ()
    current_player: int = 0
    spades_broken: bool = False
    round_number: int = 1
    team_scores: tuple[int, int] = (0, 0)
    team_bags: tuple[int, int] = (0, 0)
    difficulty: Difficulty = Difficulty.MEDIUM

    def copy_with(self, **changes) -> "SpadesState":  # type: ignore
        """Create new SpadesState with changes."""
        return replace(self, **changes)


def deal_cards(
    players: Sequence[SpadesPlayer], rng: Optional[random.Random] = None
) -> tuple[SpadesPlayer, ...]:
    """Deal 13 sorted cards to each player and clear bids and tricks."""
    deck = shuffle_deck(create_deck(), ensure_rng(rng))
    return tuple(
        player.copy_with(
            cards=sort_hand(deck[i::NUM_PLAYERS], HAND_SUIT_ORDER),
            bid=None,
            tricks_won=0,
        )
        for i, player in enumerate(players)
    )


def initialize_spades_game(
    difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
    rng: Optional[random.Random] = None,
) -> SpadesState:
    players = tuple(
        SpadesPlayer(id=i, name=name, is_human=(i == 0))
        for i, name in enumerate(PLAYER_NAMES)
    )
    return SpadesState(
        players=deal_cards(players, ensure_rng(rng)),
        difficulty=Difficulty.parse(difficulty),
    )


def place_bid(state: SpadesState, player_id: int, bid: int) -> SpadesState:
    """Record a bid of 0-13 tricks in seat order; play starts once all four have bid."""
    if state.phase is not SpadesPhase.BIDDING or player_id != state.current_player:
        return state
    if not 0 <= bid <= MAX_BID:
        return state
    players = list(state.players)
    players[player_id] = players[player_id].copy_with(bid=bid)
    if all(p.bid is not None for p in players):
        logger.debug(f"Round {state.round_number} bids: {[p.bid for p in players]}")
        return state.copy_with(players=tuple(players), phase=SpadesPhase.PLAYING, current_player=0)
    return state.copy_with(players=tuple(players), current_player=(player_id + 1) % NUM_PLAYERS)


def can_play_card(state: SpadesState, player_id: int, card: Card) -> bool:
    if state.phase is not SpadesPhase.PLAYING or player_id != state.current_player:
        return False
    hand = state.players[player_id].cards
    if card not in hand:
        return False

    trick = state.current_trick
    if not trick.cards:
        if card.suit is Suit.SPADES and not state.spades_broken:
            return all(c.suit is Suit.SPADES for c in hand)
        return True
    if card.suit is not trick.lead_suit:
        return not any(c.suit is trick.lead_suit for c in hand)
    return True


def get_legal_cards(state: SpadesState, player_id: int) -> list[Card]:
    return [c for c in state.players[player_id].cards if can_play_card(state, player_id, c)]


def _card_strength(card: Card, lead_suit: Optional[Suit]) -> int:
    """Spades beat everything, the led suit beats the rest, which never win."""
    if card.suit is Suit.SPADES:
        return 100 + ace_high_value(card.rank)
    if card.suit is lead_suit:
        return ace_high_value(card.rank)
    return 0


def evaluate_trick(trick: Trick) -> int:
    """Seat of the highest spade, or of the highest card in the led suit."""
    best = max(trick.cards, key=lambda tc: _card_strength(tc.card, trick.lead_suit))
    return best.player_id


def play_card(state: SpadesState, player_id: int, card: Card) -> SpadesState:
    """Play a card; completes the trick on the fourth card and the round on the last trick."""
    if not can_play_card(state, player_id, card):
        return state

    players = list(state.players)
    player = players[player_id]
    players[player_id] = player.copy_with(cards=tuple(c for c in player.cards if c != card))

    trick = Trick(
        cards=state.current_trick.cards + (TrickCard(player_id, card),),
        lead_suit=state.current_trick.lead_suit or card.suit,
    )
    spades_broken = state.spades_broken or card.suit is Suit.SPADES

    if len(trick.cards) < NUM_PLAYERS:
        return state.copy_with(
            players=tuple(players),
            current_trick=trick,
            current_player=(player_id + 1) % NUM_PLAYERS,
            spades_broken=spades_broken,
        )

    winner = evaluate_trick(trick)
    players[winner] = players[winner].copy_with(tricks_won=players[winner].tricks_won + 1)
    new_state = state.copy_with(
        players=tuple(players),
        current_trick=Trick(),
        completed_tricks=state.completed_tricks + (replace(trick, winner=winner),),
        current_player=winner,
        spades_broken=spades_broken,
    )
    if len(new_state.completed_tricks) == TRICKS_PER_ROUND:
        return end_round(new_state)
    return new_state


def team_totals(players: Sequence[SpadesPlayer]) -> tuple[tuple[int, int], tuple[int, int]]:
    """(bids, tricks) per team."""
    bids = [0, 0]
    tricks = [0, 0]
    for player in players:
        bids[player.team] += player.bid or 0
        tricks[player.team] += player.tricks_won
    return (bids[0], bids[1]), (tricks[0], tricks[1])


def score_team(bid: int, tricks: int, score: int, bags: int) -> tuple[int, int]:
    """Score one team's round, returning the new (score, bags).

    Making the bid earns ten a trick plus one per overtrick (a bag); every
    ten bags cost a hundred. Falling short loses ten a trick bid.
    """
    if tricks < bid:
        return score - bid * 10, bags
    overtricks = tricks - bid
    score += bid * 10 + overtricks
    bags += overtricks
    if bags >= BAG_LIMIT:
        score -= BAG_PENALTY
        bags -= BAG_LIMIT
    return score, bags


def end_round(state: SpadesState) -> SpadesState:
    bids, tricks = team_totals(state.players)
    results = [
        score_team(bids[t], tricks[t], state.team_scores[t], state.team_bags[t])
        for t in range(2)
    ]
    scores = (results[0][0], results[1][0])
    bags = (results[0][1], results[1][1])
    game_over = any(s >= WINNING_SCORE for s in scores)
    logger.debug(f"Round {state.round_number} ended, team scores {scores}, bags {bags}")
    return state.copy_with(
        team_scores=scores,
        team_bags=bags,
        phase=SpadesPhase.GAME_OVER if game_over else SpadesPhase.ROUND_END,
    )


def start_new_round(state: SpadesState, rng: Optional[random.Random] = None) -> SpadesState:
    if state.phase is not SpadesPhase.ROUND_END:
        return state
    return state.copy_with(
        players=deal_cards(state.players, ensure_rng(rng)),
        phase=SpadesPhase.BIDDING,
        current_trick=Trick(),
        completed_tricks=(),
        current_player=0,
        spades_broken=False,
        round_number=state.round_number + 1,
    )


def get_winning_teams(state: SpadesState) -> list[int]:
    if state.phase is not SpadesPhase.GAME_OVER:
        return []
    best = max(state.team_scores)
    return [t for t, score in enumerate(state.team_scores) if score == best]


def get_ai_bid(cards: Sequence[Card]) -> int:
    """One trick per side-suit ace or king, plus one per two spades; at least one."""
    high = sum(1 for c in cards if c.suit is not Suit.SPADES and c.rank in (Rank.ACE, Rank.KING))
    spades = sum(1 for c in cards if c.suit is Suit.SPADES)
    return max(1, min(MAX_BID, high + spades // 2))


def get_ai_card_to_play(
    state: SpadesState,
    player_id: int,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
) -> Optional[Card]:
    """Easy plays a random legal card.

    Otherwise lead low, let a winning partner keep the trick, win as cheaply
    as possible, and throw the lowest card when the trick cannot be won.
    """
    legal = get_legal_cards(state, player_id)
    if not legal:
        return None
    if Difficulty.parse(difficulty) is Difficulty.EASY:
        return ensure_rng(rng).choice(legal)

    trick = state.current_trick

    def discard_value(card: Card) -> tuple[bool, int]:
        return card.suit is Suit.SPADES, ace_high_value(card.rank)

    if not trick.cards:
        return min(legal, key=discard_value)

    leader = evaluate_trick(trick)
    best = max(_card_strength(tc.card, trick.lead_suit) for tc in trick.cards)
    if state.players[leader].team == state.players[player_id].team:
        return min(legal, key=discard_value)
    winners = [c for c in legal if _card_strength(c, trick.lead_suit) > best]
    if winners:
        return min(winners, key=lambda c: _card_strength(c, trick.lead_suit))
    return min(legal, key=discard_value)
