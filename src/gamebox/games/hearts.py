"""Four-player Hearts: passing, trick play, scoring and heuristic opponents.

Player 0 is the human seat; seats 1-3 are computer players. Seat indexes
increase clockwise, so passing left gives to the next seat.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from gamebox.config import Difficulty
from gamebox.core.cards import (
    Card,
    Rank,
    Suit,
    ace_high_value,
    create_deck,
    shuffle_deck,
    sort_hand,
)
from gamebox.core.rng import ensure_rng

logger = logging.getLogger(__name__)

NUM_PLAYERS = 4
CARDS_TO_PASS = 3
GAME_OVER_SCORE = 100
MOON_POINTS = 26
PLAYER_NAMES = ("You", "Alice", "Bob", "Charlie")

HAND_SUIT_ORDER = (Suit.CLUBS, Suit.DIAMONDS, Suit.SPADES, Suit.HEARTS)

TWO_OF_CLUBS = Card(Rank.TWO, Suit.CLUBS)
QUEEN_OF_SPADES = Card(Rank.QUEEN, Suit.SPADES)


class PassDirection(Enum):
    LEFT = "left"
    RIGHT = "right"
    ACROSS = "across"
    NONE = "none"

    @property
    def offset(self) -> int:
        return {"left": 1, "right": 3, "across": 2, "none": 0}[self.value]


PASS_ROTATION = (
    PassDirection.LEFT,
    PassDirection.RIGHT,
    PassDirection.ACROSS,
    PassDirection.NONE,
)


class HeartsPhase(Enum):
    PASSING = "passing"
    PLAYING = "playing"
    ROUND_END = "round_end"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class HeartsPlayer:
    id: int
    name: str
    cards: tuple[Card, ...] = ()
    score: int = 0
    total_score: int = 0
    is_human: bool = False

    def copy_with(self, **changes) -> "HeartsPlayer":  # type: ignore
        """Create new HeartsPlayer with changes."""
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
class HeartsState:
    players: tuple[HeartsPlayer, ...]
    phase: HeartsPhase
    pass_direction: PassDirection
    current_trick: Trick = Trick()
    completed_tricks: tuple[Trick, ...] = ()
    current_player: int = 0
    hearts_broken: bool = False
    round_number: int = 1
    passed_cards: tuple[tuple[int, tuple[Card, ...]], ...] = ()
    difficulty: Difficulty = Difficulty.MEDIUM

    @property
    def is_first_trick(self) -> bool:
        return not self.completed_tricks

    def copy_with(self, **changes) -> "HeartsState":  # type: ignore
        """Create new HeartsState with changes."""
        return replace(self, **changes)


def is_point_card(card: Card) -> bool:
    return card.suit is Suit.HEARTS or _same_card(card, QUEEN_OF_SPADES)


def _same_card(a: Card, b: Card) -> bool:
    return a.rank is b.rank and a.suit is b.suit


def card_points(card: Card) -> int:
    if card.suit is Suit.HEARTS:
        return 1
    if _same_card(card, QUEEN_OF_SPADES):
        return 13
    return 0


def deal_cards(
    players: Sequence[HeartsPlayer], rng: Optional[random.Random] = None
) -> tuple[HeartsPlayer, ...]:
    """Deal 13 sorted cards to each player and reset round scores."""
    deck = shuffle_deck(create_deck(), ensure_rng(rng))
    hand_size = len(deck) // NUM_PLAYERS
    return tuple(
        player.copy_with(
            cards=sort_hand(
                deck[i * hand_size:(i + 1) * hand_size],
                HAND_SUIT_ORDER,
            ),
            score=0,
        )
        for i, player in enumerate(players)
    )


def _holder_of_two_of_clubs(players: Sequence[HeartsPlayer]) -> int:
    for player in players:
        if any(_same_card(c, TWO_OF_CLUBS) for c in player.cards):
            return player.id
    return 0


def _new_round(
    players: Sequence[HeartsPlayer],
    round_number: int,
    difficulty: Difficulty,
    rng: random.Random,
) -> HeartsState:
    dealt = deal_cards(players, rng)
    direction = PASS_ROTATION[(round_number - 1) % len(PASS_ROTATION)]
    phase = HeartsPhase.PLAYING if direction is PassDirection.NONE else HeartsPhase.PASSING
    return HeartsState(
        players=dealt,
        phase=phase,
        pass_direction=direction,
        current_player=_holder_of_two_of_clubs(dealt),
        round_number=round_number,
        difficulty=difficulty,
    )


def initialize_hearts_game(
    difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
    rng: Optional[random.Random] = None,
) -> HeartsState:
    difficulty = Difficulty.parse(difficulty)
    players = tuple(
        HeartsPlayer(id=i, name=name, is_human=(i == 0))
        for i, name in enumerate(PLAYER_NAMES)
    )
    return _new_round(players, 1, difficulty, ensure_rng(rng))


def pass_cards(state: HeartsState, player_id: int, cards: Sequence[Card]) -> HeartsState:
    """Record a player's three-card pass; hands swap once everyone has passed."""
    if state.phase is not HeartsPhase.PASSING:
        return state
    if not 0 <= player_id < NUM_PLAYERS or len(cards) != CARDS_TO_PASS:
        return state
    if any(pid == player_id for pid, _ in state.passed_cards):
        return state
    hand = state.players[player_id].cards
    if len(set(cards)) != CARDS_TO_PASS or not all(card in hand for card in cards):
        return state

    passed = state.passed_cards + ((player_id, tuple(cards)),)
    if len(passed) < NUM_PLAYERS:
        return state.copy_with(passed_cards=passed)

    offset = state.pass_direction.offset
    outgoing = dict(passed)
    players = []
    for player in state.players:
        giver = (player.id - offset) % NUM_PLAYERS
        kept = [c for c in player.cards if c not in outgoing[player.id]]
        players.append(
            player.copy_with(cards=sort_hand(kept + list(outgoing[giver]), HAND_SUIT_ORDER))
        )
    players_t = tuple(players)
    logger.debug(f"Round {state.round_number}: cards passed {state.pass_direction.value}")
    return state.copy_with(
        players=players_t,
        phase=HeartsPhase.PLAYING,
        passed_cards=passed,
        current_player=_holder_of_two_of_clubs(players_t),
    )


def can_play_card(state: HeartsState, player_id: int, card: Card) -> bool:
    if state.phase is not HeartsPhase.PLAYING or player_id != state.current_player:
        return False
    hand = state.players[player_id].cards
    if card not in hand:
        return False

    trick = state.current_trick
    leading = not trick.cards

    if state.is_first_trick and leading:
        return _same_card(card, TWO_OF_CLUBS)

    if leading:
        if card.suit is Suit.HEARTS and not state.hearts_broken:
            return all(c.suit is Suit.HEARTS for c in hand)
        return True

    if card.suit is not trick.lead_suit and any(c.suit is trick.lead_suit for c in hand):
        return False

    # No points on the first trick unless the hand has nothing else.
    if state.is_first_trick and is_point_card(card):
        return all(is_point_card(c) for c in hand)
    return True


def get_legal_cards(state: HeartsState, player_id: int) -> list[Card]:
    return [c for c in state.players[player_id].cards if can_play_card(state, player_id, c)]


def evaluate_trick(trick: Trick) -> int:
    """Seat that played the highest card of the led suit."""
    following = [tc for tc in trick.cards if tc.card.suit is trick.lead_suit]
    best = max(following, key=lambda tc: ace_high_value(tc.card.rank))
    return best.player_id


def calculate_score(cards: Sequence[Card]) -> int:
    return sum(card_points(c) for c in cards)


def check_shoot_moon(players: Sequence[HeartsPlayer]) -> Optional[int]:
    """Seat that took all 26 points this round, if any."""
    for player in players:
        if player.score == MOON_POINTS:
            return player.id
    return None


def play_card(state: HeartsState, player_id: int, card: Card) -> HeartsState:
    """Play a card; completes the trick on the fourth card and the round on the last trick."""
    if not can_play_card(state, player_id, card):
        return state

    players = list(state.players)
    player = players[player_id]
    players[player_id] = player.copy_with(cards=tuple(c for c in player.cards if c != card))

    trick = state.current_trick
    trick = Trick(
        cards=trick.cards + (TrickCard(player_id, card),),
        lead_suit=trick.lead_suit or card.suit,
    )
    hearts_broken = state.hearts_broken or card.suit is Suit.HEARTS

    if len(trick.cards) < NUM_PLAYERS:
        return state.copy_with(
            players=tuple(players),
            current_trick=trick,
            current_player=(player_id + 1) % NUM_PLAYERS,
            hearts_broken=hearts_broken,
        )

    winner = evaluate_trick(trick)
    points = calculate_score([tc.card for tc in trick.cards])
    players[winner] = players[winner].copy_with(score=players[winner].score + points)
    completed = state.completed_tricks + (replace(trick, winner=winner),)
    new_state = state.copy_with(
        players=tuple(players),
        current_trick=Trick(),
        completed_tricks=completed,
        current_player=winner,
        hearts_broken=hearts_broken,
    )
    if all(not p.cards for p in players):
        return end_round(new_state)
    return new_state


def end_round(state: HeartsState) -> HeartsState:
    """Apply shoot-the-moon, fold round scores into totals and decide game over."""
    shooter = check_shoot_moon(state.players)
    players = []
    for player in state.players:
        score = player.score
        if shooter is not None:
            score = 0 if player.id == shooter else MOON_POINTS
        players.append(player.copy_with(score=score, total_score=player.total_score + score))
    if shooter is not None:
        logger.debug(f"{state.players[shooter].name} shot the moon")

    game_over = any(p.total_score >= GAME_OVER_SCORE for p in players)
    phase = HeartsPhase.GAME_OVER if game_over else HeartsPhase.ROUND_END
    logger.debug(
        f"Round {state.round_number} ended, totals {[p.total_score for p in players]}"
    )
    return state.copy_with(players=tuple(players), phase=phase)


def start_new_round(state: HeartsState, rng: Optional[random.Random] = None) -> HeartsState:
    if state.phase is not HeartsPhase.ROUND_END:
        return state
    return _new_round(state.players, state.round_number + 1, state.difficulty, ensure_rng(rng))


def get_winners(state: HeartsState) -> list[int]:
    """Seats sharing the lowest total once the game is over."""
    if state.phase is not HeartsPhase.GAME_OVER:
        return []
    low = min(p.total_score for p in state.players)
    return [p.id for p in state.players if p.total_score == low]


def _pass_priority(card: Card) -> int:
    value = ace_high_value(card.rank)
    if _same_card(card, QUEEN_OF_SPADES):
        value += 100
    elif card.suit is Suit.SPADES and card.rank in (Rank.ACE, Rank.KING):
        value += 50
    elif card.suit is Suit.HEARTS:
        value += 30
    return value


def get_ai_cards_to_pass(
    player: HeartsPlayer,
    difficulty: Union[Difficulty, str],
    rng: Optional[random.Random] = None,
) -> tuple[Card, ...]:
    """Easy passes at random; otherwise shed the queen of spades, high spades and hearts."""
    if Difficulty.parse(difficulty) is Difficulty.EASY:
        return tuple(ensure_rng(rng).sample(list(player.cards), CARDS_TO_PASS))
    ranked = sorted(player.cards, key=_pass_priority, reverse=True)
    return tuple(ranked[:CARDS_TO_PASS])


def get_ai_card_to_play(
    state: HeartsState,
    player_id: int,
    difficulty: Union[Difficulty, str],
) -> Optional[Card]:
    legal = get_legal_cards(state, player_id)
    if not legal:
        return None
    if Difficulty.parse(difficulty) is Difficulty.EASY:
        return legal[0]

    def rank_of(card: Card) -> int:
        return ace_high_value(card.rank)

    trick = state.current_trick
    if not trick.cards:
        safe = [c for c in legal if c.suit is not Suit.HEARTS]
        return min(safe or legal, key=rank_of)

    following = [c for c in legal if c.suit is trick.lead_suit]
    if following:
        winning = max(
            (tc.card for tc in trick.cards if tc.card.suit is trick.lead_suit),
            key=rank_of,
        )
        under = [c for c in following if rank_of(c) < rank_of(winning)]
        if under:
            return max(under, key=rank_of)
        return min(following, key=rank_of)

    # Void in the led suit: dump the most dangerous card.
    for card in legal:
        if _same_card(card, QUEEN_OF_SPADES):
            return card
    hearts = [c for c in legal if c.suit is Suit.HEARTS]
    if hearts:
        return max(hearts, key=rank_of)
    return max(legal, key=rank_of)
