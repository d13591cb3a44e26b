"""Tests for Spades bidding, trick rules, team scoring and AI choices."""

import random

from gamebox.core.cards import Card, Rank, Suit
from gamebox.games.spades import (
    PLAYER_NAMES,
    SpadesPhase,
    SpadesPlayer,
    SpadesState,
    Trick,
    TrickCard,
    can_play_card,
    end_round,
    evaluate_trick,
    get_ai_bid,
    get_ai_card_to_play,
    get_legal_cards,
    get_winning_teams,
    initialize_spades_game,
    place_bid,
    play_card,
    score_team,
    start_new_round,
)

C5 = Card(Rank.FIVE, Suit.CLUBS)
C9 = Card(Rank.NINE, Suit.CLUBS)
CK = Card(Rank.KING, Suit.CLUBS)
CA = Card(Rank.ACE, Suit.CLUBS)
D3 = Card(Rank.THREE, Suit.DIAMONDS)
H7 = Card(Rank.SEVEN, Suit.HEARTS)
HA = Card(Rank.ACE, Suit.HEARTS)
S2 = Card(Rank.TWO, Suit.SPADES)
S8 = Card(Rank.EIGHT, Suit.SPADES)
SA = Card(Rank.ACE, Suit.SPADES)


def state_with(hands: list, **changes) -> SpadesState:
    players = tuple(
        SpadesPlayer(id=i, name=PLAYER_NAMES[i], cards=tuple(hand), bid=3, is_human=(i == 0))
        for i, hand in enumerate(hands)
    )
    return SpadesState(players=players, phase=SpadesPhase.PLAYING).copy_with(**changes)


def trick(*plays: tuple) -> Trick:
    cards = tuple(TrickCard(seat, card) for seat, card in plays)
    return Trick(cards=cards, lead_suit=cards[0].card.suit)


def test_deal() -> None:
    """Test every seat gets 13 cards from one deck and starts bidding."""
    state = initialize_spades_game(rng=random.Random(1))
    assert [len(p.cards) for p in state.players] == [13] * 4
    assert len({c for p in state.players for c in p.cards}) == 52
    assert state.phase is SpadesPhase.BIDDING
    assert [p.team for p in state.players] == [0, 1, 0, 1]


def test_bidding_in_seat_order() -> None:
    """Test bids are taken in turn and play starts with seat 0."""
    state = initialize_spades_game(rng=random.Random(2))
    assert place_bid(state, 1, 3) is state
    assert place_bid(state, 0, 14) is state
    for seat, bid in enumerate([3, 4, 0, 2]):
        state = place_bid(state, seat, bid)
    assert state.phase is SpadesPhase.PLAYING
    assert state.current_player == 0
    assert [p.bid for p in state.players] == [3, 4, 0, 2]


def test_spades_cannot_lead_until_broken() -> None:
    """Test leading a spade needs broken spades or a spades-only hand."""
    state = state_with([[C5, S2], [C9], [D3], [H7]])
    assert not can_play_card(state, 0, S2)
    assert can_play_card(state, 0, C5)
    assert can_play_card(state.copy_with(spades_broken=True), 0, S2)
    only_spades = state_with([[S2, S8], [C9], [D3], [H7]])
    assert can_play_card(only_spades, 0, S2)


def test_must_follow_suit() -> None:
    """Test a player holding the led suit must follow it."""
    state = state_with([[], [C9, S2], [D3], [H7]], current_player=1, current_trick=trick((0, C5)))
    assert get_legal_cards(state, 1) == [C9]
    void = state_with([[], [D3, S2], [], []], current_player=1, current_trick=trick((0, C5)))
    assert set(get_legal_cards(void, 1)) == {D3, S2}


def test_spade_trumps_led_suit() -> None:
    """Test the lowest spade beats the ace of the led suit; off-suit cards never win."""
    assert evaluate_trick(trick((0, C5), (1, CA), (2, S2), (3, HA))) == 2
    assert evaluate_trick(trick((0, C5), (1, C9), (2, D3), (3, HA))) == 1


def test_trick_goes_to_winner_who_leads_next() -> None:
    """Test a complete trick is credited and its winner leads."""
    state = state_with([[C5, D3], [C9, H7], [CK, S8], [CA, HA]])
    for seat, card in enumerate([C5, C9, CK, CA]):
        state = play_card(state, seat, card)
    assert state.players[3].tricks_won == 1
    assert state.current_player == 3
    assert state.current_trick == Trick()
    assert state.completed_tricks[0].winner == 3


def test_team_scoring() -> None:
    """Test made bids, overtrick bags, the bag penalty and set bids."""
    assert score_team(bid=4, tricks=6, score=0, bags=0) == (42, 2)
    assert score_team(bid=4, tricks=6, score=100, bags=9) == (42, 1)
    assert score_team(bid=5, tricks=3, score=20, bags=3) == (-30, 3)
    assert score_team(bid=0, tricks=0, score=0, bags=0) == (0, 0)


def test_end_round_and_game_over() -> None:
    """Test partners' bids and tricks combine and 250 ends the game."""
    players = tuple(
        SpadesPlayer(id=i, name=PLAYER_NAMES[i], bid=bid, tricks_won=won)
        for i, (bid, won) in enumerate([(3, 4), (2, 1), (3, 3), (4, 5)])
    )
    state = SpadesState(players=players, phase=SpadesPhase.PLAYING, team_scores=(200, 100))
    ended = end_round(state)
    assert ended.team_scores == (261, 160)
    assert ended.team_bags == (1, 0)
    assert ended.phase is SpadesPhase.GAME_OVER
    assert get_winning_teams(ended) == [0]
    assert start_new_round(ended) is ended


def test_ai_bid() -> None:
    """Test side aces and kings count one each plus half the spades."""
    assert get_ai_bid([CA, CK, HA, S2, S8, SA, D3]) == 4
    assert get_ai_bid([C5, D3]) == 1


def test_ai_lets_partner_win_and_wins_cheaply() -> None:
    """Test the AI ducks under a winning partner and otherwise wins with its lowest winner."""
    partner_winning = state_with(
        [[], [], [C5, CA], []], current_player=2, current_trick=trick((0, CK), (1, C9))
    )
    assert get_ai_card_to_play(partner_winning, 2, "hard") == C5
    opponent_winning = state_with(
        [[], [], [], [C5, CA, HA]], current_player=3, current_trick=trick((0, CK), (1, C9), (2, D3))
    )
    assert get_ai_card_to_play(opponent_winning, 3, "hard") == CA


def test_ai_rounds_account_for_every_trick() -> None:
    """Test AI-played rounds always hand out exactly 13 tricks."""
    rng = random.Random(4)
    state = initialize_spades_game("medium", rng)
    for _ in range(3):
        while state.phase is SpadesPhase.BIDDING:
            seat = state.current_player
            state = place_bid(state, seat, get_ai_bid(state.players[seat].cards))
        while state.phase is SpadesPhase.PLAYING:
            seat = state.current_player
            state = play_card(state, seat, get_ai_card_to_play(state, seat, "hard", rng))
        assert sum(p.tricks_won for p in state.players) == 13
        assert all(not p.cards for p in state.players)
        if state.phase is SpadesPhase.GAME_OVER:
            break
        round_number = state.round_number
        state = start_new_round(state, rng)
        assert state.round_number == round_number + 1
