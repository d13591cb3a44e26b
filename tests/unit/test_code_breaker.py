"""Tests for the code breaker feedback and guess limit."""

import random

import pytest

from gamebox.games.code_breaker import (
    CODE_LENGTH,
    COLOR_COUNT,
    MAX_GUESSES,
    CodeBreakerState,
    Feedback,
    evaluate_guess,
    initialize_code_breaker,
    submit_guess,
)


def test_secret() -> None:
    """Test the secret has four pegs from the known colours and follows the seed."""
    state = initialize_code_breaker(random.Random(5))
    assert len(state.secret) == CODE_LENGTH
    assert all(0 <= c < COLOR_COUNT for c in state.secret)
    assert initialize_code_breaker(random.Random(5)).secret == state.secret
    assert state.guesses_left == MAX_GUESSES


@pytest.mark.parametrize(
    "secret,guess,expected",
    [
        ((0, 1, 2, 3), (0, 1, 2, 3), Feedback(4, 0)),
        ((0, 0, 1, 1), (1, 1, 0, 0), Feedback(0, 4)),
        ((0, 1, 2, 3), (0, 0, 0, 0), Feedback(1, 0)),
        ((1, 1, 2, 2), (1, 2, 1, 3), Feedback(1, 2)),
        ((0, 1, 2, 3), (4, 5, 4, 5), Feedback(0, 0)),
        ((5, 5, 5, 1), (1, 5, 0, 0), Feedback(1, 1)),
    ],
)
def test_feedback_counts_each_peg_once(secret: tuple, guess: tuple, expected: Feedback) -> None:
    """Test blacks and whites with repeated colours on either side."""
    assert evaluate_guess(secret, guess) == expected


def test_solving_ends_the_game() -> None:
    """Test an exact guess wins and later guesses are ignored."""
    state = CodeBreakerState(secret=(2, 2, 4, 0))
    state = submit_guess(state, (2, 4, 2, 0))
    assert state.guesses[0].feedback == Feedback(2, 2)
    assert not state.finished
    state = submit_guess(state, (2, 2, 4, 0))
    assert state.finished
    assert state.won
    assert submit_guess(state, (0, 0, 0, 0)) is state


def test_bad_guesses_are_ignored() -> None:
    """Test short guesses and unknown colours do not use up a try."""
    state = CodeBreakerState(secret=(0, 1, 2, 3))
    assert submit_guess(state, (0, 1, 2)) is state
    assert submit_guess(state, (0, 1, 2, COLOR_COUNT)) is state
    assert submit_guess(state, (0, 1, -1, 3)) is state


def test_tenth_miss_loses() -> None:
    """Test the game is lost once all ten guesses miss."""
    state = CodeBreakerState(secret=(0, 1, 2, 3))
    for _ in range(MAX_GUESSES - 1):
        state = submit_guess(state, (5, 5, 5, 5))
    assert not state.finished
    assert state.guesses_left == 1
    state = submit_guess(state, (4, 4, 4, 4))
    assert state.finished
    assert not state.won
    assert state.guesses_left == 0
    assert submit_guess(state, (0, 1, 2, 3)) is state
