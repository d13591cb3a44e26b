"""Code breaker: guess a hidden four-peg colour code within ten tries."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from gamebox.core.rng import ensure_rng

CODE_LENGTH = 4
COLOR_COUNT = 6
MAX_GUESSES = 10


@dataclass(frozen=True)
class Feedback:
    black: int  # right colour, right place
    white: int  # right colour, wrong place


@dataclass(frozen=True)
class Guess:
    colors: tuple[int, ...]
    feedback: Feedback


@dataclass(frozen=True)
class CodeBreakerState:
    secret: tuple[int, ...]
    guesses: tuple[Guess, ...] = ()
    finished: bool = False
    won: bool = False

    @property
    def guesses_left(self) -> int:
        return MAX_GUESSES - len(self.guesses)

    def copy_with(self, **changes) -> "CodeBreakerState":  # type: ignore
        """Create new CodeBreakerState with changes."""
        return replace(self, **changes)


def initialize_code_breaker(rng: Optional[random.Random] = None) -> CodeBreakerState:
    """Pick a secret of four colours; repeats are allowed."""
    rng = ensure_rng(rng)
    return CodeBreakerState(secret=tuple(rng.randrange(COLOR_COUNT) for _ in range(CODE_LENGTH)))


def evaluate_guess(secret: Sequence[int], guess: Sequence[int]) -> Feedback:
    """Blacks for exact matches; whites for the remaining colours in common, each counted once."""
    black = sum(1 for s, g in zip(secret, guess) if s == g)
    unmatched_secret = [s for s, g in zip(secret, guess) if s != g]
    white = 0
    for g in (g for s, g in zip(secret, guess) if s != g):
        if g in unmatched_secret:
            unmatched_secret.remove(g)
            white += 1
    return Feedback(black=black, white=white)


def submit_guess(state: CodeBreakerState, colors: Sequence[int]) -> CodeBreakerState:
    """Score a full guess; the game ends on a solve or the tenth miss.

    Guesses of the wrong length or with unknown colours are ignored.
    """
    if state.finished or len(colors) != CODE_LENGTH:
        return state
    if not all(0 <= c < COLOR_COUNT for c in colors):
        return state
    feedback = evaluate_guess(state.secret, colors)
    guesses = state.guesses + (Guess(tuple(colors), feedback),)
    won = feedback.black == CODE_LENGTH
    return state.copy_with(
        guesses=guesses,
        finished=won or len(guesses) >= MAX_GUESSES,
        won=won,
    )
