"""Chi-square checks that shuffle_deck produces uniform permutations."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from itertools import permutations
from typing import Optional

import numpy as np
from scipy import stats

from gamebox.core.cards import create_deck, shuffle_deck


@dataclass
class ShuffleReport:
    """Goodness-of-fit of observed permutation frequencies against uniform."""

    trials: int
    deck_size: int
    chi_square: float
    p_value: float
    permutations_seen: int

    @property
    def looks_uniform(self) -> bool:
        return self.p_value >= 0.001


def shuffle_position_counts(
    trials: int, deck_size: int = 52, rng: Optional[random.Random] = None
) -> np.ndarray:
    """counts[card, position]: how often each starting card landed at each position."""
    rng = rng or random.Random()
    deck = create_deck()[:deck_size]
    index = {card: i for i, card in enumerate(deck)}
    counts = np.zeros((deck_size, deck_size), dtype=np.int64)
    for _ in range(trials):
        for position, card in enumerate(shuffle_deck(deck, rng)):
            counts[index[card], position] += 1
    return counts


def shuffle_uniformity(
    trials: int = 24_000, deck_size: int = 4, seed: Optional[int] = None
) -> ShuffleReport:
    """Shuffle a small deck many times and test all deck_size! orderings for uniformity.

    Raises:
        ValueError: If the deck is too large to enumerate or trials are too few.
    """
    if not 2 <= deck_size <= 6:
        raise ValueError(f"deck_size must be between 2 and 6, got {deck_size}")
    outcomes = math.factorial(deck_size)
    if trials < 5 * outcomes:
        raise ValueError(f"Need at least {5 * outcomes} trials for {outcomes} orderings")

    rng = random.Random(seed)
    deck = create_deck()[:deck_size]
    slot = {perm: i for i, perm in enumerate(permutations(deck))}
    observed = np.zeros(outcomes, dtype=np.int64)
    for _ in range(trials):
        observed[slot[shuffle_deck(deck, rng)]] += 1

    chi_square, p_value = stats.chisquare(observed)
    return ShuffleReport(
        trials=trials,
        deck_size=deck_size,
        chi_square=float(chi_square),
        p_value=float(p_value),
        permutations_seen=int(np.count_nonzero(observed)),
    )
