"""Integration tests for the shuffle uniformity check."""

import random

import pytest

from gamebox.analysis.shuffle import shuffle_position_counts, shuffle_uniformity


def test_seeded_shuffle_looks_uniform() -> None:
    """Test all 24 orderings of four cards appear with uniform frequency."""
    report = shuffle_uniformity(trials=24_000, deck_size=4, seed=12345)
    assert report.permutations_seen == 24
    assert report.p_value > 0.001
    assert report.looks_uniform


def test_position_counts_are_balanced() -> None:
    """Test every card lands in every position about equally often."""
    counts = shuffle_position_counts(5_000, deck_size=5, rng=random.Random(9))
    assert counts.shape == (5, 5)
    assert (counts.sum(axis=0) == 5_000).all()
    assert (counts.sum(axis=1) == 5_000).all()
    assert counts.min() > 800


def test_bad_parameters() -> None:
    """Test oversized decks and too few trials are rejected."""
    with pytest.raises(ValueError):
        shuffle_uniformity(deck_size=7)
    with pytest.raises(ValueError):
        shuffle_uniformity(trials=10, deck_size=4)
