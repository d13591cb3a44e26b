"""Deterministic rule engines for casual card, board and puzzle games."""

__version__ = "0.1.0"
