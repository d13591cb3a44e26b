"""Difficulty levels shared by every engine."""

from __future__ import annotations

from enum import Enum
from typing import Union


class Difficulty(Enum):
    """Difficulty tier selected when a game is created."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union["Difficulty", str]) -> "Difficulty":
        """Coerce a member or its string value, rejecting anything else.

        Raises:
            ValueError: If value does not name a difficulty.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid = ", ".join(d.value for d in cls)
        raise ValueError(f"Unknown difficulty {value!r} (expected one of: {valid})")
