"""Injectable random source."""

from __future__ import annotations

import random
from typing import Optional, Union


def ensure_rng(rng: Optional[Union[random.Random, int]] = None) -> random.Random:
    """Return a Random instance.

    An existing instance is passed through so callers can share one stream,
    an int seeds a fresh generator, and None gives an unseeded one.
    """
    if isinstance(rng, random.Random):
        return rng
    return random.Random(rng)
