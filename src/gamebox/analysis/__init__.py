"""Statistical checks on the engines: AI strength and shuffle fairness."""

from gamebox.analysis.arena import (
    ArenaConfig,
    ArenaResult,
    SUPPORTED_GAMES,
    run_arena,
)
from gamebox.analysis.shuffle import (
    ShuffleReport,
    shuffle_position_counts,
    shuffle_uniformity,
)

__all__ = [
    "ArenaConfig",
    "ArenaResult",
    "SUPPORTED_GAMES",
    "run_arena",
    "ShuffleReport",
    "shuffle_position_counts",
    "shuffle_uniformity",
]
