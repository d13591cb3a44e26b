"""High scores, level progress, active-game markers and play statistics.

Everything is kept as strings in a key/value store; engines never touch it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import MutableMapping
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Union

from gamebox.config import Difficulty

logger = logging.getLogger(__name__)

HIGH_SCORE_PREFIX = "@highscore_"
ACTIVE_GAME_PREFIX = "@active_game_"
LEVEL_PREFIX = "@level_"
STATS_KEY = "@game_stats"


class GameId(Enum):
    MINESWEEPER = "minesweeper"
    SUDOKU = "sudoku"
    MAZE = "maze"
    GAME_2048 = "2048"
    TIC_TAC_TOE = "tic-tac-toe"
    CONNECT_FOUR = "connect-four"
    REVERSI = "reversi"
    CHECKERS = "checkers"
    CHESS = "chess"
    BACKGAMMON = "backgammon"
    HEARTS = "hearts"
    BLACKJACK = "blackjack"
    POKER = "poker"
    FREECELL = "freecell"
    SOLITAIRE = "solitaire"
    BATTLESHIP = "battleship"
    SPIDER_SOLITAIRE = "spider-solitaire"
    SPADES = "spades"
    DOMINOES = "dominoes"
    WATER_SORT = "water-sort"
    CODE_BREAKER = "code-breaker"
    MAHJONG = "mahjong"

    @classmethod
    def parse(cls, value: Union["GameId", str]) -> "GameId":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(g.value for g in cls)
            raise ValueError(f"Unknown game {value!r} (expected one of: {valid})") from None


@dataclass
class GameStats:
    """Lifetime results for one game."""

    games_played: int = 0
    wins: int = 0
    losses: int = 0
    total_time_seconds: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / self.games_played if self.games_played else 0.0


class JsonFileStore(MutableMapping):
    """String key/value store persisted as one JSON object on disk."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._data: dict[str, str] = {}
        if self.path.exists():
            with open(self.path) as f:
                self._data = {str(k): str(v) for k, v in json.load(f).items()}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2, sort_keys=True)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._flush()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


class ScoreBook:
    """Read and write player progress through a string key/value store."""

    def __init__(self, store: Optional[MutableMapping] = None) -> None:
        self.store: MutableMapping = {} if store is None else store

    @staticmethod
    def _scoped(prefix: str, game: Union[GameId, str], difficulty: Union[Difficulty, str]) -> str:
        return f"{prefix}{GameId.parse(game).value}_{Difficulty.parse(difficulty).value}"

    def get_high_score(
        self, game: Union[GameId, str], difficulty: Union[Difficulty, str]
    ) -> Optional[int]:
        raw = self.store.get(self._scoped(HIGH_SCORE_PREFIX, game, difficulty))
        return int(raw) if raw is not None else None

    def set_high_score(
        self, game: Union[GameId, str], score: int, difficulty: Union[Difficulty, str]
    ) -> None:
        self.store[self._scoped(HIGH_SCORE_PREFIX, game, difficulty)] = str(score)

    def submit_score(
        self,
        game: Union[GameId, str],
        score: int,
        difficulty: Union[Difficulty, str],
        lower_is_better: bool = False,
    ) -> bool:
        """Store score if it beats the current record; returns whether it did."""
        current = self.get_high_score(game, difficulty)
        better = current is None or (score < current if lower_is_better else score > current)
        if better:
            self.set_high_score(game, score, difficulty)
            logger.debug(f"New high score {score} for {GameId.parse(game).value}")
        return better

    def clear_all_high_scores(self) -> None:
        for key in [k for k in self.store if k.startswith(HIGH_SCORE_PREFIX)]:
            del self.store[key]

    def get_level(self, game: Union[GameId, str], difficulty: Union[Difficulty, str]) -> int:
        raw = self.store.get(self._scoped(LEVEL_PREFIX, game, difficulty))
        return int(raw) if raw is not None else 1

    def set_level(
        self, game: Union[GameId, str], level: int, difficulty: Union[Difficulty, str]
    ) -> None:
        if level < 1:
            raise ValueError(f"Level must be at least 1, got {level}")
        self.store[self._scoped(LEVEL_PREFIX, game, difficulty)] = str(level)

    def get_active_game(self, game: Union[GameId, str]) -> Optional[str]:
        return self.store.get(f"{ACTIVE_GAME_PREFIX}{GameId.parse(game).value}")

    def set_active_game(self, game: Union[GameId, str], payload: str) -> None:
        self.store[f"{ACTIVE_GAME_PREFIX}{GameId.parse(game).value}"] = payload

    def clear_active_game(self, game: Union[GameId, str]) -> None:
        self.store.pop(f"{ACTIVE_GAME_PREFIX}{GameId.parse(game).value}", None)

    def _load_stats(self) -> dict[str, dict]:
        raw = self.store.get(STATS_KEY)
        return json.loads(raw) if raw else {}

    def get_stats(self, game: Union[GameId, str]) -> GameStats:
        entry = self._load_stats().get(GameId.parse(game).value)
        return GameStats(**entry) if entry else GameStats()

    def get_all_stats(self) -> dict[GameId, GameStats]:
        return {GameId(key): GameStats(**value) for key, value in self._load_stats().items()}

    def record_game_result(
        self, game: Union[GameId, str], won: bool, time_seconds: int = 0
    ) -> GameStats:
        game_id = GameId.parse(game)
        all_stats = self._load_stats()
        stats = GameStats(**all_stats.get(game_id.value, {}))
        stats.games_played += 1
        if won:
            stats.wins += 1
        else:
            stats.losses += 1
        stats.total_time_seconds += max(0, int(time_seconds))
        all_stats[game_id.value] = asdict(stats)
        self.store[STATS_KEY] = json.dumps(all_stats)
        return stats

    def clear_all_stats(self) -> None:
        self.store.pop(STATS_KEY, None)
