"""Tests for score, level and statistics persistence."""

import json
from pathlib import Path

import pytest

from gamebox.config import Difficulty
from gamebox.storage import GameId, GameStats, JsonFileStore, ScoreBook


def test_game_id_parse() -> None:
    """Test game identifiers parse from their string form."""
    assert GameId.parse("2048") is GameId.GAME_2048
    assert GameId.parse(GameId.CHESS) is GameId.CHESS
    assert GameId.parse("spider-solitaire") is GameId.SPIDER_SOLITAIRE
    assert GameId.parse("water-sort") is GameId.WATER_SORT
    with pytest.raises(ValueError, match="Unknown game"):
        GameId.parse("go")


def test_high_scores_are_scoped_by_difficulty() -> None:
    """Test each game and difficulty has its own record."""
    book = ScoreBook()
    assert book.get_high_score("2048", "easy") is None
    book.set_high_score("2048", 512, "easy")
    assert book.get_high_score(GameId.GAME_2048, Difficulty.EASY) == 512
    assert book.get_high_score("2048", "hard") is None
    assert book.store["@highscore_2048_easy"] == "512"


def test_submit_score_keeps_the_best() -> None:
    """Test only improvements replace the record."""
    book = ScoreBook()
    assert book.submit_score("2048", 100, "medium")
    assert not book.submit_score("2048", 50, "medium")
    assert book.submit_score("2048", 200, "medium")
    assert book.get_high_score("2048", "medium") == 200

    assert book.submit_score("minesweeper", 90, "easy", lower_is_better=True)
    assert book.submit_score("minesweeper", 60, "easy", lower_is_better=True)
    assert not book.submit_score("minesweeper", 70, "easy", lower_is_better=True)
    assert book.get_high_score("minesweeper", "easy") == 60


def test_clear_high_scores_leaves_other_keys() -> None:
    """Test clearing scores keeps levels and stats."""
    book = ScoreBook()
    book.set_high_score("sudoku", 300, "hard")
    book.set_level("maze", 4, "easy")
    book.record_game_result("sudoku", won=True)
    book.clear_all_high_scores()
    assert book.get_high_score("sudoku", "hard") is None
    assert book.get_level("maze", "easy") == 4
    assert book.get_stats("sudoku").wins == 1


def test_levels() -> None:
    """Test levels default to one and reject values below it."""
    book = ScoreBook()
    assert book.get_level("minesweeper", "medium") == 1
    book.set_level("minesweeper", 7, "medium")
    assert book.get_level("minesweeper", "medium") == 7
    with pytest.raises(ValueError):
        book.set_level("minesweeper", 0, "medium")


def test_active_game_markers() -> None:
    """Test saved game payloads round trip and clear."""
    book = ScoreBook()
    assert book.get_active_game("chess") is None
    book.set_active_game("chess", '{"turn": 3}')
    assert book.get_active_game("chess") == '{"turn": 3}'
    book.clear_active_game("chess")
    book.clear_active_game("chess")
    assert book.get_active_game("chess") is None


def test_record_game_result() -> None:
    """Test wins, losses and time accumulate per game."""
    book = ScoreBook()
    book.record_game_result("reversi", won=True, time_seconds=30)
    stats = book.record_game_result("reversi", won=False, time_seconds=45)
    assert stats == GameStats(games_played=2, wins=1, losses=1, total_time_seconds=75)
    assert stats.win_rate == 0.5
    assert GameStats().win_rate == 0.0
    assert set(book.get_all_stats()) == {GameId.REVERSI}
    book.clear_all_stats()
    assert book.get_all_stats() == {}


def test_json_file_store_persists(tmp_path: Path) -> None:
    """Test values survive reopening the file."""
    path = tmp_path / "nested" / "scores.json"
    book = ScoreBook(JsonFileStore(path))
    book.set_high_score("blackjack", 250, "hard")
    book.record_game_result("blackjack", won=True, time_seconds=12)

    reopened = ScoreBook(JsonFileStore(path))
    assert reopened.get_high_score("blackjack", "hard") == 250
    assert reopened.get_stats("blackjack").total_time_seconds == 12
    assert json.loads(path.read_text())["@highscore_blackjack_hard"] == "250"

    store = JsonFileStore(path)
    del store["@highscore_blackjack_hard"]
    assert "@highscore_blackjack_hard" not in JsonFileStore(path)
    assert len(JsonFileStore(path)) == 1
