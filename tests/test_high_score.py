"""
Tests for high score persistence.
"""

import json

from math_snake.snake_core.high_score import JsonHighScoreStore, MemoryHighScoreStore, default_store


class TestJsonHighScoreStore:
    """File-backed best score."""

    def test_missing_file_reads_zero(self, tmp_path):
        assert JsonHighScoreStore(tmp_path / "none.json").read_high_score() == 0

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "scores" / "best.json"
        store = JsonHighScoreStore(path)
        store.write_high_score(42)

        assert path.exists()
        assert JsonHighScoreStore(path).read_high_score() == 42
        data = json.loads(path.read_text())
        assert data["high_score"] == 42
        assert "updated_at" in data

    def test_corrupt_file_reads_zero(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text("{not json")
        assert JsonHighScoreStore(path).read_high_score() == 0

    def test_wrong_shape_reads_zero(self, tmp_path):
        path = tmp_path / "best.json"
        path.write_text("[1, 2, 3]")
        assert JsonHighScoreStore(path).read_high_score() == 0

    def test_default_location(self):
        store = default_store()
        assert store.path.name == "high_score.json"
        assert store.path.parent.name == ".math_snake"


class TestMemoryHighScoreStore:

    def test_counts_writes(self):
        store = MemoryHighScoreStore(initial=5)
        assert store.read_high_score() == 5
        store.write_high_score(9)
        assert store.read_high_score() == 9
        assert store.writes == 1
