"""
High Score Storage
==================

Best-score persistence collaborators. The game reads the stored value when a
session starts and writes it back only when a finished session beats it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, Union

logger = logging.getLogger(__name__)


class HighScoreStore(Protocol):
    """Anything that can read and write a single best score."""

    def read_high_score(self) -> int:
        ...

    def write_high_score(self, score: int) -> None:
        ...


class MemoryHighScoreStore:
    """In-process store, lost on exit."""

    def __init__(self, initial: int = 0):
        self._value = max(0, int(initial))
        self.writes = 0

    def read_high_score(self) -> int:
        return self._value

    def write_high_score(self, score: int) -> None:
        self._value = int(score)
        self.writes += 1


class JsonHighScoreStore:
    """
    Stores the best score in a small JSON file.

    A missing or unreadable file reads as 0.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read_high_score(self) -> int:
        if not self._path.exists():
            return 0
        try:
            with open(self._path, "r") as f:
                data = json.load(f)
            return max(0, int(data.get("high_score", 0)))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable high score file %s: %s", self._path, e)
            return 0

    def write_high_score(self, score: int) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "high_score": int(score),
            "updated_at": datetime.now().isoformat(timespec="seconds"),
        }
        with open(self._path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info("High score %d saved to %s", score, self._path)


def default_store(path: Optional[Union[str, Path]] = None) -> JsonHighScoreStore:
    """JSON store at `path`, or ~/.math_snake/high_score.json."""
    if path is None:
        path = Path.home() / ".math_snake" / "high_score.json"
    return JsonHighScoreStore(path)
