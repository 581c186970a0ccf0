from __future__ import annotations

import json
import logging
from pathlib import Path


logger = logging.getLogger(__name__)

DEFAULT_KEY = "bestScore"
DEFAULT_PATH = Path.home() / ".block_puzzle" / "highscore.json"


class HighScoreStore:
    """Best score persisted by the host application in a small JSON file."""

    def __init__(self, path: str | Path = DEFAULT_PATH, key: str = DEFAULT_KEY) -> None:
        self.path = Path(path)
        self.key = key
        self.best = self.load()

    def load(self) -> int:
        if not self.path.exists():
            return 0
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return max(0, int(data.get(self.key, 0)))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable high score file %s: %s", self.path, e)
            return 0

    def submit(self, score: int) -> bool:
        """Store `score` if it beats the best one; returns True when written."""
        if score <= self.best:
            return False
        self.best = int(score)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {}
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError):
                data = {}
            if not isinstance(data, dict):
                data = {}
        data[self.key] = self.best
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.debug("New best score %d written to %s", self.best, self.path)
        return True
