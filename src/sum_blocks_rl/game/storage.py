from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Protocol


logger = logging.getLogger(__name__)


class BestScoreStore(Protocol):
    def load_best_score(self) -> Optional[int]: ...

    def save_best_score(self, score: int) -> None: ...


class InMemoryBestScoreStore:
    def __init__(self, best_score: Optional[int] = None) -> None:
        self.best_score = best_score

    def load_best_score(self) -> Optional[int]:
        return self.best_score

    def save_best_score(self, score: int) -> None:
        self.best_score = int(score)


class JsonBestScoreStore:
    """Keeps the best score in a small JSON file: ``{"best_score": 120}``."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @staticmethod
    def default_path() -> Path:
        return Path.home() / ".sum_blocks" / "best_score.json"

    def load_best_score(self) -> Optional[int]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            # ValueError covers both JSONDecodeError and UnicodeDecodeError
            logger.warning("ignoring unreadable best score file %s: %s", self.path, exc)
            return None
        try:
            return int(payload.get("best_score", 0))
        except (AttributeError, TypeError, ValueError):
            logger.warning("ignoring malformed best score payload in %s", self.path)
            return None

    def save_best_score(self, score: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump({"best_score": int(score)}, handle, indent=2)
