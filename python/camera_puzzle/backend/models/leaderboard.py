"""Leaderboard persistence and ranking."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

LEADERBOARD_KEY = "camera-puzzle-leaderboard"
LEADERBOARD_SIZES: tuple[str, ...] = ("3", "4", "5")


@dataclass(frozen=True)
class Score:
    score: int
    moves: int
    time: float  # ms
    date: int  # epoch ms


# -- storage collaborators ----------------------------------------------------


class Storage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Keeps blobs in a dict; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStorage:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value + "\n", encoding="utf-8")


# -- manager ------------------------------------------------------------------


class LeaderboardManager:
    """Loads, saves, and ranks the top scores per grid size."""

    def __init__(self, storage: Storage, capacity: int = 5) -> None:
        self.storage = storage
        self.capacity = capacity
        self._scores: dict[str, list[Score]] = self._empty()
        self._load()

    @staticmethod
    def _empty() -> dict[str, list[Score]]:
        return {key: [] for key in LEADERBOARD_SIZES}

    # -- persistence ----------------------------------------------------------

    def _load(self) -> None:
        try:
            blob = self.storage.get(LEADERBOARD_KEY)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read leaderboard: %s", e)
            return
        if not blob:
            return
        try:
            self._scores = self._parse(blob)
        except (ValueError, TypeError, KeyError) as e:
            # json.JSONDecodeError is a ValueError.
            logger.warning("Discarding corrupt leaderboard record: %s", e)
            self._scores = self._empty()

    def _parse(self, blob: str) -> dict[str, list[Score]]:
        data = json.loads(blob)
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        missing = [key for key in LEADERBOARD_SIZES if key not in data]
        if missing:
            raise KeyError(f"missing difficulty buckets {missing}")
        scores = self._empty()
        for key in LEADERBOARD_SIZES:
            entries = [Score(**e) for e in data[key]]
            entries.sort(key=lambda e: e.score, reverse=True)
            scores[key] = entries[: self.capacity]
        return scores

    def save(self) -> None:
        data = {
            key: [asdict(e) for e in entries]
            for key, entries in self._scores.items()
        }
        try:
            self.storage.set(LEADERBOARD_KEY, json.dumps(data, indent=2))
        except OSError as e:
            logger.warning("Could not save leaderboard: %s", e)

    # -- queries --------------------------------------------------------------

    def add_score(self, size: int, entry: Score) -> int | None:
        """Insert *entry* and persist.

        Returns the 1-based rank of the new entry, or ``None`` if it did
        not make the top list.
        """
        key = str(size)
        entries = self._scores.setdefault(key, [])
        entries.append(entry)
        entries.sort(key=lambda e: e.score, reverse=True)
        del entries[self.capacity :]
        self.save()
        for rank, e in enumerate(entries, 1):
            if e is entry:
                return rank
        return None

    def get_scores(self, size: int) -> list[Score]:
        return list(self._scores.get(str(size), []))

    def get_all_sizes(self) -> list[int]:
        return sorted(int(k) for k, v in self._scores.items() if v)
