from camera_puzzle.backend.models.grid import Grid
from camera_puzzle.backend.models.leaderboard import (
    JsonFileStorage,
    LeaderboardManager,
    MemoryStorage,
    Score,
)
from camera_puzzle.backend.models.phase import Direction, GameMode, GamePhase, Key

__all__ = [
    "Direction",
    "GameMode",
    "GamePhase",
    "Grid",
    "JsonFileStorage",
    "Key",
    "LeaderboardManager",
    "MemoryStorage",
    "Score",
]
