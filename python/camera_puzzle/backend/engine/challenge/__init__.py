from camera_puzzle.backend.engine.challenge.challenge import (
    TimedChallengeStats,
    TimedSession,
)

__all__ = ["TimedChallengeStats", "TimedSession"]
