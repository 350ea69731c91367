from camera_puzzle.backend.engine.scoring.scoring import (
    compute_score,
    describe_duration,
    format_clock,
    format_duration,
)

__all__ = ["compute_score", "describe_duration", "format_clock", "format_duration"]
