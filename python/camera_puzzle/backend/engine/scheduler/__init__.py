from camera_puzzle.backend.engine.scheduler.scheduler import (
    Clock,
    Scheduler,
    TimerHandle,
    monotonic_ms,
)

__all__ = ["Clock", "Scheduler", "TimerHandle", "monotonic_ms"]
