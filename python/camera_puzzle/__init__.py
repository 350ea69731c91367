"""Camera Puzzle — unscramble a live camera feed by swapping tiles."""

__version__ = "0.1.0"
