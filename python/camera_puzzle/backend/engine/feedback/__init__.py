from camera_puzzle.backend.engine.feedback.feedback import (
    CLASSIC_FALLBACK,
    DEFAULT_MESSAGES,
    TIMED_FALLBACK,
    FeedbackError,
    TextGenerator,
    VictoryFeedback,
    classic_prompt,
    parse_messages,
    parse_summary,
    timed_prompt,
)

__all__ = [
    "CLASSIC_FALLBACK",
    "DEFAULT_MESSAGES",
    "TIMED_FALLBACK",
    "FeedbackError",
    "TextGenerator",
    "VictoryFeedback",
    "classic_prompt",
    "parse_messages",
    "parse_summary",
    "timed_prompt",
]
