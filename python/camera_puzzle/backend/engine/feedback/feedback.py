"""Celebratory text for the result screens.

A fixed fallback is shown immediately; a remote text generator may
replace it later.  The request never blocks the engine and its result is
dropped if the player has moved on to another game in the meantime.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Callable, Protocol

from camera_puzzle.backend.engine.challenge import TimedChallengeStats
from camera_puzzle.backend.engine.scoring import describe_duration

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = ["Congratulations, you unscrambled the view!"]
CLASSIC_FALLBACK = ["Congratulations!", "Puzzle Solved!", "Nicely Done!"]
TIMED_FALLBACK = ["Great effort! You really raced against the clock."]

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


class FeedbackError(ValueError):
    """The generator answered with something we cannot display."""


class TextGenerator(Protocol):
    async def request(self, prompt: str) -> str: ...


# -- prompts ------------------------------------------------------------------


def classic_prompt(size: int, score: int, moves: int, elapsed_ms: float) -> str:
    return (
        "Act as a fun game commentator. Write 3 short, unique, witty, "
        "one-sentence congratulatory messages for a player who solved a "
        f"{size}x{size} camera puzzle. Their score was {score}, they used "
        f"{moves} moves, and their time was {describe_duration(elapsed_ms)}. "
        "Be creative and enthusiastic! Format the response as a valid JSON "
        'array of strings, like ["Message 1", "Message 2", "Message 3"]. '
        "Do not include any other text or markdown."
    )


def timed_prompt(stats: TimedChallengeStats) -> str:
    return (
        "Act as an energetic game announcer. Write a short, exciting summary "
        f"of a player's performance in a {stats.duration_minutes}-minute timed "
        f"challenge on {stats.difficulty}x{stats.difficulty} difficulty. They "
        f"cleared {stats.puzzles_cleared} puzzles and made a total of "
        f"{stats.total_moves} moves. Be enthusiastic and do not include "
        "quotation marks."
    )


# -- response parsing ---------------------------------------------------------


def _unquote(text: str) -> str:
    return text.strip().removeprefix('"').removesuffix('"').strip()


def parse_messages(text: str) -> list[str]:
    """Parse a JSON array of strings, tolerating a markdown code fence."""
    cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip()))
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise FeedbackError(f"response is not JSON: {e}") from e
    if not isinstance(data, list) or not data:
        raise FeedbackError("expected a non-empty JSON array")
    if not all(isinstance(m, str) for m in data):
        raise FeedbackError("array must contain only strings")
    messages = [_unquote(m) for m in data]
    return [m for m in messages if m] or list(CLASSIC_FALLBACK)


def parse_summary(text: str) -> list[str]:
    summary = _unquote(text)
    if not summary:
        raise FeedbackError("empty summary")
    return [summary]


# -- feedback -----------------------------------------------------------------


class VictoryFeedback:
    """Holds the messages the result screen should display."""

    def __init__(self, generator: TextGenerator | None = None) -> None:
        self.generator = generator
        self.messages: list[str] = list(DEFAULT_MESSAGES)
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def reset(self, generation: int) -> None:
        """Forget the last result and any request still in flight."""
        self._generation = generation
        self.messages = list(DEFAULT_MESSAGES)
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def celebrate_classic(
        self,
        generation: int,
        size: int,
        score: int,
        moves: int,
        elapsed_ms: float,
    ) -> asyncio.Task[None] | None:
        self.reset(generation)
        self.messages = list(CLASSIC_FALLBACK)
        prompt = classic_prompt(size, score, moves, elapsed_ms)
        return self._launch(generation, prompt, parse_messages)

    def celebrate_timed(
        self, generation: int, stats: TimedChallengeStats
    ) -> asyncio.Task[None] | None:
        self.reset(generation)
        self.messages = list(TIMED_FALLBACK)
        return self._launch(generation, timed_prompt(stats), parse_summary)

    def _launch(
        self,
        generation: int,
        prompt: str,
        parse: Callable[[str], list[str]],
    ) -> asyncio.Task[None] | None:
        if self.generator is None:
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; keeping fallback message.")
            return None
        self._task = loop.create_task(self._fetch(generation, prompt, parse))
        return self._task

    async def _fetch(
        self,
        generation: int,
        prompt: str,
        parse: Callable[[str], list[str]],
    ) -> None:
        assert self.generator is not None
        try:
            text = await self.generator.request(prompt)
            messages = parse(text or "")
        except Exception as e:
            logger.warning("Victory message generation failed: %s", e)
            return
        if generation != self._generation:
            logger.debug("Discarding victory messages from game %d.", generation)
            return
        self.messages = messages
