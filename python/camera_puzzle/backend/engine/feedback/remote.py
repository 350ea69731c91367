"""OpenAI-backed text generator for victory messages."""

from __future__ import annotations

import logging
import os

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAITextGenerator:
    """Sends one user prompt to a chat-completions model."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 15.0,
    ) -> None:
        self.client = client or AsyncOpenAI(timeout=timeout)
        self.model = model

    @classmethod
    def from_env(cls, model: str | None = None) -> OpenAITextGenerator | None:
        """Build a generator if ``OPENAI_API_KEY`` is set, else None."""
        if not os.environ.get("OPENAI_API_KEY"):
            logger.info("OPENAI_API_KEY not set; using built-in victory messages.")
            return None
        return cls(model=model or os.environ.get("CAMERA_PUZZLE_MODEL", DEFAULT_MODEL))

    async def request(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.choices[0].message.content or ""
