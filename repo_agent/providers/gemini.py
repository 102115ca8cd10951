"""Gemini provider (google-genai SDK).

Streams a completion from a Gemini model with a fixed thinking budget. Errors
from the SDK are logged and re-raised; there is no retry or fallback.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from google import genai
from google.genai import types

from repo_agent.providers.base import CompletionProvider


@dataclass(frozen=True)
class GeminiProviderConfig:
    """Configuration for GeminiProvider."""

    api_key: str
    model: str
    thinking_budget: int


class GeminiProvider(CompletionProvider):
    """Provider that streams completions from Gemini."""

    _logger = logging.getLogger(__name__)

    def __init__(self, *, config: GeminiProviderConfig, client: Any | None = None) -> None:
        self._config = config
        self._client = client or genai.Client(api_key=self._config.api_key)

    def build_generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            thinking_config=types.ThinkingConfig(thinking_budget=self._config.thinking_budget),
        )

    async def stream_text(self, *, prompt: str) -> AsyncIterator[str]:
        self._logger.info(
            "Gemini completion started: model=%s prompt_chars=%s",
            self._config.model,
            len(prompt),
        )
        start_time = time.monotonic()
        chunk_count = 0
        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=self._config.model,
                contents=prompt,
                config=self.build_generation_config(),
            )
            async for chunk in stream:
                text = chunk.text
                if text:
                    chunk_count += 1
                    yield text
        except Exception:
            self._logger.exception("Gemini completion failed: model=%s", self._config.model)
            raise
        elapsed = time.monotonic() - start_time
        self._logger.info(
            "Gemini completion finished: chunks=%s elapsed_seconds=%.1f", chunk_count, elapsed
        )
