"""No-op provider used when no Gemini API key is configured."""

from __future__ import annotations

from collections.abc import AsyncIterator

from repo_agent.providers.base import CompletionProvider


class ProviderNotConfiguredError(RuntimeError):
    """Raised when a completion is requested but no provider is configured."""


class NoOpProvider(CompletionProvider):
    """Provider that fails every completion request."""

    def __init__(self, *, message: str) -> None:
        self._message = message

    async def stream_text(self, *, prompt: str) -> AsyncIterator[str]:
        raise ProviderNotConfiguredError(self._message)
        yield  # pragma: no cover
