"""Provider interface for streaming text completions."""

from __future__ import annotations

from collections.abc import AsyncIterator


class CompletionProvider:
    """Abstract completion provider.

    Implementations yield text chunks as the model produces them. The returned
    iterator is consumed once, front to back.
    """

    def stream_text(self, *, prompt: str) -> AsyncIterator[str]:
        """Streams a completion for ``prompt``.

        Args:
            prompt: The full prompt.

        Returns:
            Async iterator of text chunks. Errors raised by the model surface
            while iterating and are not suppressed.
        """

        raise NotImplementedError
