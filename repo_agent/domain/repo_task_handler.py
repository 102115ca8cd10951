"""Repository task handler.

Validates a task, obtains the packed repository content (cache first, packing
API on a miss), renders the prompt and streams the model's answer back as
markdown.

Cache lookups are not coordinated across requests: two concurrent misses for
the same repository both call the packing API and both write the entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from repo_agent.domain.task import (
    INVALID_PAYLOAD_MESSAGE,
    InvalidPayloadError,
    Task,
    TaskValidationError,
    build_github_url,
    decode_task,
)
from repo_agent.integrations.repomix.repomix_client import PackingApiError, RepomixClient
from repo_agent.providers.base import CompletionProvider
from repo_agent.rendering.prompt_template import RepoTaskPromptInput, RepoTaskPromptRenderer
from repo_agent.runtime.kv_store import KeyValueStore

JSON_MEDIA_TYPE = "application/json"
MARKDOWN_MEDIA_TYPE = "text/markdown"
CACHE_CONTENT_TYPE = "text/plain"


@dataclass(frozen=True)
class CacheHit:
    """Packed content found in the cache."""

    key: str
    content: str


@dataclass(frozen=True)
class CacheMiss:
    """No usable cache entry; the content has to be packed."""

    key: str


CacheLookup = CacheHit | CacheMiss


@dataclass(frozen=True)
class RepoTaskHandlerConfig:
    """Handler configuration."""

    cache_namespace: str = "github-repo-contents"
    cache_ttl_seconds: int = 300
    normalize_pack_url: bool = False


class RepoTaskHandler:
    """Handles a single repository task request."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        config: RepoTaskHandlerConfig,
        kv_store: KeyValueStore,
        packing_client: RepomixClient,
        provider: CompletionProvider,
        prompt_renderer: RepoTaskPromptRenderer,
    ) -> None:
        self._config = config
        self._kv_store = kv_store
        self._packing_client = packing_client
        self._provider = provider
        self._prompt_renderer = prompt_renderer

    async def handle(self, *, content_type: str | None, body: bytes) -> Response:
        """Handles a request and returns the response to send."""

        if not is_json_content_type(content_type):
            return PlainTextResponse(INVALID_PAYLOAD_MESSAGE)
        try:
            task = decode_task(body)
        except InvalidPayloadError:
            return PlainTextResponse(INVALID_PAYLOAD_MESSAGE)
        except TaskValidationError as exc:
            self._logger.info("Task rejected: missing field=%s", exc.field_name)
            return PlainTextResponse(exc.user_message)

        lookup = await self.lookup_cached_content(task=task)
        if isinstance(lookup, CacheHit):
            content = lookup.content
        else:
            try:
                content = await self.pack_and_store(task=task, miss=lookup)
            except PackingApiError as exc:
                return JSONResponse(
                    {"success": False, "error": f"Failed to process repo: {exc.status_code}"}
                )

        prompt = self._prompt_renderer.render(
            data=RepoTaskPromptInput(repo=task.repo, content=content, prompt=task.prompt)
        )
        return StreamingResponse(
            self._provider.stream_text(prompt=prompt),
            media_type=MARKDOWN_MEDIA_TYPE,
        )

    async def lookup_cached_content(self, *, task: Task) -> CacheLookup:
        """Looks up packed content for ``task``; the only hit/miss decision point."""

        key = task.cache_key
        cached = await self._kv_store.get(self._config.cache_namespace, key)
        if cached.exists and cached.data is not None:
            self._logger.info("Cache hit: key=%s", key)
            return CacheHit(key=key, content=cached.data.text())
        self._logger.info("Cache miss: key=%s", key)
        return CacheMiss(key=key)

    async def pack_and_store(self, *, task: Task, miss: CacheMiss) -> str:
        """Packs the repository and stores the result under the miss key.

        Raises:
            PackingApiError: If the packing API fails; nothing is stored.
        """

        repo = task.normalized_repo if self._config.normalize_pack_url else task.repo
        content = await self._packing_client.pack_repository(github_url=build_github_url(repo))
        await self._kv_store.set(
            self._config.cache_namespace,
            miss.key,
            content,
            ttl_seconds=self._config.cache_ttl_seconds,
            content_type=CACHE_CONTENT_TYPE,
        )
        self._logger.info(
            "Cache stored: key=%s ttl_seconds=%s", miss.key, self._config.cache_ttl_seconds
        )
        return content


def is_json_content_type(content_type: str | None) -> bool:
    """Returns True if the media type is application/json (parameters ignored)."""

    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE
