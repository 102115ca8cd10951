"""HTTP server for the repository task agent.

Endpoints:
  - GET /health
  - GET /welcome
  - POST /agent
"""

from __future__ import annotations

import asyncio
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response

from repo_agent.config import AppSettings
from repo_agent.core.startup_validation import validate_all
from repo_agent.domain.repo_task_handler import RepoTaskHandler, RepoTaskHandlerConfig
from repo_agent.domain.task import build_welcome
from repo_agent.integrations.repomix.repomix_client import RepomixClient, RepomixClientConfig
from repo_agent.providers.base import CompletionProvider
from repo_agent.providers.gemini import GeminiProvider, GeminiProviderConfig
from repo_agent.providers.noop import NoOpProvider
from repo_agent.rendering.prompt_template import RepoTaskPromptRenderer, get_default_template_dir
from repo_agent.runtime.kv_store import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore
from repo_agent.runtime.work_paths import get_default_work_paths, get_work_paths


def build_kv_store(*, settings: AppSettings) -> KeyValueStore:
    """Builds the configured cache backend."""

    if settings.kv_backend == "file":
        paths = (
            get_work_paths(work_root=settings.work_root)
            if settings.work_root is not None
            else get_default_work_paths()
        )
        return FileKeyValueStore(paths=paths)
    return InMemoryKeyValueStore()


def build_provider(*, settings: AppSettings) -> CompletionProvider:
    """Builds the completion provider.

    Without an API key the server still starts (so /health works) and every
    completion fails.
    """

    api_key = settings.get_llm_api_key()
    if api_key is None:
        return NoOpProvider(message="Gemini is not configured (set GOOGLE_API_KEY).")
    return GeminiProvider(
        config=GeminiProviderConfig(
            api_key=api_key,
            model=settings.llm_model,
            thinking_budget=settings.thinking_budget,
        )
    )


def build_packing_client(*, settings: AppSettings) -> RepomixClient:
    return RepomixClient(
        config=RepomixClientConfig(
            api_url=settings.repomix_api_url,
            timeout_seconds=settings.pack_timeout_seconds,
        )
    )


def create_app(
    *,
    settings: AppSettings | None = None,
    kv_store: KeyValueStore | None = None,
    packing_client: RepomixClient | None = None,
    provider: CompletionProvider | None = None,
) -> FastAPI:
    """Creates FastAPI app.

    Collaborators that are not passed in are built from ``settings``.
    """

    logging.basicConfig(level=logging.INFO)
    settings = settings or AppSettings()
    packing_client = packing_client or build_packing_client(settings=settings)
    handler = RepoTaskHandler(
        config=RepoTaskHandlerConfig(
            cache_namespace=settings.cache_namespace,
            cache_ttl_seconds=settings.cache_ttl_seconds,
            normalize_pack_url=settings.normalize_pack_url,
        ),
        kv_store=kv_store or build_kv_store(settings=settings),
        packing_client=packing_client,
        provider=provider or build_provider(settings=settings),
        prompt_renderer=RepoTaskPromptRenderer(template_dir=get_default_template_dir()),
    )

    app = FastAPI()
    app.state.handler = handler

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await packing_client.aclose()

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/welcome")
    async def welcome() -> dict[str, object]:
        return build_welcome()

    @app.post("/agent")
    async def agent(request: Request) -> Response:
        # Body is read raw; content type is checked by the handler, not FastAPI.
        body = await request.body()
        return await handler.handle(
            content_type=request.headers.get("content-type"),
            body=body,
        )

    return app


async def _serve() -> None:
    settings = AppSettings()
    validate_all(settings=settings)
    app = create_app(settings=settings)
    config = uvicorn.Config(
        app, host=settings.listen_host, port=settings.listen_port, log_level="info"
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Entry point used by Docker CMD."""

    asyncio.run(_serve())


if __name__ == "__main__":
    main()
