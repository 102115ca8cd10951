from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from repo_agent.integrations.repomix.repomix_client import (
    PackingApiError,
    PackOptions,
    RepomixClient,
    RepomixClientConfig,
)

API_URL = "https://api.repomix.example/api/pack"


def _build_client(handler) -> RepomixClient:
    return RepomixClient(
        config=RepomixClientConfig(api_url=API_URL),
        transport=httpx.MockTransport(handler),
    )


def test_pack_options_serialize_in_wire_format() -> None:
    assert PackOptions().to_form_value() == (
        '{"removeComments":false,"removeEmptyLines":false,"showLineNumbers":false,'
        '"fileSummary":true,"directoryStructure":true,"outputParsable":false,"compress":false}'
    )


def test_pack_repository_posts_multipart_form_and_returns_content() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"content": "ABC"})

    client = _build_client(handler)

    async def scenario() -> str:
        try:
            return await client.pack_repository(github_url="https://github.com/foo/bar")
        finally:
            await client.aclose()

    assert asyncio.run(scenario()) == "ABC"

    request = captured[0]
    assert request.method == "POST"
    assert str(request.url) == API_URL
    assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
    body = request.content.decode("utf-8")
    assert 'name="url"\r\n\r\nhttps://github.com/foo/bar\r\n' in body
    assert 'name="format"\r\n\r\nmarkdown\r\n' in body
    assert 'name="options"\r\n\r\n' + PackOptions().to_form_value() + "\r\n" in body
    assert "filename=" not in body


def test_pack_repository_raises_with_status_on_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    client = _build_client(handler)

    with pytest.raises(PackingApiError) as exc_info:
        asyncio.run(client.pack_repository(github_url="https://github.com/foo/bar"))
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "boom"


def test_pack_repository_rejects_response_without_content() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps({"other": 1}).encode("utf-8"))

    client = _build_client(handler)

    with pytest.raises(ValueError):
        asyncio.run(client.pack_repository(github_url="https://github.com/foo/bar"))
