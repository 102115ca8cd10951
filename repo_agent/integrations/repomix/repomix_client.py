"""Repomix packing API wrapper.

The packing API flattens a public GitHub repository into a single document.
Requests are multipart forms with ``url``, ``format`` and a JSON ``options``
field; the response is JSON with the packed text under ``content``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PackingApiError(RuntimeError):
    """Raised when the packing API returns a non-success response."""

    def __init__(self, *, status_code: int, message: str) -> None:
        super().__init__(f"Repomix API error: status={status_code}, message={message}")
        self.status_code = status_code
        self.message = message


class PackOptions(BaseModel):
    """Options sent in the ``options`` form field (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    remove_comments: bool = False
    remove_empty_lines: bool = False
    show_line_numbers: bool = False
    file_summary: bool = True
    directory_structure: bool = True
    output_parsable: bool = False
    compress: bool = False

    def to_form_value(self) -> str:
        return self.model_dump_json(by_alias=True)


class PackResult(BaseModel):
    """Subset of the pack response used by the agent."""

    content: str


@dataclass(frozen=True)
class RepomixClientConfig:
    """Repomix client configuration."""

    api_url: str
    timeout_seconds: float = 120.0
    output_format: str = "markdown"


class RepomixClient:
    """Thin async wrapper around the Repomix pack endpoint."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        config: RepomixClientConfig,
        options: PackOptions | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._options = options or PackOptions()
        self._client = httpx.AsyncClient(
            headers={
                "Accept": "*/*",
                "Accept-Language": "en-US,en;q=0.9",
                "User-Agent": "repo-task-agent",
            },
            timeout=httpx.Timeout(self._config.timeout_seconds),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Closes underlying HTTP client."""

        await self._client.aclose()

    async def pack_repository(self, *, github_url: str) -> str:
        """Packs a repository and returns the packed text.

        Raises:
            PackingApiError: If the API responds with a non-2xx status.
        """

        self._logger.info("Packing repository: url=%s", github_url)
        # (None, value) tuples force multipart/form-data without file names.
        resp = await self._client.post(
            self._config.api_url,
            files={
                "url": (None, github_url),
                "format": (None, self._config.output_format),
                "options": (None, self._options.to_form_value()),
            },
        )
        self._raise_for_error(resp)
        result = PackResult.model_validate(resp.json())
        self._logger.info(
            "Repository packed: url=%s content_length=%s", github_url, len(result.content)
        )
        return result.content

    def _raise_for_error(self, resp: httpx.Response) -> None:
        if 200 <= resp.status_code < 300:
            return
        self._logger.warning(
            "Repomix API returned an error: status=%s body=%s",
            resp.status_code,
            resp.text[:300],
        )
        raise PackingApiError(status_code=resp.status_code, message=resp.text)
