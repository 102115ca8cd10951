"""Application configuration.

All secrets must be supplied via environment variables. This module intentionally
avoids printing secret values.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Settings for the agent process."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # LLM (Gemini / Google)
    google_api_key: str | None = None
    gemini_api_key: str | None = None
    llm_model: str = "gemini-2.5-flash-preview-04-17"
    thinking_budget: int = 2048

    # Repomix packing API
    repomix_api_url: str = "https://api.repomix.com/api/pack"
    pack_timeout_seconds: float = 120.0
    # When False the pack URL is built from the repo exactly as submitted.
    normalize_pack_url: bool = False

    # Key-value cache
    cache_namespace: str = "github-repo-contents"
    cache_ttl_seconds: int = 300
    kv_backend: Literal["memory", "file"] = "memory"

    # Work root for the file cache. If unset, defaults to /work.
    work_root: str | None = None

    # Server
    listen_host: str = "0.0.0.0"
    listen_port: int = 8000

    @field_validator(
        "google_api_key",
        "gemini_api_key",
        mode="before",
    )
    @classmethod
    def _normalize_env_string(cls, value: Any) -> Any:
        """Normalizes env var strings.

        Docker's `--env-file` does not strip quotes. To avoid subtle auth failures
        like 401 caused by surrounding quotes, we trim whitespace and strip a
        single pair of surrounding quotes.
        """

        if value is None or not isinstance(value, str):
            return value
        text = value.strip()
        if len(text) >= 2 and ((text[0] == text[-1] == '"') or (text[0] == text[-1] == "'")):
            text = text[1:-1].strip()
        return text or None

    def get_llm_api_key(self) -> str | None:
        """Returns the Gemini API key, preferring GOOGLE_API_KEY."""

        return self.google_api_key or self.gemini_api_key
