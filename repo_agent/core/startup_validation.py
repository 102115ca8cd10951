"""Startup validation for required credentials and configuration.

This module validates that required credentials are present before the agent
starts accepting requests.
"""

from __future__ import annotations

import httpx

from repo_agent.config import AppSettings


class StartupValidationError(RuntimeError):
    """Raised when validation fails."""


def validate_llm_configuration(*, settings: AppSettings) -> None:
    """Validates LLM configuration is complete.

    Args:
        settings: Application settings.

    Raises:
        StartupValidationError: If the Gemini key or model is missing.
    """
    if not settings.get_llm_api_key():
        raise StartupValidationError(
            f"LLM_MODEL is set to '{settings.llm_model}' "
            "but neither GOOGLE_API_KEY nor GEMINI_API_KEY is set."
        )
    if not settings.llm_model.strip():
        raise StartupValidationError("LLM_MODEL must not be empty.")
    # -1 asks Gemini for a dynamic thinking budget.
    if settings.thinking_budget < -1:
        raise StartupValidationError(
            f"THINKING_BUDGET must be -1 (dynamic), zero or positive, got: {settings.thinking_budget}"
        )


def validate_repomix_configuration(*, settings: AppSettings) -> None:
    """Validates the packing API URL is an absolute http(s) URL.

    Raises:
        StartupValidationError: If REPOMIX_API_URL is malformed.
    """
    try:
        url = httpx.URL(settings.repomix_api_url)
    except httpx.InvalidURL as exc:
        raise StartupValidationError(
            f"REPOMIX_API_URL is invalid: {settings.repomix_api_url}"
        ) from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise StartupValidationError(
            f"REPOMIX_API_URL must be an absolute http(s) URL, got: {settings.repomix_api_url}"
        )


def validate_cache_configuration(*, settings: AppSettings) -> None:
    """Validates cache settings.

    Raises:
        StartupValidationError: If the TTL or namespace is unusable.
    """
    if settings.cache_ttl_seconds <= 0:
        raise StartupValidationError(
            f"CACHE_TTL_SECONDS must be positive, got: {settings.cache_ttl_seconds}"
        )
    if not settings.cache_namespace or "/" in settings.cache_namespace:
        raise StartupValidationError(
            f"CACHE_NAMESPACE must be a non-empty name without '/', got: {settings.cache_namespace!r}"
        )


def validate_all(*, settings: AppSettings) -> None:
    """Validates all required credentials and configuration.

    Args:
        settings: Application settings.

    Raises:
        StartupValidationError: If any validation fails.
    """
    errors: list[str] = []

    for validate in (
        validate_llm_configuration,
        validate_repomix_configuration,
        validate_cache_configuration,
    ):
        try:
            validate(settings=settings)
        except StartupValidationError as exc:
            errors.append(str(exc))

    if errors:
        error_message = "Startup validation failed:\n\n" + "\n".join(f"  - {err}" for err in errors)
        raise StartupValidationError(error_message)
