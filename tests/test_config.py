from __future__ import annotations

from pathlib import Path

from repo_agent.config import AppSettings


def test_app_settings_can_load_from_dotenv(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "GOOGLE_API_KEY=google_from_env_file",
                "LLM_MODEL=gemini-2.5-pro",
                "KV_BACKEND=file",
                "CACHE_TTL_SECONDS=60",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    settings = AppSettings(_env_file=str(env_file))
    assert settings.google_api_key == "google_from_env_file"
    assert settings.llm_model == "gemini-2.5-pro"
    assert settings.kv_backend == "file"
    assert settings.cache_ttl_seconds == 60


def test_app_settings_strips_surrounding_quotes_from_env(monkeypatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", '"quoted_google"')
    monkeypatch.setenv("GEMINI_API_KEY", "'quoted_gemini'")
    settings = AppSettings(_env_file=None)
    assert settings.google_api_key == "quoted_google"
    assert settings.gemini_api_key == "quoted_gemini"


def test_app_settings_defaults_match_agent_contract(monkeypatch) -> None:
    for name in ("GOOGLE_API_KEY", "GEMINI_API_KEY", "LLM_MODEL", "CACHE_TTL_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    settings = AppSettings(_env_file=None)
    assert settings.llm_model == "gemini-2.5-flash-preview-04-17"
    assert settings.thinking_budget == 2048
    assert settings.repomix_api_url == "https://api.repomix.com/api/pack"
    assert settings.cache_namespace == "github-repo-contents"
    assert settings.cache_ttl_seconds == 300
    assert settings.normalize_pack_url is False
    assert settings.get_llm_api_key() is None


def test_get_llm_api_key_prefers_google_key(monkeypatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "google")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini")
    assert AppSettings(_env_file=None).get_llm_api_key() == "google"
