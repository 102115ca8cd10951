from __future__ import annotations

import json

import pytest

from repo_agent.domain.task import (
    InvalidPayloadError,
    TaskValidationError,
    build_github_url,
    build_welcome,
    decode_task,
    normalize_repo,
)


def test_decode_task_returns_typed_task() -> None:
    task = decode_task(b'{"repo": "foo/bar", "prompt": "explain"}')
    assert task.repo == "foo/bar"
    assert task.prompt == "explain"


@pytest.mark.parametrize(
    ("payload", "field_name"),
    [
        ({"prompt": "explain"}, "repo"),
        ({"repo": "", "prompt": "explain"}, "repo"),
        ({"repo": 12, "prompt": "explain"}, "repo"),
        ({}, "repo"),
        ({"repo": "foo/bar"}, "prompt"),
        ({"repo": "foo/bar", "prompt": ""}, "prompt"),
    ],
)
def test_decode_task_reports_missing_field(payload: dict[str, object], field_name: str) -> None:
    with pytest.raises(TaskValidationError) as exc_info:
        decode_task(json.dumps(payload))
    assert exc_info.value.field_name == field_name
    assert exc_info.value.user_message == f"please provide a {field_name}"


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'"text"', b"\xff\xfe"])
def test_decode_task_rejects_non_object_bodies(body: bytes) -> None:
    with pytest.raises(InvalidPayloadError):
        decode_task(body)


def test_url_and_short_forms_share_cache_key() -> None:
    url_task = decode_task(b'{"repo": "https://github.com/foo/bar", "prompt": "p"}')
    short_task = decode_task(b'{"repo": "foo/bar", "prompt": "p"}')
    assert url_task.cache_key == short_task.cache_key == "repomix-foo/bar"


def test_normalize_repo_only_strips_leading_prefix() -> None:
    assert normalize_repo("https://github.com/foo/bar") == "foo/bar"
    assert normalize_repo("foo/bar") == "foo/bar"
    assert normalize_repo("http://github.com/foo/bar") == "http://github.com/foo/bar"


def test_build_github_url_interpolates_repo_as_given() -> None:
    assert build_github_url("foo/bar") == "https://github.com/foo/bar"
    assert (
        build_github_url("https://github.com/foo/bar")
        == "https://github.com/https://github.com/foo/bar"
    )


def test_welcome_contains_example_task() -> None:
    welcome = build_welcome()
    prompt = welcome["prompts"][0]
    assert prompt["contentType"] == "application/json"
    assert json.loads(prompt["data"]) == {
        "repo": "agentuity/cli",
        "prompt": "What is the main function of the repo?",
    }
    assert "Github repo" in welcome["welcome"]


def test_task_validation_error_message_matches_user_message() -> None:
    error = TaskValidationError(field_name="prompt")
    assert str(error) == error.user_message == "please provide a prompt"
