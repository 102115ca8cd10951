"""Task decoding and repository identifiers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

GITHUB_URL_PREFIX = "https://github.com/"
CACHE_KEY_PREFIX = "repomix-"

INVALID_PAYLOAD_MESSAGE = (
    "please provide a valid JSON object with the following properties: repo, prompt. "
    "Repo should be a valid Github repo name. Prompt should be a valid task description."
)

PERSONA = (
    "You are a helpful software developer assistant that can answer questions "
    "and help with tasks related to the Github repo."
)


class InvalidPayloadError(ValueError):
    """Raised when the body is not a JSON object."""


class TaskValidationError(ValueError):
    """Raised when a required task field is missing or empty."""

    def __init__(self, *, field_name: str) -> None:
        super().__init__(f"please provide a {field_name}")
        self.field_name = field_name

    @property
    def user_message(self) -> str:
        return str(self)


@dataclass(frozen=True)
class Task:
    """Task submitted by a caller.

    Attributes:
        repo: Repository as submitted, either 'owner/name' or a GitHub URL.
        prompt: Natural-language task description.
    """

    repo: str
    prompt: str

    @property
    def normalized_repo(self) -> str:
        return normalize_repo(self.repo)

    @property
    def cache_key(self) -> str:
        return build_cache_key(self.normalized_repo)


def decode_task(body: bytes | str) -> Task:
    """Decodes a request body into a ``Task``.

    Raises:
        InvalidPayloadError: If the body is not a JSON object.
        TaskValidationError: If ``repo`` or ``prompt`` is missing or empty
            (``repo`` is checked first).
    """

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidPayloadError("Body is not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise InvalidPayloadError("Body is not a JSON object.")

    repo = _require_text(payload, "repo")
    prompt = _require_text(payload, "prompt")
    return Task(repo=repo, prompt=prompt)


def _require_text(payload: dict[str, Any], field_name: str) -> str:
    value = payload.get(field_name)
    if not isinstance(value, str) or not value:
        raise TaskValidationError(field_name=field_name)
    return value


def normalize_repo(repo: str) -> str:
    """Strips a leading 'https://github.com/' so both forms map to 'owner/name'."""

    if repo.startswith(GITHUB_URL_PREFIX):
        return repo[len(GITHUB_URL_PREFIX) :]
    return repo


def build_cache_key(normalized_repo: str) -> str:
    return f"{CACHE_KEY_PREFIX}{normalized_repo}"


def build_github_url(repo: str) -> str:
    """Returns the GitHub URL sent to the packing API.

    ``repo`` is interpolated as given; a repo that is already a URL is not
    stripped here.
    """

    return f"{GITHUB_URL_PREFIX}{repo}"


def build_welcome() -> dict[str, object]:
    """Returns the agent's welcome descriptor with an example task."""

    return {
        "welcome": PERSONA,
        "prompts": [
            {
                "data": json.dumps(
                    {
                        "repo": "agentuity/cli",
                        "prompt": "What is the main function of the repo?",
                    },
                    separators=(",", ":"),
                ),
                "contentType": "application/json",
            }
        ],
    }
