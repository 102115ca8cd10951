"""Task prompt rendering."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined


@dataclass(frozen=True)
class RepoTaskPromptInput:
    """Input to render a task prompt."""

    repo: str
    content: str
    prompt: str


class RepoTaskPromptRenderer:
    """Renders the model prompt from a Jinja2 template.

    The prompt names the repo, then embeds the packed repository content, then
    the caller's task, in that order.
    """

    def __init__(self, *, template_dir: str, template_name: str = "repo_task.md") -> None:
        env = Environment(
            loader=FileSystemLoader(template_dir),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._template = env.get_template(template_name)

    def render(self, *, data: RepoTaskPromptInput) -> str:
        return self._template.render(
            repo=data.repo,
            content=data.content,
            prompt=data.prompt,
        )


def get_default_template_dir() -> str:
    """Returns the default template directory path."""

    return str(Path(__file__).parent / "templates")
