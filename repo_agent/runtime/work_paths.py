"""Container-local working paths.

The file-backed cache lives under a single root inside the container.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WorkPaths:
    """Resolved paths used by the agent."""

    work_root: Path
    kv_dir: Path


def get_default_work_paths() -> WorkPaths:
    """Returns the default container-local work paths."""

    work_root = Path("/work")
    return WorkPaths(work_root=work_root, kv_dir=work_root / "kv")


def get_work_paths(*, work_root: str | Path) -> WorkPaths:
    """Returns work paths for a given root."""

    root = Path(work_root).expanduser()
    if not root.is_absolute():
        root = (Path.cwd() / root).resolve()
    return WorkPaths(work_root=root, kv_dir=root / "kv")
