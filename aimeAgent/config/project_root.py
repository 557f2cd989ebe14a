"""Project root path detection - works regardless of working directory."""

from __future__ import annotations

from pathlib import Path
from functools import lru_cache


@lru_cache(maxsize=1)
def get_project_root() -> Path:
    """Get absolute path to project root directory.

    This works by finding the directory containing the 'aimeAgent' package,
    regardless of the current working directory.

    Example:
        >>> root = get_project_root()
        >>> config_file = root / "aimeAgent" / "config" / "mcp_servers.yaml"
    """
    # project_root.py -> config/ -> aimeAgent/ -> project_root/
    project_root = Path(__file__).resolve().parent.parent.parent

    if not (project_root / "aimeAgent").exists():
        raise RuntimeError(
            f"Could not locate project root. Expected 'aimeAgent' directory at {project_root}"
        )

    return project_root


def resolve_project_path(relative_path: str | Path) -> Path:
    """Resolve a path relative to project root; absolute paths pass through.

    Example:
        >>> resolve_project_path("aimeAgent/config/mcp_servers.yaml")
    """
    path = Path(relative_path)
    if path.is_absolute():
        return path
    return get_project_root() / path


__all__ = ["get_project_root", "resolve_project_path"]
