"""Configuration entry points."""

from .project_root import get_project_root, resolve_project_path
from .settings import (
    GovernanceSettings,
    ModelSettings,
    ObservabilitySettings,
    Settings,
    ToolSettings,
    get_settings,
)

__all__ = [
    "GovernanceSettings",
    "ModelSettings",
    "ObservabilitySettings",
    "Settings",
    "ToolSettings",
    "get_settings",
    "get_project_root",
    "resolve_project_path",
]
