"""Top-level package exports for aimeAgent."""

from .core.orchestrator import Orchestrator, RunReport
from .runtime.app import build_application

__version__ = "0.1.0"

__all__ = ["Orchestrator", "RunReport", "build_application", "__version__"]
