"""Runtime assembly: settings, AI collaborator, tool bus and orchestrator."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from aimeAgent.agents.interfaces import AIClient
from aimeAgent.config import Settings, get_settings
from aimeAgent.config.project_root import resolve_project_path
from aimeAgent.core.memory import WorkingMemory
from aimeAgent.core.orchestrator import Orchestrator
from aimeAgent.tools.builtin import builtin_tools
from aimeAgent.tools.mcp import RemoteServerConfig, load_mcp_config

from .model_resolver import build_ai_client

LOGGER = logging.getLogger(__name__)


def _load_servers(config_path: Path, settings: Settings) -> Dict[str, RemoteServerConfig]:
    if not config_path.exists():
        LOGGER.warning(f"MCP config not found, running without remote tools: {config_path}")
        return {}
    servers = load_mcp_config(config_path, default_startup_timeout=settings.tools.default_startup_timeout)
    LOGGER.info(f"MCP config loaded: {len(servers)} server(s) from {config_path}")
    return servers


async def build_application(
    *,
    settings: Optional[Settings] = None,
    ai_client: Optional[AIClient] = None,
    mcp_config_path: Optional[Union[str, Path]] = None,
    interactive: bool = True,
) -> Orchestrator:
    """Return an orchestrator with built-in tools and configured MCP servers registered.

    Args:
        settings: Settings to use (cached settings when omitted)
        ai_client: AI collaborator (a ChatOpenAI-backed client when omitted)
        mcp_config_path: YAML server list (``settings.tools.mcp_config_path`` when omitted)
        interactive: Register the ask_user tool

    The caller owns the result: ``Orchestrator.run`` closes the MCP
    connections when it returns.
    """
    settings = settings or get_settings()
    ai_client = ai_client or build_ai_client(settings)

    memory = WorkingMemory()
    orchestrator = Orchestrator(
        ai_client,
        memory=memory,
        max_turns=settings.governance.max_turns,
        max_iterations=settings.governance.max_iterations,
    )

    config_path = resolve_project_path(mcp_config_path or settings.tools.mcp_config_path)
    await orchestrator.initialize_tools(
        local_tools=builtin_tools(memory, interactive=interactive),
        servers=_load_servers(config_path, settings),
    )
    return orchestrator


__all__ = ["build_application"]
