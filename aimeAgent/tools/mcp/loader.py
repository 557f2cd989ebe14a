"""MCP server configuration loader."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from pydantic import ValidationError

from aimeAgent.config.project_root import resolve_project_path

from .client import RemoteServerConfig

LOGGER = logging.getLogger(__name__)


def load_mcp_config(
    config_path: Union[str, Path],
    default_startup_timeout: Optional[float] = None,
) -> Dict[str, RemoteServerConfig]:
    """
    Load MCP server definitions from a YAML file.

    Expected layout::

        servers:
          math:
            script: aimeAgent/mcp_servers/math_server.py
          github:
            command: npx
            args: ["-y", "@modelcontextprotocol/server-github"]
            env:
              GITHUB_TOKEN: ${GITHUB_TOKEN}
        settings:
          startup_timeout: 30

    Relative ``script`` paths are resolved against the project root. Disabled
    servers are kept in the result (``enabled: false``); callers skip them.

    Args:
        config_path: Path to the YAML file
        default_startup_timeout: Used for servers without their own
            ``startup_timeout`` when the file has no ``settings`` entry

    Returns:
        Mapping of server name to its configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid
        ValueError: If a server entry is malformed
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"MCP config not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    settings = raw.get("settings") or {}
    fallback_timeout = settings.get("startup_timeout", default_startup_timeout)

    servers: Dict[str, RemoteServerConfig] = {}
    for server_name, server_cfg in (raw.get("servers") or {}).items():
        server_cfg = dict(server_cfg or {})
        if fallback_timeout is not None:
            server_cfg.setdefault("startup_timeout", fallback_timeout)
        if server_cfg.get("script"):
            server_cfg["script"] = str(resolve_project_path(server_cfg["script"]))

        try:
            servers[server_name] = RemoteServerConfig.model_validate(server_cfg)
        except ValidationError as exc:
            raise ValueError(f"Invalid MCP server config '{server_name}': {exc}") from exc

        LOGGER.debug(f"  Loaded MCP server config: {server_name}")

    return servers


__all__ = ["load_mcp_config"]
