"""MCP (Model Context Protocol) stdio client and configuration loading."""

from .client import ClientState, RemoteServerConfig, RemoteToolClient, RemoteToolMeta
from .loader import load_mcp_config

__all__ = [
    "ClientState",
    "RemoteServerConfig",
    "RemoteToolClient",
    "RemoteToolMeta",
    "load_mcp_config",
]
