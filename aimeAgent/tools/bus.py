"""Tool bus: one registry in front of local tools and remote MCP servers.

Every tool name resolves to exactly one source. Names are global; when two
sources register the same name the later registration wins and a warning
names both sources.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Union

from langchain_core.tools import BaseTool

from aimeAgent.utils.error_handler import RemoteToolError
from aimeAgent.utils.logging_utils import log_tool_call, log_tool_result

from .base import format_error, is_error_result
from .mcp.client import RemoteServerConfig, RemoteToolClient

LOGGER = logging.getLogger(__name__)

ToolInput = Union[Dict[str, Any], str, None]


@dataclass(frozen=True, slots=True)
class LocalToolSource:
    tool: BaseTool

    def describe(self) -> str:
        return f"local tool '{self.tool.name}'"


@dataclass(frozen=True, slots=True)
class RemoteToolSource:
    client: RemoteToolClient
    server_name: str

    def describe(self) -> str:
        return f"MCP server '{self.server_name}'"


ToolSource = Union[LocalToolSource, RemoteToolSource]


class ToolBus:
    """Routes tool calls by name to a local tool or a remote tool client."""

    def __init__(self) -> None:
        self._sources: Dict[str, ToolSource] = {}
        self._clients: Dict[str, RemoteToolClient] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_local_tool(self, tool: BaseTool) -> None:
        self._bind(tool.name, LocalToolSource(tool))
        LOGGER.debug(f"  Registered local tool: {tool.name}")

    async def register_remote_server(self, server_name: str, config: RemoteServerConfig) -> List[str]:
        """Connect to one MCP server and bind every tool it advertises.

        A server that fails to start is logged and contributes no tools.

        Returns:
            Names of the tools bound from this server
        """
        if server_name in self._clients:
            LOGGER.warning(f"MCP server '{server_name}' is already registered; replacing it")
            previous = self._clients.pop(server_name)
            self._unbind_client(previous)
            await previous.close()

        client = RemoteToolClient(server_name)
        LOGGER.info(f"🚀 Starting MCP server: {server_name}")
        try:
            metas = await client.connect(config)
        except RemoteToolError as exc:
            LOGGER.error(f"  ✗ MCP server '{server_name}' unavailable: {exc}")
            return []

        self._clients[server_name] = client
        source = RemoteToolSource(client=client, server_name=server_name)
        for meta in metas:
            self._bind(meta.name, source)
        return [meta.name for meta in metas]

    async def register_remote_servers(self, servers: Mapping[str, RemoteServerConfig]) -> None:
        """Register every enabled server, one after another."""
        for server_name, config in servers.items():
            if not config.enabled:
                LOGGER.debug(f"  Skipping disabled MCP server: {server_name}")
                continue
            await self.register_remote_server(server_name, config)

    def _unbind_client(self, client: RemoteToolClient) -> None:
        stale = [
            name
            for name, source in self._sources.items()
            if isinstance(source, RemoteToolSource) and source.client is client
        ]
        for name in stale:
            del self._sources[name]
        if stale:
            LOGGER.debug(f"  Unbound {len(stale)} tool(s) of replaced server '{client.server_name}'")

    def _bind(self, name: str, source: ToolSource) -> None:
        previous = self._sources.get(name)
        if previous is not None:
            LOGGER.warning(
                f"Tool name collision on '{name}': {source.describe()} replaces {previous.describe()}"
            )
        self._sources[name] = source

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def tool_names(self) -> List[str]:
        return list(self._sources)

    def has_tool(self, name: str) -> bool:
        return name in self._sources

    def get_all_tool_descriptions(self) -> str:
        """One line per tool; remote tools also show their JSON input schema."""
        if not self._sources:
            return "No tools available."

        lines = []
        for name, source in self._sources.items():
            if isinstance(source, LocalToolSource):
                lines.append(f"- {name}: {source.tool.description}")
            else:
                meta = next((m for m in source.client.tool_metas if m.name == name), None)
                description = meta.description if meta else ""
                schema = json.dumps(meta.input_schema if meta else {}, ensure_ascii=False)
                lines.append(f"- {name}: {description} Input schema: {schema}")
        return "\n".join(lines)

    def get_tools_for_llm(self) -> List[Dict[str, Any]]:
        """Tool catalogue as ``{name, description, input_schema}`` dicts."""
        catalogue = []
        for name, source in self._sources.items():
            if isinstance(source, LocalToolSource):
                catalogue.append(
                    {
                        "name": name,
                        "description": source.tool.description,
                        "input_schema": source.tool.get_input_schema().model_json_schema(),
                    }
                )
            else:
                catalogue.append(
                    {
                        "name": name,
                        "description": next(
                            (m.description for m in source.client.tool_metas if m.name == name), ""
                        ),
                        "input_schema": source.client.get_tool_schema(name) or {},
                    }
                )
        return catalogue

    def list_remote_servers(self) -> List[Dict[str, Any]]:
        """Connected servers with the metadata of their tools."""
        return [
            {
                "name": server_name,
                "state": client.state.value,
                "connected": client.is_connected,
                "tools": [
                    {"name": meta.name, "description": meta.description, "input_schema": meta.input_schema}
                    for meta in client.tool_metas
                ],
            }
            for server_name, client in self._clients.items()
        ]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute_tool(self, name: str, tool_input: ToolInput = None) -> str:
        """Run a tool by name. Never raises; failures are error-marked text."""
        source = self._sources.get(name)
        if source is None:
            LOGGER.warning(f"Tool not found: {name}")
            return format_error(f"tool not found: {name}")

        log_tool_call(LOGGER, name, tool_input)
        if isinstance(source, LocalToolSource):
            result = await self._run_local(source.tool, tool_input)
        else:
            result = await self._run_remote(source.client, name, tool_input)

        log_tool_result(LOGGER, name, result, success=not is_error_result(result))
        return result

    @staticmethod
    async def _run_local(tool: BaseTool, tool_input: ToolInput) -> str:
        try:
            output = await tool.ainvoke(tool_input if tool_input is not None else {})
        except Exception as exc:
            LOGGER.error(f"Local tool '{tool.name}' raised {type(exc).__name__}: {exc}")
            return format_error(f"tool '{tool.name}' failed: {exc}")
        return output if isinstance(output, str) else json.dumps(output, ensure_ascii=False, default=str)

    @staticmethod
    async def _run_remote(client: RemoteToolClient, name: str, tool_input: ToolInput) -> str:
        if tool_input is None:
            arguments: Dict[str, Any] = {}
        elif isinstance(tool_input, str):
            # Remote tools take objects; a bare string goes to the first declared property
            schema = client.get_tool_schema(name) or {}
            properties = list((schema.get("properties") or {}).keys())
            if not properties:
                return format_error(f"tool '{name}' expects an object input, got a string")
            arguments = {properties[0]: tool_input}
        else:
            arguments = dict(tool_input)
        return await client.call_tool(name, arguments)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def close_all_connections(self) -> None:
        """Close every remote client concurrently. Safe to call repeatedly."""
        if not self._clients:
            return

        clients = list(self._clients.items())
        self._clients.clear()

        LOGGER.info(f"Shutting down {len(clients)} MCP server(s)...")
        results = await asyncio.gather(*(client.close() for _, client in clients), return_exceptions=True)
        for (server_name, _), outcome in zip(clients, results):
            if isinstance(outcome, BaseException):
                LOGGER.error(f"  ✗ Failed to close {server_name}: {outcome}")
            else:
                LOGGER.info(f"  ✓ Closed: {server_name}")


__all__ = ["LocalToolSource", "RemoteToolSource", "ToolBus", "ToolSource"]
