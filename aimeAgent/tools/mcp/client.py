"""Stdio client for one MCP tool server.

Each RemoteToolClient owns one server process. The MCP session is entered and
exited inside a dedicated lifecycle task, so ``close()`` may be awaited from
any task (the stdio transport's cancel scopes must be exited by the task that
entered them).

Lifecycle::

    idle --connect()--> ready --close()--> closed
      \\--connect() fails / close()-------> closed
    ready --server process gone----------> closed
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError
from mcp.types import CONNECTION_CLOSED
from pydantic import BaseModel, Field, model_validator

from aimeAgent.tools.base import format_error, is_error_result
from aimeAgent.utils.error_handler import RemoteToolConnectionError, RemoteToolError
from aimeAgent.utils.logging_utils import truncate

LOGGER = logging.getLogger(__name__)

_CLOSE_TIMEOUT = 10.0

# Interpreter used for the ``script`` shorthand, keyed by file extension
_SCRIPT_RUNNERS = {
    ".py": sys.executable,
    ".js": "node",
}


class ClientState(str, Enum):
    IDLE = "idle"
    READY = "ready"
    CLOSED = "closed"


@dataclass(frozen=True)
class RemoteToolMeta:
    """Tool advertised by a server at discovery time."""

    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)


def _resolve_env(env: Dict[str, str]) -> Dict[str, str]:
    """Merge ``env`` over the process environment, expanding ``${VAR}`` values."""
    full_env = os.environ.copy()
    for key, value in env.items():
        if value.startswith("${") and value.endswith("}"):
            full_env[key] = os.environ.get(value[2:-1], "")
        else:
            full_env[key] = value
    return full_env


class RemoteServerConfig(BaseModel):
    """How to launch one MCP server.

    Either ``command`` (+ ``args``) or ``script``. A script is launched with
    the current Python interpreter for ``.py`` and with ``node`` for ``.js``.
    """

    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    script: Optional[str] = None
    enabled: bool = True
    startup_timeout: float = Field(default=30.0, gt=0)

    @model_validator(mode="after")
    def _require_launch_target(self) -> "RemoteServerConfig":
        if not self.command and not self.script:
            raise ValueError("server config needs either 'command' or 'script'")
        return self

    def resolve(self) -> StdioServerParameters:
        """Build the stdio launch parameters.

        Raises:
            ValueError: the script extension has no known runner
        """
        if self.command:
            command, args = self.command, list(self.args)
        else:
            script = Path(self.script)
            runner = _SCRIPT_RUNNERS.get(script.suffix.lower())
            if runner is None:
                raise ValueError(
                    f"Unsupported script type '{script.suffix}' for {script}; expected a .py or .js file"
                )
            command, args = runner, [str(script), *self.args]

        return StdioServerParameters(command=command, args=args, env=_resolve_env(self.env))


def _is_connection_lost(exc: Exception) -> bool:
    """Protocol errors leave the session usable; anything else means the transport is gone."""
    if isinstance(exc, McpError):
        return exc.error.code == CONNECTION_CLOSED
    return True


def _result_text(result: Any) -> str:
    """First text block of a CallToolResult, or the JSON dump of its content."""
    content = list(result.content or [])
    for block in content:
        if getattr(block, "type", None) == "text":
            return block.text
    return json.dumps(
        [block.model_dump(mode="json", exclude_none=True) for block in content],
        ensure_ascii=False,
    )


class RemoteToolClient:
    """Connection to a single MCP tool server over stdio."""

    def __init__(self, server_name: str = "remote"):
        self.server_name = server_name
        self._state = ClientState.IDLE
        self._session: Optional[ClientSession] = None
        self._tools: Dict[str, RemoteToolMeta] = {}
        self._lifecycle: Optional[asyncio.Task] = None
        self._shutdown = asyncio.Event()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ClientState.READY

    @property
    def tool_metas(self) -> List[RemoteToolMeta]:
        return list(self._tools.values())

    @property
    def tool_names(self) -> List[str]:
        return list(self._tools)

    def get_tool_schema(self, name: str) -> Optional[Dict[str, Any]]:
        meta = self._tools.get(name)
        return meta.input_schema if meta else None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self, config: RemoteServerConfig) -> List[RemoteToolMeta]:
        """Spawn the server, run the MCP handshake and discover its tools.

        Returns:
            Metadata of every discovered tool

        Raises:
            RemoteToolError: the client is not idle
            RemoteToolConnectionError: launch, handshake or discovery failed
                or exceeded ``config.startup_timeout``
        """
        if self._state is not ClientState.IDLE:
            raise RemoteToolError(
                f"Cannot connect '{self.server_name}' in state {self._state.value}",
                f"tool server '{self.server_name}' was already used",
            )

        try:
            params = config.resolve()
        except ValueError as exc:
            self._state = ClientState.CLOSED
            raise RemoteToolConnectionError(str(exc)) from exc

        LOGGER.debug(f"  Starting stdio server '{self.server_name}': {params.command} {' '.join(params.args)}")

        ready: asyncio.Future = asyncio.get_running_loop().create_future()
        self._lifecycle = asyncio.create_task(
            self._run_session(params, ready),
            name=f"mcp-session-{self.server_name}",
        )

        try:
            await asyncio.wait_for(asyncio.shield(ready), timeout=config.startup_timeout)
        except asyncio.TimeoutError as exc:
            await self._abort()
            raise RemoteToolConnectionError(
                f"MCP server '{self.server_name}' did not finish discovery within {config.startup_timeout}s",
                f"tool server '{self.server_name}' timed out",
            ) from exc
        except Exception as exc:
            await self.close()
            raise RemoteToolConnectionError(
                f"Failed to start MCP server '{self.server_name}': {exc}",
                f"tool server '{self.server_name}' is unavailable",
            ) from exc

        LOGGER.info(f"  ✓ MCP server '{self.server_name}' ready with {len(self._tools)} tool(s): {', '.join(self._tools)}")
        return self.tool_metas

    async def _run_session(self, params: StdioServerParameters, ready: asyncio.Future) -> None:
        try:
            async with stdio_client(params) as (read_stream, write_stream):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    listed = await session.list_tools()
                    self._tools = {
                        tool.name: RemoteToolMeta(
                            name=tool.name,
                            description=tool.description or "",
                            input_schema=dict(tool.inputSchema or {}),
                        )
                        for tool in listed.tools
                    }
                    self._session = session
                    self._state = ClientState.READY
                    ready.set_result(None)
                    await self._shutdown.wait()
        except Exception as exc:
            if not ready.done():
                ready.set_exception(exc)
            else:
                LOGGER.warning(f"  MCP session '{self.server_name}' ended with error: {exc}")
        finally:
            self._session = None
            if self._state is ClientState.READY:
                self._state = ClientState.CLOSED
                LOGGER.warning(f"  MCP session '{self.server_name}' ended unexpectedly; client closed")
            if not ready.done():
                ready.cancel()

    async def close(self) -> None:
        """Terminate the session and the server process. Safe in every state."""
        self._state = ClientState.CLOSED
        task, self._lifecycle = self._lifecycle, None
        if task is None:
            return

        self._shutdown.set()
        try:
            await asyncio.wait_for(task, timeout=_CLOSE_TIMEOUT)
        except asyncio.TimeoutError:
            LOGGER.warning(f"  MCP server '{self.server_name}' did not shut down within {_CLOSE_TIMEOUT}s; cancelled")
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
        LOGGER.debug(f"  ✓ Closed stdio connection for server: {self.server_name}")

    async def _abort(self) -> None:
        """Cancel a lifecycle task that never became ready."""
        self._state = ClientState.CLOSED
        task, self._lifecycle = self._lifecycle, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def _connection_lost(self) -> None:
        # The lifecycle task exits and reaps the process; close() still awaits it
        self._state = ClientState.CLOSED
        self._shutdown.set()
        LOGGER.warning(f"  MCP server '{self.server_name}' connection lost; client closed")

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """Invoke a discovered tool. Failures come back as error-marked text."""
        if not self.is_connected or self._session is None:
            return format_error(f"tool server '{self.server_name}' is not connected (state: {self._state.value})")
        if name not in self._tools:
            return format_error(f"tool not found on server '{self.server_name}': {name}")

        LOGGER.debug(f"  Calling tool: {name} on server {self.server_name}")
        try:
            result = await self._session.call_tool(name, arguments or {})
        except Exception as exc:
            LOGGER.error(f"  Tool '{name}' on server '{self.server_name}' raised: {exc!r}")
            if _is_connection_lost(exc):
                self._connection_lost()
                return format_error(f"call to '{name}' failed: tool server '{self.server_name}' connection lost")
            return format_error(f"call to '{name}' failed: {exc}")

        text = _result_text(result)
        if result.isError:
            LOGGER.warning(f"  Tool '{name}' reported an error: {truncate(text)}")
            return text if is_error_result(text) else format_error(text)
        return text


__all__ = [
    "ClientState",
    "RemoteServerConfig",
    "RemoteToolClient",
    "RemoteToolMeta",
]
