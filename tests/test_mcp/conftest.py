"""Pytest fixtures for MCP tests."""

from pathlib import Path

import pytest

from aimeAgent.tools.mcp import RemoteServerConfig


@pytest.fixture
def math_server_config(math_server_path):
    """Launch config for the sample arithmetic server."""
    return RemoteServerConfig(script=str(math_server_path), startup_timeout=30)


@pytest.fixture
async def math_client(math_server_config):
    """Connected client; closed after the test."""
    from aimeAgent.tools.mcp import RemoteToolClient

    client = RemoteToolClient("math")
    await client.connect(math_server_config)
    yield client

    # Cleanup
    await client.close()


@pytest.fixture
def crashing_server_config():
    """Server that dies when its ``boom`` tool is called."""
    script = Path(__file__).parent.parent / "mcp_servers" / "crashing_server.py"
    return RemoteServerConfig(script=str(script), startup_timeout=30)
