"""Test fixtures for the Node Debug MCP Server tests."""

import pytest
from helpers import FakePodAPI

from node_debug_mcp.config import NodeDebugConfig


@pytest.fixture
def fast_config():
    """Configuration with short intervals so polling tests run quickly."""
    return NodeDebugConfig(
        NODE_DEBUG_POLL_INTERVAL=0.01,
        NODE_DEBUG_TIMEOUT=5,
        NODE_DEBUG_CLEANUP_TIMEOUT=1,
        NODE_DEBUG_LOG_TIMEOUT=1,
    )


@pytest.fixture
def fake_api():
    """Fixture that yields a fake pod API whose debug container exits with code 0."""
    return FakePodAPI()
