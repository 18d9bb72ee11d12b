"""Node Debug MCP Server: run diagnostic commands on cluster nodes through privileged debug pods."""

__version__ = "0.1.0"
