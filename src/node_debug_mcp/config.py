"""Configuration settings for the Node Debug MCP Server.

This module contains configuration settings for the server and the node debug
executor, loaded from environment variables using Pydantic.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

# UBI9 toolbox: systemd tools (systemctl, journalctl), networking tools (ss, ip, ping,
# traceroute, nmap), process tools (ps, top, lsof, strace), file system tools and gdb.
DEFAULT_NODE_DEBUG_IMAGE = "registry.access.redhat.com/ubi9/toolbox:latest"

# Matches the container name used by 'oc debug node'.
NODE_DEBUG_CONTAINER_NAME = "debug"

DEFAULT_NAMESPACE = "default"

# Waiting reasons that never recover within a diagnostic window.
IMAGE_PULL_FAILURE_REASONS = frozenset({"ErrImagePull", "ImagePullBackOff"})

MANAGED_BY = "node-debug-mcp-server"


class NodeDebugConfig(BaseSettings):
    """
    Defines all configuration settings for the server.
    Settings are loaded from environment variables (case-insensitive).
    Example: set NODE_DEBUG_TIMEOUT=120 to override the default.
    """
    # Node debug execution settings
    NODE_DEBUG_IMAGE: str = DEFAULT_NODE_DEBUG_IMAGE
    NODE_DEBUG_TIMEOUT: float = 60
    NODE_DEBUG_POLL_INTERVAL: float = 2
    NODE_DEBUG_CLEANUP_TIMEOUT: float = 30
    NODE_DEBUG_LOG_TIMEOUT: float = 30

    # Kubernetes specific settings
    K8S_CONTEXT: Optional[str] = None
    K8S_NAMESPACE: Optional[str] = None
    K8S_MCP_REQUEST_TIMEOUT: float = 30

    # Output settings
    K8S_MCP_MAX_OUTPUT_SIZE: int = 100000

    # Security settings
    K8S_MCP_READ_ONLY: bool = False
    K8S_MCP_DISABLE_DESTRUCTIVE: bool = False
    K8S_MCP_SECURITY_CONFIG_PATH: Optional[str] = None

    # Logging settings
    K8S_MCP_LOG_LEVEL: str = "INFO"
    K8S_MCP_LOG_DIR: Optional[str] = None

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 9096


@lru_cache
def get_config() -> NodeDebugConfig:
    """Return the process-wide configuration, read once from the environment."""
    return NodeDebugConfig()


INSTRUCTIONS = """
Node Debug MCP Server runs diagnostic commands on Kubernetes/OpenShift nodes.

Each call creates a short-lived privileged pod on the target node with the host
filesystem mounted at /host, waits for the command to finish, returns its output
and deletes the pod.
"""
