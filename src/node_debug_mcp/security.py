"""Security utilities for Node Debug MCP Server."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from node_debug_mcp.config import NodeDebugConfig
from node_debug_mcp.errors import ExecutionNotAllowedError
from node_debug_mcp.models import ExecutionRequest

logger = logging.getLogger(__name__)


@dataclass
class SecurityPolicy:
    # Each entry is an argument prefix, e.g. ["rm", "-rf"] blocks "rm -rf /host/etc".
    blocked_commands: list[list[str]] = field(default_factory=list)
    denied_nodes: list[str] = field(default_factory=list)


def load_security_policy(config_path_str: Optional[str]) -> SecurityPolicy:
    policy = SecurityPolicy()

    if config_path_str:
        config_path = Path(config_path_str)
        if config_path.exists():
            try:
                with open(config_path) as f:
                    config_data = yaml.safe_load(f)
                if config_data and isinstance(config_data, dict):
                    # Assigned only once the whole document has parsed.
                    blocked_commands = []
                    for entry in config_data.get("blocked_commands") or []:
                        if isinstance(entry, str):
                            entry = entry.split()
                        blocked_commands.append([str(part) for part in entry])
                    denied_nodes = [str(n) for n in config_data.get("denied_nodes") or []]
                    policy = SecurityPolicy(blocked_commands=blocked_commands, denied_nodes=denied_nodes)
                logger.info(f"Loaded security configuration from {config_path}")
            except Exception as e:
                logger.error(f"Error loading security configuration: {str(e)}, using defaults.")
    return policy


def is_blocked_command(command: list[str], policy: SecurityPolicy) -> bool:
    for prefix in policy.blocked_commands:
        if prefix and command[: len(prefix)] == prefix:
            return True
    return False


def check_execution_allowed(request: ExecutionRequest, config: NodeDebugConfig):
    """Main entry point for security validation."""
    # Debug pods are privileged and write to the cluster, so read-only and
    # non-destructive modes both disable the tool.
    if config.K8S_MCP_READ_ONLY:
        raise ExecutionNotAllowedError("nodes_debug_exec is disabled: server is running in read-only mode")
    if config.K8S_MCP_DISABLE_DESTRUCTIVE:
        raise ExecutionNotAllowedError("nodes_debug_exec is disabled: destructive tools are disabled")

    policy = load_security_policy(config.K8S_MCP_SECURITY_CONFIG_PATH)
    if request.node in policy.denied_nodes:
        raise ExecutionNotAllowedError(f"Debugging node '{request.node}' is not allowed")
    if is_blocked_command(request.command, policy):
        raise ExecutionNotAllowedError(f"Potentially dangerous command blocked: '{' '.join(request.command)}'")
