"""Logging utilities for Node Debug MCP Server.

This module provides standardized logging configuration and logger creation
for consistent logging across the application.
"""

import logging
import sys
from pathlib import Path

from node_debug_mcp.config import NodeDebugConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_root_logger(config: NodeDebugConfig):
    """Configure the root logger for the application.

    Sets up logging with a consistent format and handlers for console output
    and, when a log directory is configured, file logging.

    Args:
        config: The server configuration providing level and log directory
    """
    # Create formatter
    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(config.K8S_MCP_LOG_LEVEL.upper())
    root_logger.addHandler(console_handler)

    # File handler
    if config.K8S_MCP_LOG_DIR:
        log_dir = Path(config.K8S_MCP_LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "node_debug_mcp.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.info(f"Logging initialized. Log file: {log_file}")
    else:
        root_logger.info("Logging initialized.")


def get_logger(name):
    """Get a standardized logger with the application prefix.

    Args:
        name: The name of the module or component

    Returns:
        A logger instance with the application prefix
    """
    return logging.getLogger(f"node-debug-mcp.{name}")
