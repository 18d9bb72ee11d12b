"""Exceptions raised by the node debug executor and the tool surface.

Each exception carries a machine-readable ``code`` that is surfaced to the agent
through ``ErrorDetails`` and a ``details`` dict with whatever diagnostic data was
available when the failure happened.
"""

from typing import Any, Optional


class NodeDebugError(Exception):
    """Base class for node debug failures."""

    code = "NODE_DEBUG_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(NodeDebugError):
    """The request is missing the node name or the command."""

    code = "INVALID_INPUT"


class ExecutionNotAllowedError(NodeDebugError):
    """The server configuration forbids running the command."""

    code = "NOT_ALLOWED"


class PodCreationError(NodeDebugError):
    code = "POD_CREATION_ERROR"


class ImagePullError(NodeDebugError):
    code = "IMAGE_PULL_ERROR"


class PodStatusError(NodeDebugError):
    code = "POD_STATUS_ERROR"


class DebugPodTimeoutError(NodeDebugError):
    code = "TIMEOUT_ERROR"


class IncompleteExecutionError(NodeDebugError):
    """The debug container never reached a terminal state."""

    code = "INCOMPLETE_ERROR"


class PodFailedError(NodeDebugError):
    code = "POD_FAILED"


class NonZeroExitError(NodeDebugError):
    code = "EXECUTION_ERROR"

    def __init__(self, message: str, exit_code: int, details: Optional[dict[str, Any]] = None):
        super().__init__(message, details)
        self.exit_code = exit_code
        self.details.setdefault("exit_code", exit_code)


class LogRetrievalError(NodeDebugError):
    code = "LOG_RETRIEVAL_ERROR"


class ClusterConfigError(NodeDebugError):
    """No usable cluster credentials were found."""

    code = "CLUSTER_CONFIG_ERROR"
