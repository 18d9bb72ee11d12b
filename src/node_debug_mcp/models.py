"""Pydantic models for the Node Debug MCP Server API."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ExecutionRequest(BaseModel):
    """A request to run a command on a node through a privileged debug pod."""

    node: str = Field(..., description="Name of the node to debug (e.g. worker-0).")
    command: List[str] = Field(
        ...,
        description=(
            "Command to execute on the node. All standard debugging utilities from the UBI9 "
            "toolbox are available. The host filesystem is mounted at /host - use "
            "'chroot /host <command>' to access node-level resources. Provide each argument "
            "as a separate array item (e.g. ['chroot', '/host', 'systemctl', 'status', 'kubelet'] "
            "or ['journalctl', '-u', 'kubelet', '--since', '1 hour ago'])."
        ),
    )
    namespace: Optional[str] = Field(
        None,
        description="Namespace to create the temporary debug pod in (optional, defaults to the current namespace or 'default').",
    )
    image: Optional[str] = Field(
        None,
        description=(
            "Container image to use for the debug pod (optional). Defaults to "
            "registry.access.redhat.com/ubi9/toolbox:latest."
        ),
    )
    timeout_seconds: Optional[float] = Field(
        None,
        gt=0,
        description="Maximum time to wait for the command to complete before timing out (optional, defaults to 60 seconds).",
    )
    kubeconfig: Optional[str] = Field(
        None,
        description=(
            "Base64 encoded kubeconfig content. If provided, this kubeconfig will be used for the "
            "command, otherwise the server's default context will be used."
        ),
    )


class ErrorDetails(BaseModel):
    """Structured error details."""

    message: str = Field(..., description="A human-readable error message.")
    code: str = Field(..., description="A machine-readable error code (e.g., 'EXECUTION_ERROR').")
    details: Dict[str, Any] = Field(default_factory=dict, description="Additional details about the error.")


class CommandResult(BaseModel):
    """Represents the final result of a command execution."""

    status: Literal["error", "success"] = Field(..., description="The final status of the command.")
    output: str = Field(..., description="The command output, or an error message.")
    error: Optional[ErrorDetails] = Field(None, description="Structured error information, present if status is 'error'.")
    exit_code: Optional[int] = Field(None, description="The exit code of the command, if it was executed.")
