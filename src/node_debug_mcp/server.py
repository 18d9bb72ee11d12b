"""
Node Debug MCP Server - an MCP server that runs diagnostic commands on cluster nodes,
built with fastapi-mcp.
"""
from typing import Optional

from fastapi import FastAPI, Header
from fastapi_mcp import FastApiMCP

from node_debug_mcp import __version__
from node_debug_mcp.cluster import create_pod_api
from node_debug_mcp.config import NodeDebugConfig, get_config
from node_debug_mcp.errors import NodeDebugError, NonZeroExitError
from node_debug_mcp.logging_utils import get_logger
from node_debug_mcp.models import CommandResult, ErrorDetails, ExecutionRequest
from node_debug_mcp.node_debug import NodeDebugExecutor, validate_request
from node_debug_mcp.security import check_execution_allowed

logger = get_logger("server")

TRUNCATION_NOTICE = "... (output truncated)\n"

NODES_DEBUG_EXEC_DESCRIPTION = (
    "Run commands on an OpenShift/Kubernetes node using a privileged debug pod with comprehensive "
    "troubleshooting utilities. The debug pod uses the UBI9 toolbox image which includes: systemd tools "
    "(systemctl, journalctl), networking tools (ss, ip, ping, traceroute, nmap), process tools (ps, top, "
    "lsof, strace), file system tools (find, tar, rsync), and debugging tools (gdb). The host filesystem "
    "is mounted at /host, allowing commands to chroot /host if needed to access node-level resources. "
    "Long output is truncated to its most recent part, so prefer filters like grep when expecting large logs."
)

# --- FastAPI App ---
app = FastAPI(
    title="Node Debug MCP Server",
    description="An MCP server that runs diagnostic commands on Kubernetes nodes through privileged debug pods.",
    version=__version__,
)


def truncate_output(output: str, max_size: int) -> str:
    """Keep the most recent ``max_size`` characters of ``output``."""
    if max_size <= 0 or len(output) <= max_size:
        return output
    logger.info(f"Output truncated from {len(output)} to {max_size} characters")
    return TRUNCATION_NOTICE + output[-max_size:]


def error_result(error: NodeDebugError) -> CommandResult:
    return CommandResult(
        status="error",
        output=error.message,
        error=ErrorDetails(message=error.message, code=error.code, details=error.details),
        exit_code=error.exit_code if isinstance(error, NonZeroExitError) else None,
    )


# --- Command Execution Logic ---
async def execute_node_debug(
    req: ExecutionRequest,
    config: NodeDebugConfig,
    kubeconfig_b64: Optional[str] = None,
) -> CommandResult:
    """
    Run a node debug request and convert the outcome into a CommandResult.

    Failures are reported as a result with status "error" rather than raised, so the
    agent always receives the diagnostic text (exit code, reason, captured output).

    Args:
        req: The node debug request.
        config: Server configuration.
        kubeconfig_b64: An optional base64 encoded kubeconfig to use instead of the default one.

    Returns:
        A CommandResult object containing the execution result.
    """
    try:
        validate_request(req)
        check_execution_allowed(req, config)
        pod_api = create_pod_api(config, kubeconfig_b64)
        try:
            logger.info(f"Executing on node {req.node}: {' '.join(req.command)}")
            output = await NodeDebugExecutor(pod_api, config).execute(req)
        finally:
            pod_api.close()
    except NodeDebugError as e:
        logger.warning(f"Node debug on {req.node or '<unset>'} failed ({e.code}): {e.message.splitlines()[0]}")
        return error_result(e)

    if not output:
        output = f"Command executed successfully on node {req.node} but produced no output."
    return CommandResult(
        status="success",
        output=truncate_output(output, config.K8S_MCP_MAX_OUTPUT_SIZE),
        exit_code=0,
    )


# --- Tool Endpoints ---
@app.post("/tools/nodes_debug_exec",
          response_model=CommandResult,
          operation_id="nodes_debug_exec",
          summary="Nodes: Debug Exec",
          description=NODES_DEBUG_EXEC_DESCRIPTION)
async def nodes_debug_exec(req: ExecutionRequest, x_kubeconfig: Optional[str] = Header(None, alias="X-Kubeconfig")):
    """
    Execute a command on a node.

    Kubeconfig can be provided either through request body or X-Kubeconfig header.
    Header takes precedence over request body parameter.
    """
    kubeconfig = x_kubeconfig or req.kubeconfig
    return await execute_node_debug(req, get_config(), kubeconfig)


# --- Health Check ---
@app.get("/health",
         summary="Health check",
         description="Check if the server is running and healthy.")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


# --- Create and Mount MCP Server ---
mcp = FastApiMCP(
    app,
    name="Node Debug MCP Server",
    description="MCP server for running diagnostic commands on Kubernetes nodes",
    include_operations=["nodes_debug_exec"],  # Only expose the tool endpoint as an MCP tool
)

# Mount the MCP server to the FastAPI app
mcp.mount_http()
