"""Run commands on cluster nodes through short-lived privileged pods.

``NodeDebugExecutor.execute`` mimics ``oc debug node/<name> -- <command...>``:
it creates a debug pod pinned to the node, polls it until the debug container
terminates, collects the container logs and classifies the outcome. The pod is
deleted on every exit path once it has been created.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from kubernetes import client

from node_debug_mcp.config import (
    DEFAULT_NAMESPACE,
    IMAGE_PULL_FAILURE_REASONS,
    NODE_DEBUG_CONTAINER_NAME,
    NodeDebugConfig,
)
from node_debug_mcp.cluster import ClusterPodAPI
from node_debug_mcp.errors import (
    DebugPodTimeoutError,
    ImagePullError,
    IncompleteExecutionError,
    InvalidInputError,
    LogRetrievalError,
    NonZeroExitError,
    PodCreationError,
    PodFailedError,
    PodStatusError,
)
from node_debug_mcp.logging_utils import get_logger
from node_debug_mcp.models import ExecutionRequest
from node_debug_mcp.pod_spec import build_debug_pod, generate_pod_name

logger = get_logger("node_debug")


@dataclass
class PollResult:
    """What polling observed when it stopped."""

    terminated: Optional[client.V1ContainerStateTerminated] = None
    pod: Optional[client.V1Pod] = None
    wait_message: str = ""


def container_status_by_name(
    pod: client.V1Pod, name: str
) -> Optional[client.V1ContainerStatus]:
    status = pod.status
    if status is None:
        return None
    for container_status in status.container_statuses or []:
        if container_status.name == name:
            return container_status
    return None


def _with_output(message: str, logs: str) -> str:
    if logs:
        return f"{message}\nOutput:\n{logs}"
    return message


def process_results(
    terminated: Optional[client.V1ContainerStateTerminated],
    pod: Optional[client.V1Pod],
    wait_message: str,
    logs: str,
) -> str:
    """Classify the final state of the debug container.

    Returns:
        The logs when the container terminated with exit code 0

    Raises:
        NonZeroExitError: The command exited with a non-zero code
        PodFailedError: The pod failed without a terminated container state
        IncompleteExecutionError: The container never reached a terminal state
    """
    details = {"output": logs} if logs else {}

    if terminated is not None:
        if terminated.exit_code != 0:
            message = f"command exited with code {terminated.exit_code}"
            if terminated.reason:
                message = f"{message} ({terminated.reason})"
            if terminated.message:
                message = f"{message}: {terminated.message}"
            raise NonZeroExitError(
                _with_output(message, logs), terminated.exit_code, details
            )
        return logs

    pod_reason = pod.status.reason if pod is not None and pod.status is not None else None
    if pod_reason:
        raise PodFailedError(_with_output(f"debug pod failed: {pod_reason}", logs), details)
    if wait_message:
        raise IncompleteExecutionError(
            _with_output(f"debug container did not complete: {wait_message}", logs), details
        )
    raise IncompleteExecutionError(
        _with_output("debug container did not reach a terminal state", logs), details
    )


def validate_request(request: ExecutionRequest) -> None:
    if not request.node:
        raise InvalidInputError("node name is required")
    if not request.command:
        raise InvalidInputError("command is required")


class NodeDebugExecutor:
    """Executes one command per call on a node via a privileged debug pod.

    The executor holds no per-call state; concurrent calls each own the uniquely
    named pod they create.
    """

    def __init__(self, api: ClusterPodAPI, config: Optional[NodeDebugConfig] = None):
        self._api = api
        self._config = config or NodeDebugConfig()

    def resolve_namespace(self, namespace: Optional[str]) -> str:
        return namespace or self._api.default_namespace or DEFAULT_NAMESPACE

    def resolve_image(self, image: Optional[str]) -> str:
        return image or self._config.NODE_DEBUG_IMAGE

    def resolve_timeout(self, timeout_seconds: Optional[float]) -> float:
        if timeout_seconds is not None and timeout_seconds > 0:
            return float(timeout_seconds)
        return self._config.NODE_DEBUG_TIMEOUT

    async def execute(self, request: ExecutionRequest) -> str:
        """Run ``request.command`` on ``request.node`` and return its output.

        Args:
            request: The node, command and optional namespace/image/timeout

        Returns:
            The trimmed container logs of a command that exited with code 0

        Raises:
            NodeDebugError: A subclass identifying the phase that failed
        """
        validate_request(request)

        namespace = self.resolve_namespace(request.namespace)
        image = self.resolve_image(request.image)
        timeout = self.resolve_timeout(request.timeout_seconds)

        pod_name = await self._create_debug_pod(request.node, namespace, image, request.command)
        try:
            result = await self._poll_for_completion(namespace, pod_name, timeout)
            logs = await self._retrieve_logs(namespace, pod_name)
            return process_results(result.terminated, result.pod, result.wait_message, logs)
        finally:
            await self._delete_debug_pod(namespace, pod_name)

    async def _create_debug_pod(
        self, node_name: str, namespace: str, image: str, command: list[str]
    ) -> str:
        pod = build_debug_pod(generate_pod_name(node_name), node_name, namespace, image, command)
        try:
            created = await self._api.create_pod(namespace, pod)
        except Exception as e:
            raise PodCreationError(
                f"failed to create debug pod: {e}", {"node": node_name, "namespace": namespace}
            ) from e
        name = created.metadata.name if created.metadata and created.metadata.name else pod.metadata.name
        logger.info(f"Created debug pod {namespace}/{name} on node {node_name} with image {image}")
        return name

    async def _delete_debug_pod(self, namespace: str, pod_name: str) -> None:
        """Best-effort delete; failures never replace the execution outcome."""
        try:
            await asyncio.wait_for(
                self._api.delete_pod(namespace, pod_name),
                timeout=self._config.NODE_DEBUG_CLEANUP_TIMEOUT,
            )
            logger.debug(f"Deleted debug pod {namespace}/{pod_name}")
        except Exception as e:
            logger.warning(f"Failed to delete debug pod {namespace}/{pod_name}: {e}")

    async def _poll_for_completion(self, namespace: str, pod_name: str, timeout: float) -> PollResult:
        try:
            return await asyncio.wait_for(self._poll(namespace, pod_name), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Timed out after {timeout}s waiting for debug pod {namespace}/{pod_name}")
            raise DebugPodTimeoutError(
                f"timed out waiting for debug pod {pod_name} to complete: "
                f"deadline of {timeout:g}s exceeded",
                {"pod_name": pod_name, "timeout_seconds": timeout},
            ) from e

    async def _poll(self, namespace: str, pod_name: str) -> PollResult:
        result = PollResult()
        while True:
            try:
                current = await self._api.get_pod(namespace, pod_name)
            except Exception as e:
                raise PodStatusError(
                    f"failed to get debug pod status: {e}", {"pod_name": pod_name}
                ) from e
            result.pod = current

            status = container_status_by_name(current, NODE_DEBUG_CONTAINER_NAME)
            state = status.state if status is not None else None
            if state is not None:
                if state.waiting is not None:
                    reason = state.waiting.reason or ""
                    result.wait_message = f"container waiting: {reason}"
                    logger.debug(f"Debug pod {pod_name} waiting: {reason}")
                    if reason in IMAGE_PULL_FAILURE_REASONS:
                        logger.warning(f"Debug pod {pod_name} cannot pull its image: {reason}")
                        raise ImagePullError(
                            f"debug container failed to start ({reason}): {state.waiting.message or ''}",
                            {"pod_name": pod_name, "reason": reason},
                        )
                if state.terminated is not None:
                    result.terminated = state.terminated
                    return result

            if current.status is not None and current.status.phase == "Failed":
                return result

            await asyncio.sleep(self._config.NODE_DEBUG_POLL_INTERVAL)

    async def _retrieve_logs(self, namespace: str, pod_name: str) -> str:
        try:
            logs = await asyncio.wait_for(
                self._api.get_container_logs(
                    namespace, pod_name, NODE_DEBUG_CONTAINER_NAME, previous=False, tail_lines=None
                ),
                timeout=self._config.NODE_DEBUG_LOG_TIMEOUT,
            )
        except Exception as e:
            raise LogRetrievalError(
                f"failed to retrieve debug pod logs: {e}", {"pod_name": pod_name}
            ) from e
        return (logs or "").strip()
