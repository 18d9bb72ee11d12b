"""Helper utilities for Node Debug MCP Server tests."""

import asyncio
from typing import Optional

from kubernetes import client

from node_debug_mcp.config import NODE_DEBUG_CONTAINER_NAME


def waiting_state(reason: str, message: Optional[str] = None) -> client.V1ContainerState:
    return client.V1ContainerState(waiting=client.V1ContainerStateWaiting(reason=reason, message=message))


def running_state() -> client.V1ContainerState:
    return client.V1ContainerState(running=client.V1ContainerStateRunning())


def terminated_state(
    exit_code: int, reason: Optional[str] = None, message: Optional[str] = None
) -> client.V1ContainerState:
    return client.V1ContainerState(
        terminated=client.V1ContainerStateTerminated(exit_code=exit_code, reason=reason, message=message)
    )


def pod_status(
    state: Optional[client.V1ContainerState] = None,
    phase: str = "Running",
    reason: Optional[str] = None,
) -> client.V1PodStatus:
    """Build a pod status with the debug container in ``state``."""
    statuses = None
    if state is not None:
        statuses = [
            client.V1ContainerStatus(
                name=NODE_DEBUG_CONTAINER_NAME,
                image="registry.example/debug:latest",
                image_id="",
                ready=False,
                restart_count=0,
                state=state,
            )
        ]
    return client.V1PodStatus(phase=phase, reason=reason, container_statuses=statuses)


class FakePodAPI:
    """In-memory ClusterPodAPI with scripted pod statuses.

    ``statuses`` are returned by successive ``get_pod`` calls; the last one repeats.
    Set one of the ``*_error`` attributes to make the matching call fail.
    """

    def __init__(self, statuses=None, logs: str = "", default_namespace: Optional[str] = None):
        self.statuses = list(statuses or [pod_status(terminated_state(0), phase="Succeeded")])
        self.logs = logs
        self._default_namespace = default_namespace
        self.pods: dict[str, client.V1Pod] = {}
        self.created: list[client.V1Pod] = []
        self.deleted: list[tuple[str, str]] = []
        self.calls: list[str] = []
        self.log_requests: list[dict] = []
        self.get_count = 0
        self.create_error: Optional[Exception] = None
        self.get_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.logs_error: Optional[Exception] = None
        self.delete_delay = 0.0
        self.closed = False

    @property
    def default_namespace(self) -> Optional[str]:
        return self._default_namespace

    @property
    def last_created(self) -> Optional[client.V1Pod]:
        return self.created[-1] if self.created else None

    async def create_pod(self, namespace, pod):
        self.calls.append("create")
        if self.create_error:
            raise self.create_error
        self.created.append(pod)
        self.pods[pod.metadata.name] = pod
        return pod

    async def get_pod(self, namespace, name):
        self.calls.append("get")
        if self.get_error:
            raise self.get_error
        if name not in self.pods:
            raise RuntimeError("pod not created yet")
        status = self.statuses[min(self.get_count, len(self.statuses) - 1)]
        self.get_count += 1
        created = self.pods[name]
        return client.V1Pod(metadata=created.metadata, spec=created.spec, status=status)

    async def delete_pod(self, namespace, name):
        self.calls.append("delete")
        if self.delete_delay:
            await asyncio.sleep(self.delete_delay)
        if self.delete_error:
            raise self.delete_error
        self.deleted.append((namespace, name))
        self.pods.pop(name, None)

    async def get_container_logs(self, namespace, pod_name, container, previous=False, tail_lines=None):
        self.calls.append("logs")
        self.log_requests.append(
            {"pod_name": pod_name, "container": container, "previous": previous, "tail_lines": tail_lines}
        )
        if self.logs_error:
            raise self.logs_error
        return self.logs

    def close(self):
        self.closed = True
