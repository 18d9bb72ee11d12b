"""Pod access for the node debug executor.

``ClusterPodAPI`` is the narrow capability the executor needs: create, read and
delete a pod and fetch a container's logs. ``KubernetesPodAPI`` implements it on
top of the official ``kubernetes`` client; its blocking calls run in worker
threads so the executor can poll without blocking the event loop.
"""

import asyncio
import base64
import binascii
from pathlib import Path
from typing import Any, Optional, Protocol

import yaml
from kubernetes import client, config as k8s_config

from node_debug_mcp.config import NodeDebugConfig
from node_debug_mcp.errors import ClusterConfigError, InvalidInputError
from node_debug_mcp.logging_utils import get_logger

logger = get_logger("cluster")

IN_CLUSTER_NAMESPACE_FILE = Path("/var/run/secrets/kubernetes.io/serviceaccount/namespace")


class ClusterPodAPI(Protocol):
    """The pod operations the node debug executor depends on."""

    @property
    def default_namespace(self) -> Optional[str]:
        """Namespace configured for the client, if any."""
        ...

    async def create_pod(self, namespace: str, pod: client.V1Pod) -> client.V1Pod:
        ...

    async def get_pod(self, namespace: str, name: str) -> client.V1Pod:
        ...

    async def delete_pod(self, namespace: str, name: str) -> None:
        ...

    async def get_container_logs(
        self,
        namespace: str,
        pod_name: str,
        container: str,
        previous: bool = False,
        tail_lines: Optional[int] = None,
    ) -> str:
        ...


class KubernetesPodAPI:
    """``ClusterPodAPI`` backed by ``kubernetes.client.CoreV1Api``."""

    def __init__(
        self,
        api_client: client.ApiClient,
        default_namespace: Optional[str] = None,
        request_timeout: Optional[float] = None,
    ):
        self._api_client = api_client
        self._core_v1 = client.CoreV1Api(api_client)
        self._default_namespace = default_namespace
        self._request_timeout = request_timeout

    @property
    def default_namespace(self) -> Optional[str]:
        return self._default_namespace

    async def create_pod(self, namespace: str, pod: client.V1Pod) -> client.V1Pod:
        return await asyncio.to_thread(
            self._core_v1.create_namespaced_pod,
            namespace=namespace,
            body=pod,
            _request_timeout=self._request_timeout,
        )

    async def get_pod(self, namespace: str, name: str) -> client.V1Pod:
        return await asyncio.to_thread(
            self._core_v1.read_namespaced_pod,
            name=name,
            namespace=namespace,
            _request_timeout=self._request_timeout,
        )

    async def delete_pod(self, namespace: str, name: str) -> None:
        await asyncio.to_thread(
            self._core_v1.delete_namespaced_pod,
            name=name,
            namespace=namespace,
            _request_timeout=self._request_timeout,
        )

    async def get_container_logs(
        self,
        namespace: str,
        pod_name: str,
        container: str,
        previous: bool = False,
        tail_lines: Optional[int] = None,
    ) -> str:
        kwargs: dict[str, Any] = {
            "name": pod_name,
            "namespace": namespace,
            "container": container,
            "previous": previous,
            # Raw body: the client would otherwise json.loads logs that look like JSON.
            "_preload_content": False,
            "_request_timeout": self._request_timeout,
        }
        # No tail_lines means the whole log.
        if tail_lines and tail_lines > 0:
            kwargs["tail_lines"] = tail_lines
        response = await asyncio.to_thread(self._core_v1.read_namespaced_pod_log, **kwargs)
        return response.data.decode("utf-8", errors="replace")

    def close(self) -> None:
        """Release the client's worker pool and pooled HTTP connections."""
        self._api_client.close()
        self._api_client.rest_client.pool_manager.clear()


def _context_namespace(kubeconfig: dict[str, Any], context: Optional[str]) -> Optional[str]:
    """Return the namespace of the selected (or current) context of a kubeconfig dict."""
    name = context or kubeconfig.get("current-context")
    for entry in kubeconfig.get("contexts") or []:
        if entry.get("name") == name:
            return (entry.get("context") or {}).get("namespace")
    return None


def _kubeconfig_namespace(context: Optional[str]) -> Optional[str]:
    try:
        contexts, active = k8s_config.list_kube_config_contexts()
    except k8s_config.ConfigException:
        return None
    if context:
        active = next((c for c in contexts if c.get("name") == context), None)
    if not active:
        return None
    return (active.get("context") or {}).get("namespace")


def _in_cluster_namespace() -> Optional[str]:
    try:
        return IN_CLUSTER_NAMESPACE_FILE.read_text().strip() or None
    except OSError:
        return None


def load_api_client(context: Optional[str] = None) -> tuple[client.ApiClient, Optional[str]]:
    """Load cluster credentials and return an API client and the configured namespace.

    Kubeconfig (KUBECONFIG or ~/.kube/config) is tried first, optionally with a named
    context; the in-cluster service account is the fallback.
    """
    try:
        k8s_config.load_kube_config(context=context)
        namespace = _kubeconfig_namespace(context)
        logger.debug(f"Loaded kubeconfig (context={context or 'current'})")
    except k8s_config.ConfigException as kube_error:
        try:
            k8s_config.load_incluster_config()
        except k8s_config.ConfigException as e:
            raise ClusterConfigError(
                f"Failed to load Kubernetes configuration: {kube_error}; in-cluster: {e}"
            ) from e
        namespace = _in_cluster_namespace()
        logger.debug("Loaded in-cluster configuration")
    return client.ApiClient(), namespace


def api_client_from_kubeconfig(
    kubeconfig_b64: str, context: Optional[str] = None
) -> tuple[client.ApiClient, Optional[str]]:
    """Build an API client from base64 encoded kubeconfig content.

    Raises:
        InvalidInputError: If the content is not a base64 encoded kubeconfig document
    """
    try:
        decoded = base64.b64decode(kubeconfig_b64, validate=True).decode("utf-8")
        kubeconfig = yaml.safe_load(decoded)
    except (binascii.Error, UnicodeDecodeError, yaml.YAMLError) as e:
        raise InvalidInputError(f"Invalid base64 kubeconfig: {e}") from e
    if not isinstance(kubeconfig, dict):
        raise InvalidInputError("Invalid base64 kubeconfig: not a kubeconfig document")

    try:
        api_client = k8s_config.new_client_from_config_dict(kubeconfig, context=context)
    except k8s_config.ConfigException as e:
        raise InvalidInputError(f"Invalid kubeconfig: {e}") from e
    return api_client, _context_namespace(kubeconfig, context)


def create_pod_api(cfg: NodeDebugConfig, kubeconfig_b64: Optional[str] = None) -> KubernetesPodAPI:
    """Create the pod API for a request, using the supplied kubeconfig when given."""
    if kubeconfig_b64:
        logger.info("Using request-supplied kubeconfig")
        api_client, namespace = api_client_from_kubeconfig(kubeconfig_b64)
    else:
        api_client, namespace = load_api_client(cfg.K8S_CONTEXT)
    return KubernetesPodAPI(
        api_client,
        default_namespace=cfg.K8S_NAMESPACE or namespace,
        request_timeout=cfg.K8S_MCP_REQUEST_TIMEOUT,
    )
