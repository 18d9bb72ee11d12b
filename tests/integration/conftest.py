# File: tests/integration/conftest.py
import os
import uuid
from contextlib import contextmanager

import pytest
from kubernetes import client

from node_debug_mcp.cluster import create_pod_api, load_api_client
from node_debug_mcp.config import NodeDebugConfig


class KubernetesClusterManager:
    """Manager class for Kubernetes cluster operations during tests."""

    def __init__(self):
        self.context = os.environ.get("K8S_CONTEXT")
        self.use_existing = os.environ.get("K8S_MCP_TEST_USE_EXISTING_CLUSTER", "false").lower() == "true"
        self.skip_cleanup = os.environ.get("K8S_SKIP_CLEANUP", "").lower() == "true"
        self.core_v1 = None

    def verify_connection(self):
        """Verify connection to the Kubernetes cluster."""
        try:
            api_client, _ = load_api_client(self.context)
            self.core_v1 = client.CoreV1Api(api_client)
            self.core_v1.list_namespace(limit=1, _request_timeout=20)
            print("Cluster connection verified")
            return True
        except Exception as e:
            print(f"Cluster connection failed: {str(e)}")
            return False

    def ready_node(self):
        """Return the name of a schedulable node in Ready state, if any."""
        for node in self.core_v1.list_node(_request_timeout=20).items:
            if node.spec.unschedulable:
                continue
            for condition in node.status.conditions or []:
                if condition.type == "Ready" and condition.status == "True":
                    return node.metadata.name
        return None

    def create_namespace(self, name=None):
        """Create a test namespace with optional name."""
        if name is None:
            name = f"node-debug-test-{uuid.uuid4().hex[:8]}"

        body = client.V1Namespace(metadata=client.V1ObjectMeta(name=name))
        try:
            self.core_v1.create_namespace(body=body, _request_timeout=10)
            print(f"Created test namespace: {name}")
        except client.ApiException as e:
            if e.status != 409:
                raise
            print(f"Namespace {name} already exists, reusing")
        return name

    def delete_namespace(self, name):
        """Delete the specified namespace."""
        if self.skip_cleanup:
            print(f"Skipping cleanup of namespace {name} as requested")
            return

        try:
            self.core_v1.delete_namespace(name=name, _request_timeout=10)
            print(f"Deleted test namespace: {name}")
        except Exception as e:
            print(f"Warning: Failed to delete namespace {name}: {str(e)}")

    @contextmanager
    def temp_namespace(self):
        """Context manager for a temporary namespace."""
        name = self.create_namespace()
        try:
            yield name
        finally:
            self.delete_namespace(name)


@pytest.fixture(scope="session")
def k8s_cluster():
    """Fixture that provides a KubernetesClusterManager.

    Debug pods are privileged and land on real nodes, so the tests only run
    against a cluster explicitly opted in with K8S_MCP_TEST_USE_EXISTING_CLUSTER=true.
    """
    manager = KubernetesClusterManager()

    if not manager.use_existing:
        pytest.skip("Set K8S_MCP_TEST_USE_EXISTING_CLUSTER=true to run node debug integration tests")

    # Skip tests if we can't connect to the cluster
    if not manager.verify_connection():
        pytest.skip("Cannot connect to Kubernetes cluster")

    return manager


@pytest.fixture
def k8s_namespace(k8s_cluster):
    """Fixture that provides a temporary namespace for tests."""
    with k8s_cluster.temp_namespace() as name:
        yield name


@pytest.fixture
def k8s_node(k8s_cluster):
    """Fixture that provides a node to debug."""
    node = os.environ.get("K8S_MCP_TEST_NODE") or k8s_cluster.ready_node()
    if not node:
        pytest.skip("No schedulable Ready node available")
    return node


@pytest.fixture
def integration_config(k8s_cluster):
    return NodeDebugConfig(
        K8S_CONTEXT=k8s_cluster.context,
        NODE_DEBUG_TIMEOUT=float(os.environ.get("K8S_MCP_TEST_DEBUG_TIMEOUT", "180")),
        NODE_DEBUG_POLL_INTERVAL=1,
    )


@pytest.fixture
def pod_api(integration_config):
    return create_pod_api(integration_config)
