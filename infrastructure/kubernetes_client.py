# ============================================================================
# KUBERNETES CLUSTER CLIENT
# ============================================================================
# STATUS: Infrastructure - ClusterClient over the official kubernetes client
# PURPOSE: Create / read batch/v1 Jobs and probe API discovery
# CREATED: 19 OCT 2026
# ============================================================================
"""
Kubernetes Cluster Client

Adapter from the kubernetes Python client to the ClusterClient interface.

Configuration is loaded in-cluster first (service account), falling back
to the local kubeconfig. Every call carries a (connect, read) request
timeout from ClusterDefaults.

Error mapping:
- ApiException on create          -> SubmissionError (status, reason, body)
- ApiException / network / malformed body on read -> TransientReadError
- Anything failing during probe   -> ConnectivityError

Usage:
    from infrastructure.kubernetes_client import KubernetesClusterClient

    cluster = KubernetesClusterClient.from_environment()
    cluster.probe()
"""

from typing import Any, Optional, Tuple

import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from core.config import ClusterDefaults, get_defaults
from core.errors import ConnectivityError, SubmissionError, TransientReadError
from core.logging import ComponentType, get_logger
from core.models import JobDefinition, JobIdentity, JobStatusSnapshot

logger = get_logger(__name__, ComponentType.CLUSTER)

# Failures on the wire that never produced an HTTP response
_NETWORK_ERRORS = (urllib3.exceptions.HTTPError, OSError)


def load_cluster_config() -> None:
    """
    Load in-cluster config, falling back to kubeconfig.

    Raises:
        ConnectivityError: If neither source is available
    """
    try:
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
        return
    except config.ConfigException:
        pass

    try:
        config.load_kube_config()
        logger.debug("Loaded kubeconfig Kubernetes configuration")
    except config.ConfigException as e:
        raise ConnectivityError(f"No Kubernetes cluster configured: {e}", cause=e) from e


class KubernetesClusterClient:
    """
    ClusterClient backed by BatchV1Api and CoreV1Api.

    When no API objects are injected, configuration is loaded lazily on
    first use, so a missing kubeconfig surfaces from probe() as a
    ConnectivityError.
    """

    def __init__(
        self,
        batch_api: Any = None,
        core_api: Any = None,
        defaults: Optional[ClusterDefaults] = None,
    ):
        """
        Args:
            batch_api: kubernetes.client.BatchV1Api (or a test double)
            core_api: kubernetes.client.CoreV1Api (or a test double)
            defaults: Cluster settings (timeouts); env-derived if omitted
        """
        self._batch = batch_api
        self._core = core_api
        self.defaults = defaults or get_defaults()

    @classmethod
    def from_environment(cls, defaults: Optional[ClusterDefaults] = None) -> "KubernetesClusterClient":
        """Client that loads in-cluster config or kubeconfig on first use."""
        return cls(defaults=defaults)

    def _connect(self) -> None:
        load_cluster_config()
        api_client = client.ApiClient()
        if self._batch is None:
            self._batch = client.BatchV1Api(api_client)
        if self._core is None:
            self._core = client.CoreV1Api(api_client)
        logger.info("Kubernetes client configured successfully")

    @property
    def batch_api(self) -> Any:
        if self._batch is None:
            self._connect()
        return self._batch

    @property
    def core_api(self) -> Any:
        if self._core is None:
            self._connect()
        return self._core

    @property
    def request_timeout(self) -> Tuple[float, float]:
        return (self.defaults.connect_timeout_seconds, self.defaults.read_timeout_seconds)

    # ================================================================
    # ClusterClient
    # ================================================================

    def probe(self) -> None:
        """Call batch/v1 API discovery once."""
        batch = self.batch_api
        try:
            batch.get_api_resources(_request_timeout=self.request_timeout)
        except ApiException as e:
            raise ConnectivityError(
                f"Kubernetes API rejected discovery: HTTP {e.status} {e.reason}", cause=e
            ) from e
        except Exception as e:
            raise ConnectivityError(f"Cannot connect to Kubernetes API: {e}", cause=e) from e

    def create_job(self, namespace: str, definition: JobDefinition) -> JobIdentity:
        try:
            created = self.batch_api.create_namespaced_job(
                namespace=namespace,
                body=definition.to_manifest(),
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            raise SubmissionError(
                f"Failed to create job {definition.name}: {e.reason or 'rejected'}",
                job_name=definition.name,
                status=e.status,
                reason=e.reason,
                body=_decode_body(e.body),
            ) from e
        except _NETWORK_ERRORS as e:
            raise SubmissionError(
                f"Failed to create job {definition.name}: {e}",
                job_name=definition.name,
            ) from e

        metadata = created.metadata
        return JobIdentity(
            name=metadata.name or definition.name,
            uid=metadata.uid or "",
            namespace=metadata.namespace or namespace,
        )

    def read_job(self, name: str, namespace: str) -> JobStatusSnapshot:
        try:
            job = self.batch_api.read_namespaced_job_status(
                name=name,
                namespace=namespace,
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            raise TransientReadError(
                f"Error reading job {name}: HTTP {e.status} {e.reason}",
                job_name=name,
                status=e.status,
            ) from e
        except _NETWORK_ERRORS as e:
            raise TransientReadError(f"Error reading job {name}: {e}", job_name=name) from e
        except ValueError as e:
            # Response body the client could not deserialize
            raise TransientReadError(f"Malformed status for job {name}: {e}", job_name=name) from e

        status = job.status
        if status is None:
            return JobStatusSnapshot()
        return JobStatusSnapshot(
            succeeded=status.succeeded,
            failed=status.failed,
            active=status.active,
        )

    def config_map_exists(self, name: str, namespace: str) -> bool:
        try:
            self.core_api.read_namespaced_config_map(
                name=name,
                namespace=namespace,
                _request_timeout=self.request_timeout,
            )
            return True
        except ApiException as e:
            if e.status == 404:
                return False
            raise TransientReadError(
                f"Error reading ConfigMap {name}: HTTP {e.status} {e.reason}", status=e.status
            ) from e
        except _NETWORK_ERRORS as e:
            raise TransientReadError(f"Error reading ConfigMap {name}: {e}") from e


def _decode_body(body: Any) -> Optional[str]:
    """ApiException.body may be bytes, str or None."""
    if body is None:
        return None
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return str(body)


__all__ = ["KubernetesClusterClient", "load_cluster_config"]
