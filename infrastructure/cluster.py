# ============================================================================
# CLUSTER CLIENT INTERFACE
# ============================================================================
# STATUS: Infrastructure - Boundary to the Kubernetes control plane
# PURPOSE: The four calls the orchestrator needs from a cluster
# CREATED: 19 OCT 2026
# ============================================================================
"""
Cluster Client Interface

The orchestrator never talks to the Kubernetes API directly; it is handed
something that satisfies ClusterClient. The production implementation is
infrastructure.kubernetes_client.KubernetesClusterClient. Tests use
hand-written fakes.

Error contract:
    create_job        -> SubmissionError on rejection
    read_job          -> TransientReadError on a failed read
    probe             -> ConnectivityError when unreachable
    config_map_exists -> TransientReadError when the lookup itself fails
"""

from typing import Protocol, runtime_checkable

from core.models import JobDefinition, JobIdentity, JobStatusSnapshot


@runtime_checkable
class ClusterClient(Protocol):
    """Narrow view of the cluster used by one orchestration run."""

    def create_job(self, namespace: str, definition: JobDefinition) -> JobIdentity:
        """Create the job; return its cluster-assigned identity."""
        ...

    def read_job(self, name: str, namespace: str) -> JobStatusSnapshot:
        """Read the job's current status counters."""
        ...

    def probe(self) -> None:
        """Verify the batch API is reachable."""
        ...

    def config_map_exists(self, name: str, namespace: str) -> bool:
        """Check whether a ConfigMap exists in the namespace."""
        ...


__all__ = ["ClusterClient"]
