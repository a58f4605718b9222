# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Cluster access
# PURPOSE: ClusterClient interface and its Kubernetes implementation
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for the metrics job orchestrator.

Provides:
- ClusterClient: the interface a run consumes
- KubernetesClusterClient: implementation over the kubernetes client

Usage:
    from infrastructure import KubernetesClusterClient

    cluster = KubernetesClusterClient.from_environment()
"""

from infrastructure.cluster import ClusterClient
from infrastructure.kubernetes_client import (
    KubernetesClusterClient,
    load_cluster_config,
)

__all__ = [
    "ClusterClient",
    "KubernetesClusterClient",
    "load_cluster_config",
]
