# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Strategy policy table and cluster defaults
# PURPOSE: Every image, command, resource size and poll budget per strategy
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

One policy table keyed by MetricsStrategy replaces a class per strategy.
Everything the builder and monitor need is a constant here; only the
cluster connection settings are read from the environment.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides for cluster settings only
- Type-safe access via get_strategy_policy()
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

from core.contracts import MetricsStrategy
from core.models.job_definition import (
    ConfigMapSource,
    ContainerSpec,
    EmptyDirSource,
    ResourceRequirements,
    VolumeMount,
    VolumeSpec,
)
from core.models.poll_policy import PollPolicy


BUSYBOX_IMAGE = "busybox:latest"
OTEL_COLLECTOR_IMAGE = "otel/opentelemetry-collector-contrib:0.80.0"
OTEL_CONFIG_MAP = "otel-sidecar-config"
METRICS_FILE_PATH = "/tmp/metrics.prom"
JOB_TTL_SECONDS = 300

_SMALL_WORKLOAD = ResourceRequirements(
    requests={"cpu": "100m", "memory": "64Mi"},
    limits={"cpu": "200m", "memory": "128Mi"},
)
_COLLECTOR = ResourceRequirements(
    requests={"cpu": "100m", "memory": "128Mi"},
    limits={"cpu": "200m", "memory": "256Mi"},
)


# ============================================================================
# CLUSTER
# ============================================================================

@dataclass(frozen=True)
class ClusterDefaults:
    """Connection settings for the Kubernetes API."""
    namespace: str = "default"
    connect_timeout_seconds: float = 30.0
    read_timeout_seconds: float = 30.0
    created_by: str = "metrics-job-orchestrator"

    @classmethod
    def from_env(cls) -> "ClusterDefaults":
        """Create from environment variables."""
        return cls(
            namespace=os.getenv("K8S_NAMESPACE", "default"),
            connect_timeout_seconds=float(os.getenv("K8S_CONNECT_TIMEOUT_SEC", 30)),
            read_timeout_seconds=float(os.getenv("K8S_READ_TIMEOUT_SEC", 30)),
            created_by=os.getenv("JOB_CREATED_BY", "metrics-job-orchestrator"),
        )


# ============================================================================
# STRATEGY POLICY
# ============================================================================

@dataclass(frozen=True)
class StrategyPolicy:
    """
    Fixed policy for one metrics strategy.

    Containers are listed main workload first.
    """
    strategy: MetricsStrategy
    base_name: str
    app_label: str
    pod_app_label: str
    containers: Tuple[ContainerSpec, ...]
    volumes: Tuple[VolumeSpec, ...] = ()
    share_process_namespace: bool = False
    backoff_limit: int = 0
    ttl_seconds_after_finished: int = JOB_TTL_SECONDS
    poll: PollPolicy = field(default_factory=PollPolicy)
    # Shown to the operator after the job reaches a terminal state
    hints: Tuple[str, ...] = ()

    @property
    def metrics_type(self) -> str:
        return self.strategy.value

    @property
    def config_map_names(self) -> Tuple[str, ...]:
        """ConfigMaps that must exist in the namespace before submission."""
        return tuple(v.config_map.name for v in self.volumes if v.config_map is not None)

    def labels(self, created_by: str) -> Dict[str, str]:
        return {
            "app": self.app_label,
            "metrics-type": self.metrics_type,
            "created-by": created_by,
        }


SIDECAR_POLICY = StrategyPolicy(
    strategy=MetricsStrategy.SIDECAR,
    base_name="busybox-monitored-job",
    app_label="busybox-monitored",
    pod_app_label="busybox-with-metrics",
    containers=(
        ContainerSpec(
            name="busybox-main",
            image=BUSYBOX_IMAGE,
            command=("sh", "-c"),
            args=(
                "echo 'Starting Busybox workload'; "
                "echo 'Monitoring with OpenTelemetry'; "
                "counter=0; "
                "while [ $counter -lt 35 ]; do "
                "  echo 'Processing iteration: ' $counter; "
                "  sleep 5; "
                "  counter=$((counter + 1)); "
                "done; "
                "echo 'Workload completed successfully'",
            ),
            resources=_SMALL_WORKLOAD,
        ),
        ContainerSpec(
            name="otel-sidecar",
            image=OTEL_COLLECTOR_IMAGE,
            command=("/otelcol-contrib",),
            args=("--config=/etc/otel-config.yaml",),
            resources=_COLLECTOR,
            volume_mounts=(
                VolumeMount(
                    name="otel-config",
                    mount_path="/etc/otel-config.yaml",
                    sub_path="otel-config.yaml",
                ),
            ),
        ),
    ),
    volumes=(
        VolumeSpec(
            name="otel-config",
            config_map=ConfigMapSource(name=OTEL_CONFIG_MAP, default_mode=420),
        ),
    ),
    share_process_namespace=True,
    # Tolerates one sidecar startup race
    backoff_limit=1,
    poll=PollPolicy(max_attempts=15, interval_seconds=5.0),
    hints=(
        "Check sidecar logs for collected metrics: kubectl logs <pod-name> -c otel-sidecar",
        "Find the pod with: kubectl get pods -l app=busybox-with-metrics",
    ),
)


FILE_BASED_POLICY = StrategyPolicy(
    strategy=MetricsStrategy.FILE_BASED,
    base_name="busybox-file-metrics",
    app_label="busybox-file-metrics",
    pod_app_label="busybox-file-metrics",
    containers=(
        ContainerSpec(
            name="busybox-file-metrics",
            image=BUSYBOX_IMAGE,
            command=("sh", "-c"),
            args=(
                "echo 'Starting Busybox metrics workload'; "
                "counter=0; "
                "while [ $counter -lt 5 ]; do "
                "  { echo \"workload_progress $counter\"; "
                "    echo \"items_processed_total $((counter * 10))\"; "
                "    echo \"errors_encountered_total $((counter / 2))\"; "
                f"  }} > {METRICS_FILE_PATH}.tmp && mv {METRICS_FILE_PATH}.tmp {METRICS_FILE_PATH}; "
                f"  cat {METRICS_FILE_PATH}; "
                "  sleep 2; "
                "  counter=$((counter + 1)); "
                "done; "
                "{ echo \"workload_progress $counter\"; "
                "  echo 'workload_duration_seconds 10'; "
                f"  echo 'workload_status 1'; }} > {METRICS_FILE_PATH}; "
                f"cat {METRICS_FILE_PATH}; "
                "echo 'Workload completed'; "
                "exit 0",
            ),
            resources=_SMALL_WORKLOAD,
            volume_mounts=(
                VolumeMount(name="metrics-volume", mount_path="/tmp"),
            ),
        ),
    ),
    volumes=(
        VolumeSpec(name="metrics-volume", empty_dir=EmptyDirSource()),
    ),
    backoff_limit=0,
    poll=PollPolicy(max_attempts=20, interval_seconds=5.0),
    hints=(
        f"Metrics were written to {METRICS_FILE_PATH}; check the collector agent logs for scraped metrics",
        "Find the pod with: kubectl get pods -l app=busybox-file-metrics",
    ),
)


DATABASE_POLICY = StrategyPolicy(
    strategy=MetricsStrategy.DATABASE,
    base_name="database-metrics",
    app_label="database-metrics",
    pod_app_label="database-metrics",
    containers=(
        ContainerSpec(
            name="database-metrics-generator",
            image=BUSYBOX_IMAGE,
            command=("sh", "-c"),
            args=(
                "echo 'Starting database metrics'; "
                "echo 'db_queries_total 10'; "
                "echo 'db_connections_active 5'; "
                "echo 'db_response_time_seconds 0.25'; "
                "echo 'Database metrics done'; "
                "exit 0",
            ),
            resources=_SMALL_WORKLOAD,
        ),
    ),
    backoff_limit=0,
    poll=PollPolicy(max_attempts=10, interval_seconds=3.0),
    hints=(
        "Metric lines are in the container output: kubectl logs <pod-name> -c database-metrics-generator",
        "Find the pod with: kubectl get pods -l app=database-metrics",
    ),
)


STRATEGY_POLICIES: Dict[MetricsStrategy, StrategyPolicy] = {
    MetricsStrategy.SIDECAR: SIDECAR_POLICY,
    MetricsStrategy.FILE_BASED: FILE_BASED_POLICY,
    MetricsStrategy.DATABASE: DATABASE_POLICY,
}


def get_strategy_policy(strategy: MetricsStrategy) -> StrategyPolicy:
    """Look up the fixed policy for a strategy."""
    try:
        return STRATEGY_POLICIES[strategy]
    except KeyError:
        raise KeyError(f"No policy registered for strategy: {strategy}") from None


def get_defaults() -> ClusterDefaults:
    """Cluster defaults with environment overrides applied."""
    return ClusterDefaults.from_env()


__all__ = [
    "ClusterDefaults",
    "StrategyPolicy",
    "STRATEGY_POLICIES",
    "SIDECAR_POLICY",
    "FILE_BASED_POLICY",
    "DATABASE_POLICY",
    "METRICS_FILE_PATH",
    "OTEL_CONFIG_MAP",
    "JOB_TTL_SECONDS",
    "get_strategy_policy",
    "get_defaults",
]
