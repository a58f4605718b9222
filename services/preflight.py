# ============================================================================
# PRE-FLIGHT CONNECTIVITY PROBE
# ============================================================================
# STATUS: Service - Cluster reachability before submission
# PURPOSE: One best-effort discovery call; nothing is submitted if it fails
# CREATED: 19 OCT 2026
# ============================================================================
"""
Pre-flight Connectivity Probe

Runs before a job definition is submitted:
  1. API discovery (blocking): a single call, never retried here.
     Any failure (timeout, auth, network) means "unavailable".
  2. ConfigMap presence (advisory): for strategies that mount a
     ConfigMap, report a warning if it is missing. Warnings never
     block submission.

PreflightResult collects everything found rather than stopping at the
first problem.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from core.errors import TransientReadError
from core.logging import ComponentType, get_logger
from core.observability import JobObserver, NoOpObserver
from infrastructure.cluster import ClusterClient

logger = get_logger(__name__, ComponentType.PREFLIGHT)


# ============================================================================
# RESULT
# ============================================================================

@dataclass
class PreflightResult:
    """
    Result of pre-flight checks.

    valid is False only when the cluster is unreachable.
    """
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    cause: Optional[BaseException] = None


# ============================================================================
# PROBE
# ============================================================================

class ConnectivityProbe:
    """Checks that the cluster control plane is reachable."""

    def __init__(self, cluster: ClusterClient, observer: Optional[JobObserver] = None):
        self.cluster = cluster
        self.observer = observer or NoOpObserver()

    def is_available(self) -> bool:
        """Single discovery call; True if it succeeded."""
        return self.check().valid

    def check(
        self,
        namespace: Optional[str] = None,
        config_maps: Iterable[str] = (),
    ) -> PreflightResult:
        """
        Run pre-flight checks.

        Args:
            namespace: Namespace the job will be created in
            config_maps: ConfigMaps the job mounts (checked only if namespace given)

        Returns:
            PreflightResult with collected errors and warnings.
        """
        logger.info("Testing connection to Kubernetes API...")
        try:
            self.cluster.probe()
        except Exception as e:
            # Best effort: every failure is "unavailable"
            self.observer.record_error(e)
            logger.error(f"Cannot connect to Kubernetes API: {e}")
            return PreflightResult(
                valid=False,
                errors=[f"Kubernetes API unavailable: {e}"],
                cause=e,
            )

        self.observer.add_event("Kubernetes API connection successful")
        logger.info("Connected to Kubernetes API successfully")

        warnings: List[str] = []
        if namespace:
            warnings.extend(self._check_config_maps(config_maps, namespace))

        return PreflightResult(valid=True, warnings=warnings)

    def _check_config_maps(self, names: Iterable[str], namespace: str) -> List[str]:
        """Advisory ConfigMap lookups; problems become warnings."""
        warnings = []
        for name in names:
            try:
                exists = self.cluster.config_map_exists(name, namespace)
            except TransientReadError as e:
                warnings.append(f"Could not verify ConfigMap {namespace}/{name}: {e}")
                continue
            if not exists:
                warnings.append(
                    f"ConfigMap {namespace}/{name} not found; "
                    f"create it before the pod starts (kubectl apply -f {name}.yaml)"
                )
        for warning in warnings:
            logger.warning(warning)
            self.observer.add_event("Preflight warning", {"warning": warning})
        return warnings


__all__ = ["PreflightResult", "ConnectivityProbe"]
