# ============================================================================
# JOB DEFINITION BUILDER
# ============================================================================
# STATUS: Service - Pure construction of strategy-specific job definitions
# PURPOSE: Strategy + policy table -> validated, immutable JobDefinition
# CREATED: 19 OCT 2026
# ============================================================================
"""
Job Definition Builder

No I/O. Given a strategy, the builder copies the fixed policy (containers,
volumes, resources, backoff, TTL) into a JobDefinition with a unique name.
The only non-deterministic part of the output is the name suffix.

Structural validation lives on the JobDefinition model; any violation is
re-raised as ConstructionError so the run aborts before submission.
"""

import threading
import time
from typing import Callable, Optional

from pydantic import ValidationError

from core.config import get_defaults, get_strategy_policy
from core.config.defaults import StrategyPolicy
from core.contracts import MetricsStrategy
from core.errors import ConstructionError
from core.logging import ComponentType, get_logger
from core.models import JobDefinition

logger = get_logger(__name__, ComponentType.BUILDER)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class JobNameGenerator:
    """
    Produces '<base>-<suffix>' names with a strictly increasing suffix.

    The suffix is the current epoch milliseconds, bumped past the last
    issued value when the clock has not advanced.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or _epoch_millis
        self._last = 0
        self._lock = threading.Lock()

    def next_suffix(self) -> int:
        with self._lock:
            suffix = max(self._clock(), self._last + 1)
            self._last = suffix
            return suffix

    def generate(self, base_name: str) -> str:
        return f"{base_name}-{self.next_suffix()}"


_default_generator = JobNameGenerator()


def build_job_definition(
    strategy: MetricsStrategy,
    namespace: Optional[str] = None,
    name_generator: Optional[JobNameGenerator] = None,
    created_by: Optional[str] = None,
) -> JobDefinition:
    """
    Build the job definition for a strategy.

    Args:
        strategy: Metrics collection strategy
        namespace: Target namespace (cluster default if omitted)
        name_generator: Source of unique names (process-wide default if omitted)
        created_by: Value of the 'created-by' label

    Returns:
        Validated, frozen JobDefinition

    Raises:
        ConstructionError: If the policy produces a structurally invalid job
    """
    defaults = get_defaults()
    try:
        policy = get_strategy_policy(strategy)
    except KeyError as e:
        raise ConstructionError(str(e), strategy=getattr(strategy, "value", str(strategy))) from e

    generator = name_generator or _default_generator
    name = generator.generate(policy.base_name)

    return _build_from_policy(
        policy,
        name=name,
        namespace=namespace or defaults.namespace,
        created_by=created_by or defaults.created_by,
    )


def _build_from_policy(
    policy: StrategyPolicy,
    name: str,
    namespace: str,
    created_by: str,
) -> JobDefinition:
    try:
        definition = JobDefinition(
            name=name,
            namespace=namespace,
            strategy=policy.strategy,
            labels=policy.labels(created_by),
            pod_labels={"app": policy.pod_app_label},
            containers=policy.containers,
            volumes=policy.volumes,
            share_process_namespace=policy.share_process_namespace,
            backoff_limit=policy.backoff_limit,
            ttl_seconds_after_finished=policy.ttl_seconds_after_finished,
        )
    except ValidationError as e:
        raise ConstructionError(
            f"Invalid {policy.strategy.value} job definition: {e}",
            strategy=policy.strategy.value,
        ) from e

    logger.debug(
        f"Built {policy.strategy.value} job definition {definition.name} "
        f"({len(definition.containers)} container(s), {len(definition.volumes)} volume(s))"
    )
    return definition


__all__ = ["JobNameGenerator", "build_job_definition"]
