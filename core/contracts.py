# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared across the orchestrator
# PURPOSE: Strategy selector, outcome states, process exit codes
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: MetricsStrategy, OutcomeStatus, RestartPolicy, ExitCode
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the metrics job orchestrator.

These enums cross every boundary of a run:
- CLI (strategy selection, exit codes)
- Cluster (restart policy, strategy label)
- Telemetry (outcome status)
"""

from enum import Enum, IntEnum


# ============================================================================
# STRATEGY
# ============================================================================

class MetricsStrategy(str, Enum):
    """
    How metrics are collected from the batch workload.

    Exactly one strategy is chosen per run.
    """
    SIDECAR = "sidecar"              # OpenTelemetry collector sidecar, shared PID namespace
    FILE_BASED = "file-based"        # Metrics file on an emptyDir volume
    DATABASE = "database"            # Metric lines on stdout

    @classmethod
    def parse(cls, value: str) -> "MetricsStrategy":
        """Parse a CLI value, accepting underscores for dashes."""
        normalized = value.strip().lower().replace("_", "-")
        for strategy in cls:
            if strategy.value == normalized:
                return strategy
        raise ValueError(
            f"Unknown metrics strategy '{value}'. "
            f"Expected one of: {', '.join(s.value for s in cls)}"
        )


# ============================================================================
# OUTCOME
# ============================================================================

class OutcomeStatus(str, Enum):
    """
    Terminal states of a single orchestration run.

    Monitor transitions:
        PENDING -> (running, not observed) -> SUCCEEDED
                                           -> FAILED
                                           -> TIMED_OUT
                                           -> CANCELLED

    Runs that never reach the monitor end in one of the
    *_ERROR states instead.
    """
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"
    CONNECTIVITY_ERROR = "connectivity_error"
    CONSTRUCTION_ERROR = "construction_error"
    SUBMISSION_ERROR = "submission_error"
    INTERNAL_ERROR = "internal_error"

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self is not OutcomeStatus.PENDING

    def is_successful(self) -> bool:
        return self is OutcomeStatus.SUCCEEDED


class RestartPolicy(str, Enum):
    """Pod restart policy. Failed containers are never restarted in place."""
    NEVER = "Never"


# ============================================================================
# EXIT CODES
# ============================================================================

class ExitCode(IntEnum):
    """Process exit codes, one per terminal outcome."""
    SUCCESS = 0
    JOB_FAILED = 1
    TIMED_OUT = 2
    CONNECTIVITY_ERROR = 3
    SUBMISSION_ERROR = 4
    CONSTRUCTION_ERROR = 5
    # Orchestrator crashed; the job (if any) was not classified
    INTERNAL_ERROR = 6
    CANCELLED = 130

    @classmethod
    def for_status(cls, status: OutcomeStatus) -> "ExitCode":
        """Map a terminal outcome to its exit code."""
        mapping = {
            OutcomeStatus.SUCCEEDED: cls.SUCCESS,
            OutcomeStatus.FAILED: cls.JOB_FAILED,
            OutcomeStatus.TIMED_OUT: cls.TIMED_OUT,
            OutcomeStatus.CONNECTIVITY_ERROR: cls.CONNECTIVITY_ERROR,
            OutcomeStatus.SUBMISSION_ERROR: cls.SUBMISSION_ERROR,
            OutcomeStatus.CONSTRUCTION_ERROR: cls.CONSTRUCTION_ERROR,
            OutcomeStatus.INTERNAL_ERROR: cls.INTERNAL_ERROR,
            OutcomeStatus.CANCELLED: cls.CANCELLED,
        }
        if status not in mapping:
            raise ValueError(f"No exit code for non-terminal status: {status.value}")
        return mapping[status]


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "MetricsStrategy",
    "OutcomeStatus",
    "RestartPolicy",
    "ExitCode",
]
