# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts, errors and models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import ExitCode, MetricsStrategy, OutcomeStatus, RestartPolicy
from core.errors import (
    ConnectivityError,
    ConstructionError,
    JobOrchestrationError,
    MonitorCancelled,
    SubmissionError,
    TransientReadError,
)
from core.models import (
    ContainerSpec,
    JobDefinition,
    JobIdentity,
    JobOutcome,
    JobStatusSnapshot,
    PollPolicy,
    VolumeSpec,
)

__all__ = [
    # Enums
    "MetricsStrategy",
    "OutcomeStatus",
    "RestartPolicy",
    "ExitCode",
    # Errors
    "JobOrchestrationError",
    "ConnectivityError",
    "ConstructionError",
    "SubmissionError",
    "TransientReadError",
    "MonitorCancelled",
    # Models
    "JobDefinition",
    "ContainerSpec",
    "VolumeSpec",
    "JobIdentity",
    "JobStatusSnapshot",
    "JobOutcome",
    "PollPolicy",
]
