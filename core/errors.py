# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# STATUS: Foundation - Exceptions raised across a run
# PURPOSE: One hierarchy for probe, build, submit and monitor failures
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Error Taxonomy

Propagation policy:
- TransientReadError is absorbed by the monitor (logged, loop continues).
- Everything else surfaces to the orchestrator, which records it in
  telemetry and maps it to a non-zero exit code.

TimedOut is an outcome, not an exception.
"""

from typing import Optional


class JobOrchestrationError(Exception):
    """Base exception for orchestration failures."""
    pass


class ConnectivityError(JobOrchestrationError):
    """Raised when the cluster control plane is unreachable before submission."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class ConstructionError(JobOrchestrationError):
    """Raised when a job definition is structurally invalid (a policy bug)."""

    def __init__(self, message: str, strategy: Optional[str] = None):
        self.strategy = strategy
        super().__init__(message)


class SubmissionError(JobOrchestrationError):
    """
    Raised when the cluster rejects a job.

    Carries the cluster's error detail so it can be reported verbatim.
    """

    def __init__(
        self,
        message: str,
        job_name: Optional[str] = None,
        status: Optional[int] = None,
        reason: Optional[str] = None,
        body: Optional[str] = None,
    ):
        self.job_name = job_name
        self.status = status
        self.reason = reason
        self.body = body
        super().__init__(message)

    def describe(self) -> str:
        """Human-readable diagnostic including the response body."""
        parts = [str(self)]
        if self.status is not None:
            parts.append(f"HTTP {self.status}" + (f" {self.reason}" if self.reason else ""))
        if self.body:
            parts.append(f"Response: {self.body}")
        return "\n".join(parts)


class TransientReadError(JobOrchestrationError):
    """Raised when a single job status read fails."""

    def __init__(self, message: str, job_name: Optional[str] = None, status: Optional[int] = None):
        self.job_name = job_name
        self.status = status
        super().__init__(message)


class MonitorCancelled(JobOrchestrationError):
    """Raised when monitoring is interrupted by a cancellation signal."""

    def __init__(self, outcome: "JobOutcome"):
        self.outcome = outcome
        super().__init__(
            f"Monitoring of job {outcome.job_name or '<unknown>'} cancelled "
            f"after {outcome.attempts} attempt(s)"
        )


__all__ = [
    "JobOrchestrationError",
    "ConnectivityError",
    "ConstructionError",
    "SubmissionError",
    "TransientReadError",
    "MonitorCancelled",
]
