# ============================================================================
# JOB MONITOR
# ============================================================================
# STATUS: Service - Poll a submitted job to a terminal state
# PURPOSE: Bounded polling state machine with failure classification
# CREATED: 19 OCT 2026
# ============================================================================
"""
Job Monitor

State machine:
    PENDING -> (running, not observed) -> SUCCEEDED   succeeded > 0, failed == 0
                                       -> FAILED      failed > 0
                                       -> TIMED_OUT   attempt budget exhausted
                                       -> CANCELLED   cancel event set

Each attempt reads the job's aggregate counters once and emits one
progress event. Between attempts (never after the last) the monitor waits
on the cancel event, so shutdown interrupts the wait immediately.

Classification:
- failed > 0 wins over succeeded > 0 in the same read
- a failed read (any exception, surfaced as TransientReadError) is
  recorded and the loop moves on to the next scheduled attempt; it
  still counts as an attempt
- cancellation raises MonitorCancelled and is never swallowed here
"""

import threading
from typing import Callable, Optional

from core.contracts import OutcomeStatus
from core.errors import MonitorCancelled, TransientReadError
from core.logging import ComponentType, get_logger
from core.models import JobIdentity, JobOutcome, JobStatusSnapshot, PollPolicy
from core.observability import JobObserver, NoOpObserver
from infrastructure.cluster import ClusterClient

logger = get_logger(__name__, ComponentType.MONITOR)

# wait(seconds) -> True if cancelled during the wait
WaitFunc = Callable[[float], bool]


def classify_snapshot(snapshot: JobStatusSnapshot) -> Optional[OutcomeStatus]:
    """
    Classify one status read.

    Returns:
        FAILED or SUCCEEDED for a terminal read, None while still running.
    """
    if snapshot.failed_count > 0:
        return OutcomeStatus.FAILED
    if snapshot.succeeded_count > 0:
        return OutcomeStatus.SUCCEEDED
    return None


class JobMonitor:
    """Polls one job until it succeeds, fails, times out or is cancelled."""

    def __init__(
        self,
        cluster: ClusterClient,
        policy: PollPolicy,
        observer: Optional[JobObserver] = None,
        cancel_event: Optional[threading.Event] = None,
        wait: Optional[WaitFunc] = None,
    ):
        """
        Args:
            cluster: Source of job status
            policy: Attempt budget and cadence
            observer: Telemetry sink (no-op if omitted)
            cancel_event: Set to stop monitoring (e.g. on SIGTERM)
            wait: Override for the inter-attempt wait (defaults to cancel_event.wait)
        """
        self.cluster = cluster
        self.policy = policy
        self.observer = observer or NoOpObserver()
        self.cancel_event = cancel_event or threading.Event()
        self._wait = wait or self.cancel_event.wait

    def watch(self, identity: JobIdentity) -> JobOutcome:
        """
        Poll the job to a terminal outcome.

        Returns:
            JobOutcome with status SUCCEEDED, FAILED or TIMED_OUT

        Raises:
            MonitorCancelled: If the cancel event is set before or during polling
        """
        max_attempts = self.policy.max_attempts
        self.observer.set_attribute("job.name", identity.name)
        logger.info(f"Monitoring job: {identity.name} (up to {max_attempts} attempts)")

        last_snapshot: Optional[JobStatusSnapshot] = None
        attempts = 0

        for attempt in range(1, max_attempts + 1):
            if self.cancel_event.is_set():
                raise self._cancelled(identity, attempts, last_snapshot)

            attempts = attempt
            snapshot = self._read(identity, attempt)
            if snapshot is not None:
                last_snapshot = snapshot
                status = classify_snapshot(snapshot)
                if status is not None:
                    return self._finish(identity, status, attempts, snapshot)

            if attempt < max_attempts:
                logger.info(f"Waiting for job completion... ({attempt}/{max_attempts})")
                if self._wait(self.policy.delay_after(attempt)):
                    raise self._cancelled(identity, attempts, last_snapshot)

        self.observer.add_event("Job monitoring timeout")
        logger.warning(f"Job monitoring timeout reached after {attempts} attempts")
        return JobOutcome.for_identity(
            identity,
            OutcomeStatus.TIMED_OUT,
            attempts,
            last_snapshot,
            message=f"No terminal status after {attempts} attempts",
        )

    def _fetch(self, identity: JobIdentity) -> JobStatusSnapshot:
        """read_job with every failure surfaced as TransientReadError."""
        try:
            return self.cluster.read_job(identity.name, identity.namespace)
        except TransientReadError:
            raise
        except Exception as e:
            raise TransientReadError(
                f"Unexpected error reading job {identity.name}: {type(e).__name__}: {e}",
                job_name=identity.name,
            ) from e

    def _read(self, identity: JobIdentity, attempt: int) -> Optional[JobStatusSnapshot]:
        """One status read. Returns None if the read failed."""
        try:
            snapshot = self._fetch(identity)
        except TransientReadError as e:
            logger.warning(f"Error monitoring job (attempt {attempt}): {e}")
            self.observer.record_error(e)
            self.observer.add_event(
                "Job status polled",
                {"attempt": attempt, "read_error": True},
            )
            return None

        self.observer.set_attribute("monitor.iteration", attempt)
        self.observer.set_attribute("job.succeeded", snapshot.succeeded_count)
        self.observer.set_attribute("job.failed", snapshot.failed_count)
        self.observer.add_event(
            "Job status polled",
            {
                "attempt": attempt,
                "succeeded": snapshot.succeeded_count,
                "failed": snapshot.failed_count,
                "read_error": False,
            },
        )
        return snapshot

    def _finish(
        self,
        identity: JobIdentity,
        status: OutcomeStatus,
        attempts: int,
        snapshot: JobStatusSnapshot,
    ) -> JobOutcome:
        if status is OutcomeStatus.SUCCEEDED:
            self.observer.add_event("Job completed successfully")
            logger.info(f"Job completed successfully after {attempts} attempt(s)")
            message = None
        else:
            self.observer.add_event("Job failed")
            message = (
                f"Job reported {snapshot.failed_count} failed pod(s)"
                + (f" and {snapshot.succeeded_count} succeeded" if snapshot.succeeded_count else "")
            )
            logger.warning(f"Job failed after {attempts} attempt(s): {message}")
        return JobOutcome.for_identity(identity, status, attempts, snapshot, message=message)

    def _cancelled(
        self,
        identity: JobIdentity,
        attempts: int,
        snapshot: Optional[JobStatusSnapshot],
    ) -> MonitorCancelled:
        self.observer.add_event("Job monitoring cancelled", {"attempts": attempts})
        logger.warning(f"Monitoring cancelled after {attempts} attempt(s)")
        outcome = JobOutcome.for_identity(
            identity,
            OutcomeStatus.CANCELLED,
            attempts,
            snapshot,
            message="Monitoring interrupted by cancellation signal",
        )
        return MonitorCancelled(outcome)


__all__ = ["JobMonitor", "WaitFunc", "classify_snapshot"]
