# ============================================================================
# JOB MONITOR TESTS
# ============================================================================
# STATUS: Tests - Polling state machine
# PURPOSE: Verify classification, attempt budget, transient reads, cancellation
# CREATED: 19 OCT 2026
# ============================================================================
"""
Job Monitor Tests

Uses a scripted FakeCluster and a recording wait, so no test sleeps.

Covers:
1. Success/failure classification (failed wins on a tie)
2. Exactly N reads and N-1 waits for a terminal state at attempt N
3. Timeout after exactly max_attempts reads
4. Failed reads (of any kind) count as attempts and never abort the loop
5. Cancellation before or during a wait
6. One progress event per attempt

Run with:
    pytest tests/test_monitor.py -v
"""

import threading

import pytest

from core.contracts import OutcomeStatus
from core.errors import MonitorCancelled, TransientReadError
from core.models import JobIdentity, JobStatusSnapshot, PollPolicy
from core.observability import SpanObserver
from services.monitor import JobMonitor, classify_snapshot


IDENTITY = JobIdentity(name="busybox-file-metrics-1", uid="uid-1", namespace="default")


def _monitor(cluster, max_attempts=10, wait=None, cancel_event=None, backoff="fixed"):
    span = SpanObserver(name="test")
    policy = PollPolicy(max_attempts=max_attempts, interval_seconds=5.0, backoff=backoff)
    monitor = JobMonitor(cluster, policy, observer=span, cancel_event=cancel_event, wait=wait)
    return monitor, span


# ============================================================================
# CLASSIFICATION
# ============================================================================

class TestClassifySnapshot:
    """A single read maps to SUCCEEDED, FAILED or still running."""

    def test_empty_status_is_running(self):
        assert classify_snapshot(JobStatusSnapshot()) is None

    def test_active_only_is_running(self):
        assert classify_snapshot(JobStatusSnapshot(active=1)) is None

    def test_succeeded(self):
        assert classify_snapshot(JobStatusSnapshot(succeeded=1)) is OutcomeStatus.SUCCEEDED

    def test_failed(self):
        assert classify_snapshot(JobStatusSnapshot(failed=2)) is OutcomeStatus.FAILED

    def test_failed_wins_tie(self):
        snapshot = JobStatusSnapshot(succeeded=1, failed=1)
        assert classify_snapshot(snapshot) is OutcomeStatus.FAILED

    def test_zero_counters_are_running(self):
        assert classify_snapshot(JobStatusSnapshot(succeeded=0, failed=0)) is None


# ============================================================================
# ATTEMPT BUDGET
# ============================================================================

class TestPollingBudget:
    """Reads and waits are counted exactly."""

    def test_success_on_first_read(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(1, 0)])
        wait = make_wait()
        monitor, _ = _monitor(cluster, wait=wait)

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.attempts == 1
        assert cluster.read_count == 1
        assert wait.delays == []

    @pytest.mark.parametrize("n", [2, 5, 10])
    def test_success_at_attempt_n(self, n, make_cluster, make_wait):
        cluster = make_cluster(reads=[(0, 0)] * (n - 1) + [(1, 0)])
        wait = make_wait()
        monitor, _ = _monitor(cluster, max_attempts=10, wait=wait)

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.attempts == n
        assert cluster.read_count == n
        assert wait.delays == [5.0] * (n - 1)
        assert outcome.succeeded == 1
        assert outcome.job_name == IDENTITY.name
        assert outcome.job_uid == "uid-1"

    def test_failure_short_circuits(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(0, 0), (0, 1)])
        wait = make_wait()
        monitor, span = _monitor(cluster, wait=wait)

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.attempts == 2
        assert outcome.failed == 1
        assert "1 failed pod" in outcome.message
        assert len(wait.delays) == 1
        assert "Job failed" in span.event_names

    def test_tie_on_first_read_is_failed(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(1, 1)])
        monitor, _ = _monitor(cluster, wait=make_wait())

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.FAILED
        assert outcome.succeeded == 1
        assert outcome.failed == 1

    def test_timeout_after_exactly_max_reads(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(0, 0)])
        wait = make_wait()
        monitor, span = _monitor(cluster, max_attempts=15, wait=wait)

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.TIMED_OUT
        assert outcome.attempts == 15
        assert cluster.read_count == 15
        assert len(wait.delays) == 14
        assert "Job monitoring timeout" in span.event_names

    def test_single_attempt_budget(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(0, 0)])
        wait = make_wait()
        monitor, _ = _monitor(cluster, max_attempts=1, wait=wait)

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.TIMED_OUT
        assert cluster.read_count == 1
        assert wait.delays == []

    def test_exponential_delays(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(0, 0)] * 4 + [(1, 0)])
        wait = make_wait()
        monitor, _ = _monitor(cluster, wait=wait, backoff="exponential")

        monitor.watch(IDENTITY)

        assert wait.delays == [5.0, 10.0, 20.0, 40.0]


# ============================================================================
# TRANSIENT READ ERRORS
# ============================================================================

class TestTransientReads:
    """A failed read is recorded and the loop continues."""

    def test_error_then_timeout(self, make_cluster, make_wait):
        reads = [(0, 0), (0, 0), TransientReadError("connection reset")] + [(0, 0)] * 7
        cluster = make_cluster(reads=reads)
        wait = make_wait()
        monitor, span = _monitor(cluster, max_attempts=10, wait=wait)

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.TIMED_OUT
        assert cluster.read_count == 10
        assert len(wait.delays) == 9
        assert len(span.errors) == 1
        assert isinstance(span.errors[0], TransientReadError)

    def test_unexpected_exception_is_absorbed(self, make_cluster, make_wait):
        reads = [(0, 0), (0, 0), RuntimeError("decode failure")] + [(0, 0)] * 7
        cluster = make_cluster(reads=reads)
        wait = make_wait()
        monitor, span = _monitor(cluster, max_attempts=10, wait=wait)

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.TIMED_OUT
        assert cluster.read_count == 10
        assert len(wait.delays) == 9
        error = span.errors[0]
        assert isinstance(error, TransientReadError)
        assert isinstance(error.__cause__, RuntimeError)
        assert "decode failure" in str(error)
        assert error.job_name == IDENTITY.name

    def test_error_then_success(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[TransientReadError("timeout"), (1, 0)])
        monitor, _ = _monitor(cluster, wait=make_wait())

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.SUCCEEDED
        assert outcome.attempts == 2

    def test_every_read_failing_times_out(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[TransientReadError("down")])
        monitor, span = _monitor(cluster, max_attempts=3, wait=make_wait())

        outcome = monitor.watch(IDENTITY)

        assert outcome.status is OutcomeStatus.TIMED_OUT
        assert outcome.attempts == 3
        assert outcome.succeeded == 0
        assert len(span.errors) == 3

    def test_error_event_flagged(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[TransientReadError("x"), (1, 0)])
        monitor, span = _monitor(cluster, wait=make_wait())

        monitor.watch(IDENTITY)

        polled = [e for e in span.events if e["name"] == "Job status polled"]
        assert polled[0]["attributes"] == {"attempt": 1, "read_error": True}
        assert polled[1]["attributes"]["read_error"] is False


# ============================================================================
# CANCELLATION
# ============================================================================

class TestCancellation:
    """A cancel signal ends monitoring promptly."""

    def test_cancelled_during_wait(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(0, 0)])
        wait = make_wait(cancel_on=3)
        monitor, span = _monitor(cluster, max_attempts=20, wait=wait)

        with pytest.raises(MonitorCancelled) as exc_info:
            monitor.watch(IDENTITY)

        outcome = exc_info.value.outcome
        assert outcome.status is OutcomeStatus.CANCELLED
        assert outcome.attempts == 3
        assert cluster.read_count == 3
        assert "Job monitoring cancelled" in span.event_names

    def test_cancelled_before_first_read(self, make_cluster):
        cluster = make_cluster(reads=[(1, 0)])
        event = threading.Event()
        event.set()
        monitor, _ = _monitor(cluster, cancel_event=event)

        with pytest.raises(MonitorCancelled) as exc_info:
            monitor.watch(IDENTITY)

        assert exc_info.value.outcome.attempts == 0
        assert cluster.read_count == 0

    def test_event_wait_is_default(self, make_cluster):
        cluster = make_cluster(reads=[(0, 0)])
        event = threading.Event()
        event.set()
        policy = PollPolicy(max_attempts=5, interval_seconds=30.0)
        monitor = JobMonitor(cluster, policy, cancel_event=event)

        # A set event returns from wait() immediately
        assert monitor._wait(30.0) is True

    def test_event_set_by_other_thread(self, make_cluster):
        cluster = make_cluster(reads=[(0, 0)])
        event = threading.Event()
        policy = PollPolicy(max_attempts=100, interval_seconds=10.0)
        monitor = JobMonitor(cluster, policy, cancel_event=event)
        timer = threading.Timer(0.05, event.set)
        timer.start()
        try:
            with pytest.raises(MonitorCancelled):
                monitor.watch(IDENTITY)
        finally:
            timer.cancel()
        assert cluster.read_count == 1


# ============================================================================
# PROGRESS EVENTS
# ============================================================================

class TestProgressEvents:
    """Every attempt emits exactly one progress event."""

    def test_one_event_per_attempt(self, make_cluster, make_wait):
        cluster = make_cluster(reads=[(0, 0)] * 3 + [(1, 0)])
        monitor, span = _monitor(cluster, wait=make_wait())

        monitor.watch(IDENTITY)

        polled = [e for e in span.events if e["name"] == "Job status polled"]
        assert [e["attributes"]["attempt"] for e in polled] == [1, 2, 3, 4]
        assert polled[-1]["attributes"]["succeeded"] == 1
        assert span.event_names[-1] == "Job completed successfully"
        assert span.attributes["monitor.iteration"] == 4
        assert span.attributes["job.name"] == IDENTITY.name
