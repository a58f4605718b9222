# ============================================================================
# CONTRACTS AND MODEL TESTS
# ============================================================================
# STATUS: Tests - Enums, exit codes, status and poll models
# PURPOSE: Verify strategy parsing, outcome mapping and poll delays
# CREATED: 19 OCT 2026
# ============================================================================
"""
Contracts and Model Tests

Run with:
    pytest tests/test_contracts_models.py -v
"""

import pytest
from pydantic import ValidationError

from core.contracts import ExitCode, MetricsStrategy, OutcomeStatus
from core.errors import MonitorCancelled, SubmissionError
from core.models import JobIdentity, JobOutcome, JobStatusSnapshot, PollPolicy, VolumeSpec


# ============================================================================
# STRATEGY
# ============================================================================

class TestMetricsStrategy:
    """CLI parsing of strategy names."""

    @pytest.mark.parametrize("value,expected", [
        ("sidecar", MetricsStrategy.SIDECAR),
        ("file-based", MetricsStrategy.FILE_BASED),
        ("file_based", MetricsStrategy.FILE_BASED),
        (" Database ", MetricsStrategy.DATABASE),
    ])
    def test_parse(self, value, expected):
        assert MetricsStrategy.parse(value) is expected

    def test_unknown(self):
        with pytest.raises(ValueError, match="Expected one of: sidecar, file-based, database"):
            MetricsStrategy.parse("prometheus")


# ============================================================================
# OUTCOME / EXIT CODE
# ============================================================================

class TestExitCodes:
    """Every terminal status has a distinct exit code."""

    def test_distinct(self):
        terminal = [s for s in OutcomeStatus if s.is_terminal()]
        codes = {ExitCode.for_status(s) for s in terminal}
        assert len(codes) == len(terminal)

    def test_values(self):
        assert ExitCode.for_status(OutcomeStatus.SUCCEEDED) == 0
        assert ExitCode.for_status(OutcomeStatus.FAILED) == 1
        assert ExitCode.for_status(OutcomeStatus.TIMED_OUT) == 2
        assert ExitCode.for_status(OutcomeStatus.CANCELLED) == 130
        assert ExitCode.for_status(OutcomeStatus.INTERNAL_ERROR) == 6

    def test_pending_has_no_exit_code(self):
        assert OutcomeStatus.PENDING.is_terminal() is False
        with pytest.raises(ValueError):
            ExitCode.for_status(OutcomeStatus.PENDING)


class TestJobOutcome:
    """Outcome built from the last observed snapshot."""

    def test_for_identity(self):
        identity = JobIdentity(name="job-1", uid="u1", namespace="ns")
        outcome = JobOutcome.for_identity(
            identity, OutcomeStatus.SUCCEEDED, 4, JobStatusSnapshot(succeeded=1)
        )
        assert outcome.is_successful is True
        assert outcome.attempts == 4
        assert outcome.succeeded == 1
        assert outcome.failed == 0
        assert outcome.namespace == "ns"
        assert outcome.finished_at.tzinfo is not None

    def test_without_snapshot(self):
        identity = JobIdentity(name="job-1", uid="u1")
        outcome = JobOutcome.for_identity(identity, OutcomeStatus.CANCELLED, 0)
        assert outcome.succeeded == 0
        assert outcome.is_successful is False

    def test_long_message_truncated(self):
        identity = JobIdentity(name="job-1", uid="u1")
        outcome = JobOutcome.for_identity(identity, OutcomeStatus.FAILED, 1, message="x" * 5000)
        assert len(outcome.message) == 4000

    def test_serializes_success_flag(self):
        outcome = JobOutcome(status=OutcomeStatus.TIMED_OUT, attempts=20)
        assert outcome.model_dump()["is_successful"] is False

    def test_negative_counters_rejected(self):
        with pytest.raises(ValidationError):
            JobStatusSnapshot(succeeded=-1)


# ============================================================================
# POLL POLICY
# ============================================================================

class TestPollPolicy:
    """Delays between attempts."""

    def test_fixed(self):
        policy = PollPolicy(max_attempts=15, interval_seconds=5.0)
        assert [policy.delay_after(i) for i in (1, 2, 14)] == [5.0, 5.0, 5.0]
        assert policy.budget_seconds == 70.0

    def test_exponential_capped(self):
        policy = PollPolicy(backoff="exponential", interval_seconds=1.0, max_delay_seconds=5.0)
        assert [policy.delay_after(i) for i in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_large_budget_stays_capped(self):
        policy = PollPolicy(
            max_attempts=1000, backoff="exponential", multiplier=3.0, max_delay_seconds=60.0
        )
        assert policy.delay_after(648) == 60.0
        assert policy.delay_after(1000) == 60.0
        assert policy.budget_seconds == 5.0 + 15.0 + 45.0 + 60.0 * 996

    def test_huge_multiplier_jumps_to_cap(self):
        policy = PollPolicy(backoff="exponential", interval_seconds=2.0, multiplier=1e300,
                            max_delay_seconds=30.0)
        assert policy.delay_after(1) == 2.0
        assert policy.delay_after(3) == 30.0

    def test_interval_above_cap(self):
        policy = PollPolicy(backoff="exponential", interval_seconds=90.0, max_delay_seconds=60.0)
        assert policy.delay_after(1) == 60.0

    def test_attempt_must_be_positive(self):
        with pytest.raises(ValueError):
            PollPolicy().delay_after(0)

    def test_unknown_backoff(self):
        with pytest.raises(ValidationError):
            PollPolicy(backoff="linear")

    def test_at_least_one_attempt(self):
        with pytest.raises(ValidationError):
            PollPolicy(max_attempts=0)


# ============================================================================
# VOLUMES / ERRORS
# ============================================================================

class TestVolumeSpec:
    """Exactly one source per volume."""

    def test_no_source(self):
        with pytest.raises(ValidationError, match="exactly one source"):
            VolumeSpec(name="empty")


class TestErrors:
    """Error detail carried for operators."""

    def test_submission_describe(self):
        error = SubmissionError("Failed to create job x", status=422, reason="Unprocessable Entity",
                                body="spec.template: Invalid value")
        assert error.describe() == (
            "Failed to create job x\nHTTP 422 Unprocessable Entity\nResponse: spec.template: Invalid value"
        )

    def test_submission_describe_without_status(self):
        assert SubmissionError("network down").describe() == "network down"

    def test_monitor_cancelled_message(self):
        outcome = JobOutcome(status=OutcomeStatus.CANCELLED, attempts=3, job_name="job-1")
        error = MonitorCancelled(outcome)
        assert error.outcome is outcome
        assert "job-1" in str(error)
        assert "3 attempt" in str(error)
