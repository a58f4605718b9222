# ============================================================================
# JOB STATUS MODELS
# ============================================================================
# STATUS: Core model - Submitted identity, polled status, terminal outcome
# PURPOSE: Values flowing from submission through monitoring to exit
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: JobIdentity, JobStatusSnapshot, JobOutcome
# DEPENDENCIES: pydantic
# ============================================================================
"""
Job Status Models

JobIdentity is returned by submission and is the sole key for polling.
JobStatusSnapshot is one read of the job's aggregate counters.
JobOutcome is the terminal result of a run.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from core.contracts import OutcomeStatus


class JobIdentity(BaseModel):
    """Cluster-assigned identity of a submitted job."""
    name: str = Field(..., min_length=1, max_length=63)
    uid: str = Field(..., description="Opaque cluster-assigned identifier")
    namespace: str = Field(default="default")

    model_config = {"frozen": True}


class JobStatusSnapshot(BaseModel):
    """
    One read of a job's status counters.

    The API omits counters that are zero, so None reads as 0.
    """
    succeeded: Optional[int] = Field(default=None, ge=0)
    failed: Optional[int] = Field(default=None, ge=0)
    active: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @property
    def succeeded_count(self) -> int:
        return self.succeeded or 0

    @property
    def failed_count(self) -> int:
        return self.failed or 0

    @property
    def active_count(self) -> int:
        return self.active or 0


class JobOutcome(BaseModel):
    """
    Terminal result of one orchestration run.

    attempts is the number of status reads performed (0 if the run
    never reached the monitor).
    """
    status: OutcomeStatus
    attempts: int = Field(default=0, ge=0)
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)

    job_name: Optional[str] = None
    job_uid: Optional[str] = None
    namespace: Optional[str] = None

    message: Optional[str] = Field(default=None, max_length=4000)
    finished_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def is_successful(self) -> bool:
        return self.status.is_successful()

    @classmethod
    def for_identity(
        cls,
        identity: JobIdentity,
        status: OutcomeStatus,
        attempts: int,
        snapshot: Optional[JobStatusSnapshot] = None,
        message: Optional[str] = None,
    ) -> "JobOutcome":
        """Build an outcome for a submitted job from its last observed snapshot."""
        return cls(
            status=status,
            attempts=attempts,
            succeeded=snapshot.succeeded_count if snapshot else 0,
            failed=snapshot.failed_count if snapshot else 0,
            job_name=identity.name,
            job_uid=identity.uid,
            namespace=identity.namespace,
            message=message[:4000] if message else None,
        )


__all__ = ["JobIdentity", "JobStatusSnapshot", "JobOutcome"]
