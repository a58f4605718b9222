# ============================================================================
# JOB SUBMITTER
# ============================================================================
# STATUS: Service - Submit one job definition
# PURPOSE: Create the job exactly once and return its identity
# CREATED: 19 OCT 2026
# ============================================================================
"""
Job Submitter

Submits exactly one JobDefinition. A rejection (name collision, quota,
malformed spec) is fatal for the run: retrying would need a fresh unique
name, which is the caller's decision.
"""

from typing import Optional

from core.errors import SubmissionError
from core.logging import ComponentType, get_logger, log_checkpoint
from core.models import JobDefinition, JobIdentity
from core.observability import JobObserver, NoOpObserver
from infrastructure.cluster import ClusterClient

logger = get_logger(__name__, ComponentType.SUBMITTER)


class JobSubmitter:
    """Creates a job in the cluster."""

    def __init__(self, cluster: ClusterClient, observer: Optional[JobObserver] = None):
        self.cluster = cluster
        self.observer = observer or NoOpObserver()

    def submit(self, definition: JobDefinition) -> JobIdentity:
        """
        Submit the definition.

        Args:
            definition: Job to create (in definition.namespace)

        Returns:
            JobIdentity assigned by the cluster

        Raises:
            SubmissionError: If the cluster rejects the job
        """
        self.observer.add_event("Creating Kubernetes Job", {"job.name": definition.name})
        logger.info(f"Creating {definition.strategy.value} job {definition.name} in {definition.namespace}...")

        try:
            identity = self.cluster.create_job(definition.namespace, definition)
        except SubmissionError as e:
            self.observer.record_error(e)
            logger.error(f"Error creating job: {e}")
            if e.body:
                logger.error(f"Response: {e.body}")
            raise

        self.observer.add_event("Job created successfully")
        self.observer.set_attribute("job.uid", identity.uid)
        self.observer.set_attribute("job.name", identity.name)

        logger.info(f"Job created successfully: {identity.name} (uid={identity.uid})")
        log_checkpoint("job_submitted", {"job_name": identity.name, "job_uid": identity.uid})
        return identity


__all__ = ["JobSubmitter"]
