# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Definition models are frozen: a JobDefinition is built once, submitted
once and never mutated.
"""

from core.models.job_definition import (
    ConfigMapSource,
    ContainerSpec,
    EmptyDirSource,
    JobDefinition,
    ResourceRequirements,
    VolumeMount,
    VolumeSpec,
)
from core.models.job_status import JobIdentity, JobOutcome, JobStatusSnapshot
from core.models.poll_policy import PollPolicy

__all__ = [
    # Definition
    "JobDefinition",
    "ContainerSpec",
    "ResourceRequirements",
    "VolumeMount",
    "VolumeSpec",
    "EmptyDirSource",
    "ConfigMapSource",
    # Status
    "JobIdentity",
    "JobStatusSnapshot",
    "JobOutcome",
    # Polling
    "PollPolicy",
]
