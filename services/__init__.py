# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Run stages
# PURPOSE: Build, probe, submit and monitor one job
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Each stage of an orchestration run, usable on its own.

Usage:
    from services import ConnectivityProbe, JobSubmitter, JobMonitor, build_job_definition

    definition = build_job_definition(MetricsStrategy.FILE_BASED)
    identity = JobSubmitter(cluster).submit(definition)
    outcome = JobMonitor(cluster, policy).watch(identity)
"""

from .definition_builder import JobNameGenerator, build_job_definition
from .preflight import ConnectivityProbe, PreflightResult
from .submitter import JobSubmitter
from .monitor import JobMonitor, classify_snapshot

__all__ = [
    "JobNameGenerator",
    "build_job_definition",
    "ConnectivityProbe",
    "PreflightResult",
    "JobSubmitter",
    "JobMonitor",
    "classify_snapshot",
]
