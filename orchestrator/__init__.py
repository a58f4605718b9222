# ============================================================================
# ORCHESTRATOR MODULE
# ============================================================================
# STATUS: Core - One job run from probe to exit code
# PURPOSE: Coordinate probe, build, submit and monitor
# CREATED: 19 OCT 2026
# ============================================================================
"""
Orchestrator Module

Usage:
    from orchestrator import JobOrchestrator, cancel_on_signals

    orchestrator = JobOrchestrator(cluster)
    with cancel_on_signals(orchestrator.cancel_event):
        report = orchestrator.run(MetricsStrategy.SIDECAR)
    sys.exit(report.exit_code)
"""

from .runner import JobOrchestrator, RunReport
from .shutdown import cancel_on_signals

__all__ = ["JobOrchestrator", "RunReport", "cancel_on_signals"]
