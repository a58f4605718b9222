# ============================================================================
# ORCHESTRATION RUN
# ============================================================================
# STATUS: Core - One synchronous job run
# PURPOSE: probe -> build -> submit -> monitor -> report
# CREATED: 19 OCT 2026
# ============================================================================
"""
Orchestration Run

Composes the services into a single synchronous run for one strategy and
produces one JobOutcome plus the process exit code. This is the only
place an outcome becomes an exit code.

Abort points:
    probe fails      -> CONNECTIVITY_ERROR  (nothing built or submitted)
    build fails      -> CONSTRUCTION_ERROR  (nothing submitted)
    submit rejected  -> SUBMISSION_ERROR    (cluster detail reported verbatim)
    cancel signal    -> CANCELLED           (propagated by the monitor)
    anything else    -> INTERNAL_ERROR      (logged with traceback)

A final status event is emitted and the span outcome is set on every path.
"""

import threading
from dataclasses import dataclass, field
from typing import List, Optional

from core.config import get_defaults, get_strategy_policy
from core.config.defaults import StrategyPolicy
from core.contracts import ExitCode, MetricsStrategy, OutcomeStatus
from core.errors import ConstructionError, MonitorCancelled, SubmissionError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models import JobDefinition, JobIdentity, JobOutcome, PollPolicy
from core.observability import SpanObserver, Tracer, get_tracer
from infrastructure.cluster import ClusterClient
from services.definition_builder import JobNameGenerator, build_job_definition
from services.monitor import JobMonitor, WaitFunc
from services.preflight import ConnectivityProbe, PreflightResult
from services.submitter import JobSubmitter

logger = get_logger(__name__, ComponentType.ORCHESTRATOR)

_MAX_MESSAGE = 4000


@dataclass
class RunReport:
    """Everything a caller needs after a run."""
    outcome: JobOutcome
    exit_code: ExitCode
    strategy: MetricsStrategy
    definition: Optional[JobDefinition] = None
    identity: Optional[JobIdentity] = None
    preflight: Optional[PreflightResult] = None
    span: Optional[SpanObserver] = None
    hints: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS


class JobOrchestrator:
    """
    Runs one metrics job from submission to a terminal state.

    One instance may run several strategies back to back; each run gets
    its own uniquely named job. Runs are synchronous and share nothing but
    the name generator and the cancel event.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        namespace: Optional[str] = None,
        tracer: Optional[Tracer] = None,
        cancel_event: Optional[threading.Event] = None,
        name_generator: Optional[JobNameGenerator] = None,
        poll_policy: Optional[PollPolicy] = None,
        wait: Optional[WaitFunc] = None,
    ):
        """
        Args:
            cluster: Cluster access for probe, submit and monitor
            namespace: Target namespace (env default if omitted)
            tracer: Span factory (global tracer if omitted)
            cancel_event: Set to interrupt monitoring
            name_generator: Source of unique job names
            poll_policy: Override the strategy's poll policy
            wait: Override the monitor's inter-attempt wait (tests)
        """
        self.cluster = cluster
        self.namespace = namespace or get_defaults().namespace
        self.tracer = tracer
        self.cancel_event = cancel_event or threading.Event()
        self.name_generator = name_generator or JobNameGenerator()
        self.poll_policy = poll_policy
        self._wait = wait

    def request_cancel(self) -> None:
        """Ask a running monitor to stop at its next wait or attempt."""
        self.cancel_event.set()

    def run(self, strategy: MetricsStrategy) -> RunReport:
        """
        Execute one run for the strategy.

        Returns:
            RunReport with the terminal outcome and exit code
        """
        policy = get_strategy_policy(strategy)
        tracer = self.tracer or get_tracer()

        with log_context(strategy=strategy.value, namespace=self.namespace):
            with tracer.start_span(
                "job.orchestrator.run",
                {
                    "job.strategy": strategy.value,
                    "job.namespace": self.namespace,
                    "metrics.strategy": policy.metrics_type,
                },
            ) as span:
                try:
                    report = self._run(strategy, policy, span)
                except Exception as e:
                    report = self._crashed(span, strategy, policy, e)
                report.span = span
                return report

    # ================================================================
    # STAGES
    # ================================================================

    def _run(
        self,
        strategy: MetricsStrategy,
        policy: StrategyPolicy,
        span: SpanObserver,
    ) -> RunReport:
        # 1. Probe
        preflight = ConnectivityProbe(self.cluster, span).check(
            namespace=self.namespace,
            config_maps=policy.config_map_names,
        )
        if not preflight.valid:
            logger.error("Kubernetes is not available.")
            for error in preflight.errors:
                logger.error(error)
            outcome = JobOutcome(
                status=OutcomeStatus.CONNECTIVITY_ERROR,
                namespace=self.namespace,
                message=_truncate("; ".join(preflight.errors)),
            )
            return self._finalize(span, strategy, policy, outcome, preflight=preflight)

        # 2. Build
        try:
            definition = build_job_definition(
                strategy,
                namespace=self.namespace,
                name_generator=self.name_generator,
            )
        except ConstructionError as e:
            span.record_error(e)
            logger.error(f"Failed to create job object: {e}")
            outcome = JobOutcome(
                status=OutcomeStatus.CONSTRUCTION_ERROR,
                namespace=self.namespace,
                message=_truncate(str(e)),
            )
            return self._finalize(span, strategy, policy, outcome, preflight=preflight)

        span.add_event("Job definition built")
        span.set_attribute("job.containers.count", len(definition.containers))

        # 3. Submit
        try:
            identity = JobSubmitter(self.cluster, span).submit(definition)
        except SubmissionError as e:
            outcome = JobOutcome(
                status=OutcomeStatus.SUBMISSION_ERROR,
                job_name=definition.name,
                namespace=definition.namespace,
                message=_truncate(e.describe()),
            )
            return self._finalize(
                span, strategy, policy, outcome, preflight=preflight, definition=definition
            )

        # 4. Monitor
        with log_context(job_name=identity.name, job_uid=identity.uid):
            monitor = JobMonitor(
                self.cluster,
                self.poll_policy or policy.poll,
                observer=span,
                cancel_event=self.cancel_event,
                wait=self._wait,
            )
            try:
                outcome = monitor.watch(identity)
            except MonitorCancelled as e:
                span.record_error(e)
                outcome = e.outcome

            return self._finalize(
                span,
                strategy,
                policy,
                outcome,
                preflight=preflight,
                definition=definition,
                identity=identity,
            )

    def _crashed(
        self,
        span: SpanObserver,
        strategy: MetricsStrategy,
        policy: StrategyPolicy,
        error: Exception,
    ) -> RunReport:
        """Unexpected exception from any stage; the job (if created) is left to its TTL."""
        span.record_error(error)
        logger.exception(f"Unexpected error during {strategy.value} run")
        outcome = JobOutcome(
            status=OutcomeStatus.INTERNAL_ERROR,
            namespace=self.namespace,
            message=_truncate(f"{type(error).__name__}: {error}"),
        )
        return self._finalize(span, strategy, policy, outcome)

    def _finalize(
        self,
        span: SpanObserver,
        strategy: MetricsStrategy,
        policy: StrategyPolicy,
        outcome: JobOutcome,
        preflight: Optional[PreflightResult] = None,
        definition: Optional[JobDefinition] = None,
        identity: Optional[JobIdentity] = None,
    ) -> RunReport:
        """Emit the final status event, set the span outcome, map the exit code."""
        exit_code = ExitCode.for_status(outcome.status)

        span.set_attribute("job.outcome", outcome.status.value)
        span.set_attribute("job.attempts", outcome.attempts)
        span.set_attribute("process.exit_code", int(exit_code))
        span.add_event(
            "Job run finished",
            {
                "status": outcome.status.value,
                "attempts": outcome.attempts,
                "succeeded": outcome.succeeded,
                "failed": outcome.failed,
            },
        )
        span.set_outcome(outcome.is_successful, outcome.message)

        hints: List[str] = []
        if identity is not None:
            hints = list(policy.hints)

        if outcome.is_successful:
            logger.info(f"Job {outcome.job_name} completed successfully")
        elif outcome.status is OutcomeStatus.FAILED:
            logger.error(f"Job {outcome.job_name} failed: {outcome.message}")
        elif outcome.status is OutcomeStatus.SUBMISSION_ERROR:
            logger.error(outcome.message)
        else:
            logger.warning(f"Run ended with {outcome.status.value}: {outcome.message}")

        for hint in hints:
            logger.info(hint)

        log_checkpoint(
            "job_terminal",
            {
                "status": outcome.status.value,
                "attempts": outcome.attempts,
                "exit_code": int(exit_code),
            },
        )

        return RunReport(
            outcome=outcome,
            exit_code=exit_code,
            strategy=strategy,
            definition=definition,
            identity=identity,
            preflight=preflight,
            hints=hints,
        )


def _truncate(message: str) -> str:
    return message[:_MAX_MESSAGE]


__all__ = ["JobOrchestrator", "RunReport"]
