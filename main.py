# ============================================================================
# METRICS JOB ORCHESTRATOR - MAIN ENTRY POINT
# ============================================================================
# STATUS: Core - Command line entry point
# PURPOSE: Run one metrics job and exit with its outcome code
# CREATED: 19 OCT 2026
# ============================================================================
"""
Metrics Job Orchestrator

Submits one Kubernetes batch Job for the chosen metrics strategy, watches
it to a terminal state and exits with a code that reflects the outcome.

Usage:
    python main.py --strategy file-based --namespace metrics
    python main.py --strategy sidecar --dry-run
    metrics-job --strategy database --json-logs

Exit codes:
    0 succeeded, 1 failed, 2 timed out, 3 cluster unreachable,
    4 submission rejected, 5 definition invalid, 6 internal error,
    130 cancelled
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from __version__ import __version__, BUILD_DATE, CODENAME
from core import observability
from core.config import get_defaults
from core.contracts import ExitCode, MetricsStrategy
from core.errors import ConstructionError
from core.logging import configure_logging, get_logger
from infrastructure import KubernetesClusterClient
from orchestrator import JobOrchestrator, cancel_on_signals
from services import build_job_definition

logger = get_logger(__name__)


def _strategy(value: str) -> MetricsStrategy:
    try:
        return MetricsStrategy.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metrics-job",
        description="Submit and monitor a metrics-producing Kubernetes Job.",
    )
    parser.add_argument(
        "--strategy",
        type=_strategy,
        default=MetricsStrategy.SIDECAR,
        help="Metrics strategy: sidecar, file-based or database (default: sidecar)",
    )
    parser.add_argument(
        "--namespace",
        default=None,
        help="Target namespace (default: $K8S_NAMESPACE or 'default')",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the Job manifest and exit without contacting the cluster",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Log level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=os.environ.get("LOG_FORMAT", "").lower() == "json",
        help="Emit structured JSON logs",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, json_output=args.json_logs)

    strategy: MetricsStrategy = args.strategy
    namespace = args.namespace or get_defaults().namespace

    if args.dry_run:
        try:
            definition = build_job_definition(strategy, namespace=namespace)
        except ConstructionError as e:
            logger.error(f"Failed to create job object: {e}")
            return int(ExitCode.CONSTRUCTION_ERROR)
        print(json.dumps(definition.to_manifest(), indent=2))
        return int(ExitCode.SUCCESS)

    logger.info(f"Starting {CODENAME} v{__version__} (Build {BUILD_DATE})")
    logger.info(f"=== Testing {strategy.value} metrics strategy ===")

    observability.initialize()
    try:
        cluster = KubernetesClusterClient.from_environment()
        orchestrator = JobOrchestrator(cluster, namespace=namespace)
        with cancel_on_signals(orchestrator.cancel_event):
            report = orchestrator.run(strategy)
    except Exception:
        logger.exception("Unexpected error during job orchestration")
        return int(ExitCode.INTERNAL_ERROR)
    finally:
        observability.shutdown()

    logger.info(f"=== {strategy.value} strategy finished: {report.outcome.status.value} ===")
    return int(report.exit_code)


if __name__ == "__main__":
    sys.exit(main())
