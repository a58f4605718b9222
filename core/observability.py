# ============================================================================
# OBSERVABILITY
# ============================================================================
# STATUS: Core - Tracing for orchestration runs
# PURPOSE: Narrow observer capability injected into orchestrator and monitor
# CREATED: 19 OCT 2026
# ============================================================================
"""
Observability

The orchestrator and monitor only ever talk to a JobObserver:

    set_attribute(key, value)
    add_event(name, attributes=None)
    record_error(exc)
    set_outcome(ok, message=None)

Implementations:
- NoOpObserver: discards everything (tests, --dry-run)
- SpanObserver: keeps a local record and forwards to an OpenTelemetry span

Usage:
    from core.observability import get_tracer

    with get_tracer().start_span("job.run", {"job.strategy": "sidecar"}) as span:
        span.add_event("Creating Kubernetes Job")
        span.set_outcome(True)
"""

import logging
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class ObservabilityConfig:
    """Configuration for tracing."""
    service_name: str = "metrics-job-orchestrator"
    service_version: str = "0.1.0"
    environment: str = "development"

    enable_tracing: bool = True
    # "console" prints finished spans; "none" keeps spans in-process only
    traces_exporter: str = "none"

    @classmethod
    def from_env(cls) -> "ObservabilityConfig":
        """Create config from environment variables."""
        from __version__ import __version__

        return cls(
            service_name=os.getenv("OTEL_SERVICE_NAME", "metrics-job-orchestrator"),
            service_version=os.getenv("SERVICE_VERSION", __version__),
            environment=os.getenv("ENVIRONMENT", "development"),
            enable_tracing=os.getenv("ENABLE_TRACING", "true").lower() == "true",
            traces_exporter=os.getenv("OTEL_TRACES_EXPORTER", "none").lower(),
        )


# ============================================================================
# OBSERVER
# ============================================================================

class JobObserver(Protocol):
    """Span-like sink for run telemetry."""

    def set_attribute(self, key: str, value: Any) -> None: ...

    def add_event(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> None: ...

    def record_error(self, error: BaseException) -> None: ...

    def set_outcome(self, ok: bool, message: Optional[str] = None) -> None: ...


class NoOpObserver:
    """Observer that discards everything."""

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def add_event(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        pass

    def record_error(self, error: BaseException) -> None:
        pass

    def set_outcome(self, ok: bool, message: Optional[str] = None) -> None:
        pass


@dataclass
class SpanObserver:
    """
    Observer backed by a local span record.

    Every call is recorded locally (inspectable in tests) and forwarded to
    the wrapped OpenTelemetry span when one is attached.
    """
    name: str
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[BaseException] = field(default_factory=list)
    status: str = "UNSET"
    status_message: Optional[str] = None

    _otel_span: Any = None

    def set_attribute(self, key: str, value: Any) -> None:
        """Set a span attribute."""
        self.attributes[key] = value
        if self._otel_span is not None:
            self._otel_span.set_attribute(key, value)

    def add_event(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        """Add an event to the span."""
        self.events.append({
            "name": name,
            "timestamp": time.time(),
            "attributes": dict(attributes or {}),
        })
        if self._otel_span is not None:
            self._otel_span.add_event(name, attributes=attributes or {})

    def record_error(self, error: BaseException) -> None:
        """Record an exception without changing the span status."""
        self.errors.append(error)
        if self._otel_span is not None:
            self._otel_span.record_exception(error)

    def set_outcome(self, ok: bool, message: Optional[str] = None) -> None:
        """Set the final span status."""
        self.status = "OK" if ok else "ERROR"
        self.status_message = message
        if self._otel_span is not None:
            if ok:
                self._otel_span.set_status(Status(StatusCode.OK))
            else:
                self._otel_span.set_status(Status(StatusCode.ERROR, message))

    def end(self) -> None:
        self.end_time = time.time()

    @property
    def event_names(self) -> List[str]:
        return [e["name"] for e in self.events]

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds."""
        end = self.end_time or time.time()
        return (end - self.start_time) * 1000

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict."""
        return {
            "name": self.name,
            "duration_ms": self.duration_ms,
            "attributes": self.attributes,
            "events": self.events,
            "errors": [repr(e) for e in self.errors],
            "status": self.status,
            "status_message": self.status_message,
        }


# ============================================================================
# TRACER
# ============================================================================

class Tracer:
    """Creates SpanObservers backed by the global OpenTelemetry tracer."""

    def __init__(self, name: str = "metrics-job-orchestrator", enabled: bool = True):
        self.name = name
        self.enabled = enabled
        self._otel_tracer = trace.get_tracer(name) if enabled else None

    @contextmanager
    def start_span(
        self,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> Iterator[SpanObserver]:
        """
        Start a new span.

        Exceptions escaping the block are recorded and re-raised.

        Args:
            name: Span name
            attributes: Initial attributes

        Yields:
            SpanObserver instance
        """
        span = SpanObserver(name=name)

        if self._otel_tracer is None:
            try:
                for key, value in (attributes or {}).items():
                    span.set_attribute(key, value)
                yield span
            finally:
                span.end()
            return

        with self._otel_tracer.start_as_current_span(
            name,
            record_exception=True,
            set_status_on_exception=True,
        ) as otel_span:
            span._otel_span = otel_span
            for key, value in (attributes or {}).items():
                span.set_attribute(key, value)
            try:
                yield span
            finally:
                span.end()
                logger.debug(f"Span completed: {name} ({span.duration_ms:.2f}ms)")


# ============================================================================
# GLOBAL INSTANCES
# ============================================================================

_config: Optional[ObservabilityConfig] = None
_tracer: Optional[Tracer] = None


def initialize(config: Optional[ObservabilityConfig] = None) -> None:
    """
    Initialize tracing.

    Installs an SDK TracerProvider tagged with the service name. Finished
    spans are printed when OTEL_TRACES_EXPORTER=console.

    Args:
        config: Optional config (uses env vars if not provided)
    """
    global _config, _tracer

    _config = config or ObservabilityConfig.from_env()

    if _config.enable_tracing:
        provider = TracerProvider(
            resource=Resource.create({
                "service.name": _config.service_name,
                "service.version": _config.service_version,
                "deployment.environment": _config.environment,
            })
        )
        if _config.traces_exporter == "console":
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        trace.set_tracer_provider(provider)

    _tracer = Tracer(_config.service_name, enabled=_config.enable_tracing)

    logger.debug(
        f"Observability initialized: service={_config.service_name}, "
        f"tracing={_config.enable_tracing}, exporter={_config.traces_exporter}"
    )


def shutdown() -> None:
    """Flush pending spans."""
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()


def get_tracer() -> Tracer:
    """Get the global tracer."""
    global _tracer
    if _tracer is None:
        initialize()
    return _tracer


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ObservabilityConfig",
    "JobObserver",
    "NoOpObserver",
    "SpanObserver",
    "Tracer",
    "initialize",
    "shutdown",
    "get_tracer",
]
