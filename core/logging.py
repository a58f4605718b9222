# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with run context
# PURPOSE: Consistent, queryable logging across probe, submit and monitor
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Human-readable progress lines by default, JSON when LOG_FORMAT=json.
Records below ERROR go to stdout, ERROR and above go to stderr.

Features:
- Component-based loggers
- Contextual fields (job_name, strategy, namespace)
- Named checkpoints for lifecycle milestones

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger(__name__)

    with log_context(job_name="busybox-file-metrics-1729", strategy="file-based"):
        logger.info("Polling job", extra={"attempt": 3})
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from enum import Enum


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    ORCHESTRATOR = "orchestrator"
    PREFLIGHT = "preflight"
    BUILDER = "builder"
    SUBMITTER = "submitter"
    MONITOR = "monitor"
    CLUSTER = "cluster"


@dataclass
class LogContext:
    """
    Context for structured logging.

    Thread-local storage for contextual fields.
    """
    job_name: Optional[str] = None
    job_uid: Optional[str] = None
    namespace: Optional[str] = None
    strategy: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


_context_stack = threading.local()


def _get_context_stack() -> list:
    """Get thread-local context stack."""
    if not hasattr(_context_stack, "stack"):
        _context_stack.stack = []
    return _context_stack.stack


def get_current_context() -> LogContext:
    """Get current logging context."""
    stack = _get_context_stack()
    if stack:
        return stack[-1]
    return LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding logging context.

    Fields not given are inherited from the enclosing context.

    Example:
        with log_context(job_name="database-metrics-1729", namespace="default"):
            logger.info("Job submitted")
    """
    parent = get_current_context()
    new_context = LogContext(
        job_name=kwargs.get("job_name", parent.job_name),
        job_uid=kwargs.get("job_uid", parent.job_uid),
        namespace=kwargs.get("namespace", parent.namespace),
        strategy=kwargs.get("strategy", parent.strategy),
        component=kwargs.get("component", parent.component),
        operation=kwargs.get("operation", parent.operation),
        extra={**parent.extra, **kwargs.get("extra", {})},
    )

    stack = _get_context_stack()
    stack.append(new_context)
    try:
        yield new_context
    finally:
        stack.pop()


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregators.
    """

    def __init__(self, include_context: bool = True, include_source: bool = True):
        super().__init__()
        self.include_context = include_context
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context_dict = get_current_context().to_dict()
            if context_dict:
                log_data["context"] = context_dict

        if getattr(record, "extra", None):
            log_data["data"] = record.extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_source:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter for operators.

    Includes the job and strategy inline.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human reading."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        context_parts = []
        if context.strategy:
            context_parts.append(f"strategy={context.strategy}")
        if context.job_name:
            context_parts.append(f"job={context.job_name}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}"

        data = getattr(record, "extra", None)
        if data:
            # Context fields are already inline
            shown = {k: v for k, v in data.items() if k not in LogContext.__dataclass_fields__}
            if shown:
                result += f" {shown}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


class _BelowLevelFilter(logging.Filter):
    """Pass records strictly below a level (stdout side of the split)."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in log records.

    Automatically includes thread-local context in all log messages.
    """

    def process(self, msg, kwargs):
        """Process log record to include context."""
        context = get_current_context()

        extra = dict(kwargs.get("extra") or {})
        extra.update(context.to_dict())
        if self.extra and self.extra.get("component") and "component" not in extra:
            extra["component"] = self.extra["component"]

        # Stored as one attribute for formatter access
        kwargs["extra"] = {"extra": extra}

        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "services.monitor")
        component: Optional component type for categorization

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, {"component": component.value if component else None})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    stdout=None,
    stderr=None,
) -> None:
    """
    Configure logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format (also enabled by LOG_FORMAT=json)
        stdout: Stream for progress records (defaults to sys.stdout)
        stderr: Stream for ERROR and above (defaults to sys.stderr)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter(include_context=True)
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    out_handler = logging.StreamHandler(stdout or sys.stdout)
    out_handler.setFormatter(formatter)
    out_handler.addFilter(_BelowLevelFilter(logging.ERROR))
    root.addHandler(out_handler)

    err_handler = logging.StreamHandler(stderr or sys.stderr)
    err_handler.setFormatter(formatter)
    err_handler.setLevel(logging.ERROR)
    root.addHandler(err_handler)

    # The kubernetes client logs every request at DEBUG through urllib3
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a named lifecycle checkpoint.

    Args:
        name: Checkpoint name (e.g., "job_submitted", "job_terminal")
        data: Optional checkpoint data
        logger: Optional specific logger to use
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")

    checkpoint_data: Dict[str, Any] = {
        "checkpoint": name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    context = get_current_context()
    if context.job_name:
        checkpoint_data["job_name"] = context.job_name
    if context.strategy:
        checkpoint_data["strategy"] = context.strategy

    if data:
        checkpoint_data["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": checkpoint_data})


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
