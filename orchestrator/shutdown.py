# ============================================================================
# SHUTDOWN SIGNALS
# ============================================================================
# STATUS: Core - Cooperative cancellation on process shutdown
# PURPOSE: Turn SIGTERM / SIGINT into a cancel event for the monitor
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shutdown Signals

The monitor waits on a threading.Event between attempts. These handlers
set that event so a shutdown interrupts the wait at once and the run ends
CANCELLED instead of TIMED_OUT. Previous handlers are restored on exit.
"""

import signal
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Tuple

from core.logging import ComponentType, get_logger

logger = get_logger(__name__, ComponentType.ORCHESTRATOR)

SHUTDOWN_SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)


@contextmanager
def cancel_on_signals(
    cancel_event: threading.Event,
    signals: Tuple[signal.Signals, ...] = SHUTDOWN_SIGNALS,
) -> Iterator[threading.Event]:
    """
    Set cancel_event when any of the signals arrives.

    Signal handlers can only be installed from the main thread; elsewhere
    this is a no-op and cancellation must come from the caller.
    """
    previous: Dict[signal.Signals, object] = {}

    def _handler(signum, frame) -> None:
        name = signal.Signals(signum).name
        logger.warning(f"Received {name}, cancelling job monitoring")
        cancel_event.set()

    for sig in signals:
        try:
            previous[sig] = signal.signal(sig, _handler)
        except (ValueError, OSError) as e:
            logger.debug(f"Could not register {sig.name} handler: {e}")

    try:
        yield cancel_event
    finally:
        for sig, handler in previous.items():
            try:
                signal.signal(sig, handler)
            except (ValueError, OSError):
                logger.debug(f"Could not restore {sig.name} handler")


__all__ = ["cancel_on_signals", "SHUTDOWN_SIGNALS"]
