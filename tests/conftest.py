# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - Fakes for cluster access and waiting
# PURPOSE: Scripted ClusterClient and recording wait used across test modules
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shared fixtures.

FakeCluster replays a script of status reads; each entry is a
(succeeded, failed) tuple, a JobStatusSnapshot or an exception to raise.
The last entry repeats once the script is exhausted.
"""

from typing import List, Optional, Sequence

import pytest

from core.models import JobDefinition, JobIdentity, JobStatusSnapshot
from services.definition_builder import JobNameGenerator


def snap(succeeded=None, failed=None, active=None) -> JobStatusSnapshot:
    return JobStatusSnapshot(succeeded=succeeded, failed=failed, active=active)


class FakeCluster:
    """In-memory ClusterClient that records every call."""

    def __init__(
        self,
        reads: Sequence = (),
        probe_error: Optional[BaseException] = None,
        create_error: Optional[BaseException] = None,
        config_maps: Optional[Sequence[str]] = None,
    ):
        self.reads = list(reads)
        self.probe_error = probe_error
        self.create_error = create_error
        self.config_maps = config_maps
        self.calls: List[str] = []
        self.created: List[JobDefinition] = []
        self.read_count = 0

    def probe(self) -> None:
        self.calls.append("probe")
        if self.probe_error is not None:
            raise self.probe_error

    def config_map_exists(self, name: str, namespace: str) -> bool:
        self.calls.append("config_map_exists")
        return self.config_maps is None or name in self.config_maps

    def create_job(self, namespace: str, definition: JobDefinition) -> JobIdentity:
        self.calls.append("create_job")
        if self.create_error is not None:
            raise self.create_error
        self.created.append(definition)
        return JobIdentity(
            name=definition.name,
            uid=f"uid-{len(self.created)}",
            namespace=namespace,
        )

    def read_job(self, name: str, namespace: str) -> JobStatusSnapshot:
        self.calls.append("read_job")
        self.read_count += 1
        if not self.reads:
            return snap()
        item = self.reads[min(self.read_count, len(self.reads)) - 1]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, tuple):
            return snap(*item)
        return item


class RecordingWait:
    """
    Stand-in for cancel_event.wait.

    Records each requested delay. Returns True (cancelled) on the
    cancel_on-th call, or once the optional event is set.
    """

    def __init__(self, cancel_on: Optional[int] = None, on_call=None):
        self.delays: List[float] = []
        self.cancel_on = cancel_on
        self.on_call = on_call

    def __call__(self, seconds: float) -> bool:
        self.delays.append(seconds)
        if self.on_call is not None:
            self.on_call(len(self.delays))
        return self.cancel_on is not None and len(self.delays) >= self.cancel_on


@pytest.fixture
def fixed_names():
    """Name generator with a frozen clock."""
    return JobNameGenerator(clock=lambda: 1700000000000)


@pytest.fixture
def make_cluster():
    return FakeCluster


@pytest.fixture
def make_wait():
    return RecordingWait
