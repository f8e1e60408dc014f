"""Eval fixtures -- isolated enforcer instances, fixed clocks, default metadata."""

import pytest

from commitguard.enforcement import (
    CommitmentEnforcer,
    CommitmentRegistry,
    EnforcerConfig,
    MemoryAuditSink,
    RuntimeMetadata,
    ScoringConfig,
)
from evals.helpers import T0, FixedClock


@pytest.fixture
def scoring():
    return ScoringConfig()


@pytest.fixture
def metadata():
    return RuntimeMetadata(latency_ms=500)


@pytest.fixture
def audit_sink():
    return MemoryAuditSink()


@pytest.fixture
def make_enforcer(audit_sink):
    """Factory for enforcers over an ad-hoc rule table (built-in table if None)."""

    def _make(table: dict | None = None, **kwargs) -> CommitmentEnforcer:
        registry = CommitmentRegistry.from_table(table) if table is not None else None
        kwargs.setdefault("audit_sink", audit_sink)
        kwargs.setdefault("config", EnforcerConfig())
        kwargs.setdefault("clock", FixedClock(T0))
        return CommitmentEnforcer(registry=registry, **kwargs)

    return _make
