"""Shared helpers for enforcement evals -- rule rows, outcomes, fake clocks."""

from datetime import datetime, timezone

from commitguard.enforcement import CommitmentType, EnforcementLevel, RuleOutcome

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def rule(type_: str, target: float, fallback: str, level: str = "STRICT") -> dict:
    """One rule-table row."""
    return {
        "type": type_,
        "target": target,
        "enforcement_level": level,
        "fallback_action": fallback,
    }


def failing_outcome(type_: CommitmentType, score: float = 0.0, target: float = 100.0) -> RuleOutcome:
    return RuleOutcome(
        type=type_,
        passed=False,
        score=score,
        target=target,
        enforcement_level=EnforcementLevel.STRICT,
        status="failed",
    )


class FixedClock:
    """Returns queued timestamps, then keeps returning the last one."""

    def __init__(self, *stamps: datetime):
        self._stamps = list(stamps) or [T0]

    def __call__(self) -> datetime:
        if len(self._stamps) > 1:
            return self._stamps.pop(0)
        return self._stamps[0]


class SteppingMonotonic:
    """Fake monotonic clock advancing `step` seconds per read."""

    def __init__(self, step: float = 1.0):
        self._now = 0.0
        self._step = step

    def __call__(self) -> float:
        value = self._now
        self._now += self._step
        return value
