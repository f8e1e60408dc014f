"""
ViolationLedger -- append-only, time-indexed record of rule violations.

The only mutable state shared between requests. Writers append under a
lock; readers copy a snapshot under the same lock and count outside it,
so each critical section is a single append or a single list copy.
Records are frozen dataclasses, so a reader never sees a partial record.

All timestamps are stored timezone-aware. A naive datetime passed in is
taken to be UTC.
"""

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .models import RuleOutcome, ViolationRecord

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class LedgerStats:
    total_count: int
    window_count: int
    by_profile: dict[str, int] = field(default_factory=dict)


class ViolationLedger:
    """
    Thread-safe violation history.

    Usage:
        ledger = ViolationLedger()
        ledger.record("accountant", outcome)
        stats = ledger.stats(timedelta(hours=24))
    """

    def __init__(self):
        self._records: list[ViolationRecord] = []
        self._lock = threading.Lock()

    def record(
        self, profile: str, outcome: RuleOutcome, timestamp: datetime | None = None
    ) -> ViolationRecord:
        stamp = as_utc(timestamp) if timestamp is not None else utc_now()
        entry = ViolationRecord(profile=profile, outcome=outcome, timestamp=stamp)
        with self._lock:
            self._records.append(entry)
        logger.debug(f"[Ledger] Recorded {outcome.type.value} violation for {profile}")
        return entry

    def snapshot(self) -> list[ViolationRecord]:
        with self._lock:
            return list(self._records)

    def stats(self, window: timedelta, now: datetime | None = None) -> LedgerStats:
        """Total count, count of records younger than `window`, and that count per profile.

        All three numbers come from one snapshot.
        """
        records = self.snapshot()
        cutoff_now = as_utc(now) if now is not None else utc_now()
        recent = Counter(r.profile for r in records if cutoff_now - r.timestamp < window)
        return LedgerStats(
            total_count=len(records),
            window_count=sum(recent.values()),
            by_profile=dict(recent),
        )

    def by_profile(self, window: timedelta, now: datetime | None = None) -> dict[str, int]:
        """Windowed violation counts per profile."""
        return self.stats(window, now).by_profile

    def prune(self, older_than: datetime) -> int:
        """Drop records stamped before `older_than`. Returns how many were removed."""
        older_than = as_utc(older_than)
        with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.timestamp >= older_than]
            removed = before - len(self._records)
        if removed:
            logger.info(f"[Ledger] Pruned {removed} records older than {older_than.isoformat()}")
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
