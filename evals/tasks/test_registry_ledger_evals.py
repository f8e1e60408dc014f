"""
Registry + Ledger Evals -- rule tables load once and read-only; the ledger
counts windows correctly under concurrent writers.
"""

import json
import threading
from datetime import datetime, timedelta

import pytest

from commitguard.enforcement import (
    CommitmentRegistry,
    CommitmentType,
    EnforcementLevel,
    ViolationLedger,
)
from evals.helpers import T0, failing_outcome, rule


class TestRegistry:
    def test_default_table_profiles_and_order(self):
        registry = CommitmentRegistry.default()
        assert set(registry.profiles) == {"accountant", "secretary", "developer"}
        assert [r.type for r in registry.rules_for("accountant")] == [
            CommitmentType.ACCURACY,
            CommitmentType.LATENCY,
            CommitmentType.KEYWORD_COMPLIANCE,
            CommitmentType.SCRIPT_QUALITY,
        ]
        latency = registry.rules_for("accountant")[1]
        assert latency.target == 2000
        assert latency.fallback_action == "serve_cached"

    def test_unknown_profile_has_no_rules(self):
        assert CommitmentRegistry.default().rules_for("nonexistent-profile") == ()

    def test_malformed_rules_are_dropped(self):
        registry = CommitmentRegistry.from_table({
            "p": [
                rule("latency", 2000, "serve_cached"),
                {"type": "not_a_type", "target": 1, "fallback_action": "retone"},
                {"type": "tone_quality", "target": "high", "fallback_action": "retone"},
                "not even a dict",
                rule("tone_quality", 98, "retone", "MANDATORY"),
            ]
        })
        rules = registry.rules_for("p")
        assert [r.type for r in rules] == [CommitmentType.LATENCY, CommitmentType.TONE_QUALITY]
        assert rules[1].enforcement_level == EnforcementLevel.MANDATORY

    def test_unknown_fallback_action_still_loads(self):
        registry = CommitmentRegistry.from_table({"p": [rule("latency", 1, "translate_everything")]})
        assert registry.rules_for("p")[0].fallback_action == "translate_everything"

    def test_table_is_read_only(self):
        registry = CommitmentRegistry.default()
        with pytest.raises(TypeError):
            registry._profiles["accountant"] = ()

    def test_from_file_returns_scoring_overrides(self, tmp_path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({
            "profiles": {"auditor": [rule("structure_quality", 75, "restructure")]},
            "scoring": {"tone_professional_points": 25},
        }))
        registry, scoring = CommitmentRegistry.from_file(path)
        assert registry.profiles == ["auditor"]
        assert scoring == {"tone_professional_points": 25}


class TestLedger:
    def test_windowed_stats(self):
        ledger = ViolationLedger()
        outcome = failing_outcome(CommitmentType.LATENCY, 2500, 2000)
        ledger.record("accountant", outcome, T0)
        ledger.record("accountant", outcome, T0 + timedelta(hours=25))
        stats = ledger.stats(timedelta(hours=24), now=T0 + timedelta(hours=26))
        assert stats.total_count == 2
        assert stats.window_count == 1

    def test_by_profile_and_prune(self):
        ledger = ViolationLedger()
        outcome = failing_outcome(CommitmentType.TONE_QUALITY)
        ledger.record("secretary", outcome, T0)
        ledger.record("secretary", outcome, T0 + timedelta(hours=2))
        ledger.record("developer", outcome, T0 + timedelta(hours=2))
        assert ledger.by_profile(timedelta(hours=1), now=T0 + timedelta(hours=2, minutes=30)) == {
            "secretary": 1,
            "developer": 1,
        }
        assert ledger.prune(T0 + timedelta(hours=1)) == 1
        assert len(ledger) == 2

    def test_naive_timestamps_are_taken_as_utc(self):
        ledger = ViolationLedger()
        naive = T0.replace(tzinfo=None)
        entry = ledger.record("accountant", failing_outcome(CommitmentType.LATENCY), naive)
        assert entry.timestamp == T0

        later = naive + timedelta(hours=1)
        assert ledger.stats(timedelta(hours=24), now=later).window_count == 1
        assert ledger.by_profile(timedelta(hours=24), now=later) == {"accountant": 1}
        assert ledger.prune(naive + timedelta(minutes=1)) == 1

    def test_naive_record_does_not_break_default_stats(self):
        ledger = ViolationLedger()
        ledger.record("accountant", failing_outcome(CommitmentType.LATENCY), datetime.now())
        assert ledger.stats(timedelta(hours=24)).total_count == 1

    def test_stats_counts_come_from_one_snapshot(self):
        ledger = ViolationLedger()
        outcome = failing_outcome(CommitmentType.TONE_QUALITY)
        ledger.record("secretary", outcome, T0)
        ledger.record("developer", outcome, T0)
        ledger.record("developer", outcome, T0 - timedelta(days=2))
        stats = ledger.stats(timedelta(hours=24), now=T0)
        assert stats.total_count == 3
        assert stats.window_count == sum(stats.by_profile.values()) == 2
        assert stats.by_profile == {"secretary": 1, "developer": 1}

    def test_concurrent_writers_and_reader(self):
        ledger = ViolationLedger()
        outcome = failing_outcome(CommitmentType.LATENCY)
        writers, per_writer = 8, 500
        observed: list[int] = []
        done = threading.Event()

        def write():
            for _ in range(per_writer):
                ledger.record("p", outcome, T0)

        def read():
            while not done.is_set():
                observed.append(ledger.stats(timedelta(hours=1), now=T0).window_count)

        reader = threading.Thread(target=read)
        reader.start()
        threads = [threading.Thread(target=write) for _ in range(writers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        done.set()
        reader.join()

        assert len(ledger) == writers * per_writer
        assert observed == sorted(observed)
        assert ledger.stats(timedelta(hours=1), now=T0).window_count == writers * per_writer
