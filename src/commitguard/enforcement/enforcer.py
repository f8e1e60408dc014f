"""
CommitmentEnforcer -- scores a candidate output against its profile's rules
and remediates failures before the output is released.

Flow for one evaluate() call:
  1. Resolve rules for the profile (unknown profile: pass-through report)
  2. Score each rule in declared order, stopping early once the time budget
     is spent (remaining rules are reported as skipped)
  3. Remediate violations serially: each remediation sees the output left
     by the previous successful one
  4. Record violations in the ledger, emit one audit event

No fault raised by a validator, remediation or audit sink escapes; each is
converted into an outcome, an adjustment, or a log line.
"""

import asyncio
import logging
import threading
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from .audit import AuditEvent, AuditSink, LoggingAuditSink, emit_safely
from .config import EnforcerConfig, ScoringConfig
from .ledger import ViolationLedger, utc_now
from .models import (
    Adjustment,
    CommitmentRule,
    ConfigurationFault,
    EnforcementReport,
    RuleOutcome,
    RuntimeMetadata,
    ValidatorFault,
)
from .registry import CommitmentRegistry
from .remediation import RemediationLibrary, ResponseCache
from .validators import ValidatorLibrary

logger = logging.getLogger(__name__)


class CommitmentEnforcer:
    """
    Explicitly constructed enforcement service. Holds the registry and ledger.

    Usage:
        enforcer = CommitmentEnforcer.from_config(EnforcerConfig.from_env())
        report = await enforcer.evaluate(
            "accountant", user_message, llm_output, RuntimeMetadata(latency_ms=1840)
        )
        send(report.final_output)
    """

    def __init__(
        self,
        registry: CommitmentRegistry | None = None,
        ledger: ViolationLedger | None = None,
        validators: ValidatorLibrary | None = None,
        remediations: RemediationLibrary | None = None,
        audit_sink: AuditSink | None = None,
        config: EnforcerConfig | None = None,
        cache: ResponseCache | None = None,
        scoring: ScoringConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.config = config or EnforcerConfig()
        self.scoring = scoring or ScoringConfig()
        self.registry = registry or CommitmentRegistry.default()
        self.ledger = ledger or ViolationLedger()
        self.validators = validators or ValidatorLibrary(scoring=self.scoring)
        self.remediations = remediations or RemediationLibrary(
            scoring=self.scoring,
            cache=cache,
            cache_timeout=self.config.cache_timeout_ms / 1000,
        )
        self.audit_sink = audit_sink or LoggingAuditSink()
        self._clock = clock
        self._monotonic = monotonic
        self._evaluations = 0
        self._counter_lock = threading.Lock()

    @classmethod
    def from_config(
        cls, config: EnforcerConfig, cache: ResponseCache | None = None, **kwargs
    ) -> "CommitmentEnforcer":
        """Build an enforcer, loading the policy file when one is configured."""
        registry = None
        scoring = ScoringConfig()
        if config.policy_path:
            registry, overrides = CommitmentRegistry.from_file(config.policy_path)
            scoring = scoring.with_overrides(overrides)
        return cls(registry=registry, config=config, cache=cache, scoring=scoring, **kwargs)

    def reload_policy(self, path: Path) -> CommitmentRegistry:
        """Swap in the rule table and scoring overrides from a policy file.

        The file replaces the previous policy as a whole: overrides apply on
        top of the default ScoringConfig, not on top of the previous file.
        """
        registry, overrides = CommitmentRegistry.from_file(path)
        scoring = ScoringConfig().with_overrides(overrides)
        self.validators.use_scoring(scoring)
        self.remediations.scoring = scoring
        self.scoring = scoring
        self.registry = registry
        logger.info(
            f"[Enforcer] Policy reloaded from {path} "
            f"({len(registry)} profiles, {len(overrides)} scoring overrides)"
        )
        return registry

    # =========================================================================
    # EVALUATION
    # =========================================================================

    async def evaluate(
        self,
        profile: str,
        input_text: str,
        candidate_output: str,
        metadata: RuntimeMetadata | None = None,
    ) -> EnforcementReport:
        metadata = metadata or RuntimeMetadata(profile=profile)
        rules = self.registry.rules_for(profile)
        if not rules:
            return EnforcementReport(
                overall_passed=True, final_output=candidate_output, profile=profile
            )

        with self._counter_lock:
            self._evaluations += 1

        failing, skipped = self._score_rules(profile, rules, input_text, candidate_output, metadata)
        violations = tuple(outcome for _, outcome in failing)

        adjustments = []
        working = candidate_output
        for rule, outcome in failing:
            adjustment = await self._remediate(rule, outcome, working, metadata, input_text, profile)
            adjustments.append(adjustment)
            if adjustment.success:
                working = adjustment.adjusted_output

        report = EnforcementReport(
            overall_passed=not violations,
            final_output=working,
            violations=violations,
            adjustments=tuple(adjustments),
            skipped=tuple(skipped),
            profile=profile,
        )
        self._record(profile, report, rules_evaluated=len(rules) - len(skipped))
        return report

    def evaluate_sync(
        self,
        profile: str,
        input_text: str,
        candidate_output: str,
        metadata: RuntimeMetadata | None = None,
    ) -> EnforcementReport:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.evaluate(profile, input_text, candidate_output, metadata))

    def _score_rules(
        self,
        profile: str,
        rules: tuple[CommitmentRule, ...],
        input_text: str,
        output: str,
        metadata: RuntimeMetadata,
    ) -> tuple[list[tuple[CommitmentRule, RuleOutcome]], list[RuleOutcome]]:
        budget_seconds = self.config.time_budget_ms / 1000
        started = self._monotonic()
        failing: list[tuple[CommitmentRule, RuleOutcome]] = []
        skipped: list[RuleOutcome] = []

        for index, rule in enumerate(rules):
            over_budget = (
                index >= self.config.min_rules_before_budget
                and self._monotonic() - started > budget_seconds
            )
            if over_budget:
                skipped.append(self._skipped(rule, "time_budget_exceeded"))
                continue

            outcome = self._score_rule(profile, rule, input_text, output, metadata)
            if outcome.status == "skipped":
                skipped.append(outcome)
            elif not outcome.passed:
                failing.append((rule, outcome))

        if skipped:
            logger.warning(
                f"[Enforcer] {profile}: {len(skipped)} of {len(rules)} rules skipped"
            )
        return failing, skipped

    def _score_rule(
        self,
        profile: str,
        rule: CommitmentRule,
        input_text: str,
        output: str,
        metadata: RuntimeMetadata,
    ) -> RuleOutcome:
        try:
            score = self.validators.score(rule.type, input_text, output, profile, metadata)
        except ConfigurationFault as e:
            logger.warning(f"[Enforcer] Configuration: {e}")
            return self._skipped(rule, "configuration_fault:no_validator")
        except ValidatorFault as e:
            cause = type(e.__cause__ or e).__name__
            logger.error(
                f"[Enforcer] Validator fault: profile={profile} type={rule.type.value} error={e}"
            )
            return RuleOutcome(
                type=rule.type,
                passed=False,
                score=0.0,
                target=rule.target,
                enforcement_level=rule.enforcement_level,
                status="failed",
                diagnostic=f"validator_fault:{cause}",
            )

        passed = rule.is_satisfied_by(score)
        return RuleOutcome(
            type=rule.type,
            passed=passed,
            score=score,
            target=rule.target,
            enforcement_level=rule.enforcement_level,
            status="passed" if passed else "failed",
        )

    @staticmethod
    def _skipped(rule: CommitmentRule, diagnostic: str) -> RuleOutcome:
        return RuleOutcome(
            type=rule.type,
            passed=False,
            score=0.0,
            target=rule.target,
            enforcement_level=rule.enforcement_level,
            status="skipped",
            diagnostic=diagnostic,
        )

    async def _remediate(
        self,
        rule: CommitmentRule,
        outcome: RuleOutcome,
        working: str,
        metadata: RuntimeMetadata,
        input_text: str,
        profile: str,
    ) -> Adjustment:
        try:
            return await self.remediations.apply(
                rule.fallback_action, working, outcome, metadata, input_text, profile
            )
        except Exception as e:
            logger.error(
                f"[Enforcer] Remediation escaped its library: type={rule.type.value} "
                f"action={rule.fallback_action} error={e}"
            )
            return Adjustment(
                rule.fallback_action, False, working, rule.type, f"remediation_fault:{type(e).__name__}"
            )

    def _record(self, profile: str, report: EnforcementReport, rules_evaluated: int) -> None:
        now = self._clock()
        if self.config.active_monitoring:
            for outcome in report.violations:
                self.ledger.record(profile, outcome, now)

        failed_adjustments = sum(1 for a in report.adjustments if not a.success)
        logger.info(
            f"[Enforcer] {profile}: passed={report.overall_passed} "
            f"violations={len(report.violations)} adjustments={len(report.adjustments)} "
            f"failed_adjustments={failed_adjustments} skipped={len(report.skipped)}"
        )
        emit_safely(
            self.audit_sink,
            AuditEvent(
                profile=profile,
                passed=report.overall_passed,
                rules_evaluated=rules_evaluated,
                violation_count=len(report.violations),
                adjustment_count=len(report.adjustments),
                failed_adjustment_count=failed_adjustments,
                skipped_count=len(report.skipped),
                timestamp=now,
            ),
        )

    # =========================================================================
    # STATISTICS
    # =========================================================================

    @property
    def evaluations(self) -> int:
        with self._counter_lock:
            return self._evaluations

    def get_stats(self, window: timedelta | None = None, now: datetime | None = None) -> dict:
        stats = self.ledger.stats(window or self.config.stats_window, now=now or self._clock())
        return {
            "total_violations": stats.total_count,
            "recent_violations": stats.window_count,
            "evaluations": self.evaluations,
            "active_monitoring": self.config.active_monitoring,
            "recent_by_profile": stats.by_profile,
        }
