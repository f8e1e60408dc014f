"""Data models for the commitment enforcement engine.

Rules are immutable and shared across requests. Outcomes, adjustments and
reports are built fresh per evaluation and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class CommitmentType(str, Enum):
    """Scored property a response must satisfy."""

    ACCURACY = "accuracy"
    LATENCY = "latency"
    KEYWORD_COMPLIANCE = "keyword_compliance"
    SCRIPT_QUALITY = "script_quality"
    STRUCTURE_QUALITY = "structure_quality"
    BILINGUAL_CONSISTENCY = "bilingual_consistency"
    TONE_QUALITY = "tone_quality"
    CODE_QUALITY = "code_quality"
    CODE_SECURITY = "code_security"
    LANGUAGE_MATCH = "language_match"


class EnforcementLevel(str, Enum):
    STRICT = "STRICT"
    MANDATORY = "MANDATORY"


class FallbackAction(str, Enum):
    """Known remediation actions. Rules keep the raw string (see CommitmentRule)."""

    ESCALATE_FOR_REVIEW = "escalate_for_review"
    SERVE_CACHED = "serve_cached"
    APPLY_TEMPLATE = "apply_template"
    NORMALIZE_TEXT = "normalize_text"
    RESTRUCTURE = "restructure"
    ADD_SECONDARY_LANGUAGE = "add_secondary_language"
    RETONE = "retone"
    REVIEW_CODE = "review_code"
    SECURITY_NOTICE = "security_notice"


# Scores at or below target pass for these types; everything else is higher-is-better.
LOWER_IS_BETTER = frozenset({CommitmentType.LATENCY})


# =============================================================================
# ERRORS
# =============================================================================


class EnforcementError(Exception):
    """Base class for faults raised inside the enforcement core."""


class ConfigurationFault(EnforcementError):
    """Unknown fallback action, unregistered validator, or malformed rule."""


class ValidatorFault(EnforcementError):
    """A validator raised while scoring an output."""


class RemediationFault(EnforcementError):
    """A remediation raised or timed out."""


# =============================================================================
# RULES
# =============================================================================


@dataclass(frozen=True)
class CommitmentRule:
    """One commitment a profile must honour.

    Attributes:
        type: What is scored.
        target: Pass threshold (minimum score, or maximum for latency).
        enforcement_level: STRICT or MANDATORY.
        fallback_action: Remediation tag. Kept as a string so an unknown
            action loads fine and is reported when dispatched.
    """

    type: CommitmentType
    target: float
    enforcement_level: EnforcementLevel = EnforcementLevel.STRICT
    fallback_action: str = FallbackAction.ESCALATE_FOR_REVIEW.value

    def is_satisfied_by(self, score: float) -> bool:
        if self.type in LOWER_IS_BETTER:
            return score <= self.target
        return score >= self.target


@dataclass(frozen=True)
class RuntimeMetadata:
    """Per-request facts not derivable from the text itself."""

    latency_ms: float = 0.0
    cache_key: str | None = None
    profile: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class RuleOutcome:
    """Result of scoring one rule for one request."""

    type: CommitmentType
    passed: bool
    score: float
    target: float
    enforcement_level: EnforcementLevel
    status: str = "passed"  # "passed", "failed", "skipped"
    diagnostic: str = ""

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "passed": self.passed,
            "score": round(self.score, 2),
            "target": self.target,
            "enforcement_level": self.enforcement_level.value,
            "status": self.status,
            "diagnostic": self.diagnostic,
        }


@dataclass(frozen=True)
class Adjustment:
    """A remediation attempt for one failing rule."""

    fallback_action: str
    success: bool
    adjusted_output: str
    commitment_type: CommitmentType | None = None
    diagnostic: str = ""

    def to_dict(self) -> dict:
        return {
            "fallback_action": self.fallback_action,
            "success": self.success,
            "adjusted_output": self.adjusted_output,
            "commitment_type": self.commitment_type.value if self.commitment_type else None,
            "diagnostic": self.diagnostic,
        }


@dataclass(frozen=True)
class EnforcementReport:
    """Complete verdict for one evaluation."""

    overall_passed: bool
    final_output: str
    violations: tuple[RuleOutcome, ...] = ()
    adjustments: tuple[Adjustment, ...] = ()
    skipped: tuple[RuleOutcome, ...] = ()
    profile: str = ""

    def to_flat_dict(self) -> dict:
        """Flat structure for logging and transport."""
        return {
            "profile": self.profile,
            "overall_passed": self.overall_passed,
            "final_output": self.final_output,
            "violation_count": len(self.violations),
            "adjustment_count": len(self.adjustments),
            "skipped_count": len(self.skipped),
            "violations": [v.to_dict() for v in self.violations],
            "adjustments": [a.to_dict() for a in self.adjustments],
            "skipped": [s.to_dict() for s in self.skipped],
        }


@dataclass(frozen=True)
class ViolationRecord:
    """Ledger entry: a failed rule for a profile at a point in time."""

    profile: str
    outcome: RuleOutcome
    timestamp: datetime
