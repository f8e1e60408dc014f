"""
Commitment Enforcement -- scores generated responses against per-profile
commitments and remediates failures before release.

Components:
  - CommitmentRegistry: Immutable profile -> ordered rules table
  - ValidatorLibrary: One deterministic scorer per commitment type
  - RemediationLibrary: One transform per fallback action (cache lookup is the only I/O)
  - ViolationLedger: Thread-safe, time-windowed violation history
  - CommitmentEnforcer: Orchestrates scoring, serial remediation, ledger and audit
"""

from .audit import AuditEvent, LoggingAuditSink, MemoryAuditSink
from .config import EnforcerConfig, ScoringConfig, configure_logging
from .enforcer import CommitmentEnforcer
from .ledger import LedgerStats, ViolationLedger
from .models import (
    Adjustment,
    CommitmentRule,
    CommitmentType,
    EnforcementLevel,
    EnforcementReport,
    FallbackAction,
    RuleOutcome,
    RuntimeMetadata,
)
from .registry import CommitmentRegistry
from .remediation import InMemoryResponseCache, NullResponseCache, RemediationLibrary
from .validators import ValidatorLibrary

__all__ = [
    "Adjustment",
    "AuditEvent",
    "CommitmentEnforcer",
    "CommitmentRegistry",
    "CommitmentRule",
    "CommitmentType",
    "EnforcementLevel",
    "EnforcementReport",
    "EnforcerConfig",
    "FallbackAction",
    "InMemoryResponseCache",
    "LedgerStats",
    "LoggingAuditSink",
    "MemoryAuditSink",
    "NullResponseCache",
    "RemediationLibrary",
    "RuleOutcome",
    "RuntimeMetadata",
    "ScoringConfig",
    "ValidatorLibrary",
    "ViolationLedger",
    "configure_logging",
]
