"""
CommitmentRegistry -- immutable mapping of profile name to ordered rules.

Built once from a data table (the built-in DEFAULT_COMMITMENTS or a JSON
policy file) and never mutated, so concurrent readers need no locking.
Hot reload builds a new registry and swaps the reference.

Policy file format:

    {
      "profiles": {
        "accountant": [
          {"type": "latency", "target": 2000,
           "enforcement_level": "STRICT", "fallback_action": "serve_cached"}
        ]
      },
      "scoring": {"tone_professional_points": 25}
    }
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, Field, ValidationError

from .models import CommitmentRule, CommitmentType, EnforcementLevel

logger = logging.getLogger(__name__)

DEFAULT_COMMITMENTS: dict[str, list[dict[str, Any]]] = {
    "accountant": [
        {"type": "accuracy", "target": 99.9, "enforcement_level": "STRICT", "fallback_action": "escalate_for_review"},
        {"type": "latency", "target": 2000, "enforcement_level": "STRICT", "fallback_action": "serve_cached"},
        {"type": "keyword_compliance", "target": 100, "enforcement_level": "MANDATORY", "fallback_action": "apply_template"},
        {"type": "script_quality", "target": 95, "enforcement_level": "STRICT", "fallback_action": "normalize_text"},
    ],
    "secretary": [
        {"type": "structure_quality", "target": 100, "enforcement_level": "STRICT", "fallback_action": "restructure"},
        {"type": "bilingual_consistency", "target": 100, "enforcement_level": "MANDATORY", "fallback_action": "add_secondary_language"},
        {"type": "tone_quality", "target": 98, "enforcement_level": "STRICT", "fallback_action": "retone"},
    ],
    "developer": [
        {"type": "code_quality", "target": 95, "enforcement_level": "STRICT", "fallback_action": "review_code"},
        {"type": "code_security", "target": 100, "enforcement_level": "MANDATORY", "fallback_action": "security_notice"},
        {"type": "language_match", "target": 100, "enforcement_level": "MANDATORY", "fallback_action": "escalate_for_review"},
    ],
}


class RuleSpec(BaseModel):
    """Validated shape of one rule in a policy table."""

    type: CommitmentType
    target: float
    enforcement_level: EnforcementLevel = EnforcementLevel.STRICT
    fallback_action: str = Field(min_length=1)

    def to_rule(self) -> CommitmentRule:
        return CommitmentRule(
            type=self.type,
            target=self.target,
            enforcement_level=self.enforcement_level,
            fallback_action=self.fallback_action,
        )


def parse_rules(profile: str, entries: Iterable[Any]) -> tuple[CommitmentRule, ...]:
    """Parse a profile's rule list, dropping malformed rules with a warning."""
    rules = []
    for index, entry in enumerate(entries):
        try:
            rules.append(RuleSpec.model_validate(entry).to_rule())
        except ValidationError as e:
            logger.warning(
                f"[Registry] Malformed rule #{index} in profile '{profile}' skipped: "
                f"{e.error_count()} error(s)"
            )
    return tuple(rules)


class CommitmentRegistry:
    """Read-only profile -> rules lookup.

    Usage:
        registry = CommitmentRegistry.default()
        for rule in registry.rules_for("accountant"):
            ...
    """

    def __init__(self, profiles: Mapping[str, Iterable[CommitmentRule]] | None = None):
        self._profiles: Mapping[str, tuple[CommitmentRule, ...]] = MappingProxyType(
            {name: tuple(rules) for name, rules in (profiles or {}).items()}
        )

    @classmethod
    def from_table(cls, table: Mapping[str, Iterable[Any]]) -> "CommitmentRegistry":
        profiles = {name: parse_rules(name, entries) for name, entries in table.items()}
        registry = cls(profiles)
        logger.info(
            f"[Registry] Loaded {len(profiles)} profiles, "
            f"{sum(len(r) for r in profiles.values())} rules"
        )
        return registry

    @classmethod
    def default(cls) -> "CommitmentRegistry":
        return cls.from_table(DEFAULT_COMMITMENTS)

    @classmethod
    def from_file(cls, path: Path) -> tuple["CommitmentRegistry", dict[str, Any]]:
        """Load a JSON policy file. Returns (registry, scoring overrides)."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        profiles = data.get("profiles", {})
        if not isinstance(profiles, dict):
            logger.warning(f"[Registry] 'profiles' in {path} is not an object, loading none")
            profiles = {}
        cleaned = {}
        for name, entries in profiles.items():
            if not isinstance(entries, list):
                logger.warning(f"[Registry] Profile '{name}' in {path} is not a list, skipped")
                continue
            cleaned[name] = entries
        scoring = data.get("scoring", {})
        return cls.from_table(cleaned), scoring if isinstance(scoring, dict) else {}

    def rules_for(self, profile: str) -> tuple[CommitmentRule, ...]:
        """Ordered rules for a profile. Empty for unknown profiles."""
        return self._profiles.get(profile, ())

    @property
    def profiles(self) -> list[str]:
        return list(self._profiles)

    def __contains__(self, profile: str) -> bool:
        return profile in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)
