"""
Validator Library -- one scoring function per commitment type.

Every validator maps (input_text, output, profile, metadata, scoring) to a
score in [0, 100] and is deterministic: no clock, no randomness, no I/O.

  accuracy               mean of factual consistency, context relevance, profile expertise
  latency                measured latency (lower is better)
  keyword_compliance     100 if not triggered; else 100/0 on compliance keyword presence
  script_quality         weighted target-script ratio, morphology, punctuation/connectors
  structure_quality      share of bullets, line breaks, colon labels, numbered items
  bilingual_consistency  mixed input needs mixed output; otherwise prefer Arabic
  tone_quality           professional markers minus casual markers
  code_quality           checklist share, only when the output contains code
  code_security          0 on any unsafe construct, only when the output contains code
  language_match         requested programming language named in the output

Adding a commitment type is a `register()` call, not an edit to the enforcer.
"""

import logging
from typing import Callable, Protocol, runtime_checkable

from . import text_signals as ts
from .config import ScoringConfig
from .models import CommitmentType, ConfigurationFault, RuntimeMetadata, ValidatorFault

logger = logging.getLogger(__name__)

Validator = Callable[[str, str, str, RuntimeMetadata, ScoringConfig], float]


@runtime_checkable
class FactualConsistencyChecker(Protocol):
    """Pluggable factual-consistency sub-score for the accuracy validator."""

    def score(self, input_text: str, output: str, profile: str) -> float: ...


class BaselineFactualChecker:
    """Returns a fixed baseline. Replace with a real checker when one exists."""

    def __init__(self, baseline: float):
        self.baseline = baseline

    def score(self, input_text: str, output: str, profile: str) -> float:
        return self.baseline


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


# =============================================================================
# ACCURACY
# =============================================================================


def context_relevance(input_text: str, output: str, min_length: int) -> float:
    """Share of the input's content words that reappear in the output."""
    content_words = [w for w in input_text.lower().split() if len(w) >= min_length]
    if not content_words:
        return 100.0
    output_words = set(output.lower().split())
    shared = sum(1 for w in content_words if w in output_words)
    return min(100.0, shared / len(content_words) * 100)


def profile_expertise(output: str, profile: str, scoring: ScoringConfig) -> float:
    keywords = scoring.expertise_keywords.get(profile, ())
    if not keywords:
        return 0.0
    lowered = output.lower()
    matched = sum(1 for k in keywords if k.lower() in lowered)
    return min(100.0, matched / len(keywords) * 100)


def make_accuracy_validator(checker: FactualConsistencyChecker) -> Validator:
    def score_accuracy(input_text, output, profile, metadata, scoring):
        sub_scores = (
            _clamp(checker.score(input_text, output, profile)),
            context_relevance(input_text, output, scoring.min_content_word_length),
            profile_expertise(output, profile, scoring),
        )
        return sum(sub_scores) / len(sub_scores)

    return score_accuracy


# =============================================================================
# SIMPLE SCORERS
# =============================================================================


def score_latency(input_text, output, profile, metadata, scoring):
    return float(metadata.latency_ms)


def score_keyword_compliance(input_text, output, profile, metadata, scoring):
    lowered_input = input_text.lower()
    if not any(t.lower() in lowered_input for t in scoring.compliance_triggers):
        return 100.0
    lowered_output = output.lower()
    return 100.0 if any(k.lower() in lowered_output for k in scoring.compliance_keywords) else 0.0


def score_script_quality(input_text, output, profile, metadata, scoring):
    ratio_score = ts.arabic_ratio(output) * 100
    grammar_score = min(100.0, ts.count_morphology_matches(output) * scoring.grammar_points_per_match)

    tokens = set(ts.tokenize(output))
    structure_score = 0.0
    if any(p in output for p in scoring.script_punctuation):
        structure_score += 50
    if any(c in tokens for c in scoring.script_connectors):
        structure_score += 50

    return _clamp(
        ratio_score * scoring.script_ratio_weight
        + grammar_score * scoring.script_grammar_weight
        + structure_score * scoring.script_structure_weight
    )


def score_structure_quality(input_text, output, profile, metadata, scoring):
    indicators = (
        "•" in output or "-" in output,
        "\n" in output,
        ":" in output,
        ts.NUMBERED_ITEM.search(output) is not None,
    )
    return sum(indicators) / len(indicators) * 100


def score_bilingual_consistency(input_text, output, profile, metadata, scoring):
    if ts.has_arabic(input_text) and ts.has_latin(input_text):
        if ts.has_arabic(output) and ts.has_latin(output):
            return scoring.mixed_script_match_score
        return scoring.mixed_script_mismatch_score
    if ts.has_arabic(output):
        return scoring.preferred_script_score
    return scoring.non_preferred_script_score


def score_tone_quality(input_text, output, profile, metadata, scoring):
    professional = sum(1 for m in scoring.professional_markers if m in output)
    casual = sum(1 for m in scoring.casual_markers if m in output)
    return max(
        0.0,
        professional * scoring.tone_professional_points - casual * scoring.tone_casual_penalty,
    )


def score_code_quality(input_text, output, profile, metadata, scoring):
    if not ts.contains_code(output, scoring.code_markers):
        return 100.0
    checklist = (
        "```" in output,
        any(m in output for m in scoring.comment_markers),
        ts.has_indentation(output),
        ts.has_conventional_identifier(output),
    )
    return sum(checklist) / len(checklist) * 100


def score_code_security(input_text, output, profile, metadata, scoring):
    if not ts.contains_code(output, scoring.code_markers):
        return 100.0
    return 0.0 if any(c in output for c in scoring.unsafe_constructs) else 100.0


def score_language_match(input_text, output, profile, metadata, scoring):
    requested = next(
        (lang for lang in scoring.programming_languages if ts.mentions_language(input_text, lang)),
        None,
    )
    if requested is None:
        return 100.0
    if ts.mentions_language(output, requested):
        return scoring.language_match_score
    return scoring.language_mismatch_score


# =============================================================================
# LIBRARY
# =============================================================================


class ValidatorLibrary:
    """Maps commitment types to validators.

    Usage:
        library = ValidatorLibrary()
        score = library.score(CommitmentType.LATENCY, "q", "a", "accountant", metadata)
    """

    def __init__(
        self,
        scoring: ScoringConfig | None = None,
        factual_checker: FactualConsistencyChecker | None = None,
    ):
        self.scoring = scoring or ScoringConfig()
        self._checker = factual_checker or BaselineFactualChecker(
            self.scoring.factual_consistency_baseline
        )
        self._validators: dict[CommitmentType, Validator] = {
            CommitmentType.ACCURACY: make_accuracy_validator(self._checker),
            CommitmentType.LATENCY: score_latency,
            CommitmentType.KEYWORD_COMPLIANCE: score_keyword_compliance,
            CommitmentType.SCRIPT_QUALITY: score_script_quality,
            CommitmentType.STRUCTURE_QUALITY: score_structure_quality,
            CommitmentType.BILINGUAL_CONSISTENCY: score_bilingual_consistency,
            CommitmentType.TONE_QUALITY: score_tone_quality,
            CommitmentType.CODE_QUALITY: score_code_quality,
            CommitmentType.CODE_SECURITY: score_code_security,
            CommitmentType.LANGUAGE_MATCH: score_language_match,
        }

    def register(self, commitment_type: CommitmentType, validator: Validator) -> None:
        self._validators[commitment_type] = validator

    def use_scoring(self, scoring: ScoringConfig) -> None:
        """Switch every validator to a new ScoringConfig."""
        self.scoring = scoring
        if isinstance(self._checker, BaselineFactualChecker):
            self._checker.baseline = scoring.factual_consistency_baseline

    def supports(self, commitment_type: CommitmentType) -> bool:
        return commitment_type in self._validators

    def score(
        self,
        commitment_type: CommitmentType,
        input_text: str,
        output: str,
        profile: str,
        metadata: RuntimeMetadata,
    ) -> float:
        """Score one commitment.

        Raises ConfigurationFault for an unregistered type and ValidatorFault
        when the validator itself raises or returns a non-number.
        """
        validator = self._validators.get(commitment_type)
        if validator is None:
            raise ConfigurationFault(f"No validator registered for {commitment_type}")
        try:
            return float(validator(input_text, output, profile, metadata, self.scoring))
        except Exception as e:
            raise ValidatorFault(f"{type(e).__name__}: {e}") from e
