"""
Validator Evals -- each commitment type scores the way its rule describes.

CODE-BASED graders: pure functions, no clock, no I/O.
"""

import pytest

from commitguard.enforcement import CommitmentType, RuntimeMetadata, ScoringConfig, ValidatorLibrary
from commitguard.enforcement.models import ConfigurationFault, ValidatorFault
from commitguard.enforcement.text_signals import (
    arabic_ratio,
    count_morphology_matches,
    has_arabic,
    has_latin,
    mentions_language,
)

META = RuntimeMetadata(latency_ms=1234)


def score(type_: CommitmentType, input_text: str, output: str, profile: str = "any", **kwargs) -> float:
    library = ValidatorLibrary(**kwargs)
    return library.score(type_, input_text, output, profile, META)


class TestScriptSignals:
    """Eval: Script detection uses explicit code-point ranges."""

    def test_arabic_and_latin_detection(self):
        assert has_arabic("مرحبا")
        assert not has_arabic("hello")
        assert has_latin("abc")
        assert not has_latin("١٢٣ مرحبا")

    def test_arabic_ratio(self):
        assert arabic_ratio("") == 0.0
        assert arabic_ratio("ab") == 0.0
        assert arabic_ratio("مر") == 1.0

    def test_morphology_counts_article_and_endings(self):
        # definite article + feminine ending, then feminine plural
        assert count_morphology_matches("الفاتورة") == 2
        assert count_morphology_matches("ملفات") == 1
        assert count_morphology_matches("hello world") == 0

    def test_language_mention_is_whole_word(self):
        assert mentions_language("Use Go for this", "go")
        assert not mentions_language("a good idea", "go")
        assert not mentions_language("javascript only", "java")
        assert mentions_language("written in C++ today", "c++")


class TestLatency:
    def test_score_is_measured_latency(self):
        assert score(CommitmentType.LATENCY, "", "") == 1234.0


class TestAccuracy:
    def test_averages_three_sub_scores(self):
        output = "invoice totals محاسبة فاتورة ضريبة مالي زاتكا"
        result = score(CommitmentType.ACCURACY, "calculate invoice totals", output, "accountant")
        # factual 95, relevance 2/3, expertise 5/5
        assert result == pytest.approx((95 + 200 / 3 + 100) / 3)

    def test_factual_checker_is_pluggable(self):
        class StrictChecker:
            def score(self, input_text, output, profile):
                return 10.0

        result = score(
            CommitmentType.ACCURACY, "ok", "nothing relevant", "unknown",
            factual_checker=StrictChecker(),
        )
        # no content words -> relevance 100; unknown profile -> expertise 0
        assert result == pytest.approx((10 + 100 + 0) / 3)


class TestKeywordCompliance:
    def test_not_applicable_without_trigger(self):
        assert score(CommitmentType.KEYWORD_COMPLIANCE, "what is the weather", "") == 100.0

    def test_trigger_with_keyword_passes_case_insensitively(self):
        assert score(CommitmentType.KEYWORD_COMPLIANCE, "Need an INVOICE", "total incl. vat") == 100.0

    def test_trigger_without_keyword_fails(self):
        assert score(CommitmentType.KEYWORD_COMPLIANCE, "أريد فاتورة", "تم") == 0.0


class TestScriptQuality:
    def test_latin_output_scores_zero(self):
        assert score(CommitmentType.SCRIPT_QUALITY, "", "hello") == 0.0

    def test_weights_are_overridable(self):
        scoring = ScoringConfig().with_overrides({
            "script_ratio_weight": 1.0,
            "script_grammar_weight": 0.0,
            "script_structure_weight": 0.0,
        })
        assert score(CommitmentType.SCRIPT_QUALITY, "", "مرحبا", scoring=scoring) == pytest.approx(100.0)

    def test_weighted_formula(self):
        text = "الكتاب مفيد."
        ratio = 10 / 12 * 100
        expected = ratio * 0.4 + 10 * 0.3 + 50 * 0.3
        assert score(CommitmentType.SCRIPT_QUALITY, "", text) == pytest.approx(expected)


class TestStructureQuality:
    def test_all_indicators(self):
        assert score(CommitmentType.STRUCTURE_QUALITY, "", "• item\nlabel: value\n1. first") == 100.0

    def test_partial_and_none(self):
        assert score(CommitmentType.STRUCTURE_QUALITY, "", "label: value") == 25.0
        assert score(CommitmentType.STRUCTURE_QUALITY, "", "plain") == 0.0


class TestBilingualConsistency:
    def test_mixed_input_requires_mixed_output(self):
        assert score(CommitmentType.BILINGUAL_CONSISTENCY, "hello مرحبا", "hi مرحبا") == 100.0
        assert score(CommitmentType.BILINGUAL_CONSISTENCY, "hello مرحبا", "hi") == 50.0

    def test_single_script_input_prefers_arabic(self):
        assert score(CommitmentType.BILINGUAL_CONSISTENCY, "مرحبا", "أهلاً") == 100.0
        assert score(CommitmentType.BILINGUAL_CONSISTENCY, "مرحبا", "hello") == 80.0


class TestToneQuality:
    def test_professional_markers_add(self):
        assert score(CommitmentType.TONE_QUALITY, "", "يسعدني أن أقترح حلاً، ويجب البدء") == 60.0

    def test_casual_markers_subtract_with_floor(self):
        assert score(CommitmentType.TONE_QUALITY, "", "يسعدني أن أقترح، هاي") == 30.0
        assert score(CommitmentType.TONE_QUALITY, "", "هاي اوكي") == 0.0


class TestCodeQuality:
    def test_not_applicable_without_code(self):
        assert score(CommitmentType.CODE_QUALITY, "", "just prose here") == 100.0

    def test_full_checklist(self):
        output = "```python\n# compute total\ndef total_price(items):\n    return sum(items)\n```"
        assert score(CommitmentType.CODE_QUALITY, "", output) == 100.0

    def test_partial_checklist(self):
        # indentation only: no fence, no comment, no snake/camel identifier
        assert score(CommitmentType.CODE_QUALITY, "", "def add(a, b):\n    return a") == 25.0


class TestCodeSecurity:
    def test_unsafe_construct_in_code(self):
        assert score(CommitmentType.CODE_SECURITY, "", "```js\neval(userInput)\n```") == 0.0

    def test_safe_code(self):
        assert score(CommitmentType.CODE_SECURITY, "", "```js\nconst a = 1\n```") == 100.0

    def test_not_applicable_without_code(self):
        assert score(CommitmentType.CODE_SECURITY, "", "never call eval( in prose") == 100.0


class TestLanguageMatch:
    def test_not_applicable_without_language(self):
        assert score(CommitmentType.LANGUAGE_MATCH, "a good idea", "anything") == 100.0

    def test_requested_language_mentioned(self):
        assert score(CommitmentType.LANGUAGE_MATCH, "write it in python", "Here is Python code") == 100.0

    def test_requested_language_missing(self):
        assert score(CommitmentType.LANGUAGE_MATCH, "write it in python", "Here you go") == 50.0
        assert score(CommitmentType.LANGUAGE_MATCH, "javascript please", "plain java") == 50.0


class TestLibrary:
    def test_custom_validator_registration(self):
        library = ValidatorLibrary()
        library.register(CommitmentType.TONE_QUALITY, lambda i, o, p, m, s: 42)
        assert library.score(CommitmentType.TONE_QUALITY, "", "", "p", META) == 42.0

    def test_determinism(self):
        library = ValidatorLibrary()
        args = ("أحتاج فاتورة", "فاتورة ضريبية: 1. البند", "accountant", META)
        for type_ in CommitmentType:
            assert library.score(type_, *args) == library.score(type_, *args)

    def test_unregistered_type_is_configuration_fault(self):
        library = ValidatorLibrary()
        library._validators.pop(CommitmentType.TONE_QUALITY)
        assert not library.supports(CommitmentType.TONE_QUALITY)
        with pytest.raises(ConfigurationFault):
            library.score(CommitmentType.TONE_QUALITY, "", "", "p", META)

    def test_raising_validator_is_validator_fault(self):
        library = ValidatorLibrary()
        library.register(CommitmentType.TONE_QUALITY, lambda i, o, p, m, s: 1 / 0)
        with pytest.raises(ValidatorFault) as info:
            library.score(CommitmentType.TONE_QUALITY, "", "", "p", META)
        assert isinstance(info.value.__cause__, ZeroDivisionError)

    def test_non_numeric_score_is_validator_fault(self):
        library = ValidatorLibrary()
        library.register(CommitmentType.TONE_QUALITY, lambda i, o, p, m, s: "high")
        with pytest.raises(ValidatorFault) as info:
            library.score(CommitmentType.TONE_QUALITY, "", "", "p", META)
        assert isinstance(info.value.__cause__, ValueError)
