"""
Config Evals -- scoring overrides are type-checked at load time, and log
records render as JSON lines.
"""

import json
import logging

import pytest

from commitguard.enforcement import (
    CommitmentEnforcer,
    CommitmentType,
    EnforcerConfig,
    RuntimeMetadata,
    ScoringConfig,
    ValidatorLibrary,
    configure_logging,
)
from evals.helpers import rule

META = RuntimeMetadata(latency_ms=100)
DEFAULTS = ScoringConfig()


class TestScoringOverrides:
    """Eval: a malformed override is dropped, never applied."""

    def test_string_for_word_list_is_dropped(self, caplog):
        with caplog.at_level(logging.WARNING):
            scoring = DEFAULTS.with_overrides({"compliance_triggers": "invoice"})
        assert scoring.compliance_triggers == DEFAULTS.compliance_triggers
        assert "compliance_triggers" in caplog.text

        library = ValidatorLibrary(scoring=scoring)
        assert library.score(CommitmentType.KEYWORD_COMPLIANCE, "hi", "nothing", "accountant", META) == 100.0

    def test_string_for_number_is_dropped(self):
        scoring = DEFAULTS.with_overrides({"tone_professional_points": "loud"})
        assert scoring.tone_professional_points == DEFAULTS.tone_professional_points

        library = ValidatorLibrary(scoring=scoring)
        assert library.score(CommitmentType.TONE_QUALITY, "", "يسعدني", "secretary", META) == 20.0

    def test_valid_values_take_field_types(self):
        scoring = DEFAULTS.with_overrides({
            "compliance_triggers": ["invoice", "receipt"],
            "tone_substitutions": [["هاي", "أهلاً"]],
            "expertise_keywords": {"auditor": ["تدقيق"]},
            "tone_professional_points": 25,
        })
        assert scoring.compliance_triggers == ("invoice", "receipt")
        assert scoring.tone_substitutions == (("هاي", "أهلاً"),)
        assert scoring.expertise_keywords == {"auditor": ("تدقيق",)}
        assert scoring.tone_professional_points == 25.0

    def test_bad_key_does_not_block_good_ones(self):
        scoring = DEFAULTS.with_overrides({
            "compliance_keywords": 7,
            "no_such_field": 1,
            "review_notice": "[checked]",
        })
        assert scoring.compliance_keywords == DEFAULTS.compliance_keywords
        assert scoring.review_notice == "[checked]"

    def test_policy_file_with_bad_scoring_still_loads(self, tmp_path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({
            "profiles": {"accountant": [rule("keyword_compliance", 100, "apply_template")]},
            "scoring": {"compliance_triggers": "invoice"},
        }))
        enforcer = CommitmentEnforcer.from_config(EnforcerConfig(policy_path=path))
        report = enforcer.evaluate_sync("accountant", "hi", "nothing")
        assert report.overall_passed


class TestLoggingSetup:
    @pytest.fixture
    def log_file(self, tmp_path):
        path = tmp_path / "logs" / "commitguard.jsonl"
        yield path
        package_logger = logging.getLogger("commitguard")
        for handler in list(package_logger.handlers):
            handler.close()
            package_logger.removeHandler(handler)

    def test_records_render_as_json_lines(self, log_file):
        configure_logging("INFO", str(log_file))
        logger = logging.getLogger("commitguard.evals")
        logger.info("[Evals] فاتورة checked", extra={"audit": {"profile": "accountant"}})
        logger.debug("[Evals] below level")
        for handler in logging.getLogger("commitguard").handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["event"] == "[Evals] فاتورة checked"
        assert entry["level"] == "info"
        assert entry["logger"] == "commitguard.evals"
        assert entry["audit"] == {"profile": "accountant"}
        assert "timestamp" in entry
        assert "فاتورة" in lines[0]

    def test_reconfiguring_replaces_handlers(self, log_file):
        configure_logging("INFO", str(log_file))
        configure_logging("WARNING", str(log_file))
        assert len(logging.getLogger("commitguard").handlers) == 2
