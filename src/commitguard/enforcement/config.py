"""
Configuration for the enforcement engine.

ScoringConfig holds every heuristic weight, threshold and word list the
validators and remediations use. The numbers are uncalibrated heuristics,
so they live here as named values that a policy file can override instead
of being buried in arithmetic.

EnforcerConfig holds runtime knobs (time budget, cache timeout, stats
window). Loaded from environment with safe defaults:

  COMMITGUARD_TIME_BUDGET_MS=1500
  COMMITGUARD_MIN_RULES=1
  COMMITGUARD_CACHE_TIMEOUT_MS=250
  COMMITGUARD_STATS_WINDOW_HOURS=24
  COMMITGUARD_POLICY_PATH=            (empty: built-in rule table)
  COMMITGUARD_MONITORING=true
  COMMITGUARD_LOG_LEVEL=INFO
  COMMITGUARD_LOG_FILE=               (empty: console only)
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# SCORING HEURISTICS
# =============================================================================


@dataclass(frozen=True)
class ScoringConfig:
    """Weights, thresholds and marker lists used for scoring and remediation."""

    # accuracy
    factual_consistency_baseline: float = 95.0
    min_content_word_length: int = 4
    expertise_keywords: dict[str, tuple[str, ...]] = field(default_factory=lambda: {
        "accountant": ("محاسبة", "فاتورة", "ضريبة", "مالي", "زاتكا"),
        "secretary": ("موعد", "رسالة", "تنظيم", "مهمة", "جدولة"),
        "developer": ("كود", "برمجة", "تطوير", "تطبيق", "خوارزمية"),
    })

    # keyword_compliance
    compliance_triggers: tuple[str, ...] = ("فاتورة", "invoice")
    compliance_keywords: tuple[str, ...] = (
        "ضريبة القيمة المضافة", "الرقم الضريبي", "فاتورة ضريبية",
        "زاتكا", "ZATCA", "VAT", "Tax Invoice",
    )

    # script_quality
    script_ratio_weight: float = 0.4
    script_grammar_weight: float = 0.3
    script_structure_weight: float = 0.3
    grammar_points_per_match: float = 10.0
    script_punctuation: str = "،؛؟!."
    script_connectors: tuple[str, ...] = ("و", "أو", "لكن", "إذا", "عندما", "ثم")

    # bilingual_consistency
    mixed_script_match_score: float = 100.0
    mixed_script_mismatch_score: float = 50.0
    preferred_script_score: float = 100.0
    non_preferred_script_score: float = 80.0

    # tone_quality
    tone_professional_points: float = 20.0
    tone_casual_penalty: float = 10.0
    professional_markers: tuple[str, ...] = (
        "يمكنني", "أستطيع", "يسعدني", "أنصح", "أقترح",
        "من المهم", "يجب", "نوصي", "المطلوب",
    )
    casual_markers: tuple[str, ...] = ("هاي", "مرحبا", "اوكي", "تمام", "كول")

    # code_quality / code_security / language_match
    code_markers: tuple[str, ...] = ("```", "function", "class", "def ", "public ", "private ")
    comment_markers: tuple[str, ...] = ("//", "/*", "# ")
    unsafe_constructs: tuple[str, ...] = (
        "eval(", "innerHTML =", "document.write", "setTimeout(",
        "setInterval(", "Function(", "new Function",
        "exec(", "os.system(", "pickle.loads(",
    )
    programming_languages: tuple[str, ...] = (
        "javascript", "typescript", "python", "java", "c++", "c#", "php",
        "ruby", "go", "rust", "swift", "kotlin",
    )
    language_match_score: float = 100.0
    language_mismatch_score: float = 50.0

    # remediation texts
    review_notice: str = "[تم مراجعة هذه الإجابة للتأكد من دقتها]"
    compliance_templates: dict[str, str] = field(default_factory=lambda: {
        "keyword_compliance": "📋 ملاحظة: يرجى التأكد من مراجعة متطلبات زاتكا الحديثة للفواتير الضريبية.",
        "code_security": "🔒 تنبيه أمني: يرجى مراجعة الكود للتأكد من عدم وجود ثغرات أمنية.",
    })
    structured_header: str = "📝 الإجابة:"
    structured_footer: str = "هل تحتاج مساعدة إضافية؟"
    secondary_language_notice: str = "[English summary available upon request]"
    tone_substitutions: tuple[tuple[str, str], ...] = (
        ("مرحبا", "مرحباً بك"),
        ("اوكي", "حسناً"),
        ("تمام", "ممتاز"),
    )
    code_review_notice: str = "💡 ملاحظة: يرجى مراجعة الكود وتطبيق أفضل الممارسات البرمجية."
    security_notice: str = "🔒 تذكير أمني: تأكد من تطبيق معايير الأمان المناسبة."

    def with_overrides(self, overrides: dict[str, Any]) -> "ScoringConfig":
        """Return a copy with the given fields replaced.

        Each value is validated against the field's declared type. Unknown
        keys and values of the wrong shape are dropped with a warning.
        """
        declared = {f.name: f.type for f in fields(self)}
        accepted = {}
        for key, value in overrides.items():
            if key not in declared:
                logger.warning(f"[Config] Unknown scoring override ignored: {key}")
                continue
            try:
                accepted[key] = _adapter_for(declared[key]).validate_python(value)
            except ValidationError as e:
                logger.warning(
                    f"[Config] Scoring override '{key}' ignored: {e.error_count()} error(s)"
                )
        return replace(self, **accepted)


@lru_cache(maxsize=None)
def _adapter_for(field_type: Any) -> TypeAdapter:
    return TypeAdapter(field_type)


# =============================================================================
# ENGINE CONFIG
# =============================================================================

DEFAULT_TIME_BUDGET_MS = 1500
DEFAULT_MIN_RULES = 1
DEFAULT_CACHE_TIMEOUT_MS = 250
DEFAULT_STATS_WINDOW_HOURS = 24


def _env_number(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        logger.warning(f"[Config] {name} is not a number, using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class EnforcerConfig:
    """Runtime configuration for a CommitmentEnforcer instance."""

    time_budget_ms: float = DEFAULT_TIME_BUDGET_MS
    min_rules_before_budget: int = DEFAULT_MIN_RULES
    cache_timeout_ms: float = DEFAULT_CACHE_TIMEOUT_MS
    stats_window_hours: float = DEFAULT_STATS_WINDOW_HOURS
    policy_path: Path | None = None
    active_monitoring: bool = True

    @property
    def stats_window(self) -> timedelta:
        return timedelta(hours=self.stats_window_hours)

    @classmethod
    def from_env(cls) -> "EnforcerConfig":
        policy = os.environ.get("COMMITGUARD_POLICY_PATH", "").strip()
        return cls(
            time_budget_ms=_env_number("COMMITGUARD_TIME_BUDGET_MS", DEFAULT_TIME_BUDGET_MS),
            min_rules_before_budget=int(_env_number("COMMITGUARD_MIN_RULES", DEFAULT_MIN_RULES)),
            cache_timeout_ms=_env_number("COMMITGUARD_CACHE_TIMEOUT_MS", DEFAULT_CACHE_TIMEOUT_MS),
            stats_window_hours=_env_number(
                "COMMITGUARD_STATS_WINDOW_HOURS", DEFAULT_STATS_WINDOW_HOURS
            ),
            policy_path=Path(policy) if policy else None,
            active_monitoring=_env_bool("COMMITGUARD_MONITORING", True),
        )


# =============================================================================
# LOGGING
# =============================================================================

def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """Render stdlib log records as one JSON object per line.

    Records come from plain `logging.getLogger(__name__)` loggers; fields
    passed through `extra` are merged into the object.
    """
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
    )


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Attach JSON-lines handlers to the `commitguard` logger. Safe to call twice."""
    level = (level or os.environ.get("COMMITGUARD_LOG_LEVEL", "INFO")).upper()
    log_file = log_file if log_file is not None else os.environ.get("COMMITGUARD_LOG_FILE", "")

    root = logging.getLogger("commitguard")
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = json_formatter()
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
