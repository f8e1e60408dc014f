"""
Remediation Library -- one transform per fallback action.

Each remediation maps the current working output to (adjusted_output, success).
All are pure string transforms except `serve_cached`, which awaits an
external ResponseCache under a timeout and degrades to success=False on
miss, timeout or error.

`RemediationLibrary.apply()` never raises: unknown actions and internal
faults become an Adjustment with success=False and a diagnostic.
"""

import asyncio
import hashlib
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Protocol, Union, runtime_checkable

from . import text_signals as ts
from .config import ScoringConfig
from .models import (
    Adjustment,
    ConfigurationFault,
    FallbackAction,
    RemediationFault,
    RuleOutcome,
    RuntimeMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TIMEOUT_SECONDS = 0.25


# =============================================================================
# CACHE COLLABORATOR
# =============================================================================


@runtime_checkable
class ResponseCache(Protocol):
    """Lookup of previously released responses."""

    async def get(self, key: str) -> str | None: ...


class NullResponseCache:
    """Always misses. Used when no cache is wired in."""

    async def get(self, key: str) -> str | None:
        return None


class InMemoryResponseCache:
    """Process-local cache, mainly for tests and demos.

    `delay_seconds` simulates a slow backend.
    """

    def __init__(self, entries: dict[str, str] | None = None, delay_seconds: float = 0.0):
        self._entries: dict[str, str] = dict(entries or {})
        self._delay = delay_seconds

    def put(self, key: str, value: str) -> None:
        self._entries[key] = value

    async def get(self, key: str) -> str | None:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._entries.get(key)


def derive_cache_key(profile: str, input_text: str) -> str:
    return hashlib.sha256(f"{profile}\x00{input_text}".encode("utf-8")).hexdigest()[:32]


# =============================================================================
# REMEDIATIONS
# =============================================================================


@dataclass
class RemediationContext:
    """Everything a remediation may read besides the current output."""

    input_text: str
    profile: str
    metadata: RuntimeMetadata
    scoring: ScoringConfig
    cache: Any = None
    cache_timeout: float = DEFAULT_CACHE_TIMEOUT_SECONDS
    notes: list[str] = field(default_factory=list)


RemediationResult = tuple[str, bool]
Remediation = Callable[
    [str, RuleOutcome, RemediationContext],
    Union[RemediationResult, Awaitable[RemediationResult]],
]


def escalate_for_review(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    logger.warning(
        f"[Remediation] Review triggered: profile={ctx.profile} "
        f"type={outcome.type.value} score={outcome.score:.1f} target={outcome.target}"
    )
    return f"{output}\n\n{ctx.scoring.review_notice}", True


async def serve_cached(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    if ctx.cache is None:
        ctx.notes.append("no_cache")
        return output, False
    key = ctx.metadata.cache_key or derive_cache_key(ctx.profile, ctx.input_text)
    try:
        cached = await asyncio.wait_for(ctx.cache.get(key), timeout=ctx.cache_timeout)
    except asyncio.TimeoutError:
        logger.warning(f"[Remediation] Cache lookup timed out after {ctx.cache_timeout}s")
        ctx.notes.append("cache_timeout")
        return output, False
    if not cached:
        ctx.notes.append("cache_miss")
        return output, False
    return cached, True


def apply_template(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    template = ctx.scoring.compliance_templates.get(outcome.type.value, "")
    if not template:
        return output, True
    return f"{output}\n\n{template}", True


def normalize_text(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    return ts.collapse_whitespace(output), True


def restructure(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    if "\n" in output or "•" in output:
        return output, True
    return f"{ctx.scoring.structured_header}\n\n{output}\n\n{ctx.scoring.structured_footer}", True


def add_secondary_language(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    if ts.has_arabic(output) and not ts.has_latin(output):
        return f"{output}\n\n{ctx.scoring.secondary_language_notice}", True
    return output, True


def retone(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    # Single pass so a replacement is never re-substituted by a later pair.
    pairs = dict(ctx.scoring.tone_substitutions)
    if not pairs:
        return output, True
    result = []
    i = 0
    ordered = sorted(pairs, key=len, reverse=True)
    while i < len(output):
        for casual in ordered:
            if output.startswith(casual, i):
                result.append(pairs[casual])
                i += len(casual)
                break
        else:
            result.append(output[i])
            i += 1
    return "".join(result), True


def review_code(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    return f"{output}\n\n{ctx.scoring.code_review_notice}", True


def security_notice(output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
    return f"{output}\n\n{ctx.scoring.security_notice}", True


# =============================================================================
# LIBRARY
# =============================================================================


class RemediationLibrary:
    """Maps fallback action tags to remediations.

    Usage:
        library = RemediationLibrary(cache=my_cache, cache_timeout=0.25)
        adjustment = await library.apply("retone", text, outcome, metadata, input_text, "secretary")
    """

    def __init__(
        self,
        scoring: ScoringConfig | None = None,
        cache: ResponseCache | None = None,
        cache_timeout: float = DEFAULT_CACHE_TIMEOUT_SECONDS,
    ):
        self.scoring = scoring or ScoringConfig()
        self.cache = cache if cache is not None else NullResponseCache()
        self.cache_timeout = cache_timeout
        self._remediations: dict[str, Remediation] = {
            FallbackAction.ESCALATE_FOR_REVIEW.value: escalate_for_review,
            FallbackAction.SERVE_CACHED.value: serve_cached,
            FallbackAction.APPLY_TEMPLATE.value: apply_template,
            FallbackAction.NORMALIZE_TEXT.value: normalize_text,
            FallbackAction.RESTRUCTURE.value: restructure,
            FallbackAction.ADD_SECONDARY_LANGUAGE.value: add_secondary_language,
            FallbackAction.RETONE.value: retone,
            FallbackAction.REVIEW_CODE.value: review_code,
            FallbackAction.SECURITY_NOTICE.value: security_notice,
        }

    def register(self, action: str, remediation: Remediation) -> None:
        self._remediations[action] = remediation

    async def run(self, action: str, output: str, outcome: RuleOutcome, ctx: RemediationContext) -> RemediationResult:
        """Dispatch one remediation. Raises ConfigurationFault or RemediationFault."""
        remediation = self._remediations.get(action)
        if remediation is None:
            raise ConfigurationFault(f"Unknown fallback action '{action}'")
        try:
            result = remediation(output, outcome, ctx)
            if inspect.isawaitable(result):
                result = await result
            adjusted, success = result
        except Exception as e:
            raise RemediationFault(f"{type(e).__name__}: {e}") from e
        return adjusted, bool(success)

    async def apply(
        self,
        action: str,
        output: str,
        outcome: RuleOutcome,
        metadata: RuntimeMetadata,
        input_text: str = "",
        profile: str = "",
    ) -> Adjustment:
        """Run a remediation against the working output. Never raises."""
        ctx = RemediationContext(
            input_text=input_text,
            profile=profile or metadata.profile or "",
            metadata=metadata,
            scoring=self.scoring,
            cache=self.cache,
            cache_timeout=self.cache_timeout,
        )
        try:
            adjusted, success = await self.run(action, output, outcome, ctx)
        except ConfigurationFault as e:
            logger.warning(f"[Remediation] Configuration: {e} (type={outcome.type.value})")
            return Adjustment(action, False, output, outcome.type, "configuration_fault:unknown_action")
        except RemediationFault as e:
            logger.error(
                f"[Remediation] Action failed: type={outcome.type.value} action={action} error={e}"
            )
            return Adjustment(action, False, output, outcome.type, f"remediation_fault:{e}")

        if not success:
            return Adjustment(action, False, output, outcome.type, ";".join(ctx.notes))
        return Adjustment(action, True, adjusted, outcome.type, ";".join(ctx.notes))
