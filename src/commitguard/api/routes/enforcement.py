"""
Enforcement API -- check outputs, read violation statistics, inspect rules.

  POST /api/v1/enforce            -- Evaluate a candidate output, return the report
  GET  /api/v1/enforcement/stats  -- Windowed violation statistics
  GET  /api/v1/profiles           -- Loaded rule table

The enforcer never raises for rule faults; a request only fails on
invalid input (422 from pydantic).
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Query, Request

from ...enforcement import RuntimeMetadata
from ..models.requests import EnforceRequest
from ..models.responses import (
    EnforcementReportResponse,
    ProfilesResponse,
    RuleInfo,
    StatsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()

MAX_WINDOW_HOURS = 24 * 90


@router.post("/enforce", response_model=EnforcementReportResponse)
async def enforce(body: EnforceRequest, request: Request) -> EnforcementReportResponse:
    """Score a candidate output against its profile and return the adjusted output."""
    enforcer = request.app.state.enforcer
    metadata = RuntimeMetadata(
        latency_ms=body.metadata.latency_ms,
        cache_key=body.metadata.cache_key,
        profile=body.profile,
        extra=body.metadata.extra,
    )
    report = await enforcer.evaluate(
        body.profile, body.input_text, body.candidate_output, metadata
    )
    if not report.overall_passed:
        logger.info(
            f"[EnforcementAPI] {body.profile}: {len(report.violations)} violations"
        )
    return EnforcementReportResponse(**report.to_flat_dict())


@router.get("/enforcement/stats", response_model=StatsResponse)
async def stats(
    request: Request,
    window_hours: float = Query(default=24.0, gt=0, le=MAX_WINDOW_HOURS),
) -> StatsResponse:
    """Violation totals plus the count inside the requested window, from one ledger snapshot."""
    data = request.app.state.enforcer.get_stats(timedelta(hours=window_hours))
    return StatsResponse(**data, window_hours=window_hours)


@router.get("/profiles", response_model=ProfilesResponse)
async def profiles(request: Request) -> ProfilesResponse:
    """List every profile with its ordered rules."""
    registry = request.app.state.enforcer.registry
    return ProfilesResponse(
        profiles={
            name: [
                RuleInfo(
                    type=rule.type.value,
                    target=rule.target,
                    enforcement_level=rule.enforcement_level.value,
                    fallback_action=rule.fallback_action,
                )
                for rule in registry.rules_for(name)
            ]
            for name in registry.profiles
        }
    )
