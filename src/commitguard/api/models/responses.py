"""
Pydantic response models -- what the API returns.

The report shape mirrors EnforcementReport.to_flat_dict().
"""

from pydantic import BaseModel, Field


class RuleOutcomeResponse(BaseModel):
    type: str
    passed: bool
    score: float
    target: float
    enforcement_level: str
    status: str
    diagnostic: str = ""


class AdjustmentResponse(BaseModel):
    fallback_action: str
    success: bool
    adjusted_output: str
    commitment_type: str | None = None
    diagnostic: str = ""


class EnforcementReportResponse(BaseModel):
    """Verdict plus the output to release."""

    profile: str
    overall_passed: bool
    final_output: str
    violation_count: int = 0
    adjustment_count: int = 0
    skipped_count: int = 0
    violations: list[RuleOutcomeResponse] = Field(default_factory=list)
    adjustments: list[AdjustmentResponse] = Field(default_factory=list)
    skipped: list[RuleOutcomeResponse] = Field(default_factory=list)


class StatsResponse(BaseModel):
    """Violation trend statistics for operational tooling."""

    total_violations: int
    recent_violations: int
    evaluations: int
    active_monitoring: bool
    window_hours: float
    recent_by_profile: dict[str, int] = Field(default_factory=dict)


class RuleInfo(BaseModel):
    type: str
    target: float
    enforcement_level: str
    fallback_action: str


class ProfilesResponse(BaseModel):
    profiles: dict[str, list[RuleInfo]] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str = "healthy"
    profiles_loaded: int = 0
    uptime_seconds: float = 0.0
