"""Pydantic models for API request/response contracts."""
from .requests import EnforceRequest, MetadataPayload
from .responses import (
    EnforcementReportResponse,
    HealthResponse,
    ProfilesResponse,
    StatsResponse,
)
