"""
Pydantic request models -- what the generation pipeline sends.

All external input is validated here before it reaches the enforcer.
"""

from pydantic import BaseModel, Field

MAX_TEXT_LENGTH = 100_000


class MetadataPayload(BaseModel):
    """Per-request facts supplied by the caller."""

    latency_ms: float = Field(default=0.0, ge=0)
    cache_key: str | None = Field(default=None, max_length=512)
    extra: dict = Field(default_factory=dict)


class EnforceRequest(BaseModel):
    """A candidate output to check before release."""

    profile: str = Field(..., min_length=1, max_length=200)
    input_text: str = Field(default="", max_length=MAX_TEXT_LENGTH)
    candidate_output: str = Field(..., max_length=MAX_TEXT_LENGTH)
    metadata: MetadataPayload = Field(default_factory=MetadataPayload)
