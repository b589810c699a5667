import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class ScoringInteraction(BaseModel):
    """One attempt by one scoring tier, as logged by a fallback chain."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    tool: str  # chain name, e.g. "match_score", "profile_validation"
    service: str
    tier: str
    entity_id: str | None = None
    processing_time_ms: int = Field(ge=0)
    success: bool
    error: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ScoringPerformanceMetrics(BaseModel):
    total_interactions: int = 0
    average_processing_time_ms: int = 0
    success_rate: int = 0  # percent, rounded
    tool_usage: dict[str, int] = {}
    tier_usage: dict[str, int] = {}
