from pydantic import BaseModel

from models.schemas.batch import PlatformInsights
from models.schemas.interaction import ScoringPerformanceMetrics
from models.schemas.match_score import MatchBreakdown
from models.schemas.quality import QualityAssessment


class MatchScoreResponse(BaseModel):
    score: int = 0
    method: str = "rule_based"
    breakdown: MatchBreakdown | None = None
    notes: str | None = None


class PostingQualityResponse(BaseModel):
    assessment: QualityAssessment
    enhanced_description: str | None = None
    enhancement_method: str | None = None


class InsightsResponse(BaseModel):
    platform: PlatformInsights
    scoring: ScoringPerformanceMetrics
