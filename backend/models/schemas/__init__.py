"""Domain contracts shared by the scoring engines and the bulk orchestrator."""

from models.schemas.candidate import CandidateProfile
from models.schemas.organization import OrganizationProfile
from models.schemas.posting import Posting
from models.schemas.match_record import MatchKey, MatchRecord
from models.schemas.eligibility_result import EligibilityResult, EligibilityStats
from models.schemas.document_validation import (
    DeclaredProfileFields,
    DocumentAnalysis,
    DocumentValidationResult,
    ExtractedDocumentFields,
)
from models.schemas.match_score import MatchBreakdown, MatchScore
from models.schemas.quality import JobEnhancement, ProfileValidation, QualityAssessment
from models.schemas.interaction import ScoringInteraction, ScoringPerformanceMetrics
from models.schemas.batch import (
    BatchReport,
    EligibilityRunReport,
    MatchRunReport,
    PlatformInsights,
)

__all__ = [
    "CandidateProfile",
    "OrganizationProfile",
    "Posting",
    "MatchKey",
    "MatchRecord",
    "EligibilityResult",
    "EligibilityStats",
    "DeclaredProfileFields",
    "DocumentAnalysis",
    "DocumentValidationResult",
    "ExtractedDocumentFields",
    "MatchBreakdown",
    "MatchScore",
    "JobEnhancement",
    "ProfileValidation",
    "QualityAssessment",
    "ScoringInteraction",
    "ScoringPerformanceMetrics",
    "BatchReport",
    "EligibilityRunReport",
    "MatchRunReport",
    "PlatformInsights",
]
