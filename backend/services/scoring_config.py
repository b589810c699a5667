"""Immutable rule data shared by every scoring engine.

Engines receive a ``ScoringConfig`` at construction; nothing reads rule
tables from module globals at call time, so tests can run the same engine
against different thresholds or allow-lists side by side.
"""

from pydantic import BaseModel, ConfigDict, model_validator

# Recognized NZ tertiary institutions and their common abbreviations
RECOGNIZED_INSTITUTIONS: tuple[str, ...] = (
    # Universities
    "University of Auckland",
    "Auckland University of Technology",
    "University of Waikato",
    "Massey University",
    "Victoria University of Wellington",
    "University of Canterbury",
    "Lincoln University",
    "University of Otago",
    # Polytechnics and institutes of technology
    "Ara Institute of Canterbury",
    "Eastern Institute of Technology",
    "Manukau Institute of Technology",
    "Nelson Marlborough Institute of Technology",
    "NorthTec",
    "Open Polytechnic of New Zealand",
    "Otago Polytechnic",
    "Southern Institute of Technology",
    "Tai Poutini Polytechnic",
    "Toi Ohomai Institute of Technology",
    "Unitec Institute of Technology",
    "Universal College of Learning",
    "Waikato Institute of Technology",
    "Wellington Institute of Technology",
    "Whitireia Community Polytechnic",
    # Alternative names and abbreviations
    "AUT",
    "UoA",
    "VUW",
    "UC",
    "UOC",
    "Massey",
    "Waikato University",
    "Canterbury University",
    "Otago University",
    "Lincoln",
    "Ara",
    "EIT",
    "MIT",
    "NMIT",
    "SIT",
    "Toi Ohomai",
    "Unitec",
    "UCOL",
    "WINTEC",
    "WelTec",
    "Whitireia",
)

INSTITUTION_KEYWORDS: tuple[str, ...] = ("university", "institute", "polytechnic", "college")

# Language/platform -> frameworks and tools in the same family
SKILL_FAMILIES: dict[str, tuple[str, ...]] = {
    "javascript": ("js", "node", "react", "vue", "angular"),
    "python": ("django", "flask", "pandas", "numpy"),
    "java": ("spring", "hibernate", "maven"),
    "react": ("jsx", "javascript", "frontend"),
    "sql": ("database", "mysql", "postgresql"),
}

# Candidate availability -> posting employment types it partially fits
AVAILABILITY_COMPATIBILITY: dict[str, tuple[str, ...]] = {
    "full-time": ("full-time", "contract"),
    "part-time": ("part-time", "contract"),
    "internship": ("internship", "part-time"),
    "contract": ("contract", "full-time", "part-time"),
}

COMPLETENESS_FIELDS: tuple[str, ...] = (
    "bio",
    "linkedin_url",
    "github_url",
    "portfolio_url",
    "resume_url",
    "profile_photo_url",
    "skills",
    "interests",
)

INCLUSIVE_MARKERS: tuple[str, ...] = ("diverse", "inclusive", "welcoming", "collaborative")
BIASED_MARKERS: tuple[str, ...] = ("rockstar", "ninja", "guru", "young")
ENTHUSIASM_MARKERS: tuple[str, ...] = ("passion", "excited", "motivated", "dedicated")
REMOTE_LOCATION_MARKERS: tuple[str, ...] = ("remote", "hybrid")


class MatchWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    skills: float = 0.40
    location: float = 0.20
    availability: float = 0.15
    interests: float = 0.10
    timeline: float = 0.10
    completeness: float = 0.05

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> "MatchWeights":
        total = (
            self.skills + self.location + self.availability
            + self.interests + self.timeline + self.completeness
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"match weights must sum to 1.0, got {total:.3f}")
        return self


class QualityPoints(BaseModel):
    """Points awarded per posting-quality checklist item."""
    model_config = ConfigDict(frozen=True)

    description_length: int = 2
    skills_specified: int = 2
    salary_range: int = 2
    deadline: int = 1
    inclusive_language: int = 1
    no_biased_language: int = 1


class ScoringConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Eligibility
    recognized_institutions: tuple[str, ...] = RECOGNIZED_INSTITUTIONS
    min_substring_match_length: int = 4
    eligibility_window_months: int = 12
    near_limit_months: int = 10
    recent_graduate_months: int = 1

    # Document cross-validation
    institution_keywords: tuple[str, ...] = INSTITUTION_KEYWORDS
    document_score_tiers: dict[int, float] = {4: 10.0, 3: 7.0, 2: 4.0, 1: 2.0, 0: 0.0}
    unverifiable_document_score: float = 3.0
    aligned_score_floor: float = 7.0
    fuzzy_variant_threshold: float = 85.0  # rapidfuzz similarity, 0-100

    # Match scoring
    match_weights: MatchWeights = MatchWeights()
    skill_families: dict[str, tuple[str, ...]] = SKILL_FAMILIES
    skill_match_threshold: float = 0.7
    min_skill_containment_length: int = 3
    availability_compatibility: dict[str, tuple[str, ...]] = AVAILABILITY_COMPATIBILITY
    availability_partial_credit: float = 2 / 3
    remote_location_markers: tuple[str, ...] = REMOTE_LOCATION_MARKERS
    completeness_fields: tuple[str, ...] = COMPLETENESS_FIELDS
    baseline_match_threshold: int = 50
    advanced_match_threshold: int = 60

    # Posting quality
    quality_points: QualityPoints = QualityPoints()
    min_description_length: int = 200
    min_required_skills: int = 3
    inclusive_markers: tuple[str, ...] = INCLUSIVE_MARKERS
    biased_markers: tuple[str, ...] = BIASED_MARKERS
    enthusiasm_markers: tuple[str, ...] = ENTHUSIASM_MARKERS

    @model_validator(mode="after")
    def _tiers_cover_all_counts(self) -> "ScoringConfig":
        missing = {0, 1, 2, 3, 4} - set(self.document_score_tiers)
        if missing:
            raise ValueError(f"document_score_tiers missing match counts: {sorted(missing)}")
        return self

    @classmethod
    def from_settings(cls, settings) -> "ScoringConfig":
        return cls(
            eligibility_window_months=settings.eligibility_window_months,
            baseline_match_threshold=settings.baseline_match_threshold,
            advanced_match_threshold=settings.advanced_match_threshold,
        )
