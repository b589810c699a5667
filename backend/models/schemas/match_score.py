"""Compatibility score between a candidate and a posting."""

from pydantic import BaseModel


class MatchBreakdown(BaseModel):
    """Rule-based components, each normalized to 0.0-1.0 before weighting."""
    skills: float = 0.0
    location: float = 0.0
    availability: float = 0.0
    interests: float = 0.0
    timeline: float = 0.0
    completeness: float = 0.0

    # Interpretability
    matched_skills: list[str] = []
    related_skills: list[str] = []
    missing_skills: list[str] = []


class MatchScore(BaseModel):
    score: int = 0  # 0-100
    method: str = "rule_based"  # remote, rule_based
    breakdown: MatchBreakdown | None = None  # only from the rule-based tier
