"""Posting quality and candidate profile validation results."""

from pydantic import BaseModel


class QualityAssessment(BaseModel):
    score: float = 0.0  # 0-10
    notes: list[str] = []
    suggestions: list[str] = []
    failed_checks: list[str] = []  # checklist ids, rule-based tier only
    method: str = "rule_based"


class JobEnhancement(BaseModel):
    score: float = 0.0  # 0-10
    notes: list[str] = []
    suggestions: list[str] = []
    enhanced_description: str = ""
    scoring_method: str = "rule_based"
    enhancement_method: str = "rule_based"


class ProfileValidation(BaseModel):
    score: float = 0.0  # 0-10
    notes: str = ""
    suggestions: list[str] = []
    method: str = "rule_based"
