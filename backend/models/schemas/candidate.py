"""Candidate profile as read from the record store."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

AvailabilityMode = Literal["full-time", "part-time", "internship", "contract"]
ApprovalStatus = Literal["draft", "pending", "approved", "rejected"]


def dedupe_preserving_order(values: list[str]) -> list[str]:
    """Drop blanks and case-insensitive duplicates, keeping first spelling."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        cleaned = value.strip()
        key = cleaned.lower()
        if cleaned and key not in seen:
            seen.add(key)
            result.append(cleaned)
    return result


class CandidateProfile(BaseModel):
    """A program candidate (student or recent graduate).

    ``*_analysis_score`` is ``None`` until the matching document has been
    processed; 0.0 is a real score meaning nothing could be confirmed.
    """
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    institution: str = ""
    degree: str = ""
    graduation_year: int | None = None
    skills: list[str] = []
    interests: list[str] = []
    location: str = ""
    availability: AvailabilityMode = "internship"
    availability_options: list[AvailabilityMode] = []
    bio: str = ""

    linkedin_url: str | None = None
    github_url: str | None = None
    portfolio_url: str | None = None
    resume_url: str | None = None
    cv_url: str | None = None
    academic_records_url: str | None = None
    profile_photo_url: str | None = None

    cv_analysis_score: float | None = Field(default=None, ge=0, le=10)
    cv_analysis_notes: str | None = None
    academic_records_analysis_score: float | None = Field(default=None, ge=0, le=10)
    academic_records_analysis_notes: str | None = None
    validation_score: float | None = Field(default=None, ge=0, le=10)
    validation_notes: str | None = None

    status: ApprovalStatus = "pending"

    @field_validator("skills", "interests")
    @classmethod
    def _unique(cls, values: list[str]) -> list[str]:
        return dedupe_preserving_order(values)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def availability_modes(self) -> list[str]:
        return dedupe_preserving_order([self.availability, *self.availability_options])
