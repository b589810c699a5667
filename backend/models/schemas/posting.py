"""Job posting as read from the record store."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from models.schemas.candidate import AvailabilityMode, dedupe_preserving_order

PostingStatus = Literal["draft", "pending_review", "approved", "rejected", "published", "closed"]


class Posting(BaseModel):
    """A posting owned by one organization.

    ``quality_score`` stays ``None`` until the posting has been assessed.
    """
    id: str
    organization_id: str
    title: str = ""
    description: str = ""
    requirements: list[str] = []
    skills_required: list[str] = []
    location: str = ""
    employment_type: AvailabilityMode = "internship"
    salary_min: float | None = Field(default=None, ge=0)
    salary_max: float | None = Field(default=None, ge=0)
    application_deadline: date | None = None

    quality_score: float | None = Field(default=None, ge=0, le=10)
    quality_notes: str | None = None
    enhanced_description: str | None = None

    status: PostingStatus = "draft"

    @field_validator("skills_required")
    @classmethod
    def _unique(cls, values: list[str]) -> list[str]:
        return dedupe_preserving_order(values)

    @model_validator(mode="after")
    def _salary_band_ordered(self) -> "Posting":
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min must not exceed salary_max")
        return self
