from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from models.schemas.candidate import CandidateProfile
from models.schemas.document_validation import DeclaredProfileFields, ExtractedDocumentFields
from models.schemas.organization import OrganizationProfile
from models.schemas.posting import Posting


class EligibilityCheckRequest(BaseModel):
    graduation_year: int | str | None = Field(None, description="Declared graduation year")
    institution: str = Field("", max_length=200)
    as_of: date | None = Field(None, description="Evaluation date, defaults to today")


class DocumentValidateRequest(BaseModel):
    extracted: ExtractedDocumentFields | None = Field(
        None, description="Fields read from the document; null when text extraction failed"
    )
    declared: DeclaredProfileFields


class MatchScoreRequest(BaseModel):
    candidate: CandidateProfile
    organization: OrganizationProfile
    posting: Posting
    as_of: date | None = None
    include_notes: bool = False
    rule_based_only: bool = False


class PostingQualityRequest(BaseModel):
    posting: Posting
    enhance: bool = False


class MatchBatchRequest(BaseModel):
    mode: Literal["baseline", "advanced"] = "baseline"
    as_of: date | None = None
