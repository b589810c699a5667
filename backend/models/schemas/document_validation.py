"""Document-vs-profile cross-validation contracts."""

import re
from typing import Any, Literal

from pydantic import BaseModel, field_validator

FieldOutcome = Literal["match", "partial", "mismatch", "absent"]

_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")


def coerce_year(value: Any) -> int | None:
    """Best-effort graduation year from an int or free text; None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    m = _YEAR_RE.search(str(value))
    return int(m.group(1)) if m else None


class ExtractedDocumentFields(BaseModel):
    """Fields pulled out of a document; any of them may be missing."""
    name: str | None = None
    institution: str | None = None
    degree: str | None = None
    graduation_year: int | None = None

    @field_validator("graduation_year", mode="before")
    @classmethod
    def _year(cls, value: Any) -> int | None:
        return coerce_year(value)

    @field_validator("name", "institution", "degree", mode="before")
    @classmethod
    def _blank_is_missing(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class DeclaredProfileFields(BaseModel):
    """What the candidate declared on their profile."""
    name: str = ""
    institution: str = ""
    degree: str = ""
    graduation_year: int | None = None

    @field_validator("graduation_year", mode="before")
    @classmethod
    def _year(cls, value: Any) -> int | None:
        return coerce_year(value)


class FieldCheck(BaseModel):
    field: str  # name, institution, degree, graduation_year
    outcome: FieldOutcome = "absent"
    extracted: str | None = None
    declared: str | None = None
    note: str = ""


class DocumentValidationResult(BaseModel):
    """Outcome of comparing extracted document fields with the profile.

    ``match_count`` counts strict matches only; partial matches surface as
    warnings but do not raise the score.
    """
    fields: list[FieldCheck] = []
    match_count: int = 0
    alignment_score: float = 0.0  # 0-10
    is_aligned: bool = False
    mismatches: list[str] = []
    warnings: list[str] = []
    notes: list[str] = []
    manual_review_required: bool = False


class DocumentAnalysis(BaseModel):
    """Document analysis written back to the candidate record."""
    document_type: str = "cv"  # cv, academic_records, resume
    analysis_score: float = 0.0  # 0-10
    analysis_notes: list[str] = []
    extracted: ExtractedDocumentFields = ExtractedDocumentFields()
    validation: DocumentValidationResult = DocumentValidationResult()
    extraction_method: str = "none"  # remote, rule_based, none
