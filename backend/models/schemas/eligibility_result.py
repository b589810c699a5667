"""Program eligibility decision for one candidate."""

from datetime import date

from pydantic import BaseModel


class EligibilityResult(BaseModel):
    """Derived on demand; never persisted.

    ``months_since_graduation`` is 0 for current students and ``None`` when
    the check stopped before the graduation window was evaluated.
    """
    is_eligible: bool = False
    reason: str = ""
    is_recognized_institution: bool = False
    months_since_graduation: int | None = None
    graduation_date: date | None = None
    warnings: list[str] = []


class EligibilityStats(BaseModel):
    total: int = 0
    eligible: int = 0  # eligible with no advisory warnings
    ineligible: int = 0
    warnings: int = 0  # eligible but carrying warnings
    eligible_percentage: int = 0


class AcademicRecordsSummary(BaseModel):
    """Graduation details recovered from an academic-records analysis."""
    graduation_year: int | None = None
    institution: str | None = None
    degree: str | None = None
    is_current_student: bool = False
    warnings: list[str] = []
