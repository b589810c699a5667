"""Program eligibility: recognized institution + graduation window.

Only current students and graduates from the last 12 months of a recognized
NZ tertiary institution qualify. Graduation is assumed to happen on
December 31 of the declared year.
"""

import logging
import re
from datetime import date
from typing import Any

from models.schemas.document_validation import coerce_year
from models.schemas.eligibility_result import (
    AcademicRecordsSummary,
    EligibilityResult,
    EligibilityStats,
)
from services.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

_CURRENT_STUDENT_WORDS = ("current", "studying", "enrolled", "expected")


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", text.lower().strip())


def _words(text: str) -> list[str]:
    return re.findall(r"[a-z0-9]+", text)


def months_between(start: date, end: date) -> int:
    """Calendar-month difference, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def assumed_graduation_date(graduation_year: int) -> date:
    return date(graduation_year, 12, 31)


class EligibilityEngine:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self._institutions = [_normalize(i) for i in self.config.recognized_institutions]

    def is_recognized_institution(self, institution: str | None) -> bool:
        """Case-insensitive substring match in either direction.

        Short abbreviations (below ``min_substring_match_length``) only match
        as whole words, and a short input only matches an entry exactly.
        """
        if not institution or not institution.strip():
            return False
        name = _normalize(institution)
        name_words = _words(name)
        min_len = self.config.min_substring_match_length
        for entry in self._institutions:
            if name == entry:
                return True
            if len(entry) < min_len:
                if entry in name_words:
                    return True
            elif len(name) >= min_len and (name in entry or entry in name):
                return True
        return False

    def check_eligibility(
        self,
        graduation_year: Any,
        institution: str | None,
        as_of: date | None = None,
    ) -> EligibilityResult:
        as_of = as_of or date.today()

        if not self.is_recognized_institution(institution):
            return EligibilityResult(
                is_eligible=False,
                reason="Institution not recognized",
                is_recognized_institution=False,
                warnings=[f'Institution "{institution or ""}" is not a recognized NZ tertiary institution'],
            )

        year = coerce_year(graduation_year)
        if year is None:
            return EligibilityResult(
                is_eligible=False,
                reason="Invalid graduation year",
                is_recognized_institution=True,
                warnings=[f'Graduation year "{graduation_year}" is not a valid year'],
            )

        current_year = as_of.year
        graduation_date = assumed_graduation_date(year)

        # Current or future graduation year is always eligible
        if year >= current_year:
            reason = "Currently studying at a recognized NZ tertiary institution"
            if year == current_year:
                reason += " (final year)"
            return EligibilityResult(
                is_eligible=True,
                reason=reason,
                is_recognized_institution=True,
                months_since_graduation=0,
                graduation_date=graduation_date,
            )

        if year < current_year - 1:
            return EligibilityResult(
                is_eligible=False,
                reason="Graduated too long ago",
                is_recognized_institution=True,
                graduation_date=graduation_date,
                warnings=[f"Graduation year {year} is more than 1 year in the past"],
            )

        months = months_between(graduation_date, as_of)
        window = self.config.eligibility_window_months

        if months < 0:
            return EligibilityResult(
                is_eligible=False,
                reason="Invalid graduation date",
                is_recognized_institution=True,
                months_since_graduation=months,
                graduation_date=graduation_date,
                warnings=["Graduation date cannot be in the future"],
            )

        if months > window:
            return EligibilityResult(
                is_eligible=False,
                reason=f"Graduated too long ago ({months} months, exceeds {window}-month limit)",
                is_recognized_institution=True,
                months_since_graduation=months,
                graduation_date=graduation_date,
                warnings=[
                    f"Candidate graduated {months} months ago, which exceeds the "
                    f"{window}-month eligibility limit"
                ],
            )

        warnings: list[str] = []
        if months >= self.config.near_limit_months:
            warnings.append(
                f"Candidate is close to the {window}-month eligibility limit "
                f"({months} months since graduation)"
            )
        if months <= self.config.recent_graduate_months:
            warnings.append("Candidate is a very recent graduate - verify graduation status")

        return EligibilityResult(
            is_eligible=True,
            reason=f"Eligible - graduated {months} months ago from a recognized NZ tertiary institution",
            is_recognized_institution=True,
            months_since_graduation=months,
            graduation_date=graduation_date,
            warnings=warnings,
        )

    def check_eligibility_from_academic_records(
        self,
        analysis: dict | None,
        fallback_graduation_year: int | None = None,
        fallback_institution: str | None = None,
        as_of: date | None = None,
    ) -> tuple[EligibilityResult, AcademicRecordsSummary]:
        """Eligibility from an academic-records analysis, falling back to profile values."""
        as_of = as_of or date.today()
        parsed = parse_academic_records(analysis, as_of)

        graduation_year = parsed.graduation_year or fallback_graduation_year
        institution = parsed.institution or fallback_institution

        if not graduation_year or not institution:
            result = EligibilityResult(
                is_eligible=False,
                reason="Insufficient information to determine eligibility",
                warnings=["Missing graduation year or institution information", *parsed.warnings],
            )
            return result, parsed

        logger.debug(
            "Academic records eligibility check: graduation_year=%s, institution=%s",
            graduation_year, institution,
        )
        result = self.check_eligibility(graduation_year, institution, as_of)
        result = result.model_copy(update={"warnings": [*parsed.warnings, *result.warnings]})
        return result, parsed


def parse_academic_records(analysis: dict | None, as_of: date | None = None) -> AcademicRecordsSummary:
    """Pull graduation details out of an academic-records analysis payload."""
    if not analysis:
        return AcademicRecordsSummary(warnings=["No academic records analysis available"])

    as_of = as_of or date.today()
    warnings: list[str] = []

    graduation_year = coerce_year(analysis.get("graduation_year") or analysis.get("graduationYear"))
    institution = analysis.get("institution") or analysis.get("university") or None
    degree = analysis.get("degree") or None
    is_current_student = bool(analysis.get("is_current_student") or analysis.get("isCurrentStudent"))

    summary = (analysis.get("summary") or "").lower()
    if any(word in summary for word in _CURRENT_STUDENT_WORDS):
        is_current_student = True

    if graduation_year is None:
        graduation_year = as_of.year + 1 if is_current_student else as_of.year
        warnings.append("Graduation year not found in academic records, using estimated year")

    if not institution:
        warnings.append("Institution not clearly identified in academic records")
    if not degree:
        warnings.append("Degree information not found in academic records")

    return AcademicRecordsSummary(
        graduation_year=graduation_year,
        institution=institution,
        degree=degree,
        is_current_student=is_current_student,
        warnings=warnings,
    )


def summarize_eligibility(results: list[EligibilityResult]) -> EligibilityStats:
    total = len(results)
    eligible = sum(1 for r in results if r.is_eligible and not r.warnings)
    ineligible = sum(1 for r in results if not r.is_eligible)
    with_warnings = sum(1 for r in results if r.is_eligible and r.warnings)
    return EligibilityStats(
        total=total,
        eligible=eligible,
        ineligible=ineligible,
        warnings=with_warnings,
        eligible_percentage=round(eligible / total * 100) if total else 0,
    )
