"""Cross-validation of document-extracted fields against the declared profile.

Each of the four fields (name, institution, degree, graduation year) is
classified as match / partial / mismatch / absent. Partial covers formatting
differences and close spellings scored with rapidfuzz. Only strict matches
count toward the score, which is a fixed discrete tier rather than an average:
one confirmed mismatch should drag confidence down hard.
"""

import logging
import re

from rapidfuzz import fuzz

from models.schemas.document_validation import (
    DeclaredProfileFields,
    DocumentValidationResult,
    ExtractedDocumentFields,
    FieldCheck,
)
from services.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

FIELD_LABELS: dict[str, str] = {
    "name": "Name",
    "institution": "Institution",
    "degree": "Degree",
    "graduation_year": "Graduation year",
}


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", text.lower().strip())


def _alnum(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _tokens(text: str) -> set[str]:
    return {t for t in re.findall(r"[a-z0-9]+", text.lower()) if len(t) >= 2}


class DocumentCrossValidator:
    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def validate(
        self,
        extracted: ExtractedDocumentFields | None,
        declared: DeclaredProfileFields,
    ) -> DocumentValidationResult:
        """Compare ``extracted`` with ``declared``.

        ``extracted=None`` means text extraction failed outright; the result
        is then a fixed low-confidence score flagged for manual review.
        """
        if extracted is None:
            return self.unverifiable(declared)

        checks = [
            self._check_text("name", extracted.name, declared.name),
            self._check_text("institution", extracted.institution, declared.institution),
            self._check_text("degree", extracted.degree, declared.degree),
            self._check_year(extracted.graduation_year, declared.graduation_year),
        ]

        mismatches: list[str] = []
        warnings: list[str] = []
        for check in checks:
            label = FIELD_LABELS[check.field]
            if check.outcome in ("mismatch", "absent"):
                mismatches.append(check.note)
            elif check.outcome == "partial":
                warnings.append(f"{label} has minor variations between document and profile")
            if not check.declared:
                warnings.append(f"{label} missing in profile")

        match_count = sum(1 for c in checks if c.outcome == "match")
        score = self.config.document_score_tiers[match_count]

        return DocumentValidationResult(
            fields=checks,
            match_count=match_count,
            alignment_score=score,
            is_aligned=score >= self.config.aligned_score_floor and not mismatches,
            mismatches=mismatches,
            warnings=warnings,
            notes=[c.note for c in checks],
        )

    def unverifiable(self, declared: DeclaredProfileFields) -> DocumentValidationResult:
        expected = (
            f"{declared.institution} - {declared.degree} ({declared.graduation_year})"
        )
        notes = [
            "Document text extraction not available",
            "Cannot verify document content matches candidate profile",
            "Manual review required to validate document authenticity",
            f"Candidate: {declared.name}",
            f"Expected: {expected}",
            "Please ensure the document is readable and matches the profile",
        ]
        checks = [
            FieldCheck(
                field=field,
                outcome="absent",
                declared=_declared_value(declared, field),
                note=f"{label} could not be verified - manual review required",
            )
            for field, label in FIELD_LABELS.items()
        ]
        logger.info("Document for %s could not be read, flagged for manual review", declared.name)
        return DocumentValidationResult(
            fields=checks,
            match_count=0,
            alignment_score=self.config.unverifiable_document_score,
            is_aligned=False,
            warnings=["Document text extraction not available"],
            notes=notes,
            manual_review_required=True,
        )

    def _check_text(self, field: str, found: str | None, expected: str) -> FieldCheck:
        label = FIELD_LABELS[field]
        check = FieldCheck(field=field, extracted=found, declared=expected or None)

        if not found:
            check.outcome = "absent"
            check.note = f"{label} not found in document - cannot validate against profile"
            return check

        outcome = self._classify_text(field, found, expected or "")
        check.outcome = outcome
        if outcome == "match":
            check.note = f"{label} correctly shows {found}"
        elif outcome == "partial":
            check.note = f"{label} partially matches: document shows {found}, profile expects {expected}"
        else:
            check.note = f"{label} mismatch: document shows {found} but profile expects {expected}"
        return check

    def _classify_text(self, field: str, found: str, expected: str) -> str:
        a, b = _normalize(found), _normalize(expected)
        if not b:
            return "mismatch"
        if a == b or a in b or b in a:
            return "match"
        if field == "institution":
            keywords = set(self.config.institution_keywords)
            if _tokens(a) & _tokens(b) & keywords:
                return "match"
        if _alnum(a) and _alnum(a) == _alnum(b):
            return "partial"
        if field == "name" and _tokens(a) & _tokens(b):
            return "partial"
        # Typos and reordered words (e.g. "Univeristy of Otago")
        similarity = max(fuzz.ratio(a, b), fuzz.token_sort_ratio(a, b))
        if similarity >= self.config.fuzzy_variant_threshold:
            return "partial"
        return "mismatch"

    def _check_year(self, found: int | None, expected: int | None) -> FieldCheck:
        label = FIELD_LABELS["graduation_year"]
        check = FieldCheck(
            field="graduation_year",
            extracted=str(found) if found is not None else None,
            declared=str(expected) if expected is not None else None,
        )
        if found is None:
            check.outcome = "absent"
            check.note = f"{label} not found in document - cannot validate against profile"
            return check
        if expected is None:
            check.outcome = "mismatch"
            check.note = f"{label} mismatch: document shows {found} but profile has no graduation year"
            return check

        diff = abs(found - expected)
        if diff == 0:
            check.outcome = "match"
            check.note = f"{label} correctly shows {found}"
        elif diff == 1:
            check.outcome = "partial"
            check.note = f"{label} partially matches: document shows {found}, profile expects {expected}"
        else:
            check.outcome = "mismatch"
            check.note = f"{label} mismatch: document shows {found} but profile expects {expected}"
        return check


def _declared_value(declared: DeclaredProfileFields, field: str) -> str | None:
    value = getattr(declared, field)
    return str(value) if value not in (None, "") else None
