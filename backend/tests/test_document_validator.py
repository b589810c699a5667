"""Tests for document-vs-profile cross-validation."""

import itertools

import pytest

from models.schemas.document_validation import DeclaredProfileFields, ExtractedDocumentFields
from services.document_validator import DocumentCrossValidator
from services.scoring_config import ScoringConfig

DECLARED = DeclaredProfileFields(
    name="Aroha Ngata",
    institution="University of Auckland",
    degree="Bachelor of Science",
    graduation_year=2025,
)

MISMATCHED = {
    "name": "Zed Quinn",
    "institution": "Harvard Medical School",
    "degree": "Diploma of Arts",
    "graduation_year": 2019,
}

EXPECTED_SCORES = {4: 10.0, 3: 7.0, 2: 4.0, 1: 2.0, 0: 0.0}


@pytest.fixture
def validator():
    return DocumentCrossValidator()


class TestScoreTiers:
    @pytest.mark.parametrize("matches", list(itertools.product([True, False], repeat=4)))
    def test_every_combination(self, validator, matches):
        fields = ("name", "institution", "degree", "graduation_year")
        values = {
            field: getattr(DECLARED, field) if ok else MISMATCHED[field]
            for field, ok in zip(fields, matches)
        }
        result = validator.validate(ExtractedDocumentFields(**values), DECLARED)

        count = sum(matches)
        assert result.match_count == count
        assert result.alignment_score == EXPECTED_SCORES[count]
        assert len(result.mismatches) == 4 - count
        assert result.is_aligned == (count == 4)

    def test_deterministic(self, validator):
        extracted = ExtractedDocumentFields(name="Aroha Ngata", institution="Massey University")
        first = validator.validate(extracted, DECLARED)
        second = validator.validate(extracted, DECLARED)
        assert first == second


class TestFieldRules:
    def test_case_and_whitespace_insensitive(self, validator):
        extracted = ExtractedDocumentFields(
            name="  AROHA   NGATA ",
            institution="university of auckland",
            degree="bachelor of science",
            graduation_year="Class of 2025",
        )
        result = validator.validate(extracted, DECLARED)
        assert result.match_count == 4
        assert result.is_aligned

    def test_containment_counts_as_match(self, validator):
        extracted = ExtractedDocumentFields(degree="Bachelor of Science (Hons) in Computer Science")
        checks = {c.field: c for c in validator.validate(extracted, DECLARED).fields}
        assert checks["degree"].outcome == "match"

    def test_institutions_sharing_keyword_match(self, validator):
        extracted = ExtractedDocumentFields(institution="Auckland University")
        checks = {c.field: c for c in validator.validate(extracted, DECLARED).fields}
        assert checks["institution"].outcome == "match"

    def test_year_off_by_one_is_partial(self, validator):
        extracted = ExtractedDocumentFields(graduation_year=2024)
        result = validator.validate(extracted, DECLARED)
        checks = {c.field: c for c in result.fields}
        assert checks["graduation_year"].outcome == "partial"
        assert result.match_count == 0
        assert "Graduation year has minor variations between document and profile" in result.warnings

    def test_name_token_overlap_is_partial(self, validator):
        extracted = ExtractedDocumentFields(name="Aroha M. Ngata-Smith")
        checks = {c.field: c for c in validator.validate(extracted, DECLARED).fields}
        assert checks["name"].outcome == "partial"

    def test_punctuation_only_difference_is_partial(self, validator):
        declared = DECLARED.model_copy(update={"degree": "B.Sc."})
        extracted = ExtractedDocumentFields(degree="BSc")
        checks = {c.field: c for c in validator.validate(extracted, declared).fields}
        assert checks["degree"].outcome == "partial"

    def test_absent_field_is_a_mismatch(self, validator):
        extracted = ExtractedDocumentFields(name="Aroha Ngata")
        result = validator.validate(extracted, DECLARED)
        assert result.match_count == 1
        assert "Degree not found in document - cannot validate against profile" in result.mismatches
        assert not result.is_aligned

    def test_mismatch_note(self, validator):
        extracted = ExtractedDocumentFields(name="Zed Quinn")
        checks = {c.field: c for c in validator.validate(extracted, DECLARED).fields}
        assert checks["name"].note == "Name mismatch: document shows Zed Quinn but profile expects Aroha Ngata"

    def test_missing_profile_value_warns(self, validator):
        declared = DECLARED.model_copy(update={"degree": ""})
        result = validator.validate(ExtractedDocumentFields(degree="BSc"), declared)
        assert "Degree missing in profile" in result.warnings

    def test_three_matches_with_mismatch_not_aligned(self, validator):
        extracted = ExtractedDocumentFields(
            name="Aroha Ngata",
            institution="University of Auckland",
            degree="Bachelor of Science",
            graduation_year=2019,
        )
        result = validator.validate(extracted, DECLARED)
        assert result.alignment_score == 7.0
        assert not result.is_aligned


class TestSpellingVariants:
    OTAGO = DeclaredProfileFields(
        name="Aroha Ngata",
        institution="University of Otago",
        degree="Bachelor of Science",
        graduation_year=2024,
    )

    def test_typos_are_partial(self, validator):
        extracted = ExtractedDocumentFields(
            name="Aroha Ngata",
            institution="Univeristy of Otago",
            degree="Bachelor of Sciense",
            graduation_year=2024,
        )
        result = validator.validate(extracted, self.OTAGO)
        checks = {c.field: c.outcome for c in result.fields}

        assert checks == {
            "name": "match",
            "institution": "partial",
            "degree": "partial",
            "graduation_year": "match",
        }
        assert result.match_count == 2
        assert result.alignment_score == 4.0
        assert result.mismatches == []
        assert "Institution has minor variations between document and profile" in result.warnings
        assert "Degree has minor variations between document and profile" in result.warnings

    def test_typo_note(self, validator):
        extracted = ExtractedDocumentFields(institution="Univeristy of Otago")
        checks = {c.field: c for c in validator.validate(extracted, self.OTAGO).fields}
        assert checks["institution"].note == (
            "Institution partially matches: document shows Univeristy of Otago, "
            "profile expects University of Otago"
        )

    def test_different_degree_still_mismatch(self, validator):
        extracted = ExtractedDocumentFields(degree="Bachelor of Commerce")
        checks = {c.field: c.outcome for c in validator.validate(extracted, self.OTAGO).fields}
        assert checks["degree"] == "mismatch"

    def test_threshold_from_config(self):
        strict = DocumentCrossValidator(ScoringConfig(fuzzy_variant_threshold=99))
        extracted = ExtractedDocumentFields(degree="Bachelor of Sciense")
        checks = {c.field: c.outcome for c in strict.validate(extracted, self.OTAGO).fields}
        assert checks["degree"] == "mismatch"


class TestUnverifiable:
    def test_no_extraction(self, validator):
        result = validator.validate(None, DECLARED)
        assert result.alignment_score == 3.0
        assert result.manual_review_required
        assert not result.is_aligned
        assert result.match_count == 0
        assert "Candidate: Aroha Ngata" in result.notes
        assert all(c.outcome == "absent" for c in result.fields)
