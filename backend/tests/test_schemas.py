"""Tests for domain model validation and the match status lifecycle."""

import pytest
from pydantic import ValidationError

from models.schemas.candidate import CandidateProfile
from models.schemas.document_validation import ExtractedDocumentFields, coerce_year
from models.schemas.match_record import MatchRecord, can_transition
from models.schemas.posting import Posting
from services.scoring_config import MatchWeights, ScoringConfig


class TestMatchLifecycle:
    def make(self, status="suggested"):
        return MatchRecord(candidate_id="c", organization_id="o", posting_id="p", score=70, status=status)

    def test_forward_path(self):
        match = self.make().advance("viewed").advance("interested").advance("matched")
        assert match.status == "matched"

    def test_not_interested_can_still_match(self):
        assert can_transition("not_interested", "matched")

    @pytest.mark.parametrize("current,new", [
        ("suggested", "matched"),
        ("viewed", "suggested"),
        ("matched", "viewed"),
        ("interested", "not_interested"),
    ])
    def test_illegal(self, current, new):
        with pytest.raises(ValueError):
            self.make(current).advance(new)

    def test_advance_returns_copy(self):
        match = self.make()
        match.advance("viewed")
        assert match.status == "suggested"

    def test_score_range(self):
        with pytest.raises(ValidationError):
            MatchRecord(candidate_id="c", organization_id="o", posting_id="p", score=101)


class TestProfiles:
    def test_skills_deduplicated(self):
        candidate = CandidateProfile(id="c", skills=["Python", "python ", "", "SQL"])
        assert candidate.skills == ["Python", "SQL"]

    def test_unanalyzed_document_distinct_from_zero(self):
        candidate = CandidateProfile(id="c")
        assert candidate.cv_analysis_score is None
        assert CandidateProfile(id="c", cv_analysis_score=0).cv_analysis_score == 0.0

    def test_salary_band_ordered(self):
        with pytest.raises(ValidationError):
            Posting(id="p", organization_id="o", salary_min=80000, salary_max=50000)

    def test_single_salary_bound_allowed(self):
        assert Posting(id="p", organization_id="o", salary_min=50000).salary_max is None


class TestDocumentFields:
    @pytest.mark.parametrize("value,expected", [
        (2025, 2025), ("2025", 2025), ("Expected 2026", 2026), (2025.0, 2025),
        ("n/a", None), (None, None), (True, None),
    ])
    def test_coerce_year(self, value, expected):
        assert coerce_year(value) == expected

    def test_blank_strings_are_missing(self):
        fields = ExtractedDocumentFields(name="  ", institution="", degree=None)
        assert fields.name is None
        assert fields.institution is None


class TestScoringConfig:
    def test_defaults(self):
        config = ScoringConfig()
        assert config.match_weights.skills == 0.40
        assert config.document_score_tiers[3] == 7.0
        assert config.baseline_match_threshold == 50
        assert config.advanced_match_threshold == 60

    def test_frozen(self):
        with pytest.raises(ValidationError):
            ScoringConfig().eligibility_window_months = 24

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            MatchWeights(skills=0.9)

    def test_tiers_must_cover_counts(self):
        with pytest.raises(ValidationError):
            ScoringConfig(document_score_tiers={4: 10.0, 0: 0.0})
