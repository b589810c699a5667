"""Tests for candidate/posting match scoring."""

from datetime import date

import pytest

from models.schemas.match_score import MatchBreakdown
from services.match_scoring import (
    GeminiMatchExplainer,
    GeminiMatchScorer,
    MatchScoringEngine,
    RuleBasedMatchScorer,
    interest_alignment,
    location_compatibility,
    parse_score_reply,
    skill_similarity,
    timeline_relevance,
)
from services.scoring.base import RemoteModelError
from services.scoring_config import SKILL_FAMILIES, ScoringConfig

REMOTE = ("remote", "hybrid")


class TestSkillSimilarity:
    def test_exact_is_case_insensitive(self):
        assert skill_similarity("python", "Python", SKILL_FAMILIES) == 1.0

    def test_containment(self):
        assert skill_similarity("React Native", "react", SKILL_FAMILIES) == 0.8

    def test_family(self):
        assert skill_similarity("Django", "python", SKILL_FAMILIES) == 0.6
        assert skill_similarity("python", "Django", SKILL_FAMILIES) == 0.6

    def test_unrelated(self):
        assert skill_similarity("Rust", "COBOL", SKILL_FAMILIES) == 0.0

    @pytest.mark.parametrize("skill,required", [
        ("C", "JavaScript"),
        ("R", "React"),
        ("Go", "Django"),
    ])
    def test_short_skill_not_contained(self, skill, required):
        assert skill_similarity(skill, required, SKILL_FAMILIES) == 0.0

    def test_short_skill_exact_still_matches(self):
        assert skill_similarity("C", "c", SKILL_FAMILIES) == 1.0

    def test_three_letter_containment(self):
        assert skill_similarity("SQL", "MySQL", SKILL_FAMILIES) == 0.8

    def test_short_skill_does_not_satisfy_requirement(self):
        svc = RuleBasedMatchScorer(ScoringConfig())
        score, matched, related, missing = svc.skill_overlap(["R"], ["React"])
        assert score == 0.0
        assert matched == []
        assert missing == ["React"]


class TestComponents:
    def test_location(self):
        assert location_compatibility("Auckland", "auckland", REMOTE) == 1.0
        assert location_compatibility("Auckland", "Auckland CBD", REMOTE) == 0.8
        assert location_compatibility("Wellington", "Remote (NZ)", REMOTE) == 0.7
        assert location_compatibility("Wellington", "Christchurch", REMOTE) == 0.3

    def test_interests_default_neutral(self):
        assert interest_alignment([], "Technology") == 0.5
        assert interest_alignment(["Fintech"], "") == 0.5

    def test_interests_fraction(self):
        assert interest_alignment(["technology", "music"], "Technology") == 0.5

    @pytest.mark.parametrize("year,expected", [
        (2025, 1.0), (2026, 0.9), (2027, 0.7), (2030, 0.5), (2023, 0.3),
    ])
    def test_timeline(self, year, expected):
        assert timeline_relevance(year, date(2025, 6, 15)) == expected


class TestRuleBasedScorer:
    def setup_method(self):
        self.svc = RuleBasedMatchScorer()

    def test_reference_scenario(self, candidate, organization, posting, as_of):
        result = self.svc.predict(
            candidate=candidate, organization=organization, posting=posting, as_of=as_of
        )
        b = result.breakdown
        assert b.skills == 0.5  # Python exact, Django only related
        assert b.matched_skills == ["Python"]
        assert b.related_skills == ["Django"]
        assert b.location == 1.0
        assert b.availability == 1.0
        assert b.interests == 0.5
        assert b.timeline == 1.0
        assert 60 <= result.score <= 75
        assert result.method == "rule_based"

    def test_already_graduated_scenario(self, candidate, organization, posting):
        result = self.svc.predict(
            candidate=candidate, organization=organization, posting=posting, as_of=date(2026, 3, 1)
        )
        assert 60 <= result.score <= 75

    def test_deterministic(self, candidate, organization, posting, as_of):
        kwargs = dict(candidate=candidate, organization=organization, posting=posting, as_of=as_of)
        assert self.svc.predict(**kwargs) == self.svc.predict(**kwargs)

    def test_no_required_skills_is_neutral(self, candidate, organization, posting, as_of):
        posting = posting.model_copy(update={"skills_required": []})
        b = self.svc.breakdown(candidate, organization, posting, as_of)
        assert b.skills == 0.5

    def test_partial_availability_credit(self, candidate, organization, posting, as_of):
        posting = posting.model_copy(update={"employment_type": "part-time"})
        b = self.svc.breakdown(candidate, organization, posting, as_of)
        assert b.availability == pytest.approx(2 / 3)

    def test_incompatible_availability(self, candidate, organization, posting, as_of):
        posting = posting.model_copy(update={"employment_type": "full-time"})
        assert self.svc.breakdown(candidate, organization, posting, as_of).availability == 0.0

    def test_extra_availability_options(self, candidate, organization, posting, as_of):
        candidate = candidate.model_copy(update={"availability_options": ["full-time"]})
        posting = posting.model_copy(update={"employment_type": "full-time"})
        assert self.svc.breakdown(candidate, organization, posting, as_of).availability == 1.0

    def test_perfect_candidate_scores_high(self, candidate, organization, posting, as_of):
        candidate = candidate.model_copy(update={
            "skills": ["Python", "Django"],
            "interests": ["Technology"],
            "bio": "Aspiring data engineer",
            "linkedin_url": "https://linkedin.com/in/aroha",
            "github_url": "https://github.com/aroha",
            "portfolio_url": "https://aroha.dev",
            "resume_url": "https://files.example.com/cv.pdf",
            "profile_photo_url": "https://files.example.com/me.png",
        })
        result = self.svc.predict(
            candidate=candidate, organization=organization, posting=posting, as_of=as_of
        )
        assert result.score == 100

    def test_rounds_to_nearest(self):
        # 0.40 * 0.5 + 0.10 * 0.125 = 0.2125
        assert self.svc.combine(MatchBreakdown(skills=0.5, timeline=0.125)) == 21
        # 0.40 * 0.5 + 0.10 * 0.3 = 0.23
        assert self.svc.combine(MatchBreakdown(skills=0.5, timeline=0.3)) == 23
        assert self.svc.combine(MatchBreakdown(skills=1.0, location=1.0)) == 60

    def test_empty_breakdown_scores_zero(self):
        assert self.svc.combine(MatchBreakdown()) == 0


class TestScoreReply:
    @pytest.mark.parametrize("reply,expected", [
        ("72", 72), ("72%", 72), ("72 / 100", 72), ("100.", 100), (" 0 ", 0),
    ])
    def test_accepted(self, reply, expected):
        assert parse_score_reply(reply) == expected

    @pytest.mark.parametrize("reply", ["101", "seventy", "Score: 72", "72.5", "-3", ""])
    def test_rejected(self, reply):
        with pytest.raises(RemoteModelError):
            parse_score_reply(reply)


@pytest.mark.remote
class TestEngineTiers:
    def test_remote_score_used(self, fake_model, candidate, organization, posting, as_of):
        engine = MatchScoringEngine(remote=GeminiMatchScorer(generate=fake_model("88")))
        result = engine.score(candidate, organization, posting, as_of)
        assert result.score == 88
        assert result.method == "remote"
        assert result.breakdown is None

    def test_out_of_range_falls_back(self, fake_model, candidate, organization, posting, as_of):
        engine = MatchScoringEngine(remote=GeminiMatchScorer(generate=fake_model("150")))
        result = engine.score(candidate, organization, posting, as_of)
        assert result.method == "rule_based"
        assert result.score == engine.score_rule_based(candidate, organization, posting, as_of).score

    def test_remote_error_falls_back(self, fake_model, candidate, organization, posting, as_of):
        engine = MatchScoringEngine(remote=GeminiMatchScorer(generate=fake_model(ConnectionError("down"))))
        assert engine.score(candidate, organization, posting, as_of).method == "rule_based"

    def test_unconfigured_remote_is_skipped(self, candidate, organization, posting, as_of):
        result = MatchScoringEngine().score(candidate, organization, posting, as_of)
        assert result.method == "rule_based"

    def test_remote_notes(self, fake_model, candidate, organization, posting, as_of):
        engine = MatchScoringEngine(explainer=GeminiMatchExplainer(generate=fake_model("  Great fit.  ")))
        assert engine.explain(candidate, organization, posting, 71, as_of) == "Great fit."


class TestRuleBasedNotes:
    def test_notes(self, candidate, organization, posting, as_of):
        notes = MatchScoringEngine().explain(candidate, organization, posting, 71, as_of)
        assert notes == (
            "Strong skills alignment: Python; Perfect location match; "
            "Availability perfectly matches job type; Graduating this year - perfect timing"
        )

    def test_remote_posting(self, candidate, organization, posting, as_of):
        candidate = candidate.model_copy(update={"location": "Dunedin"})
        posting = posting.model_copy(update={"location": "Remote"})
        notes = MatchScoringEngine().explain_rule_based(candidate, organization, posting, 55, as_of)
        assert "Remote work opportunity" in notes

    def test_default_note(self, candidate, organization, posting, as_of):
        candidate = candidate.model_copy(update={
            "skills": ["Rust"], "location": "Dunedin", "availability": "contract", "graduation_year": 2027,
        })
        notes = MatchScoringEngine().explain_rule_based(candidate, organization, posting, 35, as_of)
        assert notes == "Match score: 35% based on overall compatibility"

    def test_threshold_configurable(self):
        config = ScoringConfig(skill_match_threshold=0.5)
        svc = RuleBasedMatchScorer(config)
        score, matched, _, _ = svc.skill_overlap(["Python"], ["Python", "Django"])
        assert score == 1.0
        assert matched == ["Python", "Django"]
