"""Candidate/posting compatibility scoring.

Tiers:
    1. Gemini returns a bare integer 0-100
    2. Weighted rule-based sum of six normalized components

The rule-based tier is deterministic and side-effect free: the same inputs
and ``as_of`` date always give the same score.
"""

import logging
import re
from datetime import date
from typing import Any

from models.schemas.candidate import CandidateProfile
from models.schemas.match_score import MatchBreakdown, MatchScore
from models.schemas.organization import OrganizationProfile
from models.schemas.posting import Posting
from services import prompt_builder
from services.scoring.base import (
    BaseScoringService,
    FallbackChain,
    InteractionRecorder,
    RemoteModelError,
    RemoteScoringService,
)
from services.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

# "72", "72%", "72/100", optionally with a trailing period
_SCORE_REPLY_RE = re.compile(r"^(\d{1,3})(?:\s*%|\s*/\s*100)?\.?$")


def skill_similarity(
    skill: str,
    required: str,
    families: dict[str, tuple[str, ...]],
    min_containment_length: int = 3,
) -> float:
    """1.0 exact, 0.8 containment, 0.6 same technology family, else 0.

    Containment only counts when the shorter skill has at least
    ``min_containment_length`` characters, so "C" or "R" is not found
    inside "JavaScript" or "React".
    """
    a, b = skill.lower().strip(), required.lower().strip()
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if min(len(a), len(b)) >= min_containment_length and (a in b or b in a):
        return 0.8
    for main, related in families.items():
        if (a == main and b in related) or (b == main and a in related):
            return 0.6
    return 0.0


def location_compatibility(
    candidate_location: str,
    posting_location: str,
    remote_markers: tuple[str, ...],
) -> float:
    c, p = candidate_location.lower().strip(), posting_location.lower().strip()
    if c and p:
        if c == p:
            return 1.0
        if c in p or p in c:
            return 0.8
    if any(marker in p for marker in remote_markers):
        return 0.7
    return 0.3


def interest_alignment(interests: list[str], industry: str) -> float:
    """Fraction of interests related to the industry; 0.5 when there is no signal."""
    industry = industry.lower().strip()
    if not interests or not industry:
        return 0.5
    related = [
        i for i in interests
        if i.lower() in industry or industry in i.lower()
    ]
    return min(len(related) / len(interests), 1.0)


def timeline_relevance(graduation_year: int | None, as_of: date) -> float:
    if graduation_year is None:
        return 0.5
    years_until = graduation_year - as_of.year
    if years_until == 0:
        return 1.0
    if years_until == 1:
        return 0.9
    if years_until == 2:
        return 0.7
    if years_until < 0:
        return 0.3  # already graduated
    return 0.5


def profile_completeness(candidate: CandidateProfile, fields: tuple[str, ...]) -> float:
    if not fields:
        return 0.0
    filled = 0
    for field in fields:
        value = getattr(candidate, field, None)
        if isinstance(value, str):
            value = value.strip()
        if value:
            filled += 1
    return filled / len(fields)


class RuleBasedMatchScorer(BaseScoringService):
    """Weighted sum of skills, location, availability, interests, timeline, completeness."""

    service_name = "rule_based_match_scorer"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def predict(self, **kwargs: Any) -> MatchScore:
        breakdown = self.breakdown(
            kwargs["candidate"], kwargs["organization"], kwargs["posting"], kwargs["as_of"]
        )
        return MatchScore(score=self.combine(breakdown), method=self.tier, breakdown=breakdown)

    def combine(self, breakdown: MatchBreakdown) -> int:
        w = self.config.match_weights
        total = (
            breakdown.skills * w.skills
            + breakdown.location * w.location
            + breakdown.availability * w.availability
            + breakdown.interests * w.interests
            + breakdown.timeline * w.timeline
            + breakdown.completeness * w.completeness
        )
        # Half-up rounding, not banker's
        return max(0, min(100, int(total * 100 + 0.5)))

    def breakdown(
        self,
        candidate: CandidateProfile,
        organization: OrganizationProfile,
        posting: Posting,
        as_of: date,
    ) -> MatchBreakdown:
        cfg = self.config
        skills, matched, related, missing = self.skill_overlap(candidate.skills, posting.skills_required)
        return MatchBreakdown(
            skills=skills,
            location=location_compatibility(
                candidate.location, posting.location, cfg.remote_location_markers
            ),
            availability=self.availability_match(candidate, posting),
            interests=interest_alignment(candidate.interests, organization.industry),
            timeline=timeline_relevance(candidate.graduation_year, as_of),
            completeness=profile_completeness(candidate, cfg.completeness_fields),
            matched_skills=matched,
            related_skills=related,
            missing_skills=missing,
        )

    def skill_overlap(
        self,
        candidate_skills: list[str],
        required_skills: list[str],
    ) -> tuple[float, list[str], list[str], list[str]]:
        """Return (fraction satisfied, matched, related-only, missing) required skills."""
        if not required_skills:
            return 0.5, [], [], []

        matched: list[str] = []
        related: list[str] = []
        missing: list[str] = []
        for required in required_skills:
            best = max(
                (
                    skill_similarity(
                        s, required, self.config.skill_families,
                        self.config.min_skill_containment_length,
                    )
                    for s in candidate_skills
                ),
                default=0.0,
            )
            if best > self.config.skill_match_threshold:
                matched.append(required)
            elif best > 0:
                related.append(required)
            else:
                missing.append(required)
        return len(matched) / len(required_skills), matched, related, missing

    def availability_match(self, candidate: CandidateProfile, posting: Posting) -> float:
        modes = candidate.availability_modes
        if posting.employment_type in modes:
            return 1.0
        compat = self.config.availability_compatibility
        if any(posting.employment_type in compat.get(mode, ()) for mode in modes):
            return self.config.availability_partial_credit
        return 0.0


class GeminiMatchScorer(RemoteScoringService):
    """Gemini scoring; the reply must be a bare integer in [0, 100]."""

    service_name = "gemini_match_scorer"

    def predict(self, **kwargs: Any) -> MatchScore:
        prompt = prompt_builder.build_match_score_prompt(
            kwargs["candidate"], kwargs["organization"], kwargs["posting"], kwargs["as_of"]
        )
        reply = str(self._call(prompt)).strip()
        return MatchScore(score=parse_score_reply(reply), method=self.tier)


def parse_score_reply(reply: str) -> int:
    m = _SCORE_REPLY_RE.match(reply.strip())
    if not m:
        raise RemoteModelError(f"match score reply is not an integer: {reply[:50]!r}")
    score = int(m.group(1))
    if not 0 <= score <= 100:
        raise RemoteModelError(f"match score {score} outside 0-100")
    return score


class GeminiMatchExplainer(RemoteScoringService):
    service_name = "gemini_match_explainer"

    def predict(self, **kwargs: Any) -> str:
        prompt = prompt_builder.build_match_notes_prompt(
            kwargs["candidate"], kwargs["organization"], kwargs["posting"], kwargs["score"]
        )
        text = str(self._call(prompt)).strip()
        if not text:
            raise RemoteModelError("empty match notes")
        return text


class RuleBasedMatchExplainer(BaseScoringService):
    """Short "; "-joined notes built from the strongest rule-based signals."""

    service_name = "rule_based_match_explainer"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self.scorer = RuleBasedMatchScorer(self.config)

    def predict(self, **kwargs: Any) -> str:
        candidate: CandidateProfile = kwargs["candidate"]
        posting: Posting = kwargs["posting"]
        score: int = kwargs["score"]
        as_of: date = kwargs["as_of"]

        _, matched, related, _ = self.scorer.skill_overlap(candidate.skills, posting.skills_required)

        notes: list[str] = []
        if matched:
            notes.append(f"Strong skills alignment: {', '.join(matched)}")
        elif related:
            notes.append(f"Related skills: {', '.join(related)}")

        c_loc, p_loc = candidate.location.lower().strip(), posting.location.lower().strip()
        if c_loc and c_loc == p_loc:
            notes.append("Perfect location match")
        elif "remote" in p_loc:
            notes.append("Remote work opportunity")

        if candidate.availability == posting.employment_type:
            notes.append("Availability perfectly matches job type")

        if profile_completeness(candidate, self.config.completeness_fields) > 0.8:
            notes.append("Excellent profile completeness")

        if candidate.graduation_year == as_of.year:
            notes.append("Graduating this year - perfect timing")

        return "; ".join(notes) or f"Match score: {score}% based on overall compatibility"


class MatchScoringEngine:
    def __init__(
        self,
        config: ScoringConfig | None = None,
        remote: BaseScoringService | None = None,
        explainer: BaseScoringService | None = None,
        recorder: InteractionRecorder | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.rule_based = RuleBasedMatchScorer(self.config)
        self.scoring = FallbackChain(
            "match_scoring",
            remote or GeminiMatchScorer(),
            self.rule_based,
            recorder=recorder,
        )
        self.rule_based_explainer = RuleBasedMatchExplainer(self.config)
        self.explaining = FallbackChain(
            "match_notes",
            explainer or GeminiMatchExplainer(),
            self.rule_based_explainer,
            recorder=recorder,
        )

    def score(
        self,
        candidate: CandidateProfile,
        organization: OrganizationProfile,
        posting: Posting,
        as_of: date | None = None,
    ) -> MatchScore:
        outcome = self.scoring.predict(
            entity_id=f"{candidate.id}:{posting.id}",
            candidate=candidate,
            organization=organization,
            posting=posting,
            as_of=as_of or date.today(),
        )
        return outcome.value

    def score_rule_based(
        self,
        candidate: CandidateProfile,
        organization: OrganizationProfile,
        posting: Posting,
        as_of: date | None = None,
    ) -> MatchScore:
        return self.rule_based.predict(
            candidate=candidate,
            organization=organization,
            posting=posting,
            as_of=as_of or date.today(),
        )

    def breakdown(
        self,
        candidate: CandidateProfile,
        organization: OrganizationProfile,
        posting: Posting,
        as_of: date | None = None,
    ) -> MatchBreakdown:
        return self.rule_based.breakdown(candidate, organization, posting, as_of or date.today())

    def explain(
        self,
        candidate: CandidateProfile,
        organization: OrganizationProfile,
        posting: Posting,
        score: int,
        as_of: date | None = None,
    ) -> str:
        outcome = self.explaining.predict(
            entity_id=f"{candidate.id}:{posting.id}",
            candidate=candidate,
            organization=organization,
            posting=posting,
            score=score,
            as_of=as_of or date.today(),
        )
        return outcome.value

    def explain_rule_based(
        self,
        candidate: CandidateProfile,
        organization: OrganizationProfile,
        posting: Posting,
        score: int,
        as_of: date | None = None,
    ) -> str:
        return self.rule_based_explainer.predict(
            candidate=candidate,
            organization=organization,
            posting=posting,
            score=score,
            as_of=as_of or date.today(),
        )
