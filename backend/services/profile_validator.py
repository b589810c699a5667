"""Candidate profile validation: Gemini review with a rule-based checklist fallback."""

import logging
from datetime import date
from typing import Any
from urllib.parse import urlparse

from models.schemas.candidate import CandidateProfile
from models.schemas.quality import ProfileValidation
from services import prompt_builder
from services.scoring.base import (
    BaseScoringService,
    FallbackChain,
    InteractionRecorder,
    RemoteJsonScoringService,
    RemoteModelError,
)
from services.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)


def is_valid_url(value: str | None) -> bool:
    if not value:
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class RuleBasedProfileValidator(BaseScoringService):
    """Completeness, quality, professional presence and timing, capped at 10."""

    service_name = "rule_based_profile_validator"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def predict(self, **kwargs: Any) -> ProfileValidation:
        c: CandidateProfile = kwargs["candidate"]
        as_of: date = kwargs["as_of"]
        bio = c.bio.strip()

        score = 0
        notes: list[str] = []
        suggestions: list[str] = []

        # Completeness
        completeness = [
            (len(bio) > 50, 2, "Add a more detailed bio (at least 50 characters)"),
            (len(c.skills) >= 3, 2, "Add at least 3 skills to your profile"),
            (len(c.interests) >= 2, 1, "Add at least 2 interests to your profile"),
            (bool(c.linkedin_url), 1, "Add your LinkedIn profile"),
            (bool(c.github_url), 1, "Add your GitHub profile"),
            (bool(c.portfolio_url), 1, "Add your portfolio website"),
            (bool(c.resume_url), 1, "Upload your resume"),
            (bool(c.profile_photo_url), 1, "Add a profile photo"),
        ]
        for passed, points, suggestion in completeness:
            if passed:
                score += points
            else:
                suggestions.append(suggestion)

        # Quality
        if len(bio) > 100:
            score += 1
            notes.append("Excellent bio length")
        if len(c.skills) >= 5:
            score += 1
            notes.append("Comprehensive skill set")
        if any(word in bio.lower() for word in self.config.enthusiasm_markers):
            score += 1
            notes.append("Bio shows enthusiasm")

        # Professional presence
        if is_valid_url(c.linkedin_url):
            score += 1
            notes.append("Professional LinkedIn profile")
        if is_valid_url(c.github_url):
            score += 1
            notes.append("Active GitHub profile")
        if is_valid_url(c.portfolio_url):
            score += 1
            notes.append("Portfolio website available")

        if c.graduation_year is not None and as_of.year <= c.graduation_year <= as_of.year + 2:
            score += 1
            notes.append("Relevant graduation timeline")

        return ProfileValidation(
            score=min(score, 10),
            notes="; ".join(notes) or "Profile validation completed",
            suggestions=suggestions,
            method=self.tier,
        )


class GeminiProfileValidator(RemoteJsonScoringService):
    service_name = "gemini_profile_validator"

    def predict(self, **kwargs: Any) -> ProfileValidation:
        data = self._call(prompt_builder.build_profile_validation_prompt(kwargs["candidate"]))
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 10:
            raise RemoteModelError(f"profile score invalid: {score!r}")
        notes = data.get("notes")
        suggestions = data.get("suggestions", [])
        if not isinstance(notes, str):
            raise RemoteModelError("profile notes must be a string")
        if not isinstance(suggestions, list) or not all(isinstance(s, str) for s in suggestions):
            raise RemoteModelError("profile suggestions must be a list of strings")
        return ProfileValidation(
            score=float(score), notes=notes, suggestions=suggestions, method=self.tier
        )


class ProfileValidator:
    def __init__(
        self,
        config: ScoringConfig | None = None,
        remote: BaseScoringService | None = None,
        recorder: InteractionRecorder | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.chain = FallbackChain(
            "profile_validation",
            remote or GeminiProfileValidator(),
            RuleBasedProfileValidator(self.config),
            recorder=recorder,
        )

    def validate(self, candidate: CandidateProfile, as_of: date | None = None) -> ProfileValidation:
        result = self.chain.predict(
            entity_id=candidate.id, candidate=candidate, as_of=as_of or date.today()
        ).value
        logger.debug("Profile %s validated: %.1f (%s)", candidate.id, result.score, result.method)
        return result
