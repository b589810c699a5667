"""Posting quality assessment and description enhancement.

Both operations are tiered: Gemini first, then a rule-based checklist
(assessment) or templated paragraphs appended to the description
(enhancement).
"""

import logging
from typing import Any

from models.schemas.posting import Posting
from models.schemas.quality import JobEnhancement, QualityAssessment
from services import prompt_builder
from services.scoring.base import (
    BaseScoringService,
    FallbackChain,
    InteractionRecorder,
    RemoteJsonScoringService,
    RemoteModelError,
    RemoteScoringService,
)
from services.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

INCLUSIVITY_STATEMENT = (
    "We are committed to building a diverse and inclusive team. We welcome applications "
    "from candidates of all backgrounds, experiences, and perspectives."
)
EXPANSION_PARAGRAPH = (
    "This is an exciting opportunity to join our dynamic team and make a real impact. "
    "You will work alongside talented professionals in a collaborative environment "
    "where innovation and creativity are valued."
)
CULTURE_SECTION = (
    "Company Culture:\nWe foster a supportive and inclusive work environment where every "
    "team member can thrive. We believe in work-life balance, continuous learning, and "
    "providing opportunities for professional growth."
)
BENEFITS_SECTION = (
    "Benefits:\n"
    "• Competitive salary package\n"
    "• Flexible working arrangements\n"
    "• Professional development opportunities\n"
    "• Health and wellness benefits\n"
    "• Collaborative and innovative team environment"
)
HOW_TO_APPLY_SECTION = (
    "How to Apply:\nPlease submit your resume and a brief cover letter explaining why "
    "you're excited about this opportunity. We look forward to hearing from you!"
)


def _contains_any(text: str, words: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(w in lowered for w in words)


class RuleBasedJobQualityScorer(BaseScoringService):
    """Fixed-point checklist, capped at 10."""

    service_name = "rule_based_job_quality"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def predict(self, **kwargs: Any) -> QualityAssessment:
        posting: Posting = kwargs["posting"]
        cfg = self.config
        points = cfg.quality_points
        description = posting.description or ""

        # (check id, passed, points, note, suggestion)
        checks = [
            (
                "description_length",
                len(description) >= cfg.min_description_length,
                points.description_length,
                "Comprehensive job description",
                f"Expand job description (at least {cfg.min_description_length} characters)",
            ),
            (
                "skills_specified",
                len(posting.skills_required) >= cfg.min_required_skills,
                points.skills_specified,
                "Clear skill requirements",
                f"Specify at least {cfg.min_required_skills} required skills",
            ),
            (
                "salary_range",
                posting.salary_min is not None and posting.salary_max is not None,
                points.salary_range,
                "Transparent salary range",
                "Add salary range information",
            ),
            (
                "deadline",
                posting.application_deadline is not None,
                points.deadline,
                "Clear application deadline",
                "Set an application deadline",
            ),
            (
                "inclusive_language",
                _contains_any(description, cfg.inclusive_markers),
                points.inclusive_language,
                "Inclusive language detected",
                "Use more inclusive language in the description",
            ),
            (
                "no_biased_language",
                not _contains_any(description, cfg.biased_markers),
                points.no_biased_language,
                "No bias indicators detected",
                "Remove potentially biased language",
            ),
        ]

        score = 0
        notes: list[str] = []
        suggestions: list[str] = []
        failed: list[str] = []
        for check_id, passed, value, note, suggestion in checks:
            if passed:
                score += value
                notes.append(note)
            else:
                suggestions.append(suggestion)
                failed.append(check_id)

        return QualityAssessment(
            score=min(score, 10),
            notes=notes or ["Rule-based analysis completed"],
            suggestions=suggestions or ["Consider general improvements"],
            failed_checks=failed,
            method=self.tier,
        )


class GeminiJobQualityScorer(RemoteJsonScoringService):
    """Gemini review returning ``{score, notes, suggestions}``."""

    service_name = "gemini_job_quality"

    def predict(self, **kwargs: Any) -> QualityAssessment:
        data = self._call(prompt_builder.build_job_quality_prompt(kwargs["posting"]))
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise RemoteModelError(f"quality score is not numeric: {score!r}")
        if not 0 <= score <= 10:
            raise RemoteModelError(f"quality score {score} outside 0-10")
        notes = _string_list(data.get("notes"), "notes")
        suggestions = _string_list(data.get("suggestions"), "suggestions")
        return QualityAssessment(
            score=float(score),
            notes=notes,
            suggestions=suggestions,
            method=self.tier,
        )


def _string_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise RemoteModelError(f"quality {key} must be a list of strings")
    return value


class RuleBasedDescriptionEnhancer(BaseScoringService):
    """Append templated paragraphs for whatever the checklist found missing."""

    service_name = "rule_based_description_enhancer"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()
        self.checklist = RuleBasedJobQualityScorer(self.config)

    def predict(self, **kwargs: Any) -> str:
        posting: Posting = kwargs["posting"]
        failed = self.checklist.predict(posting=posting).failed_checks

        blocks = [(posting.description or "").strip()]
        if "inclusive_language" in failed:
            blocks.append(INCLUSIVITY_STATEMENT)
        if "description_length" in failed:
            blocks.append(EXPANSION_PARAGRAPH)

        # Section checks look at the text built so far
        if not _contains_any("\n\n".join(blocks), ("culture", "environment")):
            blocks.append(CULTURE_SECTION)
        if not _contains_any("\n\n".join(blocks), ("benefit", "perk")):
            blocks.append(BENEFITS_SECTION)
        if not _contains_any("\n\n".join(blocks), ("apply", "submit")):
            blocks.append(HOW_TO_APPLY_SECTION)

        return "\n\n".join(b for b in blocks if b)


class GeminiDescriptionEnhancer(RemoteScoringService):
    service_name = "gemini_description_enhancer"

    def predict(self, **kwargs: Any) -> str:
        prompt = prompt_builder.build_job_enhancement_prompt(kwargs["posting"], kwargs["assessment"])
        text = str(self._call(prompt)).strip()
        if not text:
            raise RemoteModelError("empty enhanced description")
        return text


class JobQualityScorer:
    def __init__(
        self,
        config: ScoringConfig | None = None,
        remote: BaseScoringService | None = None,
        enhancer: BaseScoringService | None = None,
        recorder: InteractionRecorder | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.assessment = FallbackChain(
            "job_quality",
            remote or GeminiJobQualityScorer(),
            RuleBasedJobQualityScorer(self.config),
            recorder=recorder,
        )
        self.enhancement = FallbackChain(
            "job_enhancement",
            enhancer or GeminiDescriptionEnhancer(),
            RuleBasedDescriptionEnhancer(self.config),
            recorder=recorder,
        )

    def assess(self, posting: Posting) -> QualityAssessment:
        return self.assessment.predict(entity_id=posting.id, posting=posting).value

    def enhance(
        self,
        posting: Posting,
        assessment: QualityAssessment | None = None,
    ) -> tuple[str, str]:
        """Return (enhanced description, tier that produced it)."""
        assessment = assessment or self.assess(posting)
        outcome = self.enhancement.predict(
            entity_id=posting.id, posting=posting, assessment=assessment
        )
        return outcome.value, outcome.tier

    def enhance_posting(self, posting: Posting) -> JobEnhancement:
        assessment = self.assess(posting)
        text, method = self.enhance(posting, assessment)
        logger.info(
            "Posting %s scored %.1f (%s), description enhanced (%s)",
            posting.id, assessment.score, assessment.method, method,
        )
        return JobEnhancement(
            score=assessment.score,
            notes=assessment.notes,
            suggestions=assessment.suggestions,
            enhanced_description=text,
            scoring_method=assessment.method,
            enhancement_method=method,
        )
