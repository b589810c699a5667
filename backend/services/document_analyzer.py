"""Document analysis: pull identity/education fields out of document text,
then cross-validate them against the declared profile.

Field extraction is tiered:
    1. Gemini JSON extraction (remote)
    2. Regex extraction over the plain text (rule-based)

Text extraction from the uploaded binary happens upstream; ``None`` or blank
text means it failed and the document is flagged for manual review.
"""

import logging
import re
from typing import Any

from models.schemas.document_validation import (
    DeclaredProfileFields,
    DocumentAnalysis,
    ExtractedDocumentFields,
)
from services import prompt_builder
from services.document_validator import DocumentCrossValidator
from services.scoring.base import (
    TIER_REMOTE,
    BaseScoringService,
    FallbackChain,
    InteractionRecorder,
    RemoteJsonScoringService,
    RemoteModelError,
)
from services.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)

EXTRACTION_KEYS = ("name", "institution", "degree", "graduation_year")

_NAME_LABEL_RE = re.compile(
    r"^[ \t]*(?:full[ \t]+)?name[ \t]*[:\-][ \t]*(\S.*)$", re.IGNORECASE | re.MULTILINE
)
_NAME_LINE_RE = re.compile(r"^[A-Z][a-zA-Z'\-]+(?:\s+[A-Z][a-zA-Z'\-]+){1,3}$")
_YEAR_RE = re.compile(r"\b(19[5-9]\d|20\d{2})\b")
_GRADUATION_YEAR_RE = re.compile(
    r"(?:graduat\w*|completion|conferred|awarded|expected|class\s+of)\D{0,40}?(19[5-9]\d|20\d{2})",
    re.IGNORECASE,
)
# Multi-word patterns stay on one line: [ \t] rather than \s
_DEGREE_RE = re.compile(
    r"\b((?:Graduate[ \t]+|Postgraduate[ \t]+)?(?:Bachelor|Master|Doctor|Diploma)(?:'s)?[ \t]+(?:of|in)[ \t]+"
    r"[A-Z][A-Za-z]+(?:[ \t]+(?:and[ \t]+|in[ \t]+|of[ \t]+)?[A-Z][A-Za-z]+)*)"
)
_DEGREE_ABBREV_RE = re.compile(
    r"\b(BSc|BA|BE|BEng|BCom|BCS|BDes|BIT|MSc|MEng|MBA|PhD)\b(?:[ \t]*\(Hons\))?"
)
_INSTITUTION_RE = re.compile(
    r"\b((?:[A-Z][a-zA-Z]+[ \t]+)*(?:University|Institute|Polytechnic|College)"
    r"(?:[ \t]+(?:of[ \t]+)?[A-Z][a-zA-Z]+)*)"
)


class RuleBasedFieldExtractor(BaseScoringService):
    """Regex extraction over plain document text."""

    service_name = "rule_based_field_extractor"

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def predict(self, **kwargs: Any) -> ExtractedDocumentFields:
        text: str = kwargs["text"]
        declared: DeclaredProfileFields = kwargs["declared"]
        return ExtractedDocumentFields(
            name=self._extract_name(text, declared.name),
            institution=self._extract_institution(text),
            degree=self._extract_degree(text),
            graduation_year=self._extract_graduation_year(text),
        )

    def _extract_name(self, text: str, declared_name: str) -> str | None:
        m = _NAME_LABEL_RE.search(text)
        if m:
            return m.group(1).strip()
        if declared_name and declared_name.lower() in text.lower():
            return declared_name
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            # First non-empty line is the usual place for a name header
            return line if _NAME_LINE_RE.match(line) else None
        return None

    def _extract_institution(self, text: str) -> str | None:
        lowered = text.lower()
        known = [
            name for name in self.config.recognized_institutions
            if len(name) >= self.config.min_substring_match_length and name.lower() in lowered
        ]
        if known:
            return max(known, key=len)
        m = _INSTITUTION_RE.search(text)
        return m.group(1).strip() if m else None

    def _extract_degree(self, text: str) -> str | None:
        m = _DEGREE_RE.search(text) or _DEGREE_ABBREV_RE.search(text)
        return m.group(0).strip() if m else None

    def _extract_graduation_year(self, text: str) -> int | None:
        m = _GRADUATION_YEAR_RE.search(text)
        if m:
            return int(m.group(1))
        years = [int(y) for y in _YEAR_RE.findall(text)]
        return max(years) if years else None


class GeminiFieldExtractor(RemoteJsonScoringService):
    """Gemini extraction returning ``{name, institution, degree, graduation_year, notes}``."""

    service_name = "gemini_field_extractor"

    def predict(self, **kwargs: Any) -> ExtractedDocumentFields:
        prompt = prompt_builder.build_document_extraction_prompt(
            kwargs["text"], kwargs["declared"], kwargs.get("document_type", "cv")
        )
        data = self._call(prompt)
        missing = [k for k in EXTRACTION_KEYS if k not in data]
        if missing:
            raise RemoteModelError(f"extraction response missing keys: {missing}")
        try:
            return ExtractedDocumentFields.model_validate(
                {k: data[k] for k in EXTRACTION_KEYS}
            )
        except ValueError as e:
            raise RemoteModelError(f"extraction response invalid: {e}") from e


class DocumentAnalyzer:
    def __init__(
        self,
        config: ScoringConfig | None = None,
        remote: BaseScoringService | None = None,
        recorder: InteractionRecorder | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.validator = DocumentCrossValidator(self.config)
        self.extraction = FallbackChain(
            "document_extraction",
            remote or GeminiFieldExtractor(),
            RuleBasedFieldExtractor(self.config),
            recorder=recorder,
        )

    def analyze(
        self,
        text: str | None,
        declared: DeclaredProfileFields,
        document_type: str = "cv",
    ) -> DocumentAnalysis:
        if text is None or not text.strip():
            validation = self.validator.validate(None, declared)
            return DocumentAnalysis(
                document_type=document_type,
                analysis_score=validation.alignment_score,
                analysis_notes=validation.notes,
                validation=validation,
                extraction_method="none",
            )

        outcome = self.extraction.predict(text=text, declared=declared, document_type=document_type)
        extracted: ExtractedDocumentFields = outcome.value
        validation = self.validator.validate(extracted, declared)

        notes = list(validation.notes)
        if outcome.tier != TIER_REMOTE:
            notes.append("Fields extracted with rule-based parsing")

        logger.info(
            "Analyzed %s for %s: %d/4 fields match, score %.1f (%s)",
            document_type, declared.name, validation.match_count,
            validation.alignment_score, outcome.tier,
        )
        return DocumentAnalysis(
            document_type=document_type,
            analysis_score=validation.alignment_score,
            analysis_notes=notes,
            extracted=extracted,
            validation=validation,
            extraction_method=outcome.tier,
        )
