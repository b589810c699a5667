"""Bulk runs over the record store.

Every runner walks its units sequentially. A unit that fails is recorded in
the report and the run moves on; only ``StoreUnavailableError`` aborts a
run, since nothing after it could succeed either.

Match runs:
    approved candidates ─ eligibility filter
      × approved organizations × their published postings
      ─ skip triples already stored (or already produced this run)
      ─ score (baseline: rule-based only, advanced: remote first)
      ─ keep score > threshold, attach notes, insert
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, NamedTuple

from models.schemas.batch import (
    BatchItemResult,
    BatchReport,
    BatchStatus,
    EligibilityRunReport,
    MatchRunReport,
    PlatformInsights,
)
from models.schemas.candidate import CandidateProfile
from models.schemas.document_validation import DeclaredProfileFields
from models.schemas.interaction import ScoringPerformanceMetrics
from models.schemas.match_record import MatchKey, MatchRecord
from models.schemas.organization import OrganizationProfile
from models.schemas.posting import Posting
from services.document_analyzer import DocumentAnalyzer
from services.eligibility import EligibilityEngine, summarize_eligibility
from services.job_quality import JobQualityScorer
from services.match_scoring import MatchScoringEngine
from services.profile_validator import ProfileValidator
from services.scoring_config import ScoringConfig
from services.store import DuplicateMatchError, RecordStore, StoreUnavailableError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

DOCUMENT_FIELD_PREFIXES = {
    "cv": "cv",
    "academic_records": "academic_records",
}


class DocumentJob(NamedTuple):
    candidate_id: str
    document_type: str  # cv, academic_records
    text: str | None  # None when text extraction failed upstream


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BatchRun:
    """initialized -> running -> completed, with a monotonic completed count."""

    def __init__(self, report: BatchReport, on_progress: ProgressCallback | None = None) -> None:
        self.report = report
        self.on_progress = on_progress

    def start(self, total: int) -> None:
        if self.report.status != BatchStatus.INITIALIZED:
            raise RuntimeError(f"batch {self.report.name!r} already started")
        self.report.total = total
        self.report.status = BatchStatus.RUNNING
        self.report.started_at = _now()
        logger.info("Batch %s started: %d units", self.report.name, total)

    def record(self, item: BatchItemResult) -> None:
        if self.report.status != BatchStatus.RUNNING:
            raise RuntimeError(f"batch {self.report.name!r} is not running")
        self.report.results.append(item)
        self.report.completed += 1
        if item.success:
            self.report.succeeded += 1
        else:
            self.report.failed += 1
        if self.on_progress is None:
            return
        try:
            self.on_progress(self.report.completed, self.report.total)
        except Exception as e:
            logger.error("Batch %s progress callback failed: %s", self.report.name, e)

    def finish(self) -> BatchReport:
        if self.report.status != BatchStatus.RUNNING:
            raise RuntimeError(f"batch {self.report.name!r} is not running")
        self.report.status = BatchStatus.COMPLETED
        self.report.finished_at = _now()
        logger.info(
            "Batch %s completed: %d succeeded, %d failed",
            self.report.name, self.report.succeeded, self.report.failed,
        )
        return self.report


class BulkOrchestrator:
    def __init__(
        self,
        store: RecordStore,
        config: ScoringConfig | None = None,
        eligibility: EligibilityEngine | None = None,
        documents: DocumentAnalyzer | None = None,
        matcher: MatchScoringEngine | None = None,
        quality: JobQualityScorer | None = None,
        profiles: ProfileValidator | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.store = store
        self.config = config or ScoringConfig()
        self.eligibility = eligibility or EligibilityEngine(self.config)
        # Engines built here log every tier attempt to the store
        recorder = store.insert_interaction
        self.documents = documents or DocumentAnalyzer(self.config, recorder=recorder)
        self.matcher = matcher or MatchScoringEngine(self.config, recorder=recorder)
        self.quality = quality or JobQualityScorer(self.config, recorder=recorder)
        self.profiles = profiles or ProfileValidator(self.config, recorder=recorder)
        self.on_progress = on_progress

    def _failed(self, unit_id: str, error: Exception) -> BatchItemResult:
        logger.error("Unit %s failed: %s", unit_id, error)
        return BatchItemResult(id=unit_id, success=False, method="failed", error=str(error))

    # --- Per-entity runners ---

    def validate_profiles(self, candidate_ids: list[str], as_of: date | None = None) -> BatchReport:
        as_of = as_of or date.today()
        run = BatchRun(BatchReport(name="validate_profiles"), self.on_progress)
        run.start(len(candidate_ids))
        for candidate_id in candidate_ids:
            try:
                candidate = CandidateProfile.model_validate(self.store.get_candidate(candidate_id))
                result = self.profiles.validate(candidate, as_of)
                self.store.update_candidate(
                    candidate_id,
                    {"validation_score": result.score, "validation_notes": result.notes},
                )
                item = BatchItemResult(
                    id=candidate_id, success=True, score=result.score, method=result.method
                )
            except StoreUnavailableError:
                raise
            except Exception as e:
                item = self._failed(candidate_id, e)
            run.record(item)
        return run.finish()

    def analyze_documents(self, jobs: list[DocumentJob]) -> BatchReport:
        run = BatchRun(BatchReport(name="analyze_documents"), self.on_progress)
        run.start(len(jobs))
        for job in jobs:
            unit_id = f"{job.candidate_id}:{job.document_type}"
            try:
                prefix = DOCUMENT_FIELD_PREFIXES.get(job.document_type)
                if prefix is None:
                    raise ValueError(f"unknown document type {job.document_type!r}")
                candidate = CandidateProfile.model_validate(self.store.get_candidate(job.candidate_id))
                declared = DeclaredProfileFields(
                    name=candidate.full_name,
                    institution=candidate.institution,
                    degree=candidate.degree,
                    graduation_year=candidate.graduation_year,
                )
                analysis = self.documents.analyze(job.text, declared, job.document_type)
                self.store.update_candidate(
                    job.candidate_id,
                    {
                        f"{prefix}_analysis_score": analysis.analysis_score,
                        f"{prefix}_analysis_notes": "; ".join(analysis.analysis_notes),
                    },
                )
                item = BatchItemResult(
                    id=unit_id,
                    success=True,
                    score=analysis.analysis_score,
                    method=analysis.extraction_method,
                )
            except StoreUnavailableError:
                raise
            except Exception as e:
                item = self._failed(unit_id, e)
            run.record(item)
        return run.finish()

    def enhance_postings(self, posting_ids: list[str]) -> BatchReport:
        run = BatchRun(BatchReport(name="enhance_postings"), self.on_progress)
        run.start(len(posting_ids))
        for posting_id in posting_ids:
            try:
                posting = Posting.model_validate(self.store.get_posting(posting_id))
                enhancement = self.quality.enhance_posting(posting)
                self.store.update_posting(
                    posting_id,
                    {
                        "quality_score": enhancement.score,
                        "quality_notes": "; ".join(enhancement.notes),
                        "enhanced_description": enhancement.enhanced_description,
                    },
                )
                item = BatchItemResult(
                    id=posting_id,
                    success=True,
                    score=enhancement.score,
                    method=enhancement.scoring_method,
                )
            except StoreUnavailableError:
                raise
            except Exception as e:
                item = self._failed(posting_id, e)
            run.record(item)
        return run.finish()

    def check_eligibility(
        self,
        candidate_ids: list[str],
        as_of: date | None = None,
    ) -> EligibilityRunReport:
        as_of = as_of or date.today()
        report = EligibilityRunReport(name="check_eligibility")
        run = BatchRun(report, self.on_progress)
        run.start(len(candidate_ids))
        for candidate_id in candidate_ids:
            try:
                candidate = CandidateProfile.model_validate(self.store.get_candidate(candidate_id))
                result = self.eligibility.check_eligibility(
                    candidate.graduation_year, candidate.institution, as_of
                )
                report.eligibility[candidate_id] = result
                item = BatchItemResult(
                    id=candidate_id,
                    success=True,
                    score=result.months_since_graduation,
                    method="eligible" if result.is_eligible else "ineligible",
                )
            except StoreUnavailableError:
                raise
            except Exception as e:
                item = self._failed(candidate_id, e)
            run.record(item)
        report.stats = summarize_eligibility(list(report.eligibility.values()))
        run.finish()
        return report

    # --- Match generation ---

    def generate_matches(self, as_of: date | None = None) -> MatchRunReport:
        """Baseline run: rule-based scoring only."""
        return self._run_matches(
            "generate_matches",
            threshold=self.config.baseline_match_threshold,
            advanced=False,
            as_of=as_of or date.today(),
        )

    def generate_advanced_matches(self, as_of: date | None = None) -> MatchRunReport:
        """Remote-first scoring with generated notes."""
        return self._run_matches(
            "generate_advanced_matches",
            threshold=self.config.advanced_match_threshold,
            advanced=True,
            as_of=as_of or date.today(),
        )

    def _load_openings(self) -> list[tuple[OrganizationProfile, Posting]]:
        openings: list[tuple[OrganizationProfile, Posting]] = []
        for org_row in self.store.list_organizations(status="approved"):
            try:
                organization = OrganizationProfile.model_validate(org_row)
            except ValueError as e:
                logger.warning("Skipping organization %s: %s", org_row.get("id"), e)
                continue
            for posting_row in self.store.list_postings(
                status="published", organization_id=organization.id
            ):
                try:
                    openings.append((organization, Posting.model_validate(posting_row)))
                except ValueError as e:
                    logger.warning("Skipping posting %s: %s", posting_row.get("id"), e)
        return openings

    def _run_matches(self, name: str, threshold: int, advanced: bool, as_of: date) -> MatchRunReport:
        report = MatchRunReport(name=name, threshold=threshold)
        run = BatchRun(report, self.on_progress)

        candidate_rows = self.store.list_candidates(status="approved")
        openings = self._load_openings()
        run.start(len(candidate_rows))

        produced: set[MatchKey] = set()
        for row in candidate_rows:
            candidate_id = str(row.get("id"))
            try:
                candidate = CandidateProfile.model_validate(row)
                eligibility = self.eligibility.check_eligibility(
                    candidate.graduation_year, candidate.institution, as_of
                )
                if not eligibility.is_eligible:
                    logger.debug("Candidate %s not eligible: %s", candidate_id, eligibility.reason)
                    run.record(BatchItemResult(id=candidate_id, success=True, method="ineligible"))
                    continue

                report.candidates_considered += 1
                created = self._match_candidate(candidate, openings, threshold, advanced, as_of, produced, report)
                item = BatchItemResult(
                    id=candidate_id,
                    success=True,
                    score=created,
                    method="advanced" if advanced else "baseline",
                )
            except StoreUnavailableError:
                raise
            except Exception as e:
                item = self._failed(candidate_id, e)
            run.record(item)

        run.finish()
        logger.info(
            "%s: %d candidates, %d pairs scored, %d created, %d already present",
            name, report.candidates_considered, report.pairs_scored,
            report.created, report.skipped_existing,
        )
        return report

    def _match_candidate(
        self,
        candidate: CandidateProfile,
        openings: list[tuple[OrganizationProfile, Posting]],
        threshold: int,
        advanced: bool,
        as_of: date,
        produced: set[MatchKey],
        report: MatchRunReport,
    ) -> int:
        """Score one candidate against every opening; return records created."""
        keys = [MatchKey(candidate.id, org.id, posting.id) for org, posting in openings]
        existing = self.store.find_existing_match_keys(keys)

        pending: list[MatchRecord] = []
        for key, (organization, posting) in zip(keys, openings):
            if key in existing:
                report.skipped_existing += 1
                continue
            if key in produced:
                continue

            if advanced:
                result = self.matcher.score(candidate, organization, posting, as_of)
            else:
                result = self.matcher.score_rule_based(candidate, organization, posting, as_of)
            report.pairs_scored += 1
            if result.score <= threshold:
                continue

            if advanced:
                notes = self.matcher.explain(candidate, organization, posting, result.score, as_of)
            else:
                notes = self.matcher.explain_rule_based(candidate, organization, posting, result.score, as_of)
            pending.append(
                MatchRecord(
                    candidate_id=key.candidate_id,
                    organization_id=key.organization_id,
                    posting_id=key.posting_id,
                    score=result.score,
                    notes=notes,
                )
            )
            produced.add(key)

        return self._insert(pending, report)

    def _insert(self, records: list[MatchRecord], report: MatchRunReport) -> int:
        if not records:
            return 0
        try:
            self.store.insert_matches(records)
            inserted = records
        except DuplicateMatchError:
            # Another writer got there first; fall back to one-at-a-time
            inserted = []
            for record in records:
                try:
                    self.store.insert_matches([record])
                    inserted.append(record)
                except DuplicateMatchError:
                    report.skipped_existing += 1
        report.created += len(inserted)
        report.records.extend(inserted)
        return len(inserted)


def compute_insights(store: RecordStore) -> PlatformInsights:
    """Platform-wide quality and match outcome averages with recommendations."""
    profile_scores = [
        row["validation_score"] for row in store.list_candidates()
        if row.get("validation_score") is not None
    ]
    posting_scores = [
        row["quality_score"] for row in store.list_postings()
        if row.get("quality_score") is not None
    ]
    matches = store.list_matches()

    profile_quality = sum(profile_scores) / len(profile_scores) if profile_scores else 0.0
    posting_quality = sum(posting_scores) / len(posting_scores) if posting_scores else 0.0
    successful = sum(1 for m in matches if m.status in ("interested", "matched"))
    success_rate = successful / len(matches) * 100 if matches else 0.0

    recommendations: list[str] = []
    if profile_quality < 6:
        recommendations.append(
            "Consider running profile validation on more candidates to improve overall quality"
        )
    if posting_quality < 6:
        recommendations.append(
            "Use the job enhancer to improve posting quality and attract better candidates"
        )
    if success_rate < 30:
        recommendations.append(
            "Review matching criteria and consider adjusting the algorithm for better compatibility"
        )
    if profile_quality > 8 and posting_quality > 8 and success_rate > 70:
        recommendations.append("Excellent system performance! Consider expanding the program")
    if not recommendations:
        recommendations.append(
            "System is performing well. Continue monitoring for optimization opportunities"
        )

    return PlatformInsights(
        profile_quality=round(profile_quality, 1),
        posting_quality=round(posting_quality, 1),
        match_success_rate=int(success_rate + 0.5),
        recommendations=recommendations,
    )


def compute_ai_metrics(store: RecordStore) -> ScoringPerformanceMetrics:
    """Usage and reliability of the scoring tiers, from the interaction log."""
    interactions = store.list_interactions()
    if not interactions:
        return ScoringPerformanceMetrics()

    total = len(interactions)
    successful = sum(1 for i in interactions if i.success)
    average_ms = sum(i.processing_time_ms for i in interactions) / total

    tool_usage: dict[str, int] = {}
    tier_usage: dict[str, int] = {}
    for interaction in interactions:
        tool_usage[interaction.tool] = tool_usage.get(interaction.tool, 0) + 1
        tier_usage[interaction.tier] = tier_usage.get(interaction.tier, 0) + 1

    return ScoringPerformanceMetrics(
        total_interactions=total,
        average_processing_time_ms=int(average_ms + 0.5),
        success_rate=int(successful / total * 100 + 0.5),
        tool_usage=tool_usage,
        tier_usage=tier_usage,
    )
