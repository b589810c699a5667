from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_scoring_config, get_store
from config import settings
from models.requests import (
    DocumentValidateRequest,
    EligibilityCheckRequest,
    MatchBatchRequest,
    MatchScoreRequest,
    PostingQualityRequest,
)
from models.responses import InsightsResponse, MatchScoreResponse, PostingQualityResponse
from models.schemas.batch import MatchRunReport
from models.schemas.document_validation import (
    DeclaredProfileFields,
    DocumentAnalysis,
    DocumentValidationResult,
)
from models.schemas.eligibility_result import EligibilityResult
from services import gemini_client, pdf_parser
from services.document_analyzer import DocumentAnalyzer
from services.document_validator import DocumentCrossValidator
from services.eligibility import EligibilityEngine
from services.job_quality import JobQualityScorer
from services.match_scoring import MatchScoringEngine
from services.orchestrator import BulkOrchestrator, compute_ai_metrics, compute_insights
from services.scoring_config import ScoringConfig
from services.store import RecordStore

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

DOCUMENT_TYPES = ("cv", "academic_records")


@router.get("/health")
def health():
    return {
        "status": "ok",
        "gemini_configured": gemini_client.is_configured(),
    }


@router.post("/eligibility/check", response_model=EligibilityResult)
@limiter.limit("30/minute")
def check_eligibility(
    request: Request,
    body: EligibilityCheckRequest,
    config: ScoringConfig = Depends(get_scoring_config),
):
    return EligibilityEngine(config).check_eligibility(
        body.graduation_year, body.institution, body.as_of
    )


@router.post("/documents/validate", response_model=DocumentValidationResult)
@limiter.limit("30/minute")
def validate_document(
    request: Request,
    body: DocumentValidateRequest,
    config: ScoringConfig = Depends(get_scoring_config),
):
    return DocumentCrossValidator(config).validate(body.extracted, body.declared)


@router.post("/documents/analyze", response_model=DocumentAnalysis)
@limiter.limit("10/minute")
def analyze_document(
    request: Request,
    document: UploadFile = File(...),
    name: str = Form(...),
    institution: str = Form(""),
    degree: str = Form(""),
    graduation_year: int | None = Form(None),
    document_type: str = Form("cv"),
    config: ScoringConfig = Depends(get_scoring_config),
    store: RecordStore = Depends(get_store),
):
    if document_type not in DOCUMENT_TYPES:
        raise HTTPException(status_code=400, detail=f"document_type must be one of {DOCUMENT_TYPES}")

    # Validate file type
    if not document.filename or not document.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF files are accepted")

    # Read and validate size
    content = document.file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    declared = DeclaredProfileFields(
        name=name, institution=institution, degree=degree, graduation_year=graduation_year
    )
    # Unreadable PDFs become an unverifiable analysis rather than an error
    text = pdf_parser.try_extract_text(content)
    analyzer = DocumentAnalyzer(config, recorder=store.insert_interaction)
    return analyzer.analyze(text, declared, document_type)


@router.post("/matches/score", response_model=MatchScoreResponse)
@limiter.limit("30/minute")
def score_match(
    request: Request,
    body: MatchScoreRequest,
    config: ScoringConfig = Depends(get_scoring_config),
    store: RecordStore = Depends(get_store),
):
    engine = MatchScoringEngine(config, recorder=store.insert_interaction)
    args = (body.candidate, body.organization, body.posting)
    if body.rule_based_only:
        result = engine.score_rule_based(*args, as_of=body.as_of)
    else:
        result = engine.score(*args, as_of=body.as_of)

    notes = None
    if body.include_notes:
        notes = engine.explain(*args, score=result.score, as_of=body.as_of)
    return MatchScoreResponse(
        score=result.score, method=result.method, breakdown=result.breakdown, notes=notes
    )


@router.post("/postings/quality", response_model=PostingQualityResponse)
@limiter.limit("10/minute")
def posting_quality(
    request: Request,
    body: PostingQualityRequest,
    config: ScoringConfig = Depends(get_scoring_config),
    store: RecordStore = Depends(get_store),
):
    scorer = JobQualityScorer(config, recorder=store.insert_interaction)
    assessment = scorer.assess(body.posting)
    if not body.enhance:
        return PostingQualityResponse(assessment=assessment)

    text, method = scorer.enhance(body.posting, assessment)
    return PostingQualityResponse(
        assessment=assessment, enhanced_description=text, enhancement_method=method
    )


@router.post("/batches/matches", response_model=MatchRunReport)
@limiter.limit("2/minute")
def run_match_batch(
    request: Request,
    body: MatchBatchRequest,
    store: RecordStore = Depends(get_store),
    config: ScoringConfig = Depends(get_scoring_config),
):
    orchestrator = BulkOrchestrator(store, config)
    if body.mode == "advanced":
        return orchestrator.generate_advanced_matches(body.as_of)
    return orchestrator.generate_matches(body.as_of)


@router.get("/insights", response_model=InsightsResponse)
@limiter.limit("30/minute")
def insights(request: Request, store: RecordStore = Depends(get_store)):
    return InsightsResponse(platform=compute_insights(store), scoring=compute_ai_metrics(store))
