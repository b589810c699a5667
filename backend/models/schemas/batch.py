"""Bulk run reporting."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from models.schemas.eligibility_result import EligibilityResult, EligibilityStats
from models.schemas.match_record import MatchRecord


class BatchStatus(str, Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"


class BatchItemResult(BaseModel):
    id: str
    success: bool
    score: float | None = None
    method: str = ""  # remote, rule_based, failed, ...
    error: str | None = None


class BatchReport(BaseModel):
    name: str
    status: BatchStatus = BatchStatus.INITIALIZED
    total: int = 0
    completed: int = 0
    succeeded: int = 0
    failed: int = 0
    results: list[BatchItemResult] = []
    started_at: datetime | None = None
    finished_at: datetime | None = None


class MatchRunReport(BatchReport):
    threshold: int = 0
    candidates_considered: int = 0
    pairs_scored: int = 0
    created: int = 0
    skipped_existing: int = 0
    records: list[MatchRecord] = []


class EligibilityRunReport(BatchReport):
    eligibility: dict[str, EligibilityResult] = {}
    stats: EligibilityStats = EligibilityStats()


class PlatformInsights(BaseModel):
    profile_quality: float = 0.0  # mean validation score, 0-10
    posting_quality: float = 0.0  # mean posting quality score, 0-10
    match_success_rate: int = 0  # % of matches interested or matched
    recommendations: list[str] = []
