"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.scoring_config import ScoringConfig
from services.store import InMemoryStore, RecordStore

_store: RecordStore | None = None


@lru_cache
def get_scoring_config() -> ScoringConfig:
    return ScoringConfig.from_settings(settings)


def get_store() -> RecordStore:
    global _store
    if _store is None:
        _store = InMemoryStore()
    return _store
