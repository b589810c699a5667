"""Record store contract and the in-process implementation.

Rows come back as plain dicts; callers parse them into schema models one at
a time so a single malformed row only fails its own unit of work.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Iterable

from models.schemas.interaction import ScoringInteraction
from models.schemas.match_record import MatchKey, MatchRecord, MatchStatus

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for record store failures."""


class StoreUnavailableError(StoreError):
    """The store cannot be reached at all. Fatal for a batch run."""


class RecordNotFoundError(StoreError):
    def __init__(self, table: str, record_id: str) -> None:
        super().__init__(f"{table} record {record_id!r} not found")
        self.table = table
        self.record_id = record_id


class DuplicateMatchError(StoreError):
    """Insert hit the (candidate, organization, posting) uniqueness rule."""

    def __init__(self, keys: list[MatchKey]) -> None:
        super().__init__(f"{len(keys)} match(es) already exist")
        self.keys = keys


class RecordStore(ABC):
    @abstractmethod
    def list_candidates(self, status: str | None = None) -> list[dict]: ...

    @abstractmethod
    def get_candidate(self, candidate_id: str) -> dict: ...

    @abstractmethod
    def update_candidate(self, candidate_id: str, fields: dict) -> None: ...

    @abstractmethod
    def list_organizations(self, status: str | None = None) -> list[dict]: ...

    @abstractmethod
    def get_organization(self, organization_id: str) -> dict: ...

    @abstractmethod
    def list_postings(
        self,
        status: str | None = None,
        organization_id: str | None = None,
    ) -> list[dict]: ...

    @abstractmethod
    def get_posting(self, posting_id: str) -> dict: ...

    @abstractmethod
    def update_posting(self, posting_id: str, fields: dict) -> None: ...

    @abstractmethod
    def list_matches(self) -> list[MatchRecord]: ...

    @abstractmethod
    def find_existing_match_keys(self, keys: Iterable[MatchKey]) -> set[MatchKey]: ...

    @abstractmethod
    def insert_matches(self, records: list[MatchRecord]) -> None:
        """Insert all records or none. Raises ``DuplicateMatchError``."""

    @abstractmethod
    def update_match_status(self, match_id: str, status: MatchStatus) -> MatchRecord: ...

    @abstractmethod
    def insert_interaction(self, interaction: ScoringInteraction) -> None: ...

    @abstractmethod
    def list_interactions(self, tool: str | None = None) -> list[ScoringInteraction]: ...


class InMemoryStore(RecordStore):
    """Dict-backed store. Set ``available = False`` to simulate an outage."""

    def __init__(
        self,
        candidates: Iterable[dict] = (),
        organizations: Iterable[dict] = (),
        postings: Iterable[dict] = (),
        matches: Iterable[MatchRecord] = (),
        interactions: Iterable[ScoringInteraction] = (),
    ) -> None:
        self._tables: dict[str, dict[str, dict]] = {
            "candidates": {row["id"]: dict(row) for row in candidates},
            "organizations": {row["id"]: dict(row) for row in organizations},
            "postings": {row["id"]: dict(row) for row in postings},
        }
        self._matches: dict[str, MatchRecord] = {m.id: m for m in matches}
        self._interactions: list[ScoringInteraction] = list(interactions)
        self.available = True

    def _check(self) -> None:
        if not self.available:
            raise StoreUnavailableError("record store is unavailable")

    def _list(self, table: str, **filters) -> list[dict]:
        self._check()
        rows = self._tables[table].values()
        return [
            copy.deepcopy(row) for row in rows
            if all(v is None or row.get(k) == v for k, v in filters.items())
        ]

    def _get(self, table: str, record_id: str) -> dict:
        self._check()
        row = self._tables[table].get(record_id)
        if row is None:
            raise RecordNotFoundError(table, record_id)
        return copy.deepcopy(row)

    def _update(self, table: str, record_id: str, fields: dict) -> None:
        self._check()
        row = self._tables[table].get(record_id)
        if row is None:
            raise RecordNotFoundError(table, record_id)
        row.update(fields)

    def list_candidates(self, status: str | None = None) -> list[dict]:
        return self._list("candidates", status=status)

    def get_candidate(self, candidate_id: str) -> dict:
        return self._get("candidates", candidate_id)

    def update_candidate(self, candidate_id: str, fields: dict) -> None:
        self._update("candidates", candidate_id, fields)

    def list_organizations(self, status: str | None = None) -> list[dict]:
        return self._list("organizations", status=status)

    def get_organization(self, organization_id: str) -> dict:
        return self._get("organizations", organization_id)

    def list_postings(
        self,
        status: str | None = None,
        organization_id: str | None = None,
    ) -> list[dict]:
        return self._list("postings", status=status, organization_id=organization_id)

    def get_posting(self, posting_id: str) -> dict:
        return self._get("postings", posting_id)

    def update_posting(self, posting_id: str, fields: dict) -> None:
        self._update("postings", posting_id, fields)

    def list_matches(self) -> list[MatchRecord]:
        self._check()
        return list(self._matches.values())

    def find_existing_match_keys(self, keys: Iterable[MatchKey]) -> set[MatchKey]:
        self._check()
        existing = {m.key for m in self._matches.values()}
        return {k for k in keys if k in existing}

    def insert_matches(self, records: list[MatchRecord]) -> None:
        self._check()
        existing = {m.key for m in self._matches.values()}
        duplicates: list[MatchKey] = []
        for record in records:
            if record.key in existing:
                duplicates.append(record.key)
            existing.add(record.key)
        if duplicates:
            raise DuplicateMatchError(duplicates)
        for record in records:
            self._matches[record.id] = record
        logger.debug("Inserted %d match records", len(records))

    def update_match_status(self, match_id: str, status: MatchStatus) -> MatchRecord:
        self._check()
        record = self._matches.get(match_id)
        if record is None:
            raise RecordNotFoundError("matches", match_id)
        updated = record.advance(status)
        self._matches[match_id] = updated
        return updated

    def insert_interaction(self, interaction: ScoringInteraction) -> None:
        self._check()
        self._interactions.append(interaction)

    def list_interactions(self, tool: str | None = None) -> list[ScoringInteraction]:
        self._check()
        return [i for i in self._interactions if tool is None or i.tool == tool]
