"""Persisted candidate/organization/posting match and its status lifecycle."""

import uuid
from datetime import datetime, timezone
from typing import Literal, NamedTuple

from pydantic import BaseModel, Field

MatchStatus = Literal["suggested", "viewed", "interested", "not_interested", "matched"]

# Forward-only lifecycle: suggested -> viewed -> {interested | not_interested} -> matched
MATCH_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "suggested": frozenset({"viewed"}),
    "viewed": frozenset({"interested", "not_interested"}),
    "interested": frozenset({"matched"}),
    "not_interested": frozenset({"matched"}),
    "matched": frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    return new in MATCH_STATUS_TRANSITIONS.get(current, frozenset())


class MatchKey(NamedTuple):
    candidate_id: str
    organization_id: str
    posting_id: str


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MatchRecord(BaseModel):
    """At most one record may exist per (candidate, organization, posting)."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    candidate_id: str
    organization_id: str
    posting_id: str
    score: int = Field(ge=0, le=100)
    status: MatchStatus = "suggested"
    notes: str = ""
    created_at: datetime = Field(default_factory=_now)

    @property
    def key(self) -> MatchKey:
        return MatchKey(self.candidate_id, self.organization_id, self.posting_id)

    def advance(self, new_status: MatchStatus) -> "MatchRecord":
        """Return a copy moved forward to ``new_status``."""
        if not can_transition(self.status, new_status):
            raise ValueError(f"Cannot move match from {self.status!r} to {new_status!r}")
        return self.model_copy(update={"status": new_status})
