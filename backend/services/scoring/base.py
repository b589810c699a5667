"""Tiered scoring services: a remote-model tier with a rule-based fallback.

Every scorer in the engine is one of two interchangeable implementations of
``BaseScoringService``. A ``FallbackChain`` tries them in order and returns
the first result, so rule-based scoring stays testable on its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable
import logging
import time

from models.schemas.interaction import ScoringInteraction

logger = logging.getLogger(__name__)

TIER_REMOTE = "remote"
TIER_RULE_BASED = "rule_based"


class RemoteModelError(Exception):
    """Remote tier failed: no client, bad status, or malformed/out-of-range payload."""


class BaseScoringService(ABC):
    """Base class for one tier of a scoring operation.

    Subclasses must implement:
        - predict(**kwargs): produce a result or raise
    and may override is_available() when the tier depends on credentials.
    """

    service_name: str = ""
    tier: str = TIER_RULE_BASED

    def is_available(self) -> bool:
        return True

    @abstractmethod
    def predict(self, **kwargs: Any) -> Any:
        """Run the scoring step. Raise on failure so the chain can fall back."""


class RemoteScoringService(BaseScoringService):
    """Base for Gemini-backed tiers.

    ``generate`` defaults to the shared Gemini client; tests inject a fake.
    """

    tier = TIER_REMOTE

    def __init__(self, generate: Callable[[str], Any] | None = None) -> None:
        self._generate = generate

    def is_available(self) -> bool:
        if self._generate is not None:
            return True
        from services import gemini_client
        return gemini_client.is_configured()

    def _call(self, prompt: str) -> Any:
        generate = self._generate or self._default_generate()
        result = generate(prompt)
        if result is None:
            raise RemoteModelError(f"{self.service_name}: no response from remote model")
        return result

    def _default_generate(self) -> Callable[[str], Any]:
        from services import gemini_client
        return gemini_client.generate_text


class RemoteJsonScoringService(RemoteScoringService):
    """Remote tier whose response must be a JSON object."""

    def _default_generate(self) -> Callable[[str], Any]:
        from services import gemini_client
        return gemini_client.generate_json

    def _call(self, prompt: str) -> dict:
        result = super()._call(prompt)
        if not isinstance(result, dict):
            raise RemoteModelError(f"{self.service_name}: response is not a JSON object")
        return result


@dataclass(frozen=True)
class TierOutcome:
    value: Any
    tier: str


InteractionRecorder = Callable[[ScoringInteraction], None]


class FallbackChain:
    """Run services in order; the first available one that succeeds wins.

    Every attempted service is reported to ``recorder`` (if given) with its
    elapsed time and whether it produced a result. Skipped services are not.
    """

    def __init__(
        self,
        name: str,
        *services: BaseScoringService,
        recorder: InteractionRecorder | None = None,
    ) -> None:
        if not services:
            raise ValueError("FallbackChain needs at least one service")
        self.name = name
        self.services = services
        self.recorder = recorder

    def predict(self, entity_id: str | None = None, **kwargs: Any) -> TierOutcome:
        last_error: Exception | None = None
        for service in self.services:
            if not service.is_available():
                logger.debug("%s: %s unavailable, skipping", self.name, service.service_name)
                continue
            start = time.perf_counter()
            try:
                value = service.predict(**kwargs)
            except Exception as e:
                last_error = e
                self._record(service, entity_id, start, error=e)
                logger.warning(
                    "%s: %s failed, falling back: %s", self.name, service.service_name, e
                )
                continue
            self._record(service, entity_id, start)
            return TierOutcome(value, service.tier)
        raise RuntimeError(f"{self.name}: no scoring tier produced a result") from last_error

    def _record(
        self,
        service: BaseScoringService,
        entity_id: str | None,
        start: float,
        error: Exception | None = None,
    ) -> None:
        if self.recorder is None:
            return
        interaction = ScoringInteraction(
            tool=self.name,
            service=service.service_name,
            tier=service.tier,
            entity_id=entity_id,
            processing_time_ms=int((time.perf_counter() - start) * 1000),
            success=error is None,
            error=str(error) if error is not None else None,
        )
        # Losing a log entry must never lose the score
        try:
            self.recorder(interaction)
        except Exception as e:
            logger.error("%s: could not record interaction: %s", self.name, e)
