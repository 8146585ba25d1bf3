"""
Multi-provider nutrition analysis with failure-count based skipping.

Providers are tried strictly in priority order. A provider that fails
MAX_FAILURES times in a row is skipped on every later call. Nothing
re-enables a skipped provider while the process runs: there is no
cool-down and no reset operation.

Counters are shared by every concurrent analyze() call on the same
instance and are updated without a lock. They are an approximate health
signal, so interleaved updates from concurrent calls are accepted.

The orchestrator adds no timeout of its own. If a provider call never
returns, neither does analyze(); each provider must bound its own calls.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .base import (
    AllProvidersExhaustedError,
    NutritionAnalysis,
    NutritionAnalysisProvider,
    ProviderId,
)
from .monitoring import AnalysisEvent, AnalysisEventType, AnalysisObserver

logger = logging.getLogger(__name__)


MAX_FAILURES = 3


class ProviderHealth(str, Enum):
    """Health derived from a provider's consecutive failure count."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    DISABLED = "disabled"


@dataclass
class ProviderState:
    """Mutable per-provider failure counter."""

    failure_count: int = 0


@dataclass(frozen=True)
class ProviderStatus:
    """Point-in-time view of one provider's state."""

    provider: ProviderId
    failure_count: int
    health: ProviderHealth


class AnalysisOrchestrator:
    """
    Select and sequence vision providers for one image.

    Construct one instance per process and share it with every caller.

    Usage:
        orchestrator = AnalysisOrchestrator([openai, google], observer=monitor)
        analysis = await orchestrator.analyze(image_b64)
    """

    def __init__(
        self,
        providers: Sequence[NutritionAnalysisProvider],
        *,
        observer: AnalysisObserver | None = None,
        max_failures: int = MAX_FAILURES,
    ):
        """
        Initialize the orchestrator.

        Args:
            providers: Providers in priority order (first is tried first)
            observer: Optional sink for per-attempt events
            max_failures: Consecutive failures after which a provider is skipped

        Raises:
            ValueError: If no providers are given, ids repeat, or
                max_failures is not positive
        """
        if not providers:
            raise ValueError("At least one provider is required")
        ids = [p.provider_id for p in providers]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate provider ids: {[i.value for i in ids]}")
        if max_failures < 1:
            raise ValueError("max_failures must be at least 1")

        self._providers = tuple(providers)
        self._observer = observer
        self._max_failures = max_failures
        self._states: dict[ProviderId, ProviderState] = {
            provider_id: ProviderState() for provider_id in ids
        }

    @property
    def providers(self) -> tuple[NutritionAnalysisProvider, ...]:
        return self._providers

    @property
    def max_failures(self) -> int:
        return self._max_failures

    async def analyze(self, image_data: str) -> NutritionAnalysis:
        """
        Analyze an image with the first provider that succeeds.

        Args:
            image_data: Base64-encoded image, forwarded unchanged

        Returns:
            The successful provider's NutritionAnalysis

        Raises:
            AllProvidersExhaustedError: If every provider was skipped or failed
        """
        attempted: list[str] = []
        skipped: list[str] = []

        for provider in self._providers:
            provider_id = provider.provider_id
            state = self._states[provider_id]

            if self._should_skip(state):
                skipped.append(provider_id.value)
                continue

            attempted.append(provider_id.value)
            try:
                analysis = await provider.analyze(image_data)
            except Exception as e:
                state.failure_count += 1
                self._emit(
                    AnalysisEvent(
                        event=AnalysisEventType.FAILURE,
                        provider=provider_id.value,
                        metrics={
                            "error": str(e),
                            "error_type": type(e).__name__,
                            "failure_count": state.failure_count,
                        },
                    )
                )
                continue

            state.failure_count = 0
            self._emit(
                AnalysisEvent(
                    event=AnalysisEventType.SUCCESS,
                    provider=provider_id.value,
                    metrics={
                        "total_calories": analysis.total_calories,
                        "confidence_score": analysis.confidence_score,
                    },
                )
            )
            return analysis

        logger.warning(
            f"No provider could analyze the image "
            f"(attempted={attempted}, skipped={skipped})"
        )
        raise AllProvidersExhaustedError(attempted=attempted, skipped=skipped)

    def failure_count(self, provider_id: ProviderId) -> int:
        """Current consecutive failure count for a provider."""
        return self._states[provider_id].failure_count

    def provider_states(self) -> list[ProviderStatus]:
        """Snapshot of every provider's counter, in priority order."""
        return [
            ProviderStatus(
                provider=p.provider_id,
                failure_count=self._states[p.provider_id].failure_count,
                health=self._health(self._states[p.provider_id]),
            )
            for p in self._providers
        ]

    def _should_skip(self, state: ProviderState) -> bool:
        return state.failure_count >= self._max_failures

    def _health(self, state: ProviderState) -> ProviderHealth:
        if state.failure_count == 0:
            return ProviderHealth.HEALTHY
        if self._should_skip(state):
            return ProviderHealth.DISABLED
        return ProviderHealth.DEGRADED

    def _emit(self, event: AnalysisEvent) -> None:
        # Observer failures must never affect the analysis outcome.
        if self._observer is None:
            return
        try:
            self._observer.record(event)
        except Exception:
            logger.exception(f"Analysis observer failed for {event.provider}")
