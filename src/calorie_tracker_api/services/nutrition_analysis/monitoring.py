"""
Observability sink for nutrition analysis attempts.

The orchestrator reports one event per provider attempt. AnalysisMonitor
logs each event and keeps in-process error statistics that the API
exposes alongside provider health.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class AnalysisEventType(str, Enum):
    """Outcome of a single provider attempt."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class AnalysisEvent:
    """Structured observation of one provider attempt."""

    event: AnalysisEventType
    provider: str
    metrics: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class AnalysisObserver(Protocol):
    """Sink for analysis events. Must not block."""

    def record(self, event: AnalysisEvent) -> None: ...


class AnalysisMonitor:
    """
    Logging observer with rolling error statistics.

    Stats live in memory for the life of the process, like the
    orchestrator's provider counters.
    """

    def __init__(self, max_recent_errors: int = 50):
        self._errors_by_provider: Counter[str] = Counter()
        self._recent_errors: deque[dict[str, Any]] = deque(maxlen=max_recent_errors)
        self._successes_by_provider: Counter[str] = Counter()

    def record(self, event: AnalysisEvent) -> None:
        """Log an analysis event and update statistics."""
        if event.event == AnalysisEventType.SUCCESS:
            self._successes_by_provider[event.provider] += 1
            logger.info(
                f"Nutrition analysis successful ({event.provider})",
                extra={"provider": event.provider, **event.metrics},
            )
            return

        self._errors_by_provider[event.provider] += 1
        self._recent_errors.append(
            {
                "provider": event.provider,
                "error_type": event.metrics.get("error_type", "unknown"),
                "message": event.metrics.get("error", ""),
                "timestamp": event.timestamp.isoformat(),
            }
        )
        logger.error(
            f"Nutrition analysis failed ({event.provider}): "
            f"{event.metrics.get('error', '')}",
            extra={"provider": event.provider, **event.metrics},
        )

    def get_error_stats(self) -> dict[str, Any]:
        """
        Get error statistics collected since startup.

        Returns:
            Dict with total_errors, errors_by_provider, successes_by_provider
            and recent_errors (newest last)
        """
        return {
            "total_errors": sum(self._errors_by_provider.values()),
            "errors_by_provider": dict(self._errors_by_provider),
            "successes_by_provider": dict(self._successes_by_provider),
            "recent_errors": list(self._recent_errors),
        }
