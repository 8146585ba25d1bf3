"""
Factory for building the nutrition analysis orchestrator.

Reads configuration from Settings and returns an orchestrator with the
configured providers in priority order.
"""

import logging

from calorie_tracker_api.core.config import Settings

from .base import FoodAnalysisError, NutritionAnalysisProvider, ProviderId
from .google_provider import GoogleVisionNutritionProvider
from .monitoring import AnalysisObserver
from .openai_provider import OpenAINutritionProvider
from .orchestrator import AnalysisOrchestrator

logger = logging.getLogger(__name__)


def _build_openai(settings: Settings) -> NutritionAnalysisProvider:
    return OpenAINutritionProvider(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.openai_max_tokens,
        timeout=settings.openai_timeout,
        max_retries=settings.openai_max_retries,
    )


def _build_google(settings: Settings) -> NutritionAnalysisProvider:
    return GoogleVisionNutritionProvider(
        api_key=settings.google_api_key,
        endpoint=settings.google_vision_url,
        timeout=settings.google_vision_timeout,
    )


# Supported providers
PROVIDERS = {
    ProviderId.OPENAI: _build_openai,
    ProviderId.GOOGLE: _build_google,
}

CONFIGURED = {
    ProviderId.OPENAI: lambda s: s.is_openai_configured,
    ProviderId.GOOGLE: lambda s: s.is_google_configured,
}


def create_providers(settings: Settings) -> list[NutritionAnalysisProvider]:
    """
    Build provider adapters in the order given by ANALYSIS_PROVIDERS.

    Raises:
        FoodAnalysisError: If a provider name is unknown or repeated
    """
    providers: list[NutritionAnalysisProvider] = []
    seen: set[ProviderId] = set()

    for name in settings.analysis_providers:
        try:
            provider_id = ProviderId(name.lower())
        except ValueError:
            raise FoodAnalysisError(
                message=f"Unknown nutrition analysis provider: {name}",
                error_code="INVALID_PROVIDER",
                provider=name,
                details={"supported_providers": [p.value for p in PROVIDERS]},
            ) from None

        if provider_id in seen:
            raise FoodAnalysisError(
                message=f"Provider {name} listed more than once",
                error_code="INVALID_PROVIDER",
                provider=name,
            )
        seen.add(provider_id)

        if not CONFIGURED[provider_id](settings):
            logger.warning(
                f"Provider {provider_id.value} has no credentials; "
                "its calls will fail until it is configured"
            )
        providers.append(PROVIDERS[provider_id](settings))

    return providers


def create_orchestrator(
    settings: Settings,
    observer: AnalysisObserver | None = None,
) -> AnalysisOrchestrator:
    """
    Build the process-wide analysis orchestrator.

    Args:
        settings: Application settings
        observer: Sink for per-attempt events

    Returns:
        AnalysisOrchestrator with fresh provider counters
    """
    providers = create_providers(settings)
    logger.info(
        "Initializing nutrition analysis providers: "
        f"{[p.provider_id.value for p in providers]} "
        f"(max_failures={settings.analysis_max_failures})"
    )
    return AnalysisOrchestrator(
        providers,
        observer=observer,
        max_failures=settings.analysis_max_failures,
    )
