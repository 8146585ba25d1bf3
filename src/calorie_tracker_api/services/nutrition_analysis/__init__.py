"""
Nutrition Analysis Service - ordered vision providers with fallback.

Tries each configured provider in priority order and stops calling a
provider after repeated consecutive failures.
"""

from .base import (
    AllProvidersExhaustedError,
    FoodAnalysisError,
    FoodItem,
    NutritionAnalysis,
    NutritionAnalysisProvider,
    ProviderError,
    ProviderId,
)
from .factory import create_orchestrator, create_providers
from .google_provider import GoogleVisionNutritionProvider
from .monitoring import AnalysisEvent, AnalysisEventType, AnalysisMonitor, AnalysisObserver
from .openai_provider import OpenAINutritionProvider
from .orchestrator import (
    MAX_FAILURES,
    AnalysisOrchestrator,
    ProviderHealth,
    ProviderStatus,
)

__all__ = [
    "AllProvidersExhaustedError",
    "AnalysisEvent",
    "AnalysisEventType",
    "AnalysisMonitor",
    "AnalysisObserver",
    "AnalysisOrchestrator",
    "FoodAnalysisError",
    "FoodItem",
    "GoogleVisionNutritionProvider",
    "MAX_FAILURES",
    "NutritionAnalysis",
    "NutritionAnalysisProvider",
    "OpenAINutritionProvider",
    "ProviderError",
    "ProviderHealth",
    "ProviderId",
    "ProviderStatus",
    "create_orchestrator",
    "create_providers",
]
