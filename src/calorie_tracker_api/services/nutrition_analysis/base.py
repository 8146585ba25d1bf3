"""
Base classes and models for nutrition image analysis.

Defines the abstract interface that all vision providers must implement,
the shared NutritionAnalysis result contract, and the error types raised
by providers and the orchestrator.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProviderId(str, Enum):
    """Identifier of a vision analysis backend."""

    OPENAI = "openai"
    GOOGLE = "google"


class FoodItem(BaseModel):
    """A single food item detected in the image."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Human-readable food name")
    quantity: str = Field("", description="Estimated portion size")
    calories: float = Field(0, ge=0)
    protein_g: float = Field(0, ge=0)
    carbs_g: float = Field(0, ge=0)
    fat_g: float = Field(0, ge=0)
    fiber_g: float = Field(0, ge=0)


class NutritionAnalysis(BaseModel):
    """
    Structured nutrition estimate for one image.

    Serialized with camelCase keys (``foodItems``, ``totalCalories``, ...),
    which is also the JSON shape the vision prompt asks for.
    Totals are provider-computed and not checked against the items.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    food_items: list[FoodItem] = Field(default_factory=list, alias="foodItems")
    total_calories: float = Field(0, ge=0, alias="totalCalories")
    total_protein: float = Field(0, ge=0, alias="totalProtein")
    total_carbs: float = Field(0, ge=0, alias="totalCarbs")
    total_fat: float = Field(0, ge=0, alias="totalFat")
    total_fiber: float = Field(0, ge=0, alias="totalFiber")
    confidence_score: float = Field(
        ..., ge=0.0, le=1.0, alias="confidenceScore"
    )
    analysis_notes: str = Field("", alias="analysisNotes")

    def recompute_totals(self) -> "NutritionAnalysis":
        """Return a copy whose totals are the sums of the item fields."""
        return self.model_copy(
            update={
                "total_calories": sum(i.calories for i in self.food_items),
                "total_protein": sum(i.protein_g for i in self.food_items),
                "total_carbs": sum(i.carbs_g for i in self.food_items),
                "total_fat": sum(i.fat_g for i in self.food_items),
                "total_fiber": sum(i.fiber_g for i in self.food_items),
            }
        )


class FoodAnalysisError(Exception):
    """Error during nutrition image analysis."""

    def __init__(
        self,
        message: str,
        error_code: str = "ANALYSIS_ERROR",
        provider: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.provider = provider
        self.details = details or {}


class ProviderError(FoodAnalysisError):
    """A single provider call failed. Recovered by the orchestrator."""

    def __init__(
        self,
        message: str,
        provider: str,
        error_code: str = "PROVIDER_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            error_code=error_code,
            provider=provider,
            details=details,
        )


class AllProvidersExhaustedError(FoodAnalysisError):
    """Every configured provider was skipped or failed for this image."""

    def __init__(
        self,
        attempted: list[str],
        skipped: list[str],
    ):
        super().__init__(
            "All AI providers failed to analyze the image",
            error_code="ALL_PROVIDERS_EXHAUSTED",
            provider="all",
            details={"attempted": attempted, "skipped": skipped},
        )
        self.attempted = attempted
        self.skipped = skipped


class NutritionAnalysisProvider(ABC):
    """
    Abstract base class for vision nutrition providers.

    All providers (OpenAI, Google Cloud Vision, ...) must implement this
    interface. Implementations carry their own request timeout.
    """

    @property
    @abstractmethod
    def provider_id(self) -> ProviderId:
        """Return the identifier of this provider."""
        ...

    @abstractmethod
    async def analyze(self, image_data: str) -> NutritionAnalysis:
        """
        Estimate the nutrition content of a food photo.

        Args:
            image_data: Base64-encoded image (JPEG, PNG, WebP, ...)

        Returns:
            NutritionAnalysis for the image

        Raises:
            ProviderError: If the provider call or response parsing fails
        """
        ...

    async def aclose(self) -> None:
        """Release any network resources held by the provider."""
        return None
