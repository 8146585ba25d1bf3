"""
Google Cloud Vision provider for nutrition analysis.

Uses the Vision REST API's object localization to find food objects, then
assigns each one a default per-portion estimate. This is a coarse fallback:
Vision only names objects, so results carry a lower confidence score and a
note asking for manual verification.
"""

import logging

import httpx

from .base import (
    FoodItem,
    NutritionAnalysis,
    NutritionAnalysisProvider,
    ProviderError,
    ProviderId,
)

logger = logging.getLogger(__name__)


FOOD_KEYWORDS = ("food", "fruit", "vegetable")

# Per-object estimate used for every detected food object
DEFAULT_PORTION = {
    "quantity": "Medium portion",
    "calories": 200,
    "protein_g": 10,
    "carbs_g": 25,
    "fat_g": 8,
    "fiber_g": 3,
}
DEFAULT_CONFIDENCE = 0.6
ANALYSIS_NOTES = "Analysis based on object detection. Manual verification recommended."


class GoogleVisionNutritionProvider(NutritionAnalysisProvider):
    """
    Nutrition analysis from Google Cloud Vision object localization.
    """

    def __init__(
        self,
        api_key: str,
        *,
        endpoint: str = "https://vision.googleapis.com/v1/images:annotate",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize Google Vision provider.

        Args:
            api_key: Google Cloud API key with Vision enabled; without one
                every call fails
            endpoint: images:annotate endpoint URL
            timeout: Request timeout in seconds
            client: Optional pre-built HTTP client
        """
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.GOOGLE

    async def analyze(self, image_data: str) -> NutritionAnalysis:
        """
        Detect food objects in a base64 image and estimate their nutrition.
        """
        if not self.api_key:
            raise ProviderError(
                message=(
                    "Google API key not configured. "
                    "Set GOOGLE_API_KEY in your .env file."
                ),
                provider=self.provider_id.value,
                error_code="NOT_CONFIGURED",
            )

        request_body = {
            "requests": [
                {
                    "image": {"content": image_data},
                    "features": [{"type": "OBJECT_LOCALIZATION"}],
                }
            ]
        }

        try:
            response = await self._client.post(
                self.endpoint,
                params={"key": self.api_key},
                json=request_body,
            )
        except httpx.RequestError as e:
            raise ProviderError(
                message=f"Failed to connect to Google Vision: {e}",
                provider=self.provider_id.value,
                error_code="CONNECTION_ERROR",
            ) from e

        if response.status_code != 200:
            raise ProviderError(
                message=f"Google Vision API error: {response.status_code}",
                provider=self.provider_id.value,
                details={"status_code": response.status_code, "body": response.text},
            )

        try:
            result = response.json()["responses"][0]
        except (ValueError, KeyError, IndexError) as e:
            raise ProviderError(
                message="Malformed Google Vision response",
                provider=self.provider_id.value,
                error_code="PARSE_ERROR",
            ) from e

        if "error" in result:
            raise ProviderError(
                message=f"Google Vision error: {result['error'].get('message', '')}",
                provider=self.provider_id.value,
                details=result["error"],
            )

        objects = result.get("localizedObjectAnnotations", [])
        food_names = [
            obj.get("name") or "Unknown food"
            for obj in objects
            if is_food_object(obj.get("name"))
        ]
        analysis = build_default_analysis(food_names)

        logger.info(
            f"Google Vision analysis completed: {len(objects)} objects, "
            f"{len(food_names)} food objects, {analysis.total_calories} kcal"
        )
        return analysis

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def is_food_object(name: str | None) -> bool:
    """Whether a Vision object label looks like food."""
    if not name:
        return False
    lowered = name.lower()
    return any(keyword in lowered for keyword in FOOD_KEYWORDS)


def build_default_analysis(food_names: list[str]) -> NutritionAnalysis:
    """Build an analysis assigning the default portion to each food object."""
    items = [FoodItem(name=name, **DEFAULT_PORTION) for name in food_names]
    return NutritionAnalysis(
        food_items=items,
        confidence_score=DEFAULT_CONFIDENCE,
        analysis_notes=ANALYSIS_NOTES,
    ).recompute_totals()
