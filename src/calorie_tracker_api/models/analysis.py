"""Pydantic models for the nutrition analysis API contract."""

from pydantic import BaseModel, Field, model_validator

from calorie_tracker_api.services.nutrition_analysis import ProviderHealth, ProviderId


class AnalyzeImageRequest(BaseModel):
    """Request to analyze one meal photo. Exactly one source is required."""

    image_base64: str | None = Field(
        None, min_length=1, description="Base64-encoded image"
    )
    image_url: str | None = Field(
        None, min_length=1, description="URL to download the image from"
    )

    @model_validator(mode="after")
    def check_single_source(self) -> "AnalyzeImageRequest":
        if (self.image_base64 is None) == (self.image_url is None):
            raise ValueError("Provide exactly one of image_base64 or image_url")
        return self


class ProviderStatusResponse(BaseModel):
    """Health of one vision provider."""

    provider: ProviderId
    failure_count: int
    health: ProviderHealth


class RecentError(BaseModel):
    provider: str
    error_type: str
    message: str
    timestamp: str


class ProvidersResponse(BaseModel):
    """Provider health plus error statistics since startup."""

    max_failures: int
    providers: list[ProviderStatusResponse]
    total_errors: int
    errors_by_provider: dict[str, int]
    successes_by_provider: dict[str, int]
    recent_errors: list[RecentError]
