"""Pydantic models for API schemas."""

from .analysis import (
    AnalyzeImageRequest,
    ProviderStatusResponse,
    ProvidersResponse,
    RecentError,
)

__all__ = [
    "AnalyzeImageRequest",
    "ProviderStatusResponse",
    "ProvidersResponse",
    "RecentError",
]
