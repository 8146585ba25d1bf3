"""Pytest configuration and fixtures."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from calorie_tracker_api.main import create_app
from calorie_tracker_api.services.nutrition_analysis import (
    AnalysisMonitor,
    AnalysisOrchestrator,
    FoodItem,
    NutritionAnalysis,
    NutritionAnalysisProvider,
    ProviderId,
)


class FakeProvider(NutritionAnalysisProvider):
    """Provider whose analyze() is an AsyncMock for call assertions."""

    def __init__(self, provider_id: ProviderId):
        self._provider_id = provider_id
        self.analyze = AsyncMock()
        self.aclose = AsyncMock()

    @property
    def provider_id(self) -> ProviderId:
        return self._provider_id

    async def analyze(self, image_data: str) -> NutritionAnalysis:  # replaced per instance
        raise NotImplementedError


@pytest.fixture
def apple_analysis() -> NutritionAnalysis:
    """Single-item analysis of an apple."""
    return NutritionAnalysis(
        food_items=[
            FoodItem(
                name="Apple",
                quantity="1 medium",
                calories=95,
                protein_g=0.5,
                carbs_g=25,
                fat_g=0.3,
                fiber_g=4,
            )
        ],
        total_calories=95,
        total_protein=0.5,
        total_carbs=25,
        total_fat=0.3,
        total_fiber=4,
        confidence_score=0.9,
        analysis_notes="Clear image of a red apple",
    )


@pytest.fixture
def banana_analysis(apple_analysis: NutritionAnalysis) -> NutritionAnalysis:
    """Lower-confidence analysis as returned by the fallback provider."""
    return apple_analysis.model_copy(
        update={
            "food_items": [FoodItem(name="Banana", quantity="1 large", calories=105)],
            "total_calories": 105,
            "confidence_score": 0.6,
        }
    )


@pytest.fixture
def openai_provider() -> FakeProvider:
    return FakeProvider(ProviderId.OPENAI)


@pytest.fixture
def google_provider() -> FakeProvider:
    return FakeProvider(ProviderId.GOOGLE)


@pytest.fixture
def monitor() -> AnalysisMonitor:
    return AnalysisMonitor()


@pytest.fixture
def orchestrator(
    openai_provider: FakeProvider,
    google_provider: FakeProvider,
    monitor: AnalysisMonitor,
) -> AnalysisOrchestrator:
    """Orchestrator over [openai, google] with fresh counters."""
    return AnalysisOrchestrator(
        [openai_provider, google_provider],
        observer=monitor,
    )


@pytest.fixture
async def client(
    orchestrator: AnalysisOrchestrator,
    monitor: AnalysisMonitor,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async test client wired to the fake-provider orchestrator.

    Usage:
        async def test_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    app = create_app()
    app.state.orchestrator = orchestrator
    app.state.monitor = monitor

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
