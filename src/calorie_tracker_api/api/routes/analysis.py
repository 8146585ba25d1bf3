"""Nutrition analysis API routes.

Endpoints for analyzing meal photos and inspecting vision provider health.
"""

import logging

from fastapi import APIRouter, File, UploadFile

from calorie_tracker_api.api.dependencies import (
    MonitorDep,
    OrchestratorDep,
    SettingsDep,
)
from calorie_tracker_api.core.exceptions import AnalysisUnavailableError
from calorie_tracker_api.models.analysis import (
    AnalyzeImageRequest,
    ProviderStatusResponse,
    ProvidersResponse,
)
from calorie_tracker_api.services.image_source import (
    download_image,
    encode_image,
    validate_image,
)
from calorie_tracker_api.services.nutrition_analysis import (
    AllProvidersExhaustedError,
    AnalysisOrchestrator,
    NutritionAnalysis,
)

router = APIRouter()
logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "We had trouble analyzing your food image. Please try again."


async def _run_analysis(
    orchestrator: AnalysisOrchestrator, image_data: str
) -> NutritionAnalysis:
    try:
        return await orchestrator.analyze(image_data)
    except AllProvidersExhaustedError as e:
        raise AnalysisUnavailableError(ANALYSIS_FAILED_MESSAGE, details=e.details) from e


@router.post("", response_model=NutritionAnalysis, response_model_by_alias=True)
async def analyze_image(
    body: AnalyzeImageRequest,
    orchestrator: OrchestratorDep,
    settings: SettingsDep,
):
    """
    Analyze a meal photo given as base64 data or as a URL.

    URLs must point at a host in IMAGE_URL_ALLOWED_HOSTS.
    Returns the nutrition estimate from the first vision provider that
    succeeds. Responds 502 when every provider failed or is disabled.
    """
    if body.image_url is not None:
        image_data = await download_image(
            body.image_url,
            allowed_hosts=settings.image_url_allowed_hosts,
            timeout=settings.image_download_timeout,
            max_size=settings.max_image_size_bytes,
        )
    else:
        image_data = body.image_base64

    return await _run_analysis(orchestrator, image_data)


@router.post("/upload", response_model=NutritionAnalysis, response_model_by_alias=True)
async def analyze_upload(
    orchestrator: OrchestratorDep,
    settings: SettingsDep,
    image: UploadFile = File(..., description="Meal photo (JPEG, PNG, WebP, HEIC)"),
):
    """
    Analyze an uploaded meal photo.

    The file must be an image no larger than MAX_IMAGE_SIZE_BYTES.
    """
    content = await image.read()
    validate_image(content, image.content_type, settings.max_image_size_bytes)

    logger.info(f"Analyzing uploaded image {image.filename} ({len(content)} bytes)")
    return await _run_analysis(orchestrator, encode_image(content))


@router.get("/providers", response_model=ProvidersResponse)
async def get_provider_status(
    orchestrator: OrchestratorDep,
    monitor: MonitorDep,
):
    """
    Get vision provider health and error statistics.

    - **healthy**: no consecutive failures
    - **degraded**: some consecutive failures, still called
    - **disabled**: reached max_failures, skipped until restart
    """
    stats = monitor.get_error_stats()
    return ProvidersResponse(
        max_failures=orchestrator.max_failures,
        providers=[
            ProviderStatusResponse(
                provider=status.provider,
                failure_count=status.failure_count,
                health=status.health,
            )
            for status in orchestrator.provider_states()
        ],
        **stats,
    )
