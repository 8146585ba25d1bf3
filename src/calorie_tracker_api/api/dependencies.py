"""FastAPI dependency injection factories."""

from typing import Annotated

from fastapi import Depends, Request

from calorie_tracker_api.core.config import Settings, get_settings
from calorie_tracker_api.services.nutrition_analysis import (
    AnalysisMonitor,
    AnalysisOrchestrator,
)


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    """
    Get the shared analysis orchestrator.

    The instance is built once in the app lifespan so that provider
    failure counters are shared by every request in the process.
    """
    return request.app.state.orchestrator


def get_monitor(request: Request) -> AnalysisMonitor:
    """Get the shared analysis monitor."""
    return request.app.state.monitor


OrchestratorDep = Annotated[AnalysisOrchestrator, Depends(get_orchestrator)]
MonitorDep = Annotated[AnalysisMonitor, Depends(get_monitor)]
