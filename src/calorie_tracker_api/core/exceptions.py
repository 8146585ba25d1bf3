"""Custom exception classes for the API."""

from typing import Any


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int = 400, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ImageSourceError(APIError):
    """The image could not be obtained (bad upload or failed download)."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message=message, status_code=400, details=details)


class AnalysisUnavailableError(APIError):
    """No vision provider could analyze the image."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message=message, status_code=502, details=details)
