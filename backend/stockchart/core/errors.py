# backend/stockchart/core/errors.py
from __future__ import annotations

from typing import Any, Dict, List, Optional


class ChartApiError(Exception):
    """Base error. Carries the HTTP status it maps to and extra body fields."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(ChartApiError):
    """Missing, malformed or over-limit request input."""

    status_code = 400


class UpstreamError(ChartApiError):
    """A provider call failed, timed out or returned an error payload."""

    status_code = 502


class EmptySeriesError(ChartApiError):
    """Provider answered but no usable price points remained."""

    status_code = 404


class NoValidDataError(ChartApiError):
    status_code = 404

    def __init__(self, failures: List[Dict[str, str]]):
        super().__init__("No valid stock data found", details=failures)
        self.failures = failures


class RendererError(ChartApiError):
    """Chart image generation failed."""

    status_code = 500


class MethodNotAllowedError(ChartApiError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed"):
        super().__init__(message)
