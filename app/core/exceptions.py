from fastapi import HTTPException
from typing import Dict, Any, Optional


class APIException(HTTPException):
    def __init__(self, status_code: int, detail: str, headers: Dict[str, Any] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationException(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=422, detail=f"Validation Error: {detail}")


class ConfigurationException(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=f"Configuration Error: {detail}")


# =============================================================================
# ANALYTICS DOMAIN ERRORS
# =============================================================================

class AnalyticsError(Exception):
    """Base class for errors raised by the reporting layer"""
    status_code: int = 500
    error: str = "Analytics error"
    retryable: bool = False

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error


class NotFoundError(AnalyticsError):
    """Referenced subject does not exist"""
    status_code = 404
    error = "Not found"


class ComputationFailure(AnalyticsError):
    """A repository query failed while a metric was being computed"""
    status_code = 500
    error = "Computation failed"

    def __init__(self, message: str = "Server Error", query: Optional[str] = None, error: Optional[str] = None):
        super().__init__(message, error=error)
        self.query = query


class QueryTimeoutError(ComputationFailure):
    """Repository queries did not finish within the configured bound"""
    status_code = 503
    error = "Query timeout"
    retryable = True

    def __init__(self, timeout: float, query: Optional[str] = None):
        super().__init__(
            message=f"Analytics queries timed out after {timeout:g}s, please retry",
            query=query,
        )
        self.timeout = timeout


class InvalidStatusTransition(AnalyticsError):
    """Conditional status update did not match the current record state"""
    status_code = 409
    error = "Invalid status transition"
