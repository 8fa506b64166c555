"""
Response Assembler - uniform {success, ...} envelope for every admin endpoint

Success payloads are either spread into the envelope (dashboard objects) or
placed under a single key ("data", "notifications"). Failures always carry
`error` and `message`, plus `retryable` when the client may simply try again.
"""
import logging
from typing import Any, Awaitable, Dict, Optional

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.exceptions import AnalyticsError, ComputationFailure, QueryTimeoutError

logger = logging.getLogger(__name__)


def success_payload(payload: Any = None, key: Optional[str] = None) -> Dict[str, Any]:
    """
    Build {success: True, ...}. Without a key the payload must be a model or
    dict and its fields are spread into the envelope.
    """
    body: Dict[str, Any] = {"success": True}
    if key is not None:
        body[key] = jsonable_encoder(payload)
    elif payload is not None:
        encoded = jsonable_encoder(payload)
        if not isinstance(encoded, dict):
            raise TypeError(f"Cannot spread {type(payload).__name__} into the response envelope")
        body.update(encoded)
    return body


def error_payload(exc: Exception, error: Optional[str] = None) -> Dict[str, Any]:
    if isinstance(exc, AnalyticsError):
        body = {
            "success": False,
            "error": exc.error if isinstance(exc, QueryTimeoutError) or error is None else error,
            "message": exc.message,
        }
        if exc.retryable:
            body["retryable"] = True
        return body

    if isinstance(exc, HTTPException):
        return {"success": False, "error": error or "Invalid request", "message": str(exc.detail)}

    return {"success": False, "error": error or "Computation failed", "message": "Server Error"}


def status_code_for(exc: Exception) -> int:
    if isinstance(exc, AnalyticsError):
        return exc.status_code
    if isinstance(exc, HTTPException):
        return exc.status_code
    return 500


def error_response(exc: Exception, error: Optional[str] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code_for(exc), content=error_payload(exc, error))


async def assemble(
    operation: str,
    computation: Awaitable[Any],
    key: Optional[str] = None,
    failure_error: Optional[str] = None
) -> Any:
    """
    Await a metric computation and wrap its outcome.

    Domain errors map onto their status codes; anything unexpected becomes a
    generic ComputationFailure. failure_error labels 500-class failures
    (e.g. "Failed to load brand analytics").
    """
    try:
        result = await computation

    except ComputationFailure as e:
        logger.error(f"❌ {operation} failed (query={e.query or 'n/a'}): {e.message}")
        return error_response(e, failure_error)

    except AnalyticsError as e:
        logger.warning(f"⚠️ {operation}: {e.message}")
        return error_response(e)

    except HTTPException as e:
        logger.warning(f"⚠️ {operation}: {e.detail}")
        return error_response(e)

    except Exception as e:
        logger.exception(f"❌ {operation} failed unexpectedly: {e}")
        return error_response(ComputationFailure(), failure_error)

    return success_payload(result, key)
