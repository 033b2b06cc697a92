"""Translation of service-layer exceptions into HTTP errors."""

import httpx
from fastapi import HTTPException

from shared.models.errors import JobFailedError, JobTimeoutError, PollError, RecordNotFoundError

# Exceptions the routers translate; anything else propagates as a 500.
HANDLED_ERRORS = (ValueError, RecordNotFoundError, PollError, httpx.HTTPError)


def to_http_exception(error: Exception) -> HTTPException:
    """
    Map an exception raised below the router layer to an HTTPException.

    400 for invalid input, 404 for a missing session or record, 502 for backend and store
    failures (including a job the backend reported as failed), 504 for a poll timeout.
    """
    if isinstance(error, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, JobTimeoutError):
        return HTTPException(status_code=504, detail=str(error))
    if isinstance(error, JobFailedError):
        return HTTPException(status_code=502, detail=str(error))
    if isinstance(error, PollError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, httpx.HTTPStatusError):
        return HTTPException(status_code=502, detail=f"Upstream request failed with status {error.response.status_code}.")
    if isinstance(error, httpx.HTTPError):
        return HTTPException(status_code=502, detail=f"Upstream request failed: {error}")
    return HTTPException(status_code=400, detail=str(error))
