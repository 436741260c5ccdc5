"""HTTP middleware for CORS and request logging."""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Admin-Token",
}

INTERNAL_ERROR_BODY = {"message": "Internal Server Error"}

CallNext = Callable[[Request], Awaitable[Response]]


async def cors_middleware(request: Request, call_next: CallNext) -> Response:
    """Answer preflight requests and add permissive CORS headers."""
    if request.method == "OPTIONS":
        return JSONResponse({"message": "CORS OK"}, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


async def request_logging_middleware(
    request: Request, call_next: CallNext
) -> Response:
    """Log one line per request and turn unhandled errors into a generic 500."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "Unhandled error: %s %s request_id=%s",
            request.method,
            request.url.path,
            request_id,
        )
        response = JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)
    latency_ms = (time.perf_counter() - start) * 1000.0
    logger.info(
        "%s %s %s %.2fms request_id=%s",
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
        request_id,
    )
    return response
