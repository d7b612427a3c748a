"""
Request logging middleware for tracking HTTP requests.
"""
import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from proofline.utils.logger import get_logger

logger = get_logger("middleware")

# Probe endpoints are logged at debug level to keep the log readable
QUIET_PATHS = {"/health", "/"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    Logs method, path, payload size, status code and duration, and tags each
    request with an id returned in the ``X-Request-ID`` header. Editor text is
    never logged here.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        quiet = request.url.path in QUIET_PATHS
        log_start = logger.debug if quiet else logger.info

        log_start(
            "Request started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            ip=request.client.host if request.client else "unknown",
            content_length=request.headers.get("content-length", "0")
        )

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                duration_ms=f"{(time.perf_counter() - start_time) * 1000:.2f}",
                error=str(e),
                exc_info=True
            )
            raise

        duration_ms = f"{(time.perf_counter() - start_time) * 1000:.2f}"
        if response.status_code >= 500:
            log_end = logger.error
        elif response.status_code >= 400:
            log_end = logger.warning
        else:
            log_end = logger.debug if quiet else logger.info

        log_end(
            "Request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms
        )

        response.headers["X-Request-ID"] = request_id
        return response
