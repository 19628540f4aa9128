"""
Request Logging Middleware
Tags every request with an ID and logs its outcome.
"""

import logging
import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request ID and logs one line per finished request.

    The ID comes from the X-Request-ID header when the client sends one and
    is stored on request.state so handlers can attach it to their own logs.
    Client errors log at WARNING, server errors at ERROR.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "content_length": request.headers.get("content-length"),
        }

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"{request.method} {request.url.path} raised after {elapsed_ms:.1f}ms",
                exc_info=True,
                extra={**context, "duration_ms": elapsed_ms},
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400:
            log = logger.warning
        else:
            log = logger.info
        log(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {elapsed_ms:.1f}ms",
            extra={**context, "status_code": response.status_code, "duration_ms": elapsed_ms},
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        return response
