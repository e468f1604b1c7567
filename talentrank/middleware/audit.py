"""Request tracing middleware."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class AuditMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id and logs its outcome and latency."""

    def __init__(self, app):
        super().__init__(app)
        # Endpoints that should not be logged (health checks, etc.)
        self.excluded_paths = {"/", "/health", "/docs", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        start_time = time.time()

        # Generate request ID for tracing
        request_id = request.headers.get("X-Request-ID") or f"req_{int(start_time * 1000000)}"
        request.state.request_id = request_id

        response = await call_next(request)

        process_time_ms = round((time.time() - start_time) * 1000, 2)
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {process_time_ms}ms [{request_id}]"
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = str(process_time_ms)
        return response
