"""Request context middleware: correlation id and access logging."""

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from sightings_api.utils import metrics

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id and record its outcome."""

    async def dispatch(self, request: Request, call_next):
        """Process request with correlation ID and timing."""
        correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers["x-correlation-id"] = correlation_id
        metrics.request_duration.labels(method=request.method, status=str(response.status_code)).observe(
            elapsed
        )
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "correlation_id": correlation_id,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )
        return response
