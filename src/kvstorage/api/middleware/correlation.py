"""Correlation ID middleware for request tracing.

Attaches a correlation ID to every request, makes it available to the
logging context and echoes it on the response.
"""

import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from kvstorage.observability.logging import clear_correlation_id, get_logger, set_correlation_id

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation ID and log its outcome.

    A caller-supplied ``X-Correlation-ID`` header is reused; otherwise a UUID4
    is generated. The ID is returned on the response in the same header.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        set_correlation_id(correlation_id)
        started = time.perf_counter()
        log = logger.bind(method=request.method, path=request.url.path)

        log.info("request_started")
        try:
            response = await call_next(request)
        except Exception as e:
            log.error("request_failed", error=str(e), duration_ms=_elapsed_ms(started))
            raise
        else:
            log.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()
