# tarsit/core/middleware.py
"""Per-request tracing for the booking API: correlation ids and access logs"""
import uuid
import time
import logging
from starlette.requests import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


async def correlation_id_middleware(request: Request, call_next):
    """Reuse the caller's correlation id or mint one, and echo it back"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """One line when a booking/hours request arrives, one when it is answered"""
    started = time.perf_counter()
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    context = {
        "correlation_id": correlation_id,
        "method": request.method,
        "path": request.url.path,
    }

    logger.info(f"-> {request.method} {request.url.path}", extra=context)

    response = await call_next(request)

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    logger.info(
        f"<- {request.method} {request.url.path} {response.status_code} ({elapsed_ms}ms)",
        extra={**context, "status_code": response.status_code, "duration_ms": elapsed_ms}
    )

    return response
