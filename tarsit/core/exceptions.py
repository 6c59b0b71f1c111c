# tarsit/core/exceptions.py
"""Domain errors raised by the service layer and their HTTP mapping"""
import logging

from fastapi import FastAPI, Request, status
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class TarsitError(Exception):
    """Base exception for service-layer errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TarsitError):
    """Raised when a business, service or appointment id does not resolve."""
    status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(TarsitError):
    """Raised for invalid input or an illegal state transition."""
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(TarsitError):
    """Raised when the caller lacks ownership or the required permission."""
    status_code = status.HTTP_403_FORBIDDEN


async def tarsit_error_handler(request: Request, exc: TarsitError) -> JSONResponse:
    """Return the error's status code with a human-readable detail."""
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    logger.info(
        f"{exc.__class__.__name__}: {exc.message}",
        extra={
            "correlation_id": correlation_id,
            "method": request.method,
            "url": str(request.url),
            "status_code": exc.status_code,
        }
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TarsitError, tarsit_error_handler)
