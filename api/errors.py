"""
Error mapping for the HTTP layer.

Domain errors carry an ``ErrorKind``; this module turns that kind into
an HTTP status and a JSON body.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from core.domain.errors import ErrorKind, OrchestrationError


logger = logging.getLogger(__name__)


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STATE: status.HTTP_409_CONFLICT,
    ErrorKind.DISPATCH: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(error: OrchestrationError) -> int:
    return STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(error: OrchestrationError, path: str) -> JSONResponse:
    body = error.to_dict()
    body["path"] = path
    return JSONResponse(status_code=status_for(error), content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain and catch-all exception handlers."""

    @app.exception_handler(OrchestrationError)
    async def orchestration_error_handler(request: Request, exc: OrchestrationError):
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.kind.value} - {exc.message}")
        return error_response(exc, request.url.path)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )
