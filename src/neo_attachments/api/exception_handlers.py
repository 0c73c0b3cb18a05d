"""
Exception handlers for FastAPI applications serving attachments.

Every error leaves the API in the same envelope::

    {"error": {"code": ..., "message": ..., "details": {...}, "type": ...}}
"""
from typing import Any, Dict, Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.exceptions import NeoAttachmentsError, create_error_response, get_http_status_code

logger = logging.getLogger(__name__)


def error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None, error_type: str = "HTTPException") -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "type": error_type,
        }
    }


class ExceptionHandlerRegistry:
    """Registers the attachment error envelope on an application."""

    def __init__(self, is_production: bool = True):
        self.is_production = is_production

    def register_handlers(self, app: FastAPI) -> None:
        """Register exception handlers for the application."""

        @app.exception_handler(NeoAttachmentsError)
        async def neo_attachments_error_handler(request: Request, exc: NeoAttachmentsError):
            return JSONResponse(
                status_code=get_http_status_code(exc),
                content=create_error_response(exc),
            )

        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            # Routers put the error body itself in ``detail``
            if isinstance(exc.detail, dict) and "code" in exc.detail:
                content = {"error": exc.detail}
            else:
                content = error_body(f"HTTP_{exc.status_code}", str(exc.detail))
            return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

        @app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            return JSONResponse(
                status_code=422,
                content=error_body(
                    "REQUEST_VALIDATION_ERROR",
                    "Invalid request payload",
                    {"errors": jsonable_errors(exc)},
                    "RequestValidationError",
                ),
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            message = "An unexpected error occurred" if self.is_production else str(exc)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body("INTERNAL_ERROR", message, error_type="InternalServerError"),
            )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI, is_production: bool = True) -> None:
    """Create an ExceptionHandlerRegistry and register its handlers in one call."""
    ExceptionHandlerRegistry(is_production).register_handlers(app)
