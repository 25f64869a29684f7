import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors the API reports back to the caller."""

    status_code = 400

    def __init__(self, detail: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}


class ValidationError(AppError):
    """A required field is missing or malformed (name, price, cycle...)."""

    status_code = 422

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail, {"field": field} if field else None)
        self.field = field


class NotFoundError(AppError):
    status_code = 404


class AuthorizationError(AppError):
    status_code = 403


class PurchaseFailure(AppError):
    status_code = 409


class EmptyCartError(PurchaseFailure):
    def __init__(self, detail: str = "Cart is empty"):
        super().__init__(detail)


class PartialFailure(AppError):
    """A multi-step write failed midway. The transaction was rolled back."""

    status_code = 500

    def __init__(self, detail: str, step: str, rolled_back: bool = True):
        super().__init__(detail, {"step": step, "rolled_back": rolled_back})
        self.step = step
        self.rolled_back = rolled_back


class StorageError(AppError):
    status_code = 503


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url}: {exc.detail}")
        else:
            logger.info(f"{type(exc).__name__} on {request.url}: {exc.detail}")
        content = {"detail": exc.detail, "error": type(exc).__name__}
        content.update(exc.extra)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url}: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
