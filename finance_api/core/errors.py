"""
Application error taxonomy and the FastAPI handlers that render it.

Store functions raise these; routes let them propagate and the handlers
registered in ``register_exception_handlers`` turn them into JSON responses
with the same ``{"detail": ...}`` shape FastAPI uses for HTTPException.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.detail = detail or self.default_detail
        self.headers = headers
        super().__init__(self.detail)

    def to_content(self) -> Dict[str, Any]:
        return {"detail": self.detail}


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], detail: Optional[str] = None):
        super().__init__(detail)
        self.errors = errors

    def to_content(self) -> Dict[str, Any]:
        return {"detail": self.detail, "errors": self.errors}


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Resource already exists"


class InvalidReference(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid category"


class TypeMismatch(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Category type does not match transaction type"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class InternalError(AppError):
    pass


def _format_validation_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        # loc looks like ("body", "amount") or ("query", "page")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc) or "body",
            "message": err.get("msg", "Invalid value"),
        })
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if isinstance(exc, InternalError):
            logger.error(f"Internal error on {request.method} {request.url.path}: {exc.detail}")
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": InternalError.default_detail},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_content(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        failed = ValidationFailed(_format_validation_errors(exc))
        return JSONResponse(status_code=failed.status_code, content=failed.to_content())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for better error responses"""
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=InternalError.status_code,
            content={"detail": InternalError.default_detail}
        )
