import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tutorhub.schemas.generic import ApiResponse
from tutorhub.utils.exceptions import TutorHubException

logger = logging.getLogger(__name__)


def _error_response(code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content=ApiResponse.fail(code=code, message=message).model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI):
    """
    Register global exception handlers for the FastAPI app.
    Every error leaves the service as an ApiResponse envelope with success=false.
    """

    @app.exception_handler(TutorHubException)
    async def service_exception_handler(request: Request, exc: TutorHubException):
        # Each exception class carries its own HTTP status
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        # Unique constraint races that slipped past the service-level checks
        logger.error(f"IntegrityError on {request.url.path}: {exc.orig}")
        return _error_response(
            status.HTTP_409_CONFLICT, "Record conflicts with existing data"
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
            request: Request, exc: RequestValidationError
    ):
        logger.warning(f"Validation error: {exc.errors()}")
        errors = []
        for error in exc.errors():
            # Drop the "body"/"query" prefix so messages name the field itself
            loc = [str(x) for x in error["loc"] if x not in ("body", "query", "path")]
            field = ".".join(loc) if loc else "unknown"
            errors.append(f"{field}: {error['msg']}")

        message = ", ".join(errors)
        return _error_response(
            status.HTTP_400_BAD_REQUEST, f"Validation Error: {message}"
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"HTTPException: {exc.detail}")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled Exception: {str(exc)}", exc_info=True)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"
        )
