import enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(enum.StrEnum):
    """Stable error codes returned to callers."""

    INVALID_BODY = "invalid_body"
    INVALID_DATES = "invalid_dates"
    DATE_RANGE = "date_range"
    PASSWORD_TOO_SHORT = "password_too_short"
    INVALID_CURRENT_PASSWORD = "invalid_current_password"
    MISSING_FIELDS = "missing_fields"
    INVALID_LOGIN_CODE = "invalid_login_code"
    INVALID_TARGET = "invalid_target"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    USER_NOT_FOUND = "user_not_found"
    NOT_FOUND_OR_NOT_PENDING = "not_found_or_not_pending"
    NO_PENDING_UPDATE = "no_pending_update"
    NOTHING_TO_UPDATE = "nothing_to_update"
    UPDATE_FAILED = "update_failed"
    CREATE_FAILED = "create_failed"


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None


class AppError(Exception):
    """Base application exception carrying a stable error code."""

    def __init__(
        self,
        code: ErrorCode,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        detail: str | None = None,
    ) -> None:
        self.code = code
        self.status_code = status_code
        self.detail = detail
        super().__init__(detail or code.value)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.code.value, detail=exc.detail).model_dump(exclude_none=True),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error=ErrorCode.INVALID_BODY.value,
            detail=str(exc.errors()),
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
