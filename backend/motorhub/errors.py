from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .schemas import ErrorResponse

BAD_INPUT = "bad_input"
UPSTREAM = "upstream"
STORAGE = "storage"
INTERNAL = "internal"


class MotorhubError(Exception):
    """Base for failures surfaced to callers under a stable category."""

    category: str = INTERNAL
    status_code: int = 500

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.retryable = retryable

    def http_status(self) -> int:
        return self.status_code


class ValidationFailure(MotorhubError):
    category = BAD_INPUT
    status_code = 422


class UpstreamFetchFailure(MotorhubError):
    category = UPSTREAM
    status_code = 502

    def __init__(self, message: str, *, retryable: bool = True, timed_out: bool = False) -> None:
        super().__init__(message, retryable=retryable)
        self.timed_out = timed_out

    def http_status(self) -> int:
        return 504 if self.timed_out else self.status_code


class PersistenceFailure(MotorhubError):
    category = STORAGE
    status_code = 500

    def http_status(self) -> int:
        return 503 if self.retryable else self.status_code


class BusinessNotFound(MotorhubError):
    category = INTERNAL
    status_code = 500


def _error_body(category: str, detail: object, retryable: bool) -> dict[str, object]:
    return ErrorResponse(error=category, detail=detail, retryable=retryable).model_dump()


async def _handle_motorhub_error(request: Request, exc: MotorhubError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status(),
        content=_error_body(exc.category, exc.message, exc.retryable),
    )


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=422, content=_error_body(BAD_INPUT, details, False))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MotorhubError, _handle_motorhub_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]
