"""
Error taxonomy shared by the feature packages, plus the HTTP translation.

Feature code raises these; `register_exception_handlers` turns them into
`{"error": ...}` envelopes so the service layer never builds responses.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RecipeCatalogError(Exception):
    pass


class ValidationError(RecipeCatalogError):
    """
    One or more caller-supplied fields broke a constraint.

    `errors` maps field name -> message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = dict(errors)


class NotFoundError(RecipeCatalogError):
    def __init__(self, message: str = "the requested resource could not be found") -> None:
        super().__init__(message)


class UsageError(RecipeCatalogError):
    pass


# Storage failures are opaque to callers: connection, timeout and query errors alike.
class StorageError(RecipeCatalogError):
    pass


def _error_response(status_code: int, error: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error})


async def _validation_handler(_: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(422, exc.errors)


async def _not_found_handler(_: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, str(exc))


async def _usage_handler(_: Request, exc: UsageError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def _storage_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "storage_error method=%s path=%s error=%s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "the server encountered a problem and could not process your request",
    )


def _request_error_message(error: dict) -> str:
    if error.get("type") in ("int_parsing", "int_type", "int_from_float"):
        return "must be an integer value"
    msg = str(error.get("msg") or "is invalid")
    return msg.removeprefix("Value error, ")


async def _request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report request parsing failures in the same shape as ValidationError.

    A malformed path id cannot name any resource, so it is a 404.
    """
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] == "path":
            return _error_response(status.HTTP_404_NOT_FOUND, str(NotFoundError()))
        field = ".".join(loc[1:]) or (loc[0] if loc else "request")
        errors.setdefault(field, _request_error_message(error))
    return _error_response(422, errors)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(UsageError, _usage_handler)
    app.add_exception_handler(StorageError, _storage_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
