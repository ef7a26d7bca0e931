"""
Application error type and the handlers that render every failure as

    {"success": false, "message": "..."}

Register them once with `register_exception_handlers(app)`.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import env

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """
    Error with a user-facing message and an HTTP status code.
    """

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(status_code=status_code, detail=message)
        self.message = message


def error_body(message: str, *, stack: str | None = None) -> dict:
    body: dict = {"success": False, "message": message}
    if stack is not None:
        body["stack"] = stack
    return body


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form")]
        field = ".".join(loc)
        msg = str(err.get("msg") or "invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request."


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Something went wrong"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_body(_format_validation_errors(exc)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception method=%s path=%s error_type=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    if env.app_env() == "development":
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=error_body(str(exc), stack=stack))
    return JSONResponse(status_code=500, content=error_body("Something went wrong"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
