# teamcal/api/errors.py
"""
Exception -> JSON response mapping.

Все ответы об ошибках - JSON с ключом ``error``; HTML-страниц ошибок нет.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamcal.core.errors import AppError, ErrorKind

log = logging.getLogger(__name__)

GENERIC_STORAGE_MESSAGE = "Internal server error"


def error_body(message: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.kind == ErrorKind.STORAGE:
        # Подробности только в лог, клиенту - общий текст
        log.error("Storage error on %s %s: %s", request.method, request.url.path, exc.message,
                  exc_info=exc)
        return JSONResponse(status_code=exc.kind.status_code, content=error_body(GENERIC_STORAGE_MESSAGE))
    log.info("%s on %s %s: %s", exc.kind.value, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.kind.status_code, content=error_body(exc.message, exc.details))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.info("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    message = "Invalid query parameters" if all(d["loc"][:1] == ["query"] for d in details) \
        else "Invalid request body"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message, details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(GENERIC_STORAGE_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)


__all__ = ["register_exception_handlers", "error_body"]
