# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from folio.core.errors import FolioError, UnexpectedError, ValidationError

LOGGER = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to a JSON body of the form {"error": ...}."""

    @app.exception_handler(FolioError)
    async def _folio_error_handler(request: Request, exc: FolioError):
        if exc.status_code >= 500:
            LOGGER.error("Request failed. status=%s path=%s", exc.status_code, request.url.path)
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error_handler(request: Request, exc: RequestValidationError):
        err = ValidationError.from_errors(exc.errors())
        LOGGER.info("Validation failed. path=%s method=%s", request.url.path, request.method)
        return JSONResponse(err.to_dict(), status_code=err.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            {"error": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        LOGGER.exception("Unhandled error. path=%s method=%s", request.url.path, request.method)
        err = UnexpectedError()
        return JSONResponse(err.to_dict(), status_code=err.status_code)
