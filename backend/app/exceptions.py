"""Mapping of engine failures to HTTP responses.

Service and engine code stays HTTP-agnostic: it raises the typed
``MedVaultError`` subclasses and the global handler registered here translates
them into status codes.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from medvault.api import MedVaultError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "FileNotFound": 404,
    "InvalidFileType": 400,
    "FileTooLarge": 413,
    "Unauthorized": 403,
    "InvalidAnnotation": 422,
}


def status_for(exc: MedVaultError) -> int:
    return STATUS_BY_KIND.get(exc.kind, 400)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MedVaultError)
    async def _medvault_error_handler(request: Request, exc: MedVaultError) -> JSONResponse:
        status = status_for(exc)
        logger.info("%s %s -> %d %s", request.method, request.url.path, status, exc.kind)
        return JSONResponse(status_code=status, content={"detail": str(exc), "error": exc.to_dict()})
