# -*- coding: utf-8 -*-
"""
app/shared/middleware/exception_handler.py

Manejo de excepciones no traducidas por las rutas.

- JSONExceptionMiddleware: cualquier excepción no manejada responde JSON
  500 con error_code y request_id para correlación de logs.
- storage_error_handler: StorageError (store caído, timeout, deadlock)
  responde 503; el cliente puede reintentar lecturas, pero un earn/spend
  solo con clave de idempotencia.

Autor: CodeMarket
Fecha: 2026-10-08
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.shared.database.errors import StorageError

logger = logging.getLogger(__name__)

# Header para request ID (proxy, nginx, etc.)
REQUEST_ID_HEADERS = ["x-request-id", "x-correlation-id"]


def get_request_id(request: Request) -> str:
    """Extrae request_id de headers o genera uno nuevo."""
    existing = getattr(request.state, "request_id", None)
    if existing:
        return existing
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return uuid.uuid4().hex[:16]


class JSONExceptionMiddleware(BaseHTTPMiddleware):
    """
    Middleware que captura excepciones no manejadas y devuelve JSON.

    Garantiza:
    - Content-Type: application/json (nunca text/plain)
    - error_code estable para UI
    - request_id para correlación de logs
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "unhandled_exception request_id=%s method=%s path=%s error=%r",
                request_id,
                request.method,
                request.url.path,
                e,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "detail": {
                        "error_code": "INTERNAL_SERVER_ERROR",
                        "message": "Internal server error",
                        "request_id": request_id,
                    }
                },
                headers={"X-Request-ID": request_id},
            )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    request_id = get_request_id(request)
    logger.error(
        "storage_error request_id=%s method=%s path=%s error=%s",
        request_id, request.method, request.url.path, exc,
    )
    return JSONResponse(
        status_code=503,
        content={
            "detail": {
                "error_code": "storage_unavailable",
                "message": "Storage temporarily unavailable; the operation was not applied",
                "request_id": request_id,
            }
        },
        headers={"X-Request-ID": request_id},
    )


__all__ = ["JSONExceptionMiddleware", "get_request_id", "storage_error_handler"]
# Fin del archivo app/shared/middleware/exception_handler.py
