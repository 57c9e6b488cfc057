# -*- coding: utf-8 -*-
"""
tradevault/shared/middleware/exception_handler.py

Traducción de errores a respuestas JSON.

- EscrowDomainError → {"error_code", "detail", "retryable"} con el
  http_status propio del error (handler de FastAPI).
- Cualquier otra excepción no manejada → 500 JSON con request_id
  (middleware ASGI), nunca text/plain.

Autor: TradeVault
Fecha: 2026-10-13
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from tradevault.errors import EscrowDomainError

logger = logging.getLogger(__name__)

# Headers de correlación que puede inyectar el gateway
REQUEST_ID_HEADERS = ("x-request-id", "x-correlation-id")


def get_request_id(request: Request) -> str:
    """Extrae request_id de headers o genera uno nuevo."""
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return uuid.uuid4().hex[:16]


class JSONExceptionMiddleware(BaseHTTPMiddleware):
    """
    Captura excepciones no manejadas y devuelve JSON 500.

    Inyecta request.state.request_id para que los handlers lo reutilicen.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(
                "unhandled_exception request_id=%s method=%s path=%s error=%r",
                request_id,
                request.method,
                request.url.path,
                exc,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error_code": "internal_error",
                    "detail": "Internal server error",
                    "retryable": False,
                    "request_id": request_id,
                },
                headers={"X-Request-ID": request_id},
            )


async def domain_error_handler(request: Request, exc: EscrowDomainError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None) or get_request_id(request)
    log = logger.error if exc.fatal else logger.info
    log(
        "domain_error request_id=%s path=%s code=%s status=%d detail=%s",
        request_id,
        request.url.path,
        exc.error_code,
        exc.http_status,
        exc.detail,
    )
    return JSONResponse(
        status_code=exc.http_status,
        content={**exc.to_dict(), "request_id": request_id},
        headers={"X-Request-ID": request_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EscrowDomainError, domain_error_handler)  # type: ignore[arg-type]


__all__ = [
    "JSONExceptionMiddleware",
    "get_request_id",
    "domain_error_handler",
    "register_exception_handlers",
]

# Fin del archivo tradevault/shared/middleware/exception_handler.py
