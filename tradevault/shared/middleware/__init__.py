# -*- coding: utf-8 -*-
"""
tradevault/shared/middleware/__init__.py

Middlewares y handlers de errores compartidos.
"""

from .exception_handler import (
    JSONExceptionMiddleware,
    domain_error_handler,
    get_request_id,
    register_exception_handlers,
)

__all__ = [
    "JSONExceptionMiddleware",
    "domain_error_handler",
    "get_request_id",
    "register_exception_handlers",
]
