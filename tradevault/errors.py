# -*- coding: utf-8 -*-
"""
tradevault/errors.py

Taxonomía de errores de dominio del motor de órdenes/escrow/disputas.

Cada error lleva:
- error_code: código estable para la UI
- http_status: status HTTP con el que se expone en la API
- retryable: si el cliente puede reintentar (con backoff)

Errores de validación (InvalidTransition, NotAuthorized, InsufficientFunds)
se devuelven al llamador. Errores de integridad (EscrowMismatch,
EscrowOverdraw) son fatales: abortan la unidad de trabajo completa.

Autor: TradeVault
Fecha: 2026-10-05
"""

from __future__ import annotations

from typing import Any, Optional


class EscrowDomainError(Exception):
    """Base de todos los errores de dominio."""

    error_code: str = "domain_error"
    http_status: int = 400
    retryable: bool = False
    fatal: bool = False

    def __init__(self, detail: str, **context: Any) -> None:
        super().__init__(detail)
        self.detail = detail
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "detail": self.detail,
            "retryable": self.retryable,
        }


class InvalidTransition(EscrowDomainError):
    """La transición pedida no está en la tabla de transiciones."""

    error_code = "invalid_transition"
    http_status = 409


class AlreadyTerminal(InvalidTransition):
    """Se intentó mutar una orden completed/cancelled/refunded."""

    error_code = "already_terminal"


class EscrowMismatch(EscrowDomainError):
    """Un asiento calculado violaría la conservación del escrow."""

    error_code = "escrow_mismatch"
    http_status = 500
    fatal = True


class EscrowOverdraw(EscrowDomainError):
    """release + refund excederían el monto retenido."""

    error_code = "escrow_overdraw"
    http_status = 500
    fatal = True


class DuplicateDispute(EscrowDomainError):
    error_code = "duplicate_dispute"
    http_status = 409


class InvalidState(EscrowDomainError):
    error_code = "invalid_state"
    http_status = 409


class Conflict(EscrowDomainError):
    """Contención de lock / versión optimista. Reintentable."""

    error_code = "conflict"
    http_status = 409
    retryable = True


class InsufficientFunds(EscrowDomainError):
    error_code = "insufficient_funds"
    http_status = 422

    def __init__(
        self,
        detail: str = "Insufficient funds",
        *,
        available: Optional[int] = None,
        required: Optional[int] = None,
    ) -> None:
        super().__init__(detail, available=available, required=required)
        self.available = available
        self.required = required


class NotAuthorized(EscrowDomainError):
    error_code = "not_authorized"
    http_status = 403


class NotFound(EscrowDomainError):
    error_code = "not_found"
    http_status = 404


class ValidationFailed(EscrowDomainError):
    error_code = "validation_failed"
    http_status = 422


__all__ = [
    "EscrowDomainError",
    "InvalidTransition",
    "AlreadyTerminal",
    "EscrowMismatch",
    "EscrowOverdraw",
    "DuplicateDispute",
    "InvalidState",
    "Conflict",
    "InsufficientFunds",
    "NotAuthorized",
    "NotFound",
    "ValidationFailed",
]

# Fin del archivo tradevault/errors.py
