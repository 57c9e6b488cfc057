# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/enums.py

Enums del ledger de wallets.

Autor: TradeVault
Fecha: 2026-10-07
"""

from enum import Enum


class TransactionType(str, Enum):
    """Tipo de asiento en el ledger de una wallet."""
    DEPOSIT = "deposit"                # Fondeo externo (+)
    WITHDRAWAL = "withdrawal"          # Retiro a cuenta bancaria (-)
    PURCHASE = "purchase"              # Compra directa (-)
    SALE = "sale"                      # Venta directa (+)
    ESCROW_HOLD = "escrow_hold"        # Retención del comprador (-)
    ESCROW_RELEASE = "escrow_release"  # Liberación al vendedor (+)
    REFUND = "refund"                  # Devolución al comprador (+)
    FEE = "fee"                        # Comisión de plataforma (+)
    BONUS = "bonus"                    # Bonificación (+)


class TransactionStatus(str, Enum):
    PENDING = "pending"      # Solo retiros en vuelo
    COMPLETED = "completed"
    FAILED = "failed"


# Agregación de estadísticas de wallet por tipo de asiento
DEPOSIT_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.BONUS})
SPENT_TYPES = frozenset({TransactionType.PURCHASE, TransactionType.ESCROW_HOLD})
EARNED_TYPES = frozenset({TransactionType.SALE, TransactionType.ESCROW_RELEASE})


__all__ = [
    "TransactionType",
    "TransactionStatus",
    "DEPOSIT_TYPES",
    "SPENT_TYPES",
    "EARNED_TYPES",
]

# Fin del archivo tradevault/modules/ledger/enums.py
