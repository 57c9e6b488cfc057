# -*- coding: utf-8 -*-
"""
tradevault/modules/escrow/enums.py

Enums del motor de escrow.

Autor: TradeVault
Fecha: 2026-10-09
"""

from enum import Enum


class EscrowStatus(str, Enum):
    HELD = "held"
    RELEASED = "released"
    REFUNDED = "refunded"
    PARTIALLY_RELEASED = "partially_released"

    @property
    def is_terminal(self) -> bool:
        return self != EscrowStatus.HELD


class EscrowOperationType(str, Enum):
    """Operaciones con asientos; una por (order_id, operation_type)."""
    HOLD = "hold"
    RELEASE = "release"
    REFUND = "refund"
    SPLIT = "split"


__all__ = ["EscrowStatus", "EscrowOperationType"]

# Fin del archivo tradevault/modules/escrow/enums.py
