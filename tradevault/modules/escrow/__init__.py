# -*- coding: utf-8 -*-
"""
tradevault/modules/escrow/__init__.py

Motor de escrow: retención, liberación, reembolso, congelamiento y split.

Autor: TradeVault
Fecha: 2026-10-09
"""

from .engine import EscrowEngine, EscrowResult
from .enums import EscrowOperationType, EscrowStatus
from .models import EscrowOperation, EscrowTransaction

__all__ = [
    "EscrowEngine",
    "EscrowResult",
    "EscrowStatus",
    "EscrowOperationType",
    "EscrowTransaction",
    "EscrowOperation",
]

# Fin del archivo tradevault/modules/escrow/__init__.py
