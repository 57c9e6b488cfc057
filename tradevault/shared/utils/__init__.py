# -*- coding: utf-8 -*-
"""
tradevault/shared/utils/__init__.py

Utilidades transversales (fechas e identificadores).

Autor: TradeVault
Fecha: 2026-10-05
"""

from .datetime_helpers import utcnow, ensure_utc, to_iso8601
from .identifiers import generate_dispute_number, generate_order_number

__all__ = [
    "utcnow",
    "ensure_utc",
    "to_iso8601",
    "generate_order_number",
    "generate_dispute_number",
]

# Fin del archivo tradevault/shared/utils/__init__.py
