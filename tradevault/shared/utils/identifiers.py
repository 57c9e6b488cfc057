# -*- coding: utf-8 -*-
"""
tradevault/shared/utils/identifiers.py

Generación de números legibles para órdenes y disputas.

Formato: <PREFIJO>-<timestamp ms en base36>-<4 caracteres base36>
    ORD-MGD3K2PQ-7XQA
    DSP-MGD3K2PQ-0B9Z

Los números son únicos por constraint en BD; el sufijo aleatorio
hace que una colisión requiera mismo milisegundo y mismo sufijo.

Autor: TradeVault
Fecha: 2026-10-05
"""

import secrets
from datetime import datetime
from typing import Optional

from .datetime_helpers import utcnow

_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 solo para enteros no negativos")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def _random_suffix(length: int = 4) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def _build_number(prefix: str, now: Optional[datetime] = None) -> str:
    ts_ms = int((now or utcnow()).timestamp() * 1000)
    return f"{prefix}-{to_base36(ts_ms)}-{_random_suffix()}"


def generate_order_number(now: Optional[datetime] = None) -> str:
    return _build_number("ORD", now)


def generate_dispute_number(now: Optional[datetime] = None) -> str:
    return _build_number("DSP", now)


__all__ = ["to_base36", "generate_order_number", "generate_dispute_number"]
# Fin del archivo tradevault/shared/utils/identifiers.py
