# -*- coding: utf-8 -*-
"""
tradevault/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: TradeVault
Fecha: 2026-10-06
"""

from __future__ import annotations

from .base import Base, BigIntPK, NAMING_CONVENTION, TimestampMixin, as_str_enum
from .database import Database, get_async_session
from .repository import BaseRepository
from .unit_of_work import atomic

__all__ = [
    "Base",
    "BigIntPK",
    "NAMING_CONVENTION",
    "TimestampMixin",
    "as_str_enum",
    "Database",
    "get_async_session",
    "BaseRepository",
    "atomic",
]

# Fin del archivo tradevault/shared/database/__init__.py
