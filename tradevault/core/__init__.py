# -*- coding: utf-8 -*-
"""
tradevault/core/__init__.py

Fachada unificada para componentes centrales:
- Configuración (settings)
- Logging
- Base de datos y unidad de trabajo

Envuelve `tradevault.shared.*` para ofrecer puntos de entrada estables.

Autor: TradeVault
Fecha: 2026-10-14
"""

from .db import Base, Database, atomic, database_from_settings, get_async_session
from .logging import setup_logging
from .settings import BaseAppSettings, EscrowSettings, get_settings

__all__ = [
    "get_settings",
    "BaseAppSettings",
    "EscrowSettings",
    "setup_logging",
    "Base",
    "Database",
    "atomic",
    "database_from_settings",
    "get_async_session",
]

# Fin del archivo tradevault/core/__init__.py
