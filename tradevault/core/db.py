# -*- coding: utf-8 -*-
"""
tradevault/core/db.py

Fachada de base de datos: Database (engine + sesiones), la dependencia
FastAPI de sesión y el helper de unidad de trabajo.

Autor: TradeVault
Fecha: 2026-10-14
"""

from typing import Optional

from tradevault.shared.config.settings_base import BaseAppSettings
from tradevault.shared.database import Base, Database, atomic, get_async_session


def database_from_settings(settings: BaseAppSettings, url: Optional[str] = None) -> Database:
    """Construye el Database con la URL de settings (o una explícita)."""
    return Database(url or settings.database_url, echo=settings.db_echo_sql)


__all__ = ["Base", "Database", "atomic", "get_async_session", "database_from_settings"]

# Fin del archivo tradevault/core/db.py
