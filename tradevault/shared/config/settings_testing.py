# -*- coding: utf-8 -*-
"""
tradevault/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Busca ser determinista: logging moderado, SQLite aislado y
scheduler apagado (los tests disparan los sweeps a mano).

Autor: TradeVault
Fecha: 2026-10-05
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: str = Field(default="test", validation_alias="PYTHON_ENV")

    # --- Logging en test: menos ruido ---
    log_level: str = Field(default="WARNING", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="pretty", validation_alias="LOG_FORMAT")

    # --- Base de datos: SQLite por defecto, sobreescribible por env ---
    db_url: Optional[str] = Field(
        default="sqlite+aiosqlite:///./tradevault_test.db", validation_alias="DB_URL"
    )
    db_create_schema: bool = Field(default=True, validation_alias="DB_CREATE_SCHEMA")

    # --- Scheduler apagado en tests ---
    scheduler_enabled: bool = Field(default=False, validation_alias="SCHEDULER_ENABLED")

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo tradevault/shared/config/settings_testing.py
