# -*- coding: utf-8 -*-
"""
tradevault/shared/config/settings_dev.py

Overrides para entorno de DESARROLLO (dev) usando Pydantic v2.
Hereda de BaseAppSettings y ajusta únicamente valores específicos
del ambiente local de desarrollo.

Autor: TradeVault
Fecha: 2026-10-05
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class DevSettings(BaseAppSettings):
    """Configuración para entorno de desarrollo."""

    # Entorno
    python_env: str = Field(default="development", validation_alias="PYTHON_ENV")

    # Logging
    log_level: str = Field(default="DEBUG", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="plain", validation_alias="LOG_FORMAT")  # legible en consola

    # En local se permite crear el esquema al arrancar
    db_create_schema: bool = Field(default=True, validation_alias="DB_CREATE_SCHEMA")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["DevSettings"]

# Fin del archivo tradevault/shared/config/settings_dev.py
