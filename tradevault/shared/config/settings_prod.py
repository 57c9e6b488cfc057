# -*- coding: utf-8 -*-
"""
tradevault/shared/config/settings_prod.py

Overrides para entorno de PRODUCCIÓN usando Pydantic v2.
Forza lectura solo desde variables de entorno / secret stores
y activa logging estable (INFO en JSON).

Autor: TradeVault
Fecha: 2026-10-05
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class ProdSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: Literal["development", "test", "production"] = Field(
        default="production", validation_alias="PYTHON_ENV"
    )

    # --- Logging en prod: nivel estable y formato estructurado ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "pretty", "plain"] = Field(default="json", validation_alias="LOG_FORMAT")

    model_config = SettingsConfigDict(
        env_file=None,  # No leemos .env en producción
        extra="ignore",
    )


__all__ = ["ProdSettings"]
# Fin del archivo tradevault/shared/config/settings_prod.py
