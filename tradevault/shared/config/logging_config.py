# -*- coding: utf-8 -*-
"""
tradevault/shared/config/logging_config.py

Configuración centralizada de logging para TradeVault.
Soporta formato plain (desarrollo) y json (producción).

Los loggers de dominio (tradevault.ledger, tradevault.escrow,
tradevault.orders, tradevault.disputes) emiten mensajes key=value;
en formato json cada campo extra pasado vía `extra=` se serializa.

Autor: TradeVault
Fecha: 2026-10-05
"""

import logging.config
from typing import Literal


# Loggers de librerías que en DEBUG generan demasiado ruido
_NOISY_LOGGERS = ("apscheduler", "sqlalchemy.engine", "aiosqlite", "asyncio")


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Formato de salida (plain, pretty, json)

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    use_json = fmt == "json"

    formatters = {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            "rename_fields": {"levelname": "level", "name": "logger"},
        },
    }

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if use_json else "default",
            "stream": "ext://sys.stdout",
        }
    }

    loggers = {
        name: {"level": "WARNING", "propagate": True} for name in _NOISY_LOGGERS
    }
    loggers["tradevault"] = {"level": level.upper(), "propagate": True}

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers,
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }

    logging.config.dictConfig(logging_config)


__all__ = ["setup_logging"]
# Fin del archivo tradevault/shared/config/logging_config.py
