# -*- coding: utf-8 -*-
"""
tradevault/core/logging.py

Fachada de `tradevault.shared.config.logging_config`.

Autor: TradeVault
Fecha: 2026-10-14
"""

from typing import Literal

from tradevault.shared.config.logging_config import setup_logging as _setup_logging


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
) -> None:
    _setup_logging(level=level, fmt=fmt)


__all__ = ["setup_logging"]

# Fin del archivo tradevault/core/logging.py
