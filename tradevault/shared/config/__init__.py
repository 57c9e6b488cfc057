# -*- coding: utf-8 -*-
"""
tradevault/shared/config/__init__.py

Punto único de acceso a la configuración:
    from tradevault.shared.config import get_settings, EscrowSettings

Autor: TradeVault
Fecha: 2026-10-05
"""

from .config_loader import get_settings
from .logging_config import setup_logging
from .settings_base import BaseAppSettings
from .settings_escrow import EscrowSettings

__all__ = ["get_settings", "setup_logging", "BaseAppSettings", "EscrowSettings"]

# Fin del archivo tradevault/shared/config/__init__.py
