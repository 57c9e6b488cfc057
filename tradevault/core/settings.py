# -*- coding: utf-8 -*-
"""
tradevault/core/settings.py

Fachada de configuración: reexpone get_settings() de
`tradevault.shared.config` como punto de entrada estable.

Autor: TradeVault
Fecha: 2026-10-14
"""

from tradevault.shared.config.config_loader import get_settings
from tradevault.shared.config.settings_base import BaseAppSettings
from tradevault.shared.config.settings_escrow import EscrowSettings

__all__ = ["get_settings", "BaseAppSettings", "EscrowSettings"]

# Fin del archivo tradevault/core/settings.py
