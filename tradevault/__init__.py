# -*- coding: utf-8 -*-
"""
tradevault/__init__.py

Backend de TradeVault: ciclo de vida de órdenes, escrow y disputas
del marketplace de bienes digitales.

Autor: TradeVault
Fecha: 2026-10-05
"""

__version__ = "0.1.0"

# Fin del archivo tradevault/__init__.py
