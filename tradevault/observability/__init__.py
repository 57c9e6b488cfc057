# -*- coding: utf-8 -*-
"""
tradevault/observability/__init__.py

Métricas Prometheus (HTTP + dominio).

Autor: TradeVault
Fecha: 2026-10-08
"""

from .prom import setup_observability

__all__ = ["setup_observability"]

# Fin del archivo tradevault/observability/__init__.py
