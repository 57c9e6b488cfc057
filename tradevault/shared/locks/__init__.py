# -*- coding: utf-8 -*-
"""
tradevault/shared/locks/__init__.py

Lease locks respaldados por base de datos (un líder por sweep).

Autor: TradeVault
Fecha: 2026-10-07
"""

from .models import DistributedLock
from .lease import LeaseLock

__all__ = ["DistributedLock", "LeaseLock"]

# Fin del archivo tradevault/shared/locks/__init__.py
