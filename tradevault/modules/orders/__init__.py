# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/__init__.py

Ciclo de vida de órdenes: creación, máquina de estados y sweeps.

Autor: TradeVault
Fecha: 2026-10-10
"""

from .enums import CancelledBy, OrderStatus
from .models import Order
from .services import CreateOrderInput, OrderService, TransitionPayload

__all__ = [
    "OrderStatus",
    "CancelledBy",
    "Order",
    "OrderService",
    "CreateOrderInput",
    "TransitionPayload",
]

# Fin del archivo tradevault/modules/orders/__init__.py
