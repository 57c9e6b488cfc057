# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/enums.py

Enums del ciclo de vida de una orden.

Autor: TradeVault
Fecha: 2026-10-10
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"        # Creada, sin pago capturado
    PAID = "paid"              # Pago capturado; fondos en escrow
    PROCESSING = "processing"  # Vendedor trabajando en la entrega
    DELIVERED = "delivered"    # Entregada; corre el timer de revisión
    COMPLETED = "completed"    # Escrow liberado al vendedor
    CANCELLED = "cancelled"    # Cancelada antes de entregar
    DISPUTED = "disputed"      # Disputa abierta; escrow congelado
    REFUNDED = "refunded"      # Disputa resuelta con reembolso total


class CancelledBy(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    SYSTEM = "system"


__all__ = ["OrderStatus", "CancelledBy"]

# Fin del archivo tradevault/modules/orders/enums.py
