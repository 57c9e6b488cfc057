# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/__init__.py

Disputas: apertura, respuesta, evidencia, resolución y auto-resolución.

Autor: TradeVault
Fecha: 2026-10-12
"""

from .enums import DisputeReason, DisputeStatus, ResolutionType
from .models import Dispute, DisputeMessage
from .services import DisputeDetail, DisputeService, Resolution

__all__ = [
    "DisputeReason",
    "DisputeStatus",
    "ResolutionType",
    "Dispute",
    "DisputeMessage",
    "DisputeService",
    "DisputeDetail",
    "Resolution",
]

# Fin del archivo tradevault/modules/disputes/__init__.py
