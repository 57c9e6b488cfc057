# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/enums.py

Enums del motor de disputas.

Autor: TradeVault
Fecha: 2026-10-12
"""

from enum import Enum


class DisputeReason(str, Enum):
    NOT_AS_DESCRIBED = "not_as_described"
    NOT_DELIVERED = "not_delivered"
    DELAYED_DELIVERY = "delayed_delivery"
    QUALITY_ISSUES = "quality_issues"
    ACCESS_ISSUES = "access_issues"
    FRAUD = "fraud"
    OTHER = "other"


class DisputeStatus(str, Enum):
    OPEN = "open"                  # Esperando respuesta del vendedor
    UNDER_REVIEW = "under_review"  # Vendedor respondió; revisión admin
    RESOLVED = "resolved"          # Split financiero aplicado (terminal)
    CLOSED = "closed"              # Retirada sin split (terminal)

    @property
    def is_active(self) -> bool:
        return self in (DisputeStatus.OPEN, DisputeStatus.UNDER_REVIEW)


class ResolutionType(str, Enum):
    BUYER_FAVOR = "buyer_favor"
    SELLER_FAVOR = "seller_favor"
    PARTIAL_REFUND = "partial_refund"
    MUTUAL_AGREEMENT = "mutual_agreement"


__all__ = ["DisputeReason", "DisputeStatus", "ResolutionType"]

# Fin del archivo tradevault/modules/disputes/enums.py
