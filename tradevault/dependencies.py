# -*- coding: utf-8 -*-
"""
tradevault/dependencies.py

Ensamblado de servicios de dominio y dependencias inyectables de FastAPI.

Una sola instancia de cada servicio por aplicación (app.state.services),
todas compartiendo settings y event bus. Los tests pueden construir su
propio ServiceRegistry con build_services() o sobreescribir las
dependencias con app.dependency_overrides.

Autor: TradeVault
Fecha: 2026-10-13
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from tradevault.modules.disputes.services import DisputeService
from tradevault.modules.escrow.engine import EscrowEngine
from tradevault.modules.ledger.services import WalletService
from tradevault.modules.ledger.store import LedgerStore
from tradevault.modules.orders.services import OrderService
from tradevault.shared.config.settings_escrow import EscrowSettings
from tradevault.shared.events import EventBus


@dataclass
class ServiceRegistry:
    settings: EscrowSettings
    event_bus: EventBus
    ledger: LedgerStore
    escrow: EscrowEngine
    orders: OrderService
    disputes: DisputeService
    wallets: WalletService


def build_services(
    settings: EscrowSettings,
    event_bus: Optional[EventBus] = None,
) -> ServiceRegistry:
    bus = event_bus or EventBus()
    ledger = LedgerStore(currency=settings.currency)
    escrow = EscrowEngine(settings, ledger=ledger, event_bus=bus)
    orders = OrderService(settings, escrow=escrow, event_bus=bus)
    disputes = DisputeService(settings, orders=orders, escrow=escrow, event_bus=bus)
    wallets = WalletService(settings, ledger=ledger, event_bus=bus)
    return ServiceRegistry(
        settings=settings,
        event_bus=bus,
        ledger=ledger,
        escrow=escrow,
        orders=orders,
        disputes=disputes,
        wallets=wallets,
    )


# ── Dependencias FastAPI
def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services


def get_order_service(request: Request) -> OrderService:
    return get_services(request).orders


def get_dispute_service(request: Request) -> DisputeService:
    return get_services(request).disputes


def get_wallet_service(request: Request) -> WalletService:
    return get_services(request).wallets


__all__ = [
    "ServiceRegistry",
    "build_services",
    "get_services",
    "get_order_service",
    "get_dispute_service",
    "get_wallet_service",
]

# Fin del archivo tradevault/dependencies.py
