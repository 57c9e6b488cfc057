# -*- coding: utf-8 -*-
"""
tests/conftest.py

Config global de tests para TradeVault.

- Base SQLite por test (aiosqlite, archivo en tmp_path) con el esquema
  completo; SAVEPOINTs habilitados por el recipe de Database.
- Servicios de dominio con comisiones de 10 % por lado.
- EventBus con un recolector wildcard para verificar eventos publicados.
- Fábricas async para fondear wallets y crear órdenes en cada estado.
"""

import os
from collections.abc import AsyncIterator
from typing import Any, Callable, Dict, List, Optional

import pytest

os.environ.setdefault("PYTHON_ENV", "test")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from tradevault.dependencies import ServiceRegistry, build_services
from tradevault.modules.orders.enums import OrderStatus
from tradevault.modules.orders.models import Order
from tradevault.modules.orders.services import CreateOrderInput, TransitionPayload
from tradevault.shared.auth_context import Actor, ActorRole
from tradevault.shared.config.settings_escrow import EscrowSettings
from tradevault.shared.database.database import Database
from tradevault.shared.events import DomainEvent, EventBus

BUYER = Actor(user_id="buyer-1", role=ActorRole.BUYER)
SELLER = Actor(user_id="seller-1", role=ActorRole.SELLER)
ADMIN = Actor(user_id="admin-1", role=ActorRole.ADMIN)
OUTSIDER = Actor(user_id="mallory", role=ActorRole.BUYER)


@pytest.fixture
def escrow_settings() -> EscrowSettings:
    return EscrowSettings(
        buyer_fee_bps=1000,
        seller_fee_bps=1000,
        currency="NGN",
        dispute_response_hours=48,
        buyer_review_hours=72,
        default_delivery_days=3,
        pending_order_ttl_minutes=60,
        platform_user_id="platform",
        min_withdrawal_amount=1000,
    )


@pytest.fixture
async def db(tmp_path) -> AsyncIterator[Database]:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'tradevault.db'}")
    await database.create_all()
    try:
        yield database
    finally:
        await database.dispose()


@pytest.fixture
async def session(db):
    async with db.session_scope() as s:
        yield s


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published(event_bus) -> List[DomainEvent]:
    """Eventos publicados (post-commit) en orden."""
    events: List[DomainEvent] = []

    async def _collect(event: DomainEvent) -> None:
        events.append(event)

    event_bus.subscribe("*", _collect)
    return events


@pytest.fixture
def services(escrow_settings, event_bus) -> ServiceRegistry:
    return build_services(escrow_settings, event_bus)


@pytest.fixture
def fund(db, services) -> Callable:
    """Deposita `amount` en la wallet de `user_id` en su propia sesión."""
    counter = {"n": 0}

    async def _fund(user_id: str, amount: int):
        counter["n"] += 1
        async with db.session_scope() as s:
            return await services.wallets.deposit(
                s,
                Actor(user_id=user_id, role=ActorRole.BUYER),
                amount,
                reference=f"test-topup-{user_id}-{counter['n']}",
            )

    return _fund


_PATHS: Dict[OrderStatus, List[OrderStatus]] = {
    OrderStatus.PENDING: [],
    OrderStatus.PAID: [OrderStatus.PAID],
    OrderStatus.PROCESSING: [OrderStatus.PAID, OrderStatus.PROCESSING],
    OrderStatus.DELIVERED: [OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.DELIVERED],
    OrderStatus.COMPLETED: [
        OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.DELIVERED, OrderStatus.COMPLETED,
    ],
}


@pytest.fixture
def make_order(db, services, fund) -> Callable:
    """
    Crea una orden (price=45000 por defecto) y la lleva hasta `status`
    con los actores correctos. Fondea al comprador si hace falta pagar.
    """

    async def _make(
        status: OrderStatus = OrderStatus.PENDING,
        *,
        price: int = 45000,
        buyer: Actor = BUYER,
        seller: Actor = SELLER,
        funding: Optional[int] = None,
    ) -> Order:
        steps = _PATHS[status]
        if steps:
            await fund(buyer.user_id, funding if funding is not None else price * 2)

        async with db.session_scope() as s:
            order = await services.orders.create_order(
                s, buyer, CreateOrderInput(seller_id=seller.user_id, listing_id="listing-1", price=price)
            )
        for target in steps:
            actor = buyer if target in (OrderStatus.PAID, OrderStatus.COMPLETED) else seller
            payload: Any = None
            if target == OrderStatus.DELIVERED:
                payload = TransitionPayload(delivery={"type": "link", "url": "https://files.example/x.zip"})
            async with db.session_scope() as s:
                order = await services.orders.transition(s, order.id, target, actor, payload)
        return order

    return _make


@pytest.fixture
def buyer() -> Actor:
    return BUYER


@pytest.fixture
def seller() -> Actor:
    return SELLER


@pytest.fixture
def admin() -> Actor:
    return ADMIN


@pytest.fixture
def outsider() -> Actor:
    return OUTSIDER


# ============================================================================
# App HTTP (lifespan real + ASGITransport)
# ============================================================================

@pytest.fixture
def api_settings(tmp_path):
    from tradevault.shared.config.settings_testing import EnvTestingSettings

    return EnvTestingSettings(
        DB_URL=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        DB_CREATE_SCHEMA=True,
        SCHEDULER_ENABLED=False,
        METRICS_ENABLED=True,
        LOG_LEVEL="WARNING",
        LOG_FORMAT="plain",
    )


@pytest.fixture
async def app(api_settings):
    from asgi_lifespan import LifespanManager

    from tradevault.main import create_app

    application = create_app(api_settings)
    async with LifespanManager(application):
        yield application


@pytest.fixture
async def client(app):
    from httpx import ASGITransport, AsyncClient

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(actor: Actor) -> Dict[str, str]:
    return {"X-User-Id": actor.user_id, "X-User-Role": actor.role.value}


@pytest.fixture
def headers_for() -> Callable[[Actor], Dict[str, str]]:
    """Headers X-User-Id / X-User-Role que inyecta el gateway."""
    return auth_headers


# Fin del archivo tests/conftest.py
