# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/services.py

Servicio de órdenes: creación, transiciones, consultas y sweeps.

Flujo de una transición:
    lock de la orden (FOR UPDATE) → tabla de transiciones → autorización
    → efectos de escrow → nuevo status → COMMIT → OrderStatusChanged

Todo corre en atomic(session): si el escrow falla, la orden no cambia.

Autor: TradeVault
Fecha: 2026-10-11
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.errors import InvalidTransition, NotAuthorized, NotFound, ValidationFailed
from tradevault.modules.escrow.engine import EscrowEngine
from tradevault.modules.escrow.enums import EscrowStatus
from tradevault.observability.metrics import record_transition
from tradevault.shared.auth_context import SYSTEM_ACTOR, Actor, ActorRole
from tradevault.shared.config.settings_escrow import EscrowSettings
from tradevault.shared.database.unit_of_work import atomic
from tradevault.shared.events import DomainEvent, EventBus, EventName, enqueue
from tradevault.shared.utils.datetime_helpers import ensure_utc, utcnow
from tradevault.shared.utils.identifiers import generate_order_number
from . import state_machine
from .enums import CancelledBy, OrderStatus
from .models import Order
from .payloads import DeliveryPayload, parse_delivery
from .repositories import OrderFilters, OrderRepository, OrderStats

logger = logging.getLogger(__name__)

_ORDER_NUMBER_ATTEMPTS = 3


@dataclass
class CreateOrderInput:
    seller_id: str
    listing_id: str
    price: int
    selected_tier: Optional[str] = None
    requirements: Optional[str] = None
    delivery_days: Optional[int] = None


@dataclass
class TransitionPayload:
    """Datos opcionales que acompañan una transición."""
    delivery: Optional[Union[DeliveryPayload, dict[str, Any]]] = None
    reason: Optional[str] = None


def compute_fee(price: int, bps: int) -> int:
    """Comisión en unidades mínimas: price * bps // 10000."""
    return price * bps // 10000


class OrderService:
    """
    Máquina de estados de órdenes con efectos de escrow.
    """

    def __init__(
        self,
        settings: Optional[EscrowSettings] = None,
        *,
        escrow: Optional[EscrowEngine] = None,
        order_repo: Optional[OrderRepository] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.settings = settings or EscrowSettings()
        self.event_bus = event_bus
        self.escrow = escrow or EscrowEngine(self.settings, event_bus=event_bus)
        self.order_repo = order_repo or OrderRepository()

    # ------------------------------------------------------------------
    # Creación
    # ------------------------------------------------------------------

    async def create_order(
        self,
        session: AsyncSession,
        actor: Actor,
        data: CreateOrderInput,
    ) -> Order:
        """
        Crea una orden pending con montos fijados.

        Raises:
            ValidationFailed: precio no positivo, comprador == vendedor,
                o comisiones que dejarían al vendedor sin pago
        """
        if data.price <= 0:
            raise ValidationFailed("Price must be positive")
        if actor.user_id == data.seller_id:
            raise ValidationFailed("Buyer and seller must be different users")

        buyer_fee = compute_fee(data.price, self.settings.buyer_fee_bps)
        seller_fee = compute_fee(data.price, self.settings.seller_fee_bps)
        seller_receives = data.price - seller_fee
        if seller_receives <= 0:
            raise ValidationFailed("Seller fee leaves nothing for the seller")

        delivery_days = data.delivery_days or self.settings.default_delivery_days
        if delivery_days <= 0:
            raise ValidationFailed("delivery_days must be positive")

        async with atomic(session):
            order = await self._insert_with_unique_number(
                session,
                buyer_id=actor.user_id,
                seller_id=data.seller_id,
                listing_id=data.listing_id,
                selected_tier=data.selected_tier,
                requirements=data.requirements,
                price=data.price,
                buyer_fee=buyer_fee,
                seller_fee=seller_fee,
                total_amount=data.price + buyer_fee,
                seller_receives=seller_receives,
                currency=self.settings.currency,
                status=OrderStatus.PENDING,
                delivery_days=delivery_days,
            )
            enqueue(
                session,
                self.event_bus,
                DomainEvent(
                    EventName.ORDER_CREATED,
                    aggregate_id=order.id,
                    payload={
                        "order_number": order.order_number,
                        "buyer_id": order.buyer_id,
                        "seller_id": order.seller_id,
                        "total_amount": order.total_amount,
                    },
                ),
            )

        logger.info(
            "order_created order=%s number=%s buyer=%s seller=%s price=%d total=%d",
            order.id, order.order_number, order.buyer_id, order.seller_id, order.price, order.total_amount,
        )
        return order

    async def _insert_with_unique_number(self, session: AsyncSession, **fields: Any) -> Order:
        for attempt in range(1, _ORDER_NUMBER_ATTEMPTS + 1):
            order = Order(order_number=generate_order_number(), **fields)
            try:
                async with session.begin_nested():
                    session.add(order)
                    await session.flush()
                return order
            except IntegrityError:
                if attempt == _ORDER_NUMBER_ATTEMPTS:
                    raise
                logger.warning("order_number_collision attempt=%d", attempt)
        raise RuntimeError("unreachable")

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    async def get_order(self, session: AsyncSession, order_id: str, actor: Actor) -> Order:
        order = await self.order_repo.get(session, order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found", order_id=order_id)
        if not (order.is_participant(actor.user_id) or actor.is_admin or actor.is_system):
            raise NotAuthorized("Order belongs to other users")
        return order

    async def list_orders(
        self,
        session: AsyncSession,
        actor: Actor,
        filters: Optional[OrderFilters] = None,
    ) -> Sequence[Order]:
        """Un no-admin solo ve órdenes donde participa."""
        filters = filters or OrderFilters()
        if not actor.is_admin:
            filters.participant_id = actor.user_id
        return await self.order_repo.search(session, filters)

    async def order_stats(
        self,
        session: AsyncSession,
        actor: Actor,
        *,
        as_role: ActorRole = ActorRole.BUYER,
    ) -> OrderStats:
        if as_role == ActorRole.SELLER:
            return await self.order_repo.stats(session, seller_id=actor.user_id)
        return await self.order_repo.stats(session, buyer_id=actor.user_id)

    # ------------------------------------------------------------------
    # Transiciones
    # ------------------------------------------------------------------

    async def transition(
        self,
        session: AsyncSession,
        order_id: str,
        target: OrderStatus,
        actor: Actor,
        payload: Optional[TransitionPayload] = None,
    ) -> Order:
        """
        Aplica una transición pública. Un replay al status actual es no-op.

        Raises:
            NotFound, NotAuthorized, InvalidTransition, AlreadyTerminal,
            InsufficientFunds (al pagar), Conflict (escritura concurrente)
        """
        payload = payload or TransitionPayload()
        if target in state_machine.DISPUTE_DRIVEN:
            raise InvalidTransition(
                f"Orders reach {target.value} only through dispute resolution",
                target=target.value,
            )

        async with atomic(session):
            order = await self._lock(session, order_id)
            state_machine.authorize_transition(
                target, actor, buyer_id=order.buyer_id, seller_id=order.seller_id
            )
            if order.status == OrderStatus.DISPUTED:
                raise InvalidTransition(
                    "Disputed orders move only through dispute resolution",
                    current=order.status.value,
                    target=target.value,
                )
            if not state_machine.check_transition(order.status, target):
                logger.info("order_transition_replay order=%s status=%s actor=%s", order.id, target.value, actor.user_id)
                return order

            previous = order.status
            await self._apply_effects(session, order, target, actor, payload)
            self._set_status(session, order, previous, target, actor)
            await session.flush()

        record_transition(previous.value, target.value)
        logger.info(
            "order_transition order=%s from=%s to=%s actor=%s",
            order.id, previous.value, target.value, actor.user_id,
        )
        return order

    async def _apply_effects(
        self,
        session: AsyncSession,
        order: Order,
        target: OrderStatus,
        actor: Actor,
        payload: TransitionPayload,
    ) -> None:
        now = utcnow()

        if target == OrderStatus.PAID:
            await self.escrow.hold(session, order, performed_by=actor.user_id)
            order.paid_at = now
            order.delivery_deadline = now + timedelta(days=order.delivery_days)

        elif target == OrderStatus.DELIVERED:
            if payload.delivery is not None:
                order.delivery_data = parse_delivery(payload.delivery).model_dump(mode="json")
            order.delivered_at = now
            order.auto_complete_at = now + timedelta(hours=self.settings.buyer_review_hours)

        elif target == OrderStatus.COMPLETED:
            await self.escrow.release(
                session, order, order.seller_receives, order.seller_id, performed_by=actor.user_id
            )
            order.buyer_confirmed = actor.user_id == order.buyer_id
            order.completed_at = now

        elif target == OrderStatus.CANCELLED:
            escrow = await self.escrow.get_escrow(session, order.id)
            if escrow is not None and escrow.status == EscrowStatus.HELD:
                await self.escrow.refund(
                    session,
                    order,
                    escrow.remaining,
                    order.buyer_id,
                    performed_by=actor.user_id,
                    reason=payload.reason or "order cancelled",
                )
            order.cancelled_at = now
            order.cancelled_by = self._cancelled_by(order, actor)
            order.cancellation_reason = payload.reason

    def _set_status(
        self,
        session: AsyncSession,
        order: Order,
        previous: OrderStatus,
        target: OrderStatus,
        actor: Actor,
    ) -> None:
        order.status = target
        enqueue(
            session,
            self.event_bus,
            DomainEvent(
                EventName.ORDER_STATUS_CHANGED,
                aggregate_id=order.id,
                payload={
                    "order_number": order.order_number,
                    "from": previous.value,
                    "to": target.value,
                    "actor_id": actor.user_id,
                    "buyer_id": order.buyer_id,
                    "seller_id": order.seller_id,
                },
            ),
        )

    async def apply_dispute_transition(
        self,
        session: AsyncSession,
        order: Order,
        target: OrderStatus,
        actor: Actor,
    ) -> None:
        """
        Transición conducida por el motor de disputas (→ disputed,
        disputed → completed | refunded). Los efectos de escrow los aplica
        el propio motor de disputas; aquí solo se valida y se sella el status.
        El llamador ya tiene la orden bloqueada dentro de su atomic().
        """
        if not state_machine.check_transition(order.status, target):
            return
        previous = order.status
        now = utcnow()
        if target == OrderStatus.COMPLETED:
            order.completed_at = now
        self._set_status(session, order, previous, target, actor)
        await session.flush()
        record_transition(previous.value, target.value)
        logger.info(
            "order_transition order=%s from=%s to=%s actor=%s source=dispute",
            order.id, previous.value, target.value, actor.user_id,
        )

    async def lock_order(self, session: AsyncSession, order_id: str) -> Order:
        return await self._lock(session, order_id)

    async def _lock(self, session: AsyncSession, order_id: str) -> Order:
        order = await self.order_repo.get(session, order_id, for_update=True)
        if order is None:
            raise NotFound(f"Order {order_id} not found", order_id=order_id)
        return order

    @staticmethod
    def _cancelled_by(order: Order, actor: Actor) -> CancelledBy:
        if actor.is_system:
            return CancelledBy.SYSTEM
        if actor.user_id == order.buyer_id:
            return CancelledBy.BUYER
        if actor.user_id == order.seller_id:
            return CancelledBy.SELLER
        return CancelledBy.ADMIN

    # ------------------------------------------------------------------
    # Sweeps (una orden por unidad de trabajo)
    # ------------------------------------------------------------------

    async def due_for_auto_complete(
        self,
        session: AsyncSession,
        now: Optional[datetime] = None,
    ) -> list[str]:
        return await self.order_repo.ids_due_for_auto_complete(
            session, now or utcnow(), self.settings.sweep_batch_size
        )

    async def pending_expired(
        self,
        session: AsyncSession,
        now: Optional[datetime] = None,
    ) -> list[str]:
        cutoff = (now or utcnow()) - timedelta(minutes=self.settings.pending_order_ttl_minutes)
        return await self.order_repo.ids_pending_expired(session, cutoff, self.settings.sweep_batch_size)

    async def auto_complete(
        self,
        session: AsyncSession,
        order_id: str,
        now: Optional[datetime] = None,
    ) -> bool:
        """Completa una orden delivered cuyo timer de revisión venció. False si ya no aplica."""
        now = now or utcnow()
        async with atomic(session):
            order = await self._lock(session, order_id)
            if order.status != OrderStatus.DELIVERED or order.auto_complete_at is None:
                return False
            if ensure_utc(order.auto_complete_at) > now:
                return False
            await self.transition(session, order_id, OrderStatus.COMPLETED, SYSTEM_ACTOR)
        return True

    async def expire_pending(
        self,
        session: AsyncSession,
        order_id: str,
        now: Optional[datetime] = None,
    ) -> bool:
        """Cancela por timeout una orden que nunca se pagó. False si ya no aplica."""
        now = now or utcnow()
        cutoff = now - timedelta(minutes=self.settings.pending_order_ttl_minutes)
        async with atomic(session):
            order = await self._lock(session, order_id)
            if order.status != OrderStatus.PENDING or ensure_utc(order.created_at) > cutoff:
                return False
            await self.transition(
                session,
                order_id,
                OrderStatus.CANCELLED,
                SYSTEM_ACTOR,
                TransitionPayload(reason="payment timeout"),
            )
        return True


__all__ = [
    "OrderService",
    "CreateOrderInput",
    "TransitionPayload",
    "compute_fee",
]

# Fin del archivo tradevault/modules/orders/services.py
