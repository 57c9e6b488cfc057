# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/services.py

Motor de resolución de disputas.

Estados: open → under_review → resolved | closed

- file: el comprador abre la disputa; la orden pasa a disputed y el
  escrow queda congelado. Una disputa por orden (DuplicateDispute).
- respond: el vendedor responde dentro del plazo (open → under_review).
- add_message / add_evidence: append-only, solo con la disputa activa.
- resolve (admin): split refund/release que suma exactamente lo retenido.
- close (admin o quien la abrió): retiro sin split; el escrow se libera
  como una finalización normal.
- auto_resolve (sweep): plazo vencido sin respuesta → buyer_favor.

Autor: TradeVault
Fecha: 2026-10-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.errors import (
    DuplicateDispute,
    InvalidState,
    NotAuthorized,
    NotFound,
    ValidationFailed,
)
from tradevault.modules.escrow.engine import EscrowEngine
from tradevault.modules.orders import state_machine
from tradevault.modules.orders.enums import OrderStatus
from tradevault.modules.orders.models import Order
from tradevault.modules.orders.services import OrderService
from tradevault.shared.auth_context import SYSTEM_ACTOR, Actor
from tradevault.shared.config.settings_escrow import EscrowSettings
from tradevault.shared.database.unit_of_work import atomic
from tradevault.shared.events import DomainEvent, EventBus, EventName, enqueue
from tradevault.shared.utils.datetime_helpers import ensure_utc, utcnow
from tradevault.shared.utils.identifiers import generate_dispute_number
from .enums import DisputeReason, DisputeStatus, ResolutionType
from .evidence import parse_evidence
from .models import Dispute, DisputeMessage
from .repositories import (
    DisputeFilters,
    DisputeMessageRepository,
    DisputeRepository,
    DisputeStats,
)

logger = logging.getLogger(__name__)

DUPLICATE_DISPUTE_MESSAGE = "A dispute has already been filed for this order"


@dataclass
class Resolution:
    """Decisión del admin. En partial/mutual falta a lo sumo un lado del split."""
    resolution_type: ResolutionType
    refund_amount: Optional[int] = None
    release_amount: Optional[int] = None
    notes: Optional[str] = None


@dataclass
class DisputeDetail:
    dispute: Dispute
    messages: Sequence[DisputeMessage]


def compute_split(resolution: Resolution, held: int) -> tuple[int, int]:
    """
    Devuelve (refund, release) con refund + release == held.

    Raises:
        ValidationFailed: montos negativos, que exceden lo retenido o que no suman
    """
    kind = resolution.resolution_type
    if kind == ResolutionType.BUYER_FAVOR:
        return held, 0
    if kind == ResolutionType.SELLER_FAVOR:
        return 0, held

    refund, release = resolution.refund_amount, resolution.release_amount
    if refund is None and release is None:
        raise ValidationFailed(f"{kind.value} requires refund_amount or release_amount")
    if refund is None:
        refund = held - release
    if release is None:
        release = held - refund
    if refund < 0 or release < 0:
        raise ValidationFailed("Split amounts must be within the held amount", held=held)
    if refund + release != held:
        raise ValidationFailed(
            f"refund_amount + release_amount must equal the held amount {held}",
            held=held,
            refund_amount=refund,
            release_amount=release,
        )
    return refund, release


class DisputeService:
    """Disputas sobre órdenes con escrow retenido."""

    def __init__(
        self,
        settings: Optional[EscrowSettings] = None,
        *,
        orders: Optional[OrderService] = None,
        escrow: Optional[EscrowEngine] = None,
        dispute_repo: Optional[DisputeRepository] = None,
        message_repo: Optional[DisputeMessageRepository] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.settings = settings or EscrowSettings()
        self.event_bus = event_bus
        self.escrow = escrow or EscrowEngine(self.settings, event_bus=event_bus)
        self.orders = orders or OrderService(self.settings, escrow=self.escrow, event_bus=event_bus)
        self.dispute_repo = dispute_repo or DisputeRepository()
        self.message_repo = message_repo or DisputeMessageRepository()

    # ------------------------------------------------------------------
    # file
    # ------------------------------------------------------------------

    async def file_dispute(
        self,
        session: AsyncSession,
        actor: Actor,
        order_id: str,
        reason: DisputeReason,
        description: str,
        *,
        evidence: Optional[List[dict[str, Any]]] = None,
    ) -> Dispute:
        """
        Raises:
            NotAuthorized: quien abre no es el comprador
            DuplicateDispute: la orden ya tiene disputa
            InvalidTransition / AlreadyTerminal: la orden no admite disputa
        """
        if not description or not description.strip():
            raise ValidationFailed("Dispute description is required")

        async with atomic(session):
            order = await self.orders.lock_order(session, order_id)
            if actor.user_id != order.buyer_id:
                raise NotAuthorized("Only the buyer may file a dispute for this order")

            if await self.dispute_repo.get_by_order_id(session, order.id) is not None:
                raise DuplicateDispute(DUPLICATE_DISPUTE_MESSAGE, order_id=order.id)
            state_machine.check_transition(order.status, OrderStatus.DISPUTED)

            now = utcnow()
            dispute = Dispute(
                dispute_number=generate_dispute_number(now),
                order_id=order.id,
                filed_by=order.buyer_id,
                against_id=order.seller_id,
                reason=reason,
                description=description.strip(),
                evidence=[
                    parse_evidence(item, uploaded_by=actor.user_id).model_dump(mode="json")
                    for item in (evidence or [])
                ],
                status=DisputeStatus.OPEN,
                deadline=now + timedelta(hours=self.settings.dispute_response_hours),
            )
            try:
                async with session.begin_nested():
                    session.add(dispute)
                    await session.flush()
            except IntegrityError as exc:
                raise DuplicateDispute(DUPLICATE_DISPUTE_MESSAGE, order_id=order.id) from exc

            await self.escrow.freeze(session, order, performed_by=actor.user_id)
            await self.orders.apply_dispute_transition(session, order, OrderStatus.DISPUTED, actor)
            self._emit(session, EventName.DISPUTE_FILED, dispute, reason=reason.value)

        logger.info(
            "dispute_filed dispute=%s order=%s filed_by=%s reason=%s deadline=%s",
            dispute.id, order.id, dispute.filed_by, reason.value, dispute.deadline.isoformat(),
        )
        return dispute

    # ------------------------------------------------------------------
    # respond / messages / evidence
    # ------------------------------------------------------------------

    async def respond(
        self,
        session: AsyncSession,
        dispute_id: str,
        actor: Actor,
        response: str,
    ) -> Dispute:
        if not response or not response.strip():
            raise ValidationFailed("Response text is required")

        async with atomic(session):
            dispute = await self._lock(session, dispute_id)
            if actor.user_id != dispute.against_id:
                raise NotAuthorized("Only the party the dispute is against may respond")
            if dispute.status != DisputeStatus.OPEN:
                raise InvalidState(
                    f"Dispute is {dispute.status.value}; responses are accepted only while open",
                    dispute_id=dispute.id,
                )

            dispute.seller_response = response.strip()
            dispute.responded_at = utcnow()
            dispute.status = DisputeStatus.UNDER_REVIEW
            await session.flush()
            self._emit(session, EventName.DISPUTE_RESPONDED, dispute)

        logger.info("dispute_responded dispute=%s by=%s", dispute.id, actor.user_id)
        return dispute

    async def add_message(
        self,
        session: AsyncSession,
        dispute_id: str,
        actor: Actor,
        message: str,
        *,
        attachments: Optional[List[str]] = None,
    ) -> DisputeMessage:
        if not message or not message.strip():
            raise ValidationFailed("Message text is required")

        async with atomic(session):
            dispute = await self._lock(session, dispute_id)
            self._ensure_party_or_admin(dispute, actor)
            self._ensure_active(dispute)

            entry = await self.message_repo.create(
                session,
                dispute_id=dispute.id,
                sender_id=actor.user_id,
                message=message.strip(),
                attachments=list(attachments or []),
                is_admin=actor.is_admin,
            )
            self._emit(
                session, EventName.DISPUTE_MESSAGE_ADDED, dispute,
                message_id=entry.id, sender_id=actor.user_id,
            )

        logger.info("dispute_message_added dispute=%s message=%s sender=%s", dispute.id, entry.id, actor.user_id)
        return entry

    async def add_evidence(
        self,
        session: AsyncSession,
        dispute_id: str,
        actor: Actor,
        evidence: dict[str, Any],
    ) -> Dispute:
        async with atomic(session):
            dispute = await self._lock(session, dispute_id)
            self._ensure_party_or_admin(dispute, actor)
            self._ensure_active(dispute)

            item = parse_evidence(evidence, uploaded_by=actor.user_id).model_dump(mode="json")
            # Lista nueva: JSON no rastrea mutaciones in-place
            dispute.evidence = [*(dispute.evidence or []), item]
            await session.flush()
            self._emit(
                session, EventName.DISPUTE_EVIDENCE_ADDED, dispute,
                evidence_type=item["type"], uploaded_by=actor.user_id,
            )

        logger.info("dispute_evidence_added dispute=%s type=%s by=%s", dispute.id, item["type"], actor.user_id)
        return dispute

    # ------------------------------------------------------------------
    # resolve / close
    # ------------------------------------------------------------------

    async def resolve(
        self,
        session: AsyncSession,
        dispute_id: str,
        actor: Actor,
        resolution: Resolution,
    ) -> Dispute:
        """
        Aplica la resolución: split de escrow + orden completed/refunded.

        Raises:
            NotAuthorized: no es admin
            InvalidState: disputa no activa u orden no está disputed
            ValidationFailed: split inconsistente con lo retenido
        """
        if not (actor.is_admin or actor.is_system):
            raise NotAuthorized("Only admins may resolve disputes")

        async with atomic(session):
            dispute = await self._lock(session, dispute_id)
            self._ensure_active(dispute)
            order = await self._disputed_order(session, dispute)

            escrow = await self.escrow.get_escrow(session, order.id, for_update=True)
            if escrow is None:
                raise InvalidState(f"Order {order.id} has no escrow to resolve", order_id=order.id)
            refund, release = compute_split(resolution, escrow.amount)

            await self.escrow.split(
                session, order, refund, release,
                performed_by=actor.user_id,
                note=resolution.notes,
            )

            now = utcnow()
            dispute.status = DisputeStatus.RESOLVED
            dispute.resolution_type = resolution.resolution_type
            dispute.resolution = resolution.notes
            dispute.refund_amount = refund
            dispute.release_amount = release
            dispute.resolved_by = actor.user_id
            dispute.resolved_at = now
            await session.flush()

            target = OrderStatus.REFUNDED if refund == escrow.amount else OrderStatus.COMPLETED
            await self.orders.apply_dispute_transition(session, order, target, actor)
            self._emit(
                session, EventName.DISPUTE_RESOLVED, dispute,
                resolution_type=resolution.resolution_type.value,
                refund_amount=refund,
                release_amount=release,
            )

        logger.info(
            "dispute_resolved dispute=%s order=%s type=%s refund=%d release=%d by=%s",
            dispute.id, order.id, resolution.resolution_type.value, refund, release, actor.user_id,
        )
        return dispute

    async def close(
        self,
        session: AsyncSession,
        dispute_id: str,
        actor: Actor,
        *,
        notes: Optional[str] = None,
    ) -> Dispute:
        """Retiro de la disputa: la orden se completa con el pago normal al vendedor."""
        async with atomic(session):
            dispute = await self._lock(session, dispute_id)
            if not (actor.is_admin or actor.user_id == dispute.filed_by):
                raise NotAuthorized("Only an admin or the filer may close a dispute")
            self._ensure_active(dispute)
            order = await self._disputed_order(session, dispute)

            await self.escrow.release(
                session, order, order.seller_receives, order.seller_id,
                performed_by=actor.user_id,
                override_freeze=True,
            )

            dispute.status = DisputeStatus.CLOSED
            dispute.closed_by = actor.user_id
            dispute.closed_at = utcnow()
            dispute.resolution = notes
            await session.flush()

            await self.orders.apply_dispute_transition(session, order, OrderStatus.COMPLETED, actor)
            self._emit(session, EventName.DISPUTE_CLOSED, dispute, closed_by=actor.user_id)

        logger.info("dispute_closed dispute=%s order=%s by=%s", dispute.id, order.id, actor.user_id)
        return dispute

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    async def get_dispute(self, session: AsyncSession, dispute_id: str, actor: Actor) -> DisputeDetail:
        dispute = await self.dispute_repo.get(session, dispute_id)
        if dispute is None:
            raise NotFound(f"Dispute {dispute_id} not found", dispute_id=dispute_id)
        self._ensure_party_or_admin(dispute, actor)
        messages = await self.message_repo.list_for_dispute(session, dispute.id)
        return DisputeDetail(dispute=dispute, messages=messages)

    async def list_disputes(
        self,
        session: AsyncSession,
        actor: Actor,
        filters: Optional[DisputeFilters] = None,
    ) -> Sequence[Dispute]:
        user_id = None if actor.is_admin else actor.user_id
        return await self.dispute_repo.list_for_user(session, user_id, filters or DisputeFilters())

    async def dispute_stats(self, session: AsyncSession, actor: Actor) -> DisputeStats:
        return await self.dispute_repo.stats_for_user(session, actor.user_id)

    # ------------------------------------------------------------------
    # Sweep de plazos
    # ------------------------------------------------------------------

    async def overdue(self, session: AsyncSession, now: Optional[datetime] = None) -> list[str]:
        return await self.dispute_repo.ids_past_deadline(
            session, now or utcnow(), self.settings.sweep_batch_size
        )

    async def auto_resolve(
        self,
        session: AsyncSession,
        dispute_id: str,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Resuelve a favor del comprador una disputa open sin respuesta y con
        plazo vencido. False si otro worker ya la atendió o dejó de aplicar.
        """
        now = now or utcnow()
        async with atomic(session):
            dispute = await self._lock(session, dispute_id)
            if (
                dispute.status != DisputeStatus.OPEN
                or dispute.seller_response is not None
                or ensure_utc(dispute.deadline) > now
            ):
                return False

            await self.resolve(
                session,
                dispute_id,
                SYSTEM_ACTOR,
                Resolution(
                    ResolutionType.BUYER_FAVOR,
                    notes="Auto-resolved: no seller response before the deadline",
                ),
            )
            dispute.auto_resolved = True
            await session.flush()

        logger.info("dispute_auto_resolved dispute=%s", dispute_id)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _lock(self, session: AsyncSession, dispute_id: str) -> Dispute:
        dispute = await self.dispute_repo.get(session, dispute_id, for_update=True)
        if dispute is None:
            raise NotFound(f"Dispute {dispute_id} not found", dispute_id=dispute_id)
        return dispute

    async def _disputed_order(self, session: AsyncSession, dispute: Dispute) -> Order:
        order = await self.orders.lock_order(session, dispute.order_id)
        if order.status != OrderStatus.DISPUTED:
            raise InvalidState(
                f"Order {order.id} is {order.status.value}, not disputed",
                order_id=order.id,
            )
        return order

    @staticmethod
    def _ensure_active(dispute: Dispute) -> None:
        if not dispute.status.is_active:
            raise InvalidState(
                f"Dispute is already {dispute.status.value}",
                dispute_id=dispute.id,
            )

    @staticmethod
    def _ensure_party_or_admin(dispute: Dispute, actor: Actor) -> None:
        if not (dispute.is_party(actor.user_id) or actor.is_admin or actor.is_system):
            raise NotAuthorized("Dispute belongs to other users")

    def _emit(self, session: AsyncSession, name: EventName, dispute: Dispute, **payload: Any) -> None:
        enqueue(
            session,
            self.event_bus,
            DomainEvent(
                name,
                aggregate_id=dispute.id,
                payload={
                    "dispute_number": dispute.dispute_number,
                    "order_id": dispute.order_id,
                    "status": dispute.status.value,
                    **payload,
                },
            ),
        )


__all__ = [
    "DisputeService",
    "DisputeDetail",
    "Resolution",
    "compute_split",
    "DUPLICATE_DISPUTE_MESSAGE",
]

# Fin del archivo tradevault/modules/disputes/services.py
