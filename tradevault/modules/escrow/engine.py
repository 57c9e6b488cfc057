# -*- coding: utf-8 -*-
"""
tradevault/modules/escrow/engine.py

Motor de escrow: hold / release / refund / freeze / split.

Contrato:
- Cada operación registra sus asientos en el ledger y actualiza el
  EscrowTransaction dentro de una sola unidad atómica (SAVEPOINT).
- release + refund (+ fee) nunca exceden lo retenido: exceder →
  EscrowOverdraw (fatal, sin clamp).
- Un asiento calculado que rompa la conservación → EscrowMismatch (fatal).
- Replay de (order_id, operation_type) ya aplicado → no-op exitoso.

El llamador debe tener la orden bloqueada (FOR UPDATE); las wallets se
bloquean aquí en orden estable de user_id.

Autor: TradeVault
Fecha: 2026-10-09
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.errors import Conflict, EscrowMismatch, EscrowOverdraw, InvalidState, NotFound
from tradevault.modules.ledger.enums import TransactionType
from tradevault.modules.ledger.models import Wallet, WalletTransaction
from tradevault.modules.ledger.store import LedgerStore, Posting
from tradevault.observability.metrics import record_integrity_error, record_posting
from tradevault.shared.config.settings_escrow import EscrowSettings
from tradevault.shared.database.unit_of_work import atomic
from tradevault.shared.events import DomainEvent, EventBus, EventName, enqueue
from tradevault.shared.utils.datetime_helpers import utcnow
from .enums import EscrowOperationType, EscrowStatus
from .models import EscrowOperation, EscrowTransaction
from .repositories import EscrowOperationRepository, EscrowRepository

if TYPE_CHECKING:
    from tradevault.modules.orders.models import Order

logger = logging.getLogger(__name__)


@dataclass
class EscrowResult:
    """Resultado de una operación de escrow."""
    escrow: EscrowTransaction
    operation: EscrowOperationType
    postings: List[WalletTransaction] = field(default_factory=list)
    replayed: bool = False


class EscrowEngine:
    """Operaciones de escrow sobre el LedgerStore."""

    def __init__(
        self,
        settings: Optional[EscrowSettings] = None,
        *,
        ledger: Optional[LedgerStore] = None,
        escrow_repo: Optional[EscrowRepository] = None,
        operation_repo: Optional[EscrowOperationRepository] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.settings = settings or EscrowSettings()
        self.ledger = ledger or LedgerStore(currency=self.settings.currency)
        self.escrow_repo = escrow_repo or EscrowRepository()
        self.operation_repo = operation_repo or EscrowOperationRepository()
        self.event_bus = event_bus

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    async def get_escrow(
        self,
        session: AsyncSession,
        order_id: str,
        *,
        for_update: bool = False,
    ) -> Optional[EscrowTransaction]:
        return await self.escrow_repo.get_by_order_id(session, order_id, for_update=for_update)

    # ------------------------------------------------------------------
    # hold
    # ------------------------------------------------------------------

    async def hold(
        self,
        session: AsyncSession,
        order: "Order",
        *,
        performed_by: Optional[str] = None,
    ) -> EscrowResult:
        """Retiene order.total_amount de la wallet del comprador."""
        async with atomic(session):
            replay = await self._replay(session, order, EscrowOperationType.HOLD)
            if replay:
                return replay

            amount = order.total_amount
            if order.price + order.buyer_fee != amount:
                self._fatal(
                    EscrowMismatch,
                    "mismatch",
                    f"Order {order.id} total_amount {amount} != price + buyer_fee",
                    order,
                )

            await self._record_operation(session, order, EscrowOperationType.HOLD, amount, performed_by)
            wallets = await self._lock_wallets(session, order.buyer_id)

            posting = await self.ledger.post(
                session,
                wallets[order.buyer_id],
                Posting(
                    tx_type=TransactionType.ESCROW_HOLD,
                    amount=-amount,
                    fee=order.buyer_fee,
                    net_amount=-amount,
                    order_id=order.id,
                    description=f"Escrow hold for order {order.order_number}",
                ),
            )

            now = utcnow()
            escrow = EscrowTransaction(
                order_id=order.id,
                amount=amount,
                currency=self.settings.currency,
                status=EscrowStatus.HELD,
                held_at=now,
                processed_by=performed_by,
            )
            session.add(escrow)
            await session.flush()

            self._emit(session, order, EscrowOperationType.HOLD, escrow, amount=amount)

        record_posting(EscrowOperationType.HOLD.value)
        logger.info("escrow_held order=%s amount=%d buyer=%s", order.id, amount, order.buyer_id)
        return EscrowResult(escrow, EscrowOperationType.HOLD, [posting])

    # ------------------------------------------------------------------
    # release (completion payout)
    # ------------------------------------------------------------------

    async def release(
        self,
        session: AsyncSession,
        order: "Order",
        amount: int,
        recipient_id: str,
        *,
        performed_by: Optional[str] = None,
        override_freeze: bool = False,
    ) -> EscrowResult:
        """
        Paga `amount` (== order.seller_receives) al vendedor y retiene el
        resto como comisión de plataforma.

        override_freeze solo lo usa el motor de disputas al cerrar una
        disputa sin split financiero.
        """
        async with atomic(session):
            replay = await self._replay(session, order, EscrowOperationType.RELEASE)
            if replay:
                return replay

            escrow = await self._held_escrow(session, order, override_freeze=override_freeze)
            fee = escrow.amount - amount

            self._check_overdraw(escrow, amount, order)
            if recipient_id != order.seller_id:
                self._fatal(EscrowMismatch, "mismatch", "Release recipient is not the seller", order)
            if amount != order.seller_receives or fee != order.buyer_fee + order.seller_fee:
                self._fatal(
                    EscrowMismatch,
                    "mismatch",
                    f"Release {amount} + fees {fee} does not conserve escrow {escrow.amount}",
                    order,
                )

            await self._record_operation(session, order, EscrowOperationType.RELEASE, amount, performed_by, escrow)
            platform_id = self.settings.platform_user_id
            wallets = await self._lock_wallets(session, recipient_id, platform_id)

            postings = [
                await self.ledger.post(
                    session,
                    wallets[recipient_id],
                    Posting(
                        tx_type=TransactionType.ESCROW_RELEASE,
                        amount=order.price,
                        fee=order.seller_fee,
                        net_amount=amount,
                        order_id=order.id,
                        description=f"Escrow release for order {order.order_number}",
                    ),
                )
            ]
            if fee > 0:
                postings.append(
                    await self.ledger.post(
                        session,
                        wallets[platform_id],
                        Posting(
                            tx_type=TransactionType.FEE,
                            amount=fee,
                            order_id=order.id,
                            description=f"Platform fees for order {order.order_number}",
                            metadata={"buyer_fee": order.buyer_fee, "seller_fee": order.seller_fee},
                        ),
                    )
                )

            escrow.release_amount += amount
            escrow.fee_amount += fee
            escrow.status = EscrowStatus.RELEASED
            escrow.released_at = utcnow()
            escrow.is_frozen = False
            escrow.processed_by = performed_by
            await self._flush_checked(session, escrow, order)

            self._emit(session, order, EscrowOperationType.RELEASE, escrow, amount=amount, fee=fee)

        record_posting(EscrowOperationType.RELEASE.value)
        logger.info(
            "escrow_released order=%s seller=%s amount=%d fee=%d",
            order.id, recipient_id, amount, fee,
        )
        return EscrowResult(escrow, EscrowOperationType.RELEASE, postings)

    # ------------------------------------------------------------------
    # refund (cancelación)
    # ------------------------------------------------------------------

    async def refund(
        self,
        session: AsyncSession,
        order: "Order",
        amount: int,
        recipient_id: str,
        *,
        performed_by: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> EscrowResult:
        """Devuelve al comprador todo lo retenido (sin comisiones)."""
        async with atomic(session):
            replay = await self._replay(session, order, EscrowOperationType.REFUND)
            if replay:
                return replay

            escrow = await self._held_escrow(session, order)
            self._check_overdraw(escrow, amount, order)
            if recipient_id != order.buyer_id:
                self._fatal(EscrowMismatch, "mismatch", "Refund recipient is not the buyer", order)
            if amount != escrow.remaining:
                self._fatal(
                    EscrowMismatch,
                    "mismatch",
                    f"Refund {amount} leaves {escrow.remaining - amount} unaccounted in escrow",
                    order,
                )

            await self._record_operation(session, order, EscrowOperationType.REFUND, amount, performed_by, escrow)
            wallets = await self._lock_wallets(session, recipient_id)

            posting = await self.ledger.post(
                session,
                wallets[recipient_id],
                Posting(
                    tx_type=TransactionType.REFUND,
                    amount=amount,
                    order_id=order.id,
                    description=f"Escrow refund for order {order.order_number}",
                    metadata={"reason": reason} if reason else {},
                ),
            )

            escrow.refund_amount += amount
            escrow.status = EscrowStatus.REFUNDED
            escrow.refunded_at = utcnow()
            escrow.processed_by = performed_by
            escrow.notes = reason
            await self._flush_checked(session, escrow, order)

            self._emit(session, order, EscrowOperationType.REFUND, escrow, amount=amount)

        record_posting(EscrowOperationType.REFUND.value)
        logger.info("escrow_refunded order=%s buyer=%s amount=%d", order.id, recipient_id, amount)
        return EscrowResult(escrow, EscrowOperationType.REFUND, [posting])

    # ------------------------------------------------------------------
    # freeze
    # ------------------------------------------------------------------

    async def freeze(
        self,
        session: AsyncSession,
        order: "Order",
        *,
        performed_by: Optional[str] = None,
    ) -> EscrowTransaction:
        """Bloquea release/refund ordinarios hasta resolver la disputa. Idempotente."""
        async with atomic(session):
            escrow = await self._held_escrow(session, order, override_freeze=True)
            if not escrow.is_frozen:
                escrow.is_frozen = True
                escrow.frozen_at = utcnow()
                escrow.processed_by = performed_by
                await session.flush()
                logger.info("escrow_frozen order=%s amount=%d", order.id, escrow.amount)
        return escrow

    # ------------------------------------------------------------------
    # split (resolución de disputa)
    # ------------------------------------------------------------------

    async def split(
        self,
        session: AsyncSession,
        order: "Order",
        refund_amount: int,
        release_amount: int,
        *,
        performed_by: Optional[str] = None,
        note: Optional[str] = None,
    ) -> EscrowResult:
        """
        Reparte lo retenido entre comprador y vendedor sin comisión:
        refund_amount + release_amount == escrow.amount.
        """
        async with atomic(session):
            replay = await self._replay(session, order, EscrowOperationType.SPLIT)
            if replay:
                return replay

            escrow = await self._held_escrow(session, order, override_freeze=True)
            if refund_amount < 0 or release_amount < 0:
                self._fatal(EscrowMismatch, "mismatch", "Split amounts cannot be negative", order)
            self._check_overdraw(escrow, refund_amount + release_amount, order)
            if refund_amount + release_amount != escrow.amount:
                self._fatal(
                    EscrowMismatch,
                    "mismatch",
                    f"Split {refund_amount} + {release_amount} != held {escrow.amount}",
                    order,
                )

            await self._record_operation(
                session, order, EscrowOperationType.SPLIT, escrow.amount, performed_by, escrow
            )
            wallets = await self._lock_wallets(session, order.buyer_id, order.seller_id)

            postings: List[WalletTransaction] = []
            now = utcnow()
            if refund_amount > 0:
                postings.append(
                    await self.ledger.post(
                        session,
                        wallets[order.buyer_id],
                        Posting(
                            tx_type=TransactionType.REFUND,
                            amount=refund_amount,
                            order_id=order.id,
                            description=f"Dispute refund for order {order.order_number}",
                        ),
                    )
                )
                escrow.refund_amount += refund_amount
                escrow.refunded_at = now
            if release_amount > 0:
                postings.append(
                    await self.ledger.post(
                        session,
                        wallets[order.seller_id],
                        Posting(
                            tx_type=TransactionType.ESCROW_RELEASE,
                            amount=release_amount,
                            order_id=order.id,
                            description=f"Dispute release for order {order.order_number}",
                        ),
                    )
                )
                escrow.release_amount += release_amount
                escrow.released_at = now

            if refund_amount == escrow.amount:
                escrow.status = EscrowStatus.REFUNDED
            elif release_amount == escrow.amount:
                escrow.status = EscrowStatus.RELEASED
            else:
                escrow.status = EscrowStatus.PARTIALLY_RELEASED
            escrow.is_frozen = False
            escrow.processed_by = performed_by
            escrow.notes = note
            await self._flush_checked(session, escrow, order)

            self._emit(
                session, order, EscrowOperationType.SPLIT, escrow,
                refund_amount=refund_amount, release_amount=release_amount,
            )

        record_posting(EscrowOperationType.SPLIT.value)
        logger.info(
            "escrow_split order=%s refund=%d release=%d status=%s",
            order.id, refund_amount, release_amount, escrow.status.value,
        )
        return EscrowResult(escrow, EscrowOperationType.SPLIT, postings)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _replay(
        self,
        session: AsyncSession,
        order: "Order",
        operation: EscrowOperationType,
    ) -> Optional[EscrowResult]:
        existing = await self.operation_repo.get_for_order(session, order.id, operation)
        if existing is None:
            return None
        escrow = await self.escrow_repo.get_by_order_id(session, order.id)
        logger.info("escrow_replay order=%s operation=%s", order.id, operation.value)
        return EscrowResult(escrow, operation, [], replayed=True)

    async def _record_operation(
        self,
        session: AsyncSession,
        order: "Order",
        operation: EscrowOperationType,
        amount: int,
        performed_by: Optional[str],
        escrow: Optional[EscrowTransaction] = None,
    ) -> EscrowOperation:
        record = EscrowOperation(
            order_id=order.id,
            escrow_id=escrow.id if escrow else None,
            operation_type=operation,
            amount=amount,
            performed_by=performed_by,
            created_at=utcnow(),
        )
        try:
            async with session.begin_nested():
                session.add(record)
                await session.flush()
        except IntegrityError as exc:
            raise Conflict(
                f"Escrow {operation.value} for order {order.id} is being applied concurrently",
                order_id=order.id,
            ) from exc
        return record

    async def _held_escrow(
        self,
        session: AsyncSession,
        order: "Order",
        *,
        override_freeze: bool = False,
    ) -> EscrowTransaction:
        escrow = await self.escrow_repo.get_by_order_id(session, order.id, for_update=True)
        if escrow is None:
            raise NotFound(f"No escrow held for order {order.id}", order_id=order.id)
        if escrow.status != EscrowStatus.HELD:
            raise InvalidState(
                f"Escrow for order {order.id} is already {escrow.status.value}",
                order_id=order.id,
            )
        if escrow.is_frozen and not override_freeze:
            raise InvalidState(
                f"Escrow for order {order.id} is frozen by a dispute",
                order_id=order.id,
            )
        return escrow

    async def _lock_wallets(self, session: AsyncSession, *user_ids: str) -> Dict[str, Wallet]:
        wallets: Dict[str, Wallet] = {}
        for user_id in sorted(set(user_ids)):
            wallets[user_id] = await self.ledger.lock_wallet(session, user_id)
        return wallets

    def _check_overdraw(self, escrow: EscrowTransaction, amount: int, order: "Order") -> None:
        if amount > escrow.remaining:
            self._fatal(
                EscrowOverdraw,
                "overdraw",
                f"Escrow for order {order.id} holds {escrow.remaining}, attempted {amount}",
                order,
            )

    async def _flush_checked(self, session: AsyncSession, escrow: EscrowTransaction, order: "Order") -> None:
        if escrow.status.is_terminal and escrow.remaining != 0:
            self._fatal(
                EscrowMismatch,
                "mismatch",
                f"Terminal escrow for order {order.id} leaves {escrow.remaining} unaccounted",
                order,
            )
        await session.flush()

    @staticmethod
    def _fatal(error_cls: type, kind: str, detail: str, order: "Order") -> None:
        record_integrity_error(kind)
        logger.error("escrow_integrity_error kind=%s order=%s detail=%s", kind, order.id, detail)
        raise error_cls(detail, order_id=order.id)

    def _emit(
        self,
        session: AsyncSession,
        order: "Order",
        operation: EscrowOperationType,
        escrow: EscrowTransaction,
        **amounts: int,
    ) -> None:
        enqueue(
            session,
            self.event_bus,
            DomainEvent(
                EventName.ESCROW_POSTED,
                aggregate_id=order.id,
                payload={
                    "operation": operation.value,
                    "escrow_status": escrow.status.value,
                    **amounts,
                },
            ),
        )


__all__ = ["EscrowEngine", "EscrowResult"]

# Fin del archivo tradevault/modules/escrow/engine.py
