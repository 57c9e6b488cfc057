# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/store.py

LedgerStore: único punto que modifica saldos de wallets.

Reglas:
- post() agrega un asiento y actualiza los buckets de forma incremental.
- Un débito que dejaría available_balance < 0 falla con InsufficientFunds.
- Asiento completed: su net_amount impacta available_balance.
- Asiento pending (solo retiros): el monto pasa de available a pending.
- settle() liquida un asiento pending exactamente una vez
  (completed: sale de pending; failed: vuelve a available).

Invariante de reconciliación:
    Σ net_amount(asientos completed) == available_balance + pending_balance

Autor: TradeVault
Fecha: 2026-10-08
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.errors import InsufficientFunds, InvalidState, ValidationFailed
from tradevault.shared.utils.datetime_helpers import utcnow
from .enums import TransactionStatus, TransactionType
from .models import Wallet, WalletTransaction
from .repositories import WalletRepository, WalletTransactionRepository

logger = logging.getLogger(__name__)


@dataclass
class Posting:
    """Asiento a registrar. net_amount por defecto: amount - fee en abonos, amount en cargos."""
    tx_type: TransactionType
    amount: int
    fee: int = 0
    net_amount: Optional[int] = None
    status: TransactionStatus = TransactionStatus.COMPLETED
    order_id: Optional[str] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def resolved_net(self) -> int:
        if self.net_amount is not None:
            return self.net_amount
        return self.amount - self.fee if self.amount > 0 else self.amount


class LedgerStore:
    """Append-and-aggregate sobre wallets / wallet_transactions."""

    def __init__(
        self,
        wallet_repo: Optional[WalletRepository] = None,
        tx_repo: Optional[WalletTransactionRepository] = None,
        *,
        currency: str = "NGN",
    ):
        self.wallet_repo = wallet_repo or WalletRepository()
        self.tx_repo = tx_repo or WalletTransactionRepository()
        self.currency = currency

    async def lock_wallet(self, session: AsyncSession, user_id: str) -> Wallet:
        """Wallet del usuario bajo FOR UPDATE (se crea si no existe)."""
        wallet, _ = await self.wallet_repo.get_or_create(
            session, user_id, currency=self.currency, for_update=True
        )
        return wallet

    async def post(
        self,
        session: AsyncSession,
        wallet: Wallet,
        posting: Posting,
    ) -> WalletTransaction:
        """
        Registra un asiento y actualiza saldos. La wallet debe venir bloqueada.

        Idempotente vía posting.reference: si ya existe un asiento con la
        misma referencia en la wallet, se devuelve sin volver a aplicar.

        Raises:
            ValidationFailed: monto cero o estado inicial inválido
            InsufficientFunds: el débito dejaría available_balance < 0
        """
        if posting.amount == 0:
            raise ValidationFailed("Posting amount cannot be zero")
        if posting.status == TransactionStatus.FAILED:
            raise ValidationFailed("Postings start as completed or pending")

        net = posting.resolved_net()
        if posting.status == TransactionStatus.PENDING and net >= 0:
            raise ValidationFailed("Only debits may be posted as pending")

        if posting.reference:
            existing = await self.tx_repo.get_by_reference(session, wallet.id, posting.reference)
            if existing:
                logger.info(
                    "ledger_post_replay wallet=%s reference=%s tx=%s",
                    wallet.id, posting.reference, existing.id,
                )
                return existing

        if net < 0 and wallet.available_balance + net < 0:
            raise InsufficientFunds(
                f"Insufficient funds: available={wallet.available_balance}, required={-net}",
                available=wallet.available_balance,
                required=-net,
            )

        wallet.available_balance += net
        if posting.status == TransactionStatus.PENDING:
            wallet.pending_balance += -net
        else:
            self._apply_totals(wallet, posting.tx_type, posting.amount, net)

        tx = WalletTransaction(
            wallet_id=wallet.id,
            tx_type=posting.tx_type,
            amount=posting.amount,
            fee=posting.fee,
            net_amount=net,
            balance_after=wallet.available_balance,
            status=posting.status,
            order_id=posting.order_id,
            reference=posting.reference,
            description=posting.description,
            tx_metadata=dict(posting.metadata),
            settled_at=utcnow() if posting.status == TransactionStatus.COMPLETED else None,
        )
        session.add(tx)
        await session.flush()

        logger.info(
            "ledger_posted wallet=%s type=%s amount=%+d net=%+d status=%s available=%d pending=%d order=%s",
            wallet.id, posting.tx_type.value, posting.amount, net, posting.status.value,
            wallet.available_balance, wallet.pending_balance, posting.order_id,
        )
        return tx

    async def settle(
        self,
        session: AsyncSession,
        wallet: Wallet,
        tx: WalletTransaction,
        outcome: TransactionStatus,
        *,
        note: Optional[str] = None,
    ) -> WalletTransaction:
        """
        Liquida un asiento pending. Es el único cambio permitido sobre un
        asiento existente; el monto nunca se edita.

        Raises:
            InvalidState: el asiento no está pending
            ValidationFailed: outcome no es completed/failed
        """
        if outcome not in (TransactionStatus.COMPLETED, TransactionStatus.FAILED):
            raise ValidationFailed("Settlement outcome must be completed or failed")
        if tx.status != TransactionStatus.PENDING:
            raise InvalidState(
                f"Transaction {tx.id} is already {tx.status.value}",
                transaction_id=tx.id,
            )
        if tx.wallet_id != wallet.id:
            raise ValidationFailed("Transaction does not belong to wallet")

        held = -tx.net_amount
        wallet.pending_balance -= held
        if outcome == TransactionStatus.COMPLETED:
            self._apply_totals(wallet, tx.tx_type, tx.amount, tx.net_amount)
        else:
            wallet.available_balance += held

        tx.status = outcome
        tx.settled_at = utcnow()
        if note:
            tx.tx_metadata = {**(tx.tx_metadata or {}), "settlement_note": note}
        await session.flush()

        logger.info(
            "ledger_settled wallet=%s tx=%s outcome=%s amount=%d available=%d pending=%d",
            wallet.id, tx.id, outcome.value, held, wallet.available_balance, wallet.pending_balance,
        )
        return tx

    @staticmethod
    def _apply_totals(wallet: Wallet, tx_type: TransactionType, amount: int, net: int) -> None:
        if tx_type in (TransactionType.ESCROW_RELEASE, TransactionType.SALE, TransactionType.FEE):
            wallet.total_earned += net
        elif tx_type in (TransactionType.ESCROW_HOLD, TransactionType.PURCHASE):
            wallet.total_spent += -net
        elif tx_type == TransactionType.REFUND:
            wallet.total_spent = max(0, wallet.total_spent - net)
        elif tx_type == TransactionType.WITHDRAWAL:
            wallet.total_withdrawn += -net


__all__ = ["LedgerStore", "Posting"]

# Fin del archivo tradevault/modules/ledger/store.py
