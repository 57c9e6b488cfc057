# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/services.py

Servicios de wallet sobre el LedgerStore.

Provee lógica de negocio para:
- Consulta de wallet, asientos y estadísticas
- Depósitos (fondeo externo ya confirmado por la pasarela)
- Retiros: solicitud (pending) y liquidación completed/failed (admin)
- Cuentas bancarias con una sola cuenta por defecto por usuario
- Reconciliación de saldos contra el ledger

Todas las mutaciones corren dentro de atomic(session).

Autor: TradeVault
Fecha: 2026-10-08
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.errors import NotAuthorized, NotFound, ValidationFailed
from tradevault.shared.auth_context import Actor
from tradevault.shared.config.settings_escrow import EscrowSettings
from tradevault.shared.database.unit_of_work import atomic
from tradevault.shared.events import DomainEvent, EventBus, EventName, enqueue
from .enums import (
    DEPOSIT_TYPES,
    EARNED_TYPES,
    SPENT_TYPES,
    TransactionStatus,
    TransactionType,
)
from .models import BankAccount, Wallet, WalletTransaction
from .reconciliation import ReconciliationResult, reconcile_wallet
from .repositories import (
    BankAccountRepository,
    TransactionFilters,
    WalletRepository,
    WalletTransactionRepository,
)
from .store import LedgerStore, Posting

logger = logging.getLogger(__name__)


@dataclass
class WalletStats:
    """Agregado de asientos completed por categoría."""
    total_deposits: int
    total_withdrawals: int
    total_spent: int
    total_earned: int
    pending_transactions: int


@dataclass
class BankAccountInput:
    bank_name: str
    bank_code: str
    account_number: str
    account_name: str
    is_default: bool = False


class WalletService:
    """
    Servicio de wallets: lecturas, depósitos, retiros y cuentas bancarias.
    """

    def __init__(
        self,
        settings: Optional[EscrowSettings] = None,
        *,
        ledger: Optional[LedgerStore] = None,
        wallet_repo: Optional[WalletRepository] = None,
        tx_repo: Optional[WalletTransactionRepository] = None,
        bank_repo: Optional[BankAccountRepository] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.settings = settings or EscrowSettings()
        self.wallet_repo = wallet_repo or WalletRepository()
        self.tx_repo = tx_repo or WalletTransactionRepository()
        self.bank_repo = bank_repo or BankAccountRepository()
        self.ledger = ledger or LedgerStore(
            self.wallet_repo, self.tx_repo, currency=self.settings.currency
        )
        self.event_bus = event_bus

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    async def get_wallet(self, session: AsyncSession, user_id: str) -> Wallet:
        """Wallet del usuario; se crea vacía en el primer acceso."""
        async with atomic(session):
            wallet, _ = await self.wallet_repo.get_or_create(
                session, user_id, currency=self.settings.currency
            )
        return wallet

    async def get_wallet_by_id(
        self,
        session: AsyncSession,
        wallet_id: int,
        actor: Actor,
    ) -> Wallet:
        wallet = await self.wallet_repo.get(session, wallet_id)
        if wallet is None:
            raise NotFound(f"Wallet {wallet_id} not found", wallet_id=wallet_id)
        self._ensure_owner_or_admin(wallet, actor)
        return wallet

    async def list_transactions(
        self,
        session: AsyncSession,
        wallet_id: int,
        actor: Actor,
        filters: Optional[TransactionFilters] = None,
    ) -> Sequence[WalletTransaction]:
        await self.get_wallet_by_id(session, wallet_id, actor)
        return await self.tx_repo.list_for_wallet(session, wallet_id, filters)

    async def wallet_stats(
        self,
        session: AsyncSession,
        wallet_id: int,
        actor: Actor,
    ) -> WalletStats:
        await self.get_wallet_by_id(session, wallet_id, actor)
        totals, pending_count = await self.tx_repo.aggregate_by_type(session, wallet_id)

        return WalletStats(
            total_deposits=sum(totals.get(t, 0) for t in DEPOSIT_TYPES),
            total_withdrawals=totals.get(TransactionType.WITHDRAWAL, 0),
            total_spent=sum(totals.get(t, 0) for t in SPENT_TYPES),
            total_earned=sum(totals.get(t, 0) for t in EARNED_TYPES),
            pending_transactions=pending_count,
        )

    # ------------------------------------------------------------------
    # Depósitos
    # ------------------------------------------------------------------

    async def deposit(
        self,
        session: AsyncSession,
        actor: Actor,
        amount: int,
        *,
        reference: str,
        description: Optional[str] = None,
    ) -> WalletTransaction:
        """
        Acredita fondos ya cobrados por la pasarela.

        Idempotente vía reference (p.ej. ID del cargo en la pasarela).
        """
        if amount <= 0:
            raise ValidationFailed("Deposit amount must be positive")
        if not reference:
            raise ValidationFailed("Deposit reference is required")

        async with atomic(session):
            wallet = await self.ledger.lock_wallet(session, actor.user_id)
            tx = await self.ledger.post(
                session,
                wallet,
                Posting(
                    tx_type=TransactionType.DEPOSIT,
                    amount=amount,
                    reference=f"deposit:{reference}",
                    description=description or "Wallet top-up",
                    metadata={"gateway_reference": reference},
                ),
            )
        logger.info("deposit_posted wallet=%s tx=%s amount=%d reference=%s", wallet.id, tx.id, amount, reference)
        return tx

    # ------------------------------------------------------------------
    # Retiros
    # ------------------------------------------------------------------

    async def request_withdrawal(
        self,
        session: AsyncSession,
        wallet_id: int,
        actor: Actor,
        amount: int,
        bank_account_id: int,
        *,
        idempotency_key: Optional[str] = None,
    ) -> WalletTransaction:
        """
        Crea un asiento de retiro pending (-amount) y aparta los fondos.

        Raises:
            ValidationFailed: monto menor al mínimo
            NotFound: cuenta bancaria inexistente o ajena
            InsufficientFunds: available_balance < amount
        """
        if amount < max(1, self.settings.min_withdrawal_amount):
            raise ValidationFailed(
                f"Minimum withdrawal is {self.settings.min_withdrawal_amount}",
                amount=amount,
            )

        async with atomic(session):
            wallet = await self.wallet_repo.get(session, wallet_id, for_update=True)
            if wallet is None:
                raise NotFound(f"Wallet {wallet_id} not found", wallet_id=wallet_id)
            if wallet.user_id != actor.user_id:
                raise NotAuthorized("Only the wallet owner may withdraw")

            account = await self.bank_repo.get(session, bank_account_id)
            if account is None or account.user_id != wallet.user_id:
                raise NotFound(
                    f"Bank account {bank_account_id} not found",
                    bank_account_id=bank_account_id,
                )

            tx = await self.ledger.post(
                session,
                wallet,
                Posting(
                    tx_type=TransactionType.WITHDRAWAL,
                    amount=-amount,
                    status=TransactionStatus.PENDING,
                    reference=f"withdrawal:{idempotency_key}" if idempotency_key else None,
                    description=f"Withdrawal to {account.bank_name} {account.masked_account_number}",
                    metadata={"bank_account_id": account.id},
                ),
            )
            enqueue(
                session,
                self.event_bus,
                DomainEvent(
                    EventName.WITHDRAWAL_REQUESTED,
                    aggregate_id=str(tx.id),
                    payload={"wallet_id": wallet.id, "amount": amount, "bank_account_id": account.id},
                ),
            )

        logger.info(
            "withdrawal_requested wallet=%s tx=%s amount=%d bank_account=%s",
            wallet_id, tx.id, amount, bank_account_id,
        )
        return tx

    async def complete_withdrawal(
        self,
        session: AsyncSession,
        tx_id: int,
        actor: Actor,
    ) -> WalletTransaction:
        return await self._settle_withdrawal(session, tx_id, actor, TransactionStatus.COMPLETED)

    async def fail_withdrawal(
        self,
        session: AsyncSession,
        tx_id: int,
        actor: Actor,
        *,
        reason: Optional[str] = None,
    ) -> WalletTransaction:
        return await self._settle_withdrawal(
            session, tx_id, actor, TransactionStatus.FAILED, note=reason
        )

    async def _settle_withdrawal(
        self,
        session: AsyncSession,
        tx_id: int,
        actor: Actor,
        outcome: TransactionStatus,
        *,
        note: Optional[str] = None,
    ) -> WalletTransaction:
        if not (actor.is_admin or actor.is_system):
            raise NotAuthorized("Only admins may settle withdrawals")

        async with atomic(session):
            tx = await self.tx_repo.get(session, tx_id, for_update=True)
            if tx is None or tx.tx_type != TransactionType.WITHDRAWAL:
                raise NotFound(f"Withdrawal {tx_id} not found", transaction_id=tx_id)

            wallet = await self.wallet_repo.get(session, tx.wallet_id, for_update=True)
            await self.ledger.settle(session, wallet, tx, outcome, note=note)
            enqueue(
                session,
                self.event_bus,
                DomainEvent(
                    EventName.WITHDRAWAL_SETTLED,
                    aggregate_id=str(tx.id),
                    payload={"wallet_id": wallet.id, "outcome": outcome.value, "amount": -tx.net_amount},
                ),
            )
        return tx

    # ------------------------------------------------------------------
    # Cuentas bancarias
    # ------------------------------------------------------------------

    async def add_bank_account(
        self,
        session: AsyncSession,
        actor: Actor,
        data: BankAccountInput,
    ) -> BankAccount:
        """La primera cuenta del usuario queda como default."""
        async with atomic(session):
            existing = await self.bank_repo.count_for_user(session, actor.user_id)
            make_default = data.is_default or existing == 0
            if make_default:
                await self.bank_repo.clear_default(session, actor.user_id)

            account = await self.bank_repo.create(
                session,
                user_id=actor.user_id,
                bank_name=data.bank_name,
                bank_code=data.bank_code,
                account_number=data.account_number,
                account_name=data.account_name,
                is_default=make_default,
                is_verified=False,
            )
        logger.info("bank_account_added user=%s account=%s default=%s", actor.user_id, account.id, make_default)
        return account

    async def list_bank_accounts(self, session: AsyncSession, actor: Actor) -> Sequence[BankAccount]:
        return await self.bank_repo.list_for_user(session, actor.user_id)

    async def set_default_bank_account(
        self,
        session: AsyncSession,
        actor: Actor,
        account_id: int,
    ) -> BankAccount:
        async with atomic(session):
            account = await self._owned_account(session, actor, account_id)
            await self.bank_repo.clear_default(session, actor.user_id)
            account.is_default = True
            await session.flush()
        return account

    async def delete_bank_account(
        self,
        session: AsyncSession,
        actor: Actor,
        account_id: int,
    ) -> None:
        """Si se borra la cuenta default, la más reciente restante pasa a default."""
        async with atomic(session):
            account = await self._owned_account(session, actor, account_id)
            was_default = account.is_default
            await self.bank_repo.delete(session, account)

            if was_default:
                remaining = await self.bank_repo.list_for_user(session, actor.user_id)
                if remaining:
                    remaining[0].is_default = True
                    await session.flush()

    async def _owned_account(self, session: AsyncSession, actor: Actor, account_id: int) -> BankAccount:
        account = await self.bank_repo.get(session, account_id)
        if account is None or account.user_id != actor.user_id:
            raise NotFound(f"Bank account {account_id} not found", bank_account_id=account_id)
        return account

    # ------------------------------------------------------------------
    # Reconciliación
    # ------------------------------------------------------------------

    async def reconcile(
        self,
        session: AsyncSession,
        wallet_id: int,
        actor: Actor,
    ) -> ReconciliationResult:
        if not (actor.is_admin or actor.is_system):
            raise NotAuthorized("Only admins may reconcile wallets")
        return await reconcile_wallet(
            session, wallet_id, wallet_repo=self.wallet_repo, tx_repo=self.tx_repo
        )

    @staticmethod
    def _ensure_owner_or_admin(wallet: Wallet, actor: Actor) -> None:
        if wallet.user_id != actor.user_id and not (actor.is_admin or actor.is_system):
            raise NotAuthorized("Wallet belongs to another user")


__all__ = ["WalletService", "WalletStats", "BankAccountInput"]

# Fin del archivo tradevault/modules/ledger/services.py
