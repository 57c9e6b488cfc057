# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/repositories.py

Repositorios del ledger (wallets, asientos, cuentas bancarias).

Autor: TradeVault
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.shared.database.repository import BaseRepository
from .enums import TransactionStatus, TransactionType
from .models import BankAccount, Wallet, WalletTransaction

logger = logging.getLogger(__name__)


class WalletRepository(BaseRepository[Wallet]):
    """Repositorio para operaciones CRUD de Wallet."""

    def __init__(self) -> None:
        super().__init__(Wallet)

    async def get_by_user_id(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        for_update: bool = False,
    ) -> Optional[Wallet]:
        stmt = select(Wallet).where(Wallet.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self,
        session: AsyncSession,
        user_id: str,
        *,
        currency: str,
        for_update: bool = False,
    ) -> tuple[Wallet, bool]:
        """
        Obtiene o crea la wallet del usuario.

        Usa SAVEPOINT para manejar concurrencia sin invalidar
        la transacción principal del request.

        Returns:
            Tuple (wallet, created: bool)
        """
        wallet = await self.get_by_user_id(session, user_id, for_update=for_update)
        if wallet:
            return wallet, False

        try:
            async with session.begin_nested():
                wallet = Wallet(
                    user_id=user_id,
                    currency=currency,
                    available_balance=0,
                    pending_balance=0,
                    total_earned=0,
                    total_spent=0,
                    total_withdrawn=0,
                )
                session.add(wallet)
                await session.flush()
            logger.info("wallet_created user=%s currency=%s", user_id, currency)
            return wallet, True
        except IntegrityError:
            logger.debug("wallet_exists user=%s (concurrent create)", user_id)

        wallet = await self.get_by_user_id(session, user_id, for_update=for_update)
        if wallet:
            return wallet, False

        raise RuntimeError(f"Failed to get or create wallet for user {user_id}")


@dataclass
class TransactionFilters:
    tx_type: Optional[TransactionType] = None
    status: Optional[TransactionStatus] = None
    order_id: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    limit: int = 50
    offset: int = 0


class WalletTransactionRepository(BaseRepository[WalletTransaction]):
    """Repositorio para el ledger append-only."""

    def __init__(self) -> None:
        super().__init__(WalletTransaction)

    async def get_by_reference(
        self,
        session: AsyncSession,
        wallet_id: int,
        reference: str,
    ) -> Optional[WalletTransaction]:
        stmt = select(WalletTransaction).where(
            WalletTransaction.wallet_id == wallet_id,
            WalletTransaction.reference == reference,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_wallet(
        self,
        session: AsyncSession,
        wallet_id: int,
        filters: Optional[TransactionFilters] = None,
    ) -> Sequence[WalletTransaction]:
        """Asientos de una wallet, más recientes primero."""
        filters = filters or TransactionFilters()
        stmt = select(WalletTransaction).where(WalletTransaction.wallet_id == wallet_id)

        if filters.tx_type is not None:
            stmt = stmt.where(WalletTransaction.tx_type == filters.tx_type)
        if filters.status is not None:
            stmt = stmt.where(WalletTransaction.status == filters.status)
        if filters.order_id is not None:
            stmt = stmt.where(WalletTransaction.order_id == filters.order_id)
        if filters.created_from is not None:
            stmt = stmt.where(WalletTransaction.created_at >= filters.created_from)
        if filters.created_to is not None:
            stmt = stmt.where(WalletTransaction.created_at <= filters.created_to)

        stmt = (
            stmt.order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_for_order(
        self,
        session: AsyncSession,
        order_id: str,
    ) -> Sequence[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.order_id == order_id)
            .order_by(WalletTransaction.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def sum_net(
        self,
        session: AsyncSession,
        wallet_id: int,
        *,
        status: TransactionStatus,
        tx_type: Optional[TransactionType] = None,
    ) -> int:
        stmt = select(func.coalesce(func.sum(WalletTransaction.net_amount), 0)).where(
            WalletTransaction.wallet_id == wallet_id,
            WalletTransaction.status == status,
        )
        if tx_type is not None:
            stmt = stmt.where(WalletTransaction.tx_type == tx_type)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def aggregate_by_type(
        self,
        session: AsyncSession,
        wallet_id: int,
    ) -> tuple[dict[TransactionType, int], int]:
        """
        Suma |net_amount| de asientos completed por tipo y cuenta los pending.

        Returns:
            ({tipo: total}, pending_count)
        """
        stmt = (
            select(
                WalletTransaction.tx_type,
                func.coalesce(func.sum(func.abs(WalletTransaction.net_amount)), 0),
            )
            .where(
                WalletTransaction.wallet_id == wallet_id,
                WalletTransaction.status == TransactionStatus.COMPLETED,
            )
            .group_by(WalletTransaction.tx_type)
        )
        totals = {
            (row[0] if isinstance(row[0], TransactionType) else TransactionType(row[0])): int(row[1])
            for row in (await session.execute(stmt)).all()
        }

        pending_stmt = select(
            func.coalesce(
                func.sum(case((WalletTransaction.status == TransactionStatus.PENDING, 1), else_=0)),
                0,
            )
        ).where(WalletTransaction.wallet_id == wallet_id)
        pending_count = int((await session.execute(pending_stmt)).scalar_one())
        return totals, pending_count


class BankAccountRepository(BaseRepository[BankAccount]):
    """Repositorio de cuentas bancarias."""

    def __init__(self) -> None:
        super().__init__(BankAccount)

    async def list_for_user(self, session: AsyncSession, user_id: str) -> Sequence[BankAccount]:
        stmt = (
            select(BankAccount)
            .where(BankAccount.user_id == user_id)
            .order_by(BankAccount.is_default.desc(), BankAccount.created_at.desc(), BankAccount.id.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_for_user(self, session: AsyncSession, user_id: str) -> int:
        stmt = select(func.count(BankAccount.id)).where(BankAccount.user_id == user_id)
        return int((await session.execute(stmt)).scalar_one())

    async def clear_default(self, session: AsyncSession, user_id: str) -> None:
        await session.execute(
            update(BankAccount)
            .where(BankAccount.user_id == user_id, BankAccount.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )

    async def delete(self, session: AsyncSession, account: BankAccount) -> None:
        await session.delete(account)
        await session.flush()


__all__ = [
    "WalletRepository",
    "WalletTransactionRepository",
    "BankAccountRepository",
    "TransactionFilters",
]

# Fin del archivo tradevault/modules/ledger/repositories.py
