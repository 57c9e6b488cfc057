# -*- coding: utf-8 -*-
"""
tradevault/modules/escrow/repositories.py

Repositorios del escrow.

Autor: TradeVault
Fecha: 2026-10-09
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.shared.database.repository import BaseRepository
from .enums import EscrowOperationType
from .models import EscrowOperation, EscrowTransaction


class EscrowRepository(BaseRepository[EscrowTransaction]):

    def __init__(self) -> None:
        super().__init__(EscrowTransaction)

    async def get_by_order_id(
        self,
        session: AsyncSession,
        order_id: str,
        *,
        for_update: bool = False,
    ) -> Optional[EscrowTransaction]:
        stmt = select(EscrowTransaction).where(EscrowTransaction.order_id == order_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


class EscrowOperationRepository(BaseRepository[EscrowOperation]):

    def __init__(self) -> None:
        super().__init__(EscrowOperation)

    async def get_for_order(
        self,
        session: AsyncSession,
        order_id: str,
        operation_type: EscrowOperationType,
    ) -> Optional[EscrowOperation]:
        stmt = select(EscrowOperation).where(
            EscrowOperation.order_id == order_id,
            EscrowOperation.operation_type == operation_type,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_order(self, session: AsyncSession, order_id: str) -> Sequence[EscrowOperation]:
        stmt = (
            select(EscrowOperation)
            .where(EscrowOperation.order_id == order_id)
            .order_by(EscrowOperation.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["EscrowRepository", "EscrowOperationRepository"]

# Fin del archivo tradevault/modules/escrow/repositories.py
