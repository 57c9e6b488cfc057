# -*- coding: utf-8 -*-
"""
tradevault/modules/orders/repositories.py

Repositorio de órdenes: lecturas con lock, filtros, estadísticas y
selección de candidatas para los sweeps.

Autor: TradeVault
Fecha: 2026-10-10
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.shared.database.repository import BaseRepository
from .enums import OrderStatus
from .models import Order


@dataclass
class OrderFilters:
    buyer_id: Optional[str] = None
    seller_id: Optional[str] = None
    participant_id: Optional[str] = None  # buyer OR seller
    listing_id: Optional[str] = None
    statuses: list[OrderStatus] = field(default_factory=list)
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    limit: int = 50
    offset: int = 0


@dataclass
class OrderStats:
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    disputed: int = 0


class OrderRepository(BaseRepository[Order]):

    def __init__(self) -> None:
        super().__init__(Order)

    async def get_by_number(self, session: AsyncSession, order_number: str) -> Optional[Order]:
        result = await session.execute(select(Order).where(Order.order_number == order_number))
        return result.scalar_one_or_none()

    async def search(self, session: AsyncSession, filters: OrderFilters) -> Sequence[Order]:
        """Órdenes filtradas, más recientes primero."""
        stmt = select(Order)
        if filters.buyer_id:
            stmt = stmt.where(Order.buyer_id == filters.buyer_id)
        if filters.seller_id:
            stmt = stmt.where(Order.seller_id == filters.seller_id)
        if filters.participant_id:
            stmt = stmt.where(
                or_(Order.buyer_id == filters.participant_id, Order.seller_id == filters.participant_id)
            )
        if filters.listing_id:
            stmt = stmt.where(Order.listing_id == filters.listing_id)
        if filters.statuses:
            stmt = stmt.where(Order.status.in_(filters.statuses))
        if filters.created_from is not None:
            stmt = stmt.where(Order.created_at >= filters.created_from)
        if filters.created_to is not None:
            stmt = stmt.where(Order.created_at <= filters.created_to)

        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(filters.limit).offset(filters.offset)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def stats(
        self,
        session: AsyncSession,
        *,
        buyer_id: Optional[str] = None,
        seller_id: Optional[str] = None,
    ) -> OrderStats:
        def _count(status: OrderStatus):
            return func.coalesce(func.sum(case((Order.status == status, 1), else_=0)), 0)

        stmt = select(
            func.count(Order.id),
            _count(OrderStatus.PENDING),
            _count(OrderStatus.PROCESSING),
            _count(OrderStatus.COMPLETED),
            _count(OrderStatus.DISPUTED),
        )
        if buyer_id:
            stmt = stmt.where(Order.buyer_id == buyer_id)
        if seller_id:
            stmt = stmt.where(Order.seller_id == seller_id)

        row = (await session.execute(stmt)).one()
        return OrderStats(
            total=int(row[0]),
            pending=int(row[1]),
            processing=int(row[2]),
            completed=int(row[3]),
            disputed=int(row[4]),
        )

    async def ids_due_for_auto_complete(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int,
    ) -> list[str]:
        stmt = (
            select(Order.id)
            .where(Order.status == OrderStatus.DELIVERED, Order.auto_complete_at <= now)
            .order_by(Order.auto_complete_at.asc())
            .limit(limit)
        )
        return list((await session.execute(stmt)).scalars().all())

    async def ids_pending_expired(
        self,
        session: AsyncSession,
        cutoff: datetime,
        limit: int,
    ) -> list[str]:
        stmt = (
            select(Order.id)
            .where(Order.status == OrderStatus.PENDING, Order.created_at <= cutoff)
            .order_by(Order.created_at.asc())
            .limit(limit)
        )
        return list((await session.execute(stmt)).scalars().all())


__all__ = ["OrderRepository", "OrderFilters", "OrderStats"]

# Fin del archivo tradevault/modules/orders/repositories.py
