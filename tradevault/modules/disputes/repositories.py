# -*- coding: utf-8 -*-
"""
tradevault/modules/disputes/repositories.py

Repositorios de disputas y mensajes.

Autor: TradeVault
Fecha: 2026-10-12
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.shared.database.repository import BaseRepository
from .enums import DisputeStatus
from .models import Dispute, DisputeMessage


@dataclass
class DisputeFilters:
    status: Optional[DisputeStatus] = None
    limit: int = 50
    offset: int = 0


@dataclass
class DisputeStats:
    total: int = 0
    open: int = 0
    under_review: int = 0
    resolved: int = 0
    as_filed_by: int = 0
    as_against: int = 0


class DisputeRepository(BaseRepository[Dispute]):

    def __init__(self) -> None:
        super().__init__(Dispute)

    async def get_by_order_id(self, session: AsyncSession, order_id: str) -> Optional[Dispute]:
        result = await session.execute(select(Dispute).where(Dispute.order_id == order_id))
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        session: AsyncSession,
        user_id: Optional[str],
        filters: DisputeFilters,
    ) -> Sequence[Dispute]:
        """Disputas donde el usuario es parte (None = todas, para admin)."""
        stmt = select(Dispute)
        if user_id is not None:
            stmt = stmt.where(or_(Dispute.filed_by == user_id, Dispute.against_id == user_id))
        if filters.status is not None:
            stmt = stmt.where(Dispute.status == filters.status)
        stmt = stmt.order_by(Dispute.created_at.desc(), Dispute.id.desc()).limit(filters.limit).offset(filters.offset)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def stats_for_user(self, session: AsyncSession, user_id: str) -> DisputeStats:
        def _when(cond):
            return func.coalesce(func.sum(case((cond, 1), else_=0)), 0)

        stmt = select(
            func.count(Dispute.id),
            _when(Dispute.status == DisputeStatus.OPEN),
            _when(Dispute.status == DisputeStatus.UNDER_REVIEW),
            _when(Dispute.status == DisputeStatus.RESOLVED),
            _when(Dispute.filed_by == user_id),
            _when(Dispute.against_id == user_id),
        ).where(or_(Dispute.filed_by == user_id, Dispute.against_id == user_id))

        row = (await session.execute(stmt)).one()
        return DisputeStats(*(int(v) for v in row))

    async def ids_past_deadline(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int,
    ) -> list[str]:
        """Disputas open, sin respuesta del vendedor y con plazo vencido."""
        stmt = (
            select(Dispute.id)
            .where(
                Dispute.status == DisputeStatus.OPEN,
                Dispute.seller_response.is_(None),
                Dispute.deadline <= now,
            )
            .order_by(Dispute.deadline.asc())
            .limit(limit)
        )
        return list((await session.execute(stmt)).scalars().all())


class DisputeMessageRepository(BaseRepository[DisputeMessage]):

    def __init__(self) -> None:
        super().__init__(DisputeMessage)

    async def list_for_dispute(self, session: AsyncSession, dispute_id: str) -> Sequence[DisputeMessage]:
        stmt = (
            select(DisputeMessage)
            .where(DisputeMessage.dispute_id == dispute_id)
            .order_by(DisputeMessage.created_at.asc(), DisputeMessage.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = [
    "DisputeRepository",
    "DisputeMessageRepository",
    "DisputeFilters",
    "DisputeStats",
]

# Fin del archivo tradevault/modules/disputes/repositories.py
