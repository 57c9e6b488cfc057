# -*- coding: utf-8 -*-
"""
tradevault/shared/database/repository.py

Repositorio base para operaciones async con SQLAlchemy.

Autor: TradeVault
Fecha: 2026-10-06
"""

from typing import Any, Type, TypeVar, Generic, Sequence, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")  # modelo ORM


class BaseRepository(Generic[T]):
    """Repositorio asincrónico base para CRUD común."""

    def __init__(self, model: Type[T]):
        self.model = model

    # -------------------------------------------------------------
    # CRUD básico
    # -------------------------------------------------------------
    async def get(
        self,
        session: AsyncSession,
        obj_id: Any,
        *,
        for_update: bool = False,
    ) -> Optional[T]:
        """
        Obtiene por PK. Con for_update=True emite SELECT ... FOR UPDATE y
        refresca la identidad en sesión (populate_existing) para leer el
        estado comprometido más reciente.
        """
        if not for_update:
            return await session.get(self.model, obj_id)

        stmt = (
            select(self.model)
            .where(self.model.id == obj_id)  # type: ignore[attr-defined]
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(self, session: AsyncSession) -> Sequence[T]:
        result = await session.execute(select(self.model))
        return result.scalars().all()

    async def create(self, session: AsyncSession, **kwargs) -> T:
        obj = self.model(**kwargs)
        session.add(obj)
        await session.flush()
        return obj


# Fin del archivo tradevault/shared/database/repository.py
