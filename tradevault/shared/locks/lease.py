# -*- coding: utf-8 -*-
"""
tradevault/shared/locks/lease.py

Lease lock atómico sobre la tabla distributed_locks.

Adquisición:
    1. Borra el lease si ya expiró.
    2. INSERT de la fila; la PK (lock_name) hace que solo un INSERT gane.
    3. IntegrityError → otro worker es líder: se devuelve None.

El TTL del lease es menor al intervalo del sweep, de modo que un worker
caído libera el liderazgo antes del siguiente tick.

Autor: TradeVault
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tradevault.shared.utils.datetime_helpers import utcnow

from .models import DistributedLock

logger = logging.getLogger(__name__)


class LeaseLock:
    """Lease con nombre, propietario y expiración."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory
        self.metrics = {"acquired": 0, "contended": 0, "released": 0}

    async def acquire(self, lock_name: str, ttl_seconds: int) -> Optional[str]:
        """Devuelve el token del lease o None si otro worker lo posee."""
        token = uuid.uuid4().hex
        now = utcnow()

        async with self.session_factory() as session:
            try:
                async with session.begin():
                    await session.execute(
                        delete(DistributedLock).where(
                            DistributedLock.lock_name == lock_name,
                            DistributedLock.expires_at <= now,
                        )
                    )
                    session.add(
                        DistributedLock(
                            lock_name=lock_name,
                            owner_token=token,
                            acquired_at=now,
                            expires_at=now + timedelta(seconds=ttl_seconds),
                        )
                    )
            except IntegrityError:
                self.metrics["contended"] += 1
                logger.debug("lease_contended lock=%s", lock_name)
                return None

        self.metrics["acquired"] += 1
        logger.debug("lease_acquired lock=%s token=%s ttl=%ss", lock_name, token[:8], ttl_seconds)
        return token

    async def release(self, lock_name: str, token: str) -> bool:
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(DistributedLock).where(
                        DistributedLock.lock_name == lock_name,
                        DistributedLock.owner_token == token,
                    )
                )
        released = (result.rowcount or 0) > 0
        if released:
            self.metrics["released"] += 1
        return released

    @asynccontextmanager
    async def hold(self, lock_name: str, ttl_seconds: int) -> AsyncIterator[bool]:
        """
        Context manager: produce True si este worker es líder.

            async with lease.hold("sweep:disputes", 55) as leader:
                if leader:
                    ...
        """
        token = await self.acquire(lock_name, ttl_seconds)
        try:
            yield token is not None
        finally:
            if token is not None:
                await self.release(lock_name, token)


__all__ = ["LeaseLock"]

# Fin del archivo tradevault/shared/locks/lease.py
