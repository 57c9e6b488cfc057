# -*- coding: utf-8 -*-
"""
tests/shared/locks/test_lease_lock.py

Lease con TTL sobre la tabla distributed_locks: un solo líder por nombre,
liberación por token y reclamo de leases vencidos.

Autor: TradeVault
Fecha: 2026-10-17
"""

from datetime import timedelta

from sqlalchemy import update

from tradevault.shared.locks.lease import LeaseLock
from tradevault.shared.locks.models import DistributedLock
from tradevault.shared.utils.datetime_helpers import utcnow


class TestLeaseLock:

    async def test_single_holder(self, db):
        lease = LeaseLock(db.session_factory)

        token = await lease.acquire("sweep:test", 30)
        rival = await lease.acquire("sweep:test", 30)

        assert token is not None
        assert rival is None
        assert lease.metrics == {"acquired": 1, "contended": 1, "released": 0}

    async def test_release_requires_owner_token(self, db):
        lease = LeaseLock(db.session_factory)
        token = await lease.acquire("sweep:test", 30)

        assert await lease.release("sweep:test", "not-mine") is False
        assert await lease.release("sweep:test", token) is True
        assert await lease.acquire("sweep:test", 30) is not None

    async def test_expired_lease_can_be_taken_over(self, db):
        lease = LeaseLock(db.session_factory)
        await lease.acquire("sweep:test", 30)

        async with db.session_scope() as s:
            await s.execute(
                update(DistributedLock)
                .where(DistributedLock.lock_name == "sweep:test")
                .values(expires_at=utcnow() - timedelta(seconds=1))
            )
            await s.commit()

        assert await lease.acquire("sweep:test", 30) is not None

    async def test_hold_reports_leadership_and_releases(self, db):
        lease = LeaseLock(db.session_factory)

        async with lease.hold("sweep:test", 30) as leader:
            assert leader is True
            async with lease.hold("sweep:test", 30) as follower:
                assert follower is False

        async with lease.hold("sweep:test", 30) as again:
            assert again is True

    async def test_names_are_independent(self, db):
        lease = LeaseLock(db.session_factory)

        assert await lease.acquire("sweep:a", 30) is not None
        assert await lease.acquire("sweep:b", 30) is not None


# Fin del archivo tests/shared/locks/test_lease_lock.py
