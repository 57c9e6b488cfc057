# -*- coding: utf-8 -*-
"""
tests/shared/scheduler/test_escrow_sweep_jobs.py

Sweeps de timeouts ejecutados a mano con un `now` adelantado:
- pending_expiry cancela órdenes sin pagar más viejas que el TTL
- order_auto_complete libera el escrow al vencer la revisión
- dispute_deadlines resuelve a favor del comprador sin respuesta
- solo el líder del lease procesa filas

Autor: TradeVault
Fecha: 2026-10-18
"""

from datetime import timedelta

import pytest

from tradevault.modules.disputes.enums import DisputeReason, DisputeStatus
from tradevault.modules.orders.enums import CancelledBy, OrderStatus
from tradevault.shared.locks.lease import LeaseLock
from tradevault.shared.scheduler.jobs import (
    register_escrow_sweep_jobs,
    sweep_dispute_deadlines,
    sweep_order_auto_complete,
    sweep_pending_expiry,
)
from tradevault.shared.scheduler.jobs.escrow_sweep_jobs import PENDING_EXPIRY
from tradevault.shared.scheduler.scheduler_service import SchedulerService
from tradevault.shared.utils.datetime_helpers import utcnow


@pytest.fixture
def lease(db):
    return LeaseLock(db.session_factory)


async def _order(db, services, order_id):
    async with db.session_scope() as s:
        return await services.orders.order_repo.get(s, order_id)


async def _balance(db, services, user_id):
    async with db.session_scope() as s:
        return (await services.wallets.get_wallet(s, user_id)).available_balance


# ============================================================================
# pending_expiry
# ============================================================================

class TestPendingExpiry:

    async def test_fresh_orders_are_left_alone(self, db, lease, services, make_order):
        order = await make_order()

        result = await sweep_pending_expiry(db, lease, services, now=utcnow() + timedelta(minutes=30))

        assert result.leader is True
        assert result.scanned == 0
        assert (await _order(db, services, order.id)).status == OrderStatus.PENDING

    async def test_expired_order_is_cancelled_by_system(self, db, lease, services, make_order):
        order = await make_order()

        result = await sweep_pending_expiry(db, lease, services, now=utcnow() + timedelta(minutes=61))

        assert (result.scanned, result.handled, result.failed) == (1, 1, 0)
        stored = await _order(db, services, order.id)
        assert stored.status == OrderStatus.CANCELLED
        assert stored.cancelled_by == CancelledBy.SYSTEM
        assert stored.cancellation_reason == "payment timeout"

    async def test_paid_orders_never_expire(self, db, lease, services, make_order):
        order = await make_order(OrderStatus.PAID)

        result = await sweep_pending_expiry(db, lease, services, now=utcnow() + timedelta(days=2))

        assert result.handled == 0
        assert (await _order(db, services, order.id)).status == OrderStatus.PAID


# ============================================================================
# order_auto_complete
# ============================================================================

class TestAutoComplete:

    async def test_before_review_window_nothing_happens(self, db, lease, services, make_order):
        order = await make_order(OrderStatus.DELIVERED)

        result = await sweep_order_auto_complete(db, lease, services, now=utcnow() + timedelta(hours=71))

        assert result.handled == 0
        assert (await _order(db, services, order.id)).status == OrderStatus.DELIVERED

    async def test_review_timeout_releases_to_seller(self, db, lease, services, make_order, seller):
        order = await make_order(OrderStatus.DELIVERED)

        result = await sweep_order_auto_complete(db, lease, services, now=utcnow() + timedelta(hours=73))

        assert result.handled == 1
        stored = await _order(db, services, order.id)
        assert stored.status == OrderStatus.COMPLETED
        assert stored.completed_at is not None
        assert await _balance(db, services, seller.user_id) == 40500
        assert await _balance(db, services, "platform") == 9000

    async def test_second_pass_finds_nothing(self, db, lease, services, make_order):
        await make_order(OrderStatus.DELIVERED)
        later = utcnow() + timedelta(hours=73)

        await sweep_order_auto_complete(db, lease, services, now=later)
        again = await sweep_order_auto_complete(db, lease, services, now=later)

        assert again.scanned == 0


# ============================================================================
# dispute_deadlines
# ============================================================================

class TestDisputeDeadlines:

    async def _open_dispute(self, db, services, make_order, buyer):
        order = await make_order(OrderStatus.PROCESSING, funding=90000)
        async with db.session_scope() as s:
            dispute = await services.disputes.file_dispute(
                s, buyer, order.id, DisputeReason.NOT_DELIVERED, "Nothing arrived"
            )
        return order, dispute

    async def test_unanswered_dispute_refunds_buyer(self, db, lease, services, make_order, buyer):
        order, dispute = await self._open_dispute(db, services, make_order, buyer)

        result = await sweep_dispute_deadlines(db, lease, services, now=utcnow() + timedelta(hours=49))

        assert result.handled == 1
        async with db.session_scope() as s:
            stored = await services.disputes.dispute_repo.get(s, dispute.id)
            assert stored.status == DisputeStatus.RESOLVED
            assert stored.auto_resolved is True
        assert (await _order(db, services, order.id)).status == OrderStatus.REFUNDED
        assert await _balance(db, services, buyer.user_id) == 90000

    async def test_answered_dispute_waits_for_admin(self, db, lease, services, make_order, buyer, seller):
        order, dispute = await self._open_dispute(db, services, make_order, buyer)
        async with db.session_scope() as s:
            await services.disputes.respond(s, dispute.id, seller, "Sent it twice, see logs")

        result = await sweep_dispute_deadlines(db, lease, services, now=utcnow() + timedelta(hours=49))

        assert result.handled == 0
        assert (await _order(db, services, order.id)).status == OrderStatus.DISPUTED


# ============================================================================
# Liderazgo y registro
# ============================================================================

class TestLeadership:

    async def test_follower_skips_the_pass(self, db, lease, services, make_order):
        order = await make_order()
        token = await lease.acquire(f"sweep:{PENDING_EXPIRY}", 30)
        assert token is not None

        result = await sweep_pending_expiry(db, lease, services, now=utcnow() + timedelta(minutes=61))

        assert result.leader is False
        assert result.scanned == 0
        assert (await _order(db, services, order.id)).status == OrderStatus.PENDING

    async def test_register_adds_three_jobs(self, db, services):
        scheduler = SchedulerService()

        job_ids = register_escrow_sweep_jobs(scheduler, db, services)

        assert sorted(job_ids) == ["dispute_deadlines", "order_auto_complete", "pending_expiry"]
        assert {job["id"] for job in scheduler.get_jobs()} == set(job_ids)
        assert scheduler.remove_job("pending_expiry") is True
        assert scheduler.remove_job("pending_expiry") is False
        assert scheduler.get_job_status("pending_expiry") is None


# Fin del archivo tests/shared/scheduler/test_escrow_sweep_jobs.py
