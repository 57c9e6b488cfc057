# -*- coding: utf-8 -*-
"""
tests/modules/escrow/test_escrow_engine.py

Motor de escrow invocado directamente (sin pasar por la máquina de estados):
conservación, overdraw, replays, freeze y split.

Autor: TradeVault
Fecha: 2026-10-16
"""

import pytest
from prometheus_client import REGISTRY

from tradevault.errors import EscrowMismatch, EscrowOverdraw, InvalidState, NotFound
from tradevault.modules.escrow.enums import EscrowOperationType, EscrowStatus
from tradevault.modules.escrow.repositories import EscrowOperationRepository
from tradevault.modules.ledger.enums import TransactionType
from tradevault.modules.orders.enums import OrderStatus
from tradevault.shared.events import EventName


def _integrity_errors(kind: str) -> float:
    return REGISTRY.get_sample_value("escrow_integrity_errors_total", {"kind": kind}) or 0.0


async def _balance(db, services, user_id):
    async with db.session_scope() as s:
        return (await services.wallets.get_wallet(s, user_id)).available_balance


async def _escrow(db, services, order_id):
    async with db.session_scope() as s:
        return await services.escrow.get_escrow(s, order_id)


@pytest.fixture
async def paid_order(make_order):
    return await make_order(OrderStatus.PAID, funding=90000)


# ============================================================================
# hold
# ============================================================================

class TestHold:

    async def test_hold_replay_returns_existing_escrow(self, db, services, paid_order):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            result = await services.escrow.hold(s, order)

        assert result.replayed is True
        assert result.postings == []
        assert result.escrow.amount == 49500
        assert await _balance(db, services, "buyer-1") == 40500

    async def test_hold_rejects_inconsistent_total(self, db, services, make_order, fund):
        await fund("buyer-1", 90000)
        pending = await make_order()
        before = _integrity_errors("mismatch")

        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, pending.id)
            # Fuera de la sesión: el CHECK de la tabla impediría persistirlo
            s.expunge(order)
            order.total_amount += 1
            with pytest.raises(EscrowMismatch):
                await services.escrow.hold(s, order)

        assert _integrity_errors("mismatch") == before + 1
        assert await _escrow(db, services, pending.id) is None
        assert await _balance(db, services, "buyer-1") == 90000


# ============================================================================
# release / refund
# ============================================================================

class TestReleaseRefund:

    async def test_release_with_wrong_amount_aborts_everything(self, db, services, paid_order, published):
        published.clear()
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            with pytest.raises(EscrowMismatch):
                await services.escrow.release(s, order, 40000, order.seller_id)

        escrow = await _escrow(db, services, paid_order.id)
        assert escrow.status == EscrowStatus.HELD
        assert escrow.remaining == 49500
        assert await _balance(db, services, "seller-1") == 0
        assert published == []

        async with db.session_scope() as s:
            ops = await EscrowOperationRepository().list_for_order(s, paid_order.id)
        assert [op.operation_type for op in ops] == [EscrowOperationType.HOLD]

    async def test_release_to_non_seller_is_mismatch(self, db, services, paid_order):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            with pytest.raises(EscrowMismatch):
                await services.escrow.release(s, order, order.seller_receives, order.buyer_id)

    async def test_release_posts_seller_and_platform(self, db, services, paid_order, published):
        published.clear()
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            result = await services.escrow.release(s, order, order.seller_receives, order.seller_id)

        assert result.replayed is False
        assert [p.tx_type for p in result.postings] == [TransactionType.ESCROW_RELEASE, TransactionType.FEE]
        assert await _balance(db, services, "seller-1") == 40500
        assert await _balance(db, services, "platform") == 9000

        (event,) = published
        assert event.name == EventName.ESCROW_POSTED
        assert event.payload == {
            "operation": "release",
            "escrow_status": "released",
            "amount": 40500,
            "fee": 9000,
        }

    async def test_release_replay_is_noop(self, db, services, make_order):
        completed = await make_order(OrderStatus.COMPLETED)

        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, completed.id)
            result = await services.escrow.release(s, order, order.seller_receives, order.seller_id)

        assert result.replayed is True
        assert await _balance(db, services, "seller-1") == 40500
        assert await _balance(db, services, "platform") == 9000

    async def test_refund_overdraw_is_fatal(self, db, services, paid_order):
        before = _integrity_errors("overdraw")

        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            with pytest.raises(EscrowOverdraw):
                await services.escrow.refund(s, order, 60000, order.buyer_id)

        assert _integrity_errors("overdraw") == before + 1
        assert (await _escrow(db, services, paid_order.id)).status == EscrowStatus.HELD

    async def test_partial_refund_is_mismatch(self, db, services, paid_order):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            with pytest.raises(EscrowMismatch):
                await services.escrow.refund(s, order, 100, order.buyer_id)

    async def test_refund_after_release_is_invalid_state(self, db, services, make_order):
        completed = await make_order(OrderStatus.COMPLETED)

        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, completed.id)
            with pytest.raises(InvalidState):
                await services.escrow.refund(s, order, 0, order.buyer_id)

    async def test_release_without_escrow(self, db, services, make_order):
        pending = await make_order()

        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, pending.id)
            with pytest.raises(NotFound):
                await services.escrow.release(s, order, order.seller_receives, order.seller_id)


# ============================================================================
# freeze / split
# ============================================================================

class TestFreezeAndSplit:

    async def test_frozen_escrow_blocks_ordinary_settlement(self, db, services, paid_order):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            escrow = await services.escrow.freeze(s, order)
            again = await services.escrow.freeze(s, order)
        assert escrow.is_frozen is True
        assert again.frozen_at == escrow.frozen_at

        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            with pytest.raises(InvalidState):
                await services.escrow.release(s, order, order.seller_receives, order.seller_id)
            with pytest.raises(InvalidState):
                await services.escrow.refund(s, order, 49500, order.buyer_id)

    async def test_release_can_override_freeze(self, db, services, paid_order):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            await services.escrow.freeze(s, order)
            result = await services.escrow.release(
                s, order, order.seller_receives, order.seller_id, override_freeze=True
            )

        assert result.escrow.status == EscrowStatus.RELEASED
        assert result.escrow.is_frozen is False

    async def test_partial_split_has_no_fee(self, db, services, paid_order):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            result = await services.escrow.split(s, order, 10000, 39500, note="half done")

        escrow = result.escrow
        assert escrow.status == EscrowStatus.PARTIALLY_RELEASED
        assert (escrow.refund_amount, escrow.release_amount, escrow.fee_amount) == (10000, 39500, 0)
        assert escrow.remaining == 0
        assert escrow.notes == "half done"

        assert await _balance(db, services, "buyer-1") == 90000 - 49500 + 10000
        assert await _balance(db, services, "seller-1") == 39500
        assert await _balance(db, services, "platform") == 0

    @pytest.mark.parametrize(
        "refund,release,status",
        [
            (49500, 0, EscrowStatus.REFUNDED),
            (0, 49500, EscrowStatus.RELEASED),
        ],
    )
    async def test_one_sided_split_status(self, db, services, paid_order, refund, release, status):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            result = await services.escrow.split(s, order, refund, release)

        assert result.escrow.status == status
        assert len(result.postings) == 1

    @pytest.mark.parametrize("refund,release", [(10000, 10000), (-1, 49501), (40000, 40000)])
    async def test_split_must_conserve(self, db, services, paid_order, refund, release):
        async with db.session_scope() as s:
            order = await services.orders.lock_order(s, paid_order.id)
            with pytest.raises((EscrowMismatch, EscrowOverdraw)):
                await services.escrow.split(s, order, refund, release)

        assert (await _escrow(db, services, paid_order.id)).status == EscrowStatus.HELD


# Fin del archivo tests/modules/escrow/test_escrow_engine.py
