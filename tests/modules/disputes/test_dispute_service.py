# -*- coding: utf-8 -*-
"""
tests/modules/disputes/test_dispute_service.py

Motor de disputas sobre SQLite real: apertura (freeze + disputed),
respuesta, mensajes, evidencia, resolución con split, cierre y
auto-resolución por plazo vencido.

Autor: TradeVault
Fecha: 2026-10-17
"""

from datetime import timedelta

import pytest

from tradevault.errors import (
    AlreadyTerminal,
    DuplicateDispute,
    InvalidState,
    InvalidTransition,
    NotAuthorized,
    ValidationFailed,
)
from tradevault.modules.disputes.enums import DisputeReason, DisputeStatus, ResolutionType
from tradevault.modules.disputes.repositories import DisputeFilters
from tradevault.modules.disputes.services import Resolution, compute_split
from tradevault.modules.escrow.enums import EscrowStatus
from tradevault.modules.orders.enums import OrderStatus
from tradevault.shared.events import EventName
from tradevault.shared.utils.datetime_helpers import ensure_utc, utcnow


async def _balance(db, services, user_id):
    async with db.session_scope() as s:
        return (await services.wallets.get_wallet(s, user_id)).available_balance


async def _order_status(db, services, order_id, actor):
    async with db.session_scope() as s:
        return (await services.orders.get_order(s, order_id, actor)).status


async def _escrow(db, services, order_id):
    async with db.session_scope() as s:
        return await services.escrow.get_escrow(s, order_id)


@pytest.fixture
def file_dispute(db, services, buyer):
    async def _file(order, *, actor=buyer, evidence=None):
        async with db.session_scope() as s:
            return await services.disputes.file_dispute(
                s,
                actor,
                order.id,
                DisputeReason.NOT_AS_DESCRIBED,
                "Files do not match the listing",
                evidence=evidence,
            )

    return _file


@pytest.fixture
async def disputed(make_order, file_dispute):
    """(order, dispute) con la orden en processing al momento de abrir."""
    order = await make_order(OrderStatus.PROCESSING, funding=90000)
    dispute = await file_dispute(order)
    return order, dispute


# ============================================================================
# compute_split (puro)
# ============================================================================

class TestComputeSplit:

    def test_buyer_favor_refunds_everything(self):
        assert compute_split(Resolution(ResolutionType.BUYER_FAVOR), 49500) == (49500, 0)

    def test_seller_favor_releases_everything(self):
        assert compute_split(Resolution(ResolutionType.SELLER_FAVOR), 49500) == (0, 49500)

    def test_partial_derives_missing_side(self):
        assert compute_split(Resolution(ResolutionType.PARTIAL_REFUND, refund_amount=10000), 49500) == (
            10000,
            39500,
        )
        assert compute_split(
            Resolution(ResolutionType.MUTUAL_AGREEMENT, release_amount=30000), 49500
        ) == (19500, 30000)

    @pytest.mark.parametrize(
        "refund,release",
        [(None, None), (60000, None), (10000, 10000), (-5, None)],
    )
    def test_partial_rejects_inconsistent_amounts(self, refund, release):
        with pytest.raises(ValidationFailed):
            compute_split(
                Resolution(ResolutionType.PARTIAL_REFUND, refund_amount=refund, release_amount=release),
                49500,
            )


# ============================================================================
# Apertura
# ============================================================================

class TestFileDispute:

    async def test_file_freezes_escrow_and_disputes_order(self, db, services, make_order, file_dispute, published, buyer):
        order = await make_order(OrderStatus.DELIVERED, funding=90000)
        published.clear()
        before = utcnow()

        dispute = await file_dispute(
            order, evidence=[{"type": "screenshot", "url": "https://img.example/1.png", "uploaded_by": "forged"}]
        )

        assert dispute.status == DisputeStatus.OPEN
        assert dispute.filed_by == "buyer-1"
        assert dispute.against_id == "seller-1"
        assert dispute.dispute_number.startswith("DSP-")
        assert ensure_utc(dispute.deadline) >= before + timedelta(hours=48)
        assert dispute.evidence[0]["type"] == "screenshot"
        assert dispute.evidence[0]["uploaded_by"] == "buyer-1"

        assert await _order_status(db, services, order.id, buyer) == OrderStatus.DISPUTED
        escrow = await _escrow(db, services, order.id)
        assert escrow.status == EscrowStatus.HELD
        assert escrow.is_frozen is True

        names = [e.name for e in published]
        assert EventName.DISPUTE_FILED in names
        assert EventName.ORDER_STATUS_CHANGED in names

    async def test_only_buyer_may_file(self, make_order, file_dispute, seller):
        order = await make_order(OrderStatus.PAID)

        with pytest.raises(NotAuthorized):
            await file_dispute(order, actor=seller)

    async def test_second_dispute_is_duplicate(self, disputed, file_dispute):
        order, _ = disputed

        with pytest.raises(DuplicateDispute):
            await file_dispute(order)

    async def test_pending_order_cannot_be_disputed(self, make_order, file_dispute):
        order = await make_order()

        with pytest.raises(InvalidTransition):
            await file_dispute(order)

    async def test_completed_order_cannot_be_disputed(self, make_order, file_dispute):
        order = await make_order(OrderStatus.COMPLETED)

        with pytest.raises(AlreadyTerminal):
            await file_dispute(order)

    async def test_description_required(self, db, services, make_order, buyer):
        order = await make_order(OrderStatus.PAID)

        async with db.session_scope() as s:
            with pytest.raises(ValidationFailed):
                await services.disputes.file_dispute(s, buyer, order.id, DisputeReason.OTHER, "   ")

    async def test_disputed_order_blocks_public_completion(self, db, services, disputed, buyer):
        order, _ = disputed

        async with db.session_scope() as s:
            with pytest.raises(InvalidTransition):
                await services.orders.transition(s, order.id, OrderStatus.COMPLETED, buyer)


# ============================================================================
# Respuesta, mensajes y evidencia
# ============================================================================

class TestConversation:

    async def test_seller_response_moves_to_review(self, db, services, disputed, seller):
        _, dispute = disputed

        async with db.session_scope() as s:
            updated = await services.disputes.respond(s, dispute.id, seller, "Delivered as agreed")

        assert updated.status == DisputeStatus.UNDER_REVIEW
        assert updated.seller_response == "Delivered as agreed"
        assert updated.responded_at is not None

        async with db.session_scope() as s:
            with pytest.raises(InvalidState):
                await services.disputes.respond(s, dispute.id, seller, "again")

    async def test_buyer_cannot_respond(self, db, services, disputed, buyer):
        _, dispute = disputed

        async with db.session_scope() as s:
            with pytest.raises(NotAuthorized):
                await services.disputes.respond(s, dispute.id, buyer, "me too")

    async def test_messages_are_listed_in_detail(self, db, services, disputed, buyer, seller, admin, outsider):
        _, dispute = disputed

        async with db.session_scope() as s:
            await services.disputes.add_message(s, dispute.id, buyer, "Where is the source?")
        async with db.session_scope() as s:
            await services.disputes.add_message(s, dispute.id, seller, "In the zip", attachments=["a.png"])
        async with db.session_scope() as s:
            admin_msg = await services.disputes.add_message(s, dispute.id, admin, "Reviewing")

        assert admin_msg.is_admin is True

        async with db.session_scope() as s:
            detail = await services.disputes.get_dispute(s, dispute.id, seller)
            with pytest.raises(NotAuthorized):
                await services.disputes.add_message(s, dispute.id, outsider, "hi")
            with pytest.raises(NotAuthorized):
                await services.disputes.get_dispute(s, dispute.id, outsider)

        assert [m.sender_id for m in detail.messages] == ["buyer-1", "seller-1", "admin-1"]
        assert detail.messages[1].attachments == ["a.png"]

    async def test_evidence_is_appended(self, db, services, disputed, seller):
        _, dispute = disputed

        async with db.session_scope() as s:
            updated = await services.disputes.add_evidence(
                s, dispute.id, seller, {"type": "link", "url": "https://proof.example"}
            )
        async with db.session_scope() as s:
            updated = await services.disputes.add_evidence(
                s, dispute.id, seller, {"type": "video", "url": "https://v.example"}
            )

        assert [e["type"] for e in updated.evidence] == ["link", "other"]
        assert updated.evidence[1]["data"]["type"] == "video"

    async def test_invalid_evidence_rejected(self, db, services, disputed, buyer):
        _, dispute = disputed

        async with db.session_scope() as s:
            with pytest.raises(ValidationFailed):
                await services.disputes.add_evidence(s, dispute.id, buyer, {"type": "document"})


# ============================================================================
# Resolución
# ============================================================================

class TestResolve:

    async def _resolve(self, db, services, dispute, actor, resolution):
        async with db.session_scope() as s:
            return await services.disputes.resolve(s, dispute.id, actor, resolution)

    async def test_buyer_favor_refunds_and_marks_refunded(self, db, services, disputed, admin, buyer):
        order, dispute = disputed

        resolved = await self._resolve(db, services, dispute, admin, Resolution(ResolutionType.BUYER_FAVOR))

        assert resolved.status == DisputeStatus.RESOLVED
        assert (resolved.refund_amount, resolved.release_amount) == (49500, 0)
        assert resolved.resolved_by == "admin-1"
        assert await _order_status(db, services, order.id, buyer) == OrderStatus.REFUNDED
        assert await _balance(db, services, "buyer-1") == 90000
        escrow = await _escrow(db, services, order.id)
        assert escrow.status == EscrowStatus.REFUNDED
        assert escrow.is_frozen is False

    async def test_seller_favor_releases_without_fee(self, db, services, disputed, admin, buyer):
        order, dispute = disputed

        await self._resolve(db, services, dispute, admin, Resolution(ResolutionType.SELLER_FAVOR))

        assert await _order_status(db, services, order.id, buyer) == OrderStatus.COMPLETED
        assert await _balance(db, services, "seller-1") == 49500
        assert await _balance(db, services, "platform") == 0

    async def test_partial_refund_splits_held_amount(self, db, services, disputed, admin, buyer, published):
        order, dispute = disputed
        published.clear()

        resolved = await self._resolve(
            db, services, dispute, admin,
            Resolution(ResolutionType.PARTIAL_REFUND, refund_amount=10000, notes="half delivered"),
        )

        assert (resolved.refund_amount, resolved.release_amount) == (10000, 39500)
        assert resolved.resolution == "half delivered"
        assert await _order_status(db, services, order.id, buyer) == OrderStatus.COMPLETED
        assert await _balance(db, services, "buyer-1") == 90000 - 49500 + 10000
        assert await _balance(db, services, "seller-1") == 39500
        assert (await _escrow(db, services, order.id)).status == EscrowStatus.PARTIALLY_RELEASED

        resolved_events = [e for e in published if e.name == EventName.DISPUTE_RESOLVED]
        assert resolved_events[0].payload["refund_amount"] == 10000

    async def test_bad_split_leaves_everything_untouched(self, db, services, disputed, admin, buyer):
        order, dispute = disputed

        with pytest.raises(ValidationFailed):
            await self._resolve(
                db, services, dispute, admin,
                Resolution(ResolutionType.PARTIAL_REFUND, refund_amount=10000, release_amount=10000),
            )

        assert await _order_status(db, services, order.id, buyer) == OrderStatus.DISPUTED
        assert (await _escrow(db, services, order.id)).is_frozen is True

    async def test_only_admin_resolves(self, db, services, disputed, buyer):
        _, dispute = disputed

        with pytest.raises(NotAuthorized):
            await self._resolve(db, services, dispute, buyer, Resolution(ResolutionType.BUYER_FAVOR))

    async def test_resolved_dispute_is_final(self, db, services, disputed, admin):
        _, dispute = disputed
        await self._resolve(db, services, dispute, admin, Resolution(ResolutionType.BUYER_FAVOR))

        with pytest.raises(InvalidState):
            await self._resolve(db, services, dispute, admin, Resolution(ResolutionType.SELLER_FAVOR))


# ============================================================================
# Cierre sin split
# ============================================================================

class TestClose:

    async def test_filer_withdraws_and_seller_is_paid(self, db, services, disputed, buyer):
        order, dispute = disputed

        async with db.session_scope() as s:
            closed = await services.disputes.close(s, dispute.id, buyer, notes="sorted out")

        assert closed.status == DisputeStatus.CLOSED
        assert closed.closed_by == "buyer-1"
        assert await _order_status(db, services, order.id, buyer) == OrderStatus.COMPLETED
        assert await _balance(db, services, "seller-1") == 40500
        assert await _balance(db, services, "platform") == 9000

    async def test_seller_cannot_close(self, db, services, disputed, seller):
        _, dispute = disputed

        async with db.session_scope() as s:
            with pytest.raises(NotAuthorized):
                await services.disputes.close(s, dispute.id, seller)


# ============================================================================
# Auto-resolución por plazo
# ============================================================================

class TestAutoResolve:

    async def test_not_before_deadline(self, db, services, disputed):
        _, dispute = disputed

        async with db.session_scope() as s:
            assert await services.disputes.overdue(s) == []
            assert await services.disputes.auto_resolve(s, dispute.id) is False

    async def test_unanswered_dispute_resolves_for_buyer(self, db, services, disputed, buyer):
        order, dispute = disputed
        later = utcnow() + timedelta(hours=49)

        async with db.session_scope() as s:
            assert await services.disputes.overdue(s, later) == [dispute.id]
        async with db.session_scope() as s:
            assert await services.disputes.auto_resolve(s, dispute.id, later) is True

        async with db.session_scope() as s:
            detail = await services.disputes.get_dispute(s, dispute.id, buyer)
        assert detail.dispute.status == DisputeStatus.RESOLVED
        assert detail.dispute.auto_resolved is True
        assert detail.dispute.resolution_type == ResolutionType.BUYER_FAVOR
        assert detail.dispute.resolved_by == "system"
        assert await _order_status(db, services, order.id, buyer) == OrderStatus.REFUNDED
        assert await _balance(db, services, "buyer-1") == 90000

    async def test_answered_dispute_is_left_for_admin(self, db, services, disputed, seller):
        _, dispute = disputed
        async with db.session_scope() as s:
            await services.disputes.respond(s, dispute.id, seller, "Delivered")

        async with db.session_scope() as s:
            assert await services.disputes.auto_resolve(s, dispute.id, utcnow() + timedelta(hours=49)) is False


# ============================================================================
# Listados y estadísticas
# ============================================================================

class TestQueries:

    async def test_list_and_stats(self, db, services, make_order, file_dispute, buyer, seller, admin, outsider):
        first = await make_order(OrderStatus.PAID)
        second = await make_order(OrderStatus.DELIVERED)
        d1 = await file_dispute(first)
        await file_dispute(second)
        async with db.session_scope() as s:
            await services.disputes.respond(s, d1.id, seller, "ok")

        async with db.session_scope() as s:
            as_buyer = await services.disputes.list_disputes(s, buyer)
            as_outsider = await services.disputes.list_disputes(s, outsider)
            open_only = await services.disputes.list_disputes(
                s, admin, DisputeFilters(status=DisputeStatus.OPEN)
            )
            buyer_stats = await services.disputes.dispute_stats(s, buyer)
            seller_stats = await services.disputes.dispute_stats(s, seller)

        assert len(as_buyer) == 2
        assert as_outsider == []
        assert len(open_only) == 1
        assert (buyer_stats.total, buyer_stats.open, buyer_stats.under_review) == (2, 1, 1)
        assert (buyer_stats.as_filed_by, buyer_stats.as_against) == (2, 0)
        assert (seller_stats.as_filed_by, seller_stats.as_against) == (0, 2)


# Fin del archivo tests/modules/disputes/test_dispute_service.py
