# -*- coding: utf-8 -*-
"""
tests/modules/ledger/test_ledger_store.py

Reglas del ledger append-and-aggregate: asientos válidos, saldos nunca
negativos y liquidación única de asientos pending.
"""

import pytest

from tradevault.errors import InsufficientFunds, InvalidState, ValidationFailed
from tradevault.modules.ledger.enums import TransactionStatus, TransactionType
from tradevault.modules.ledger.store import LedgerStore, Posting


@pytest.fixture
def ledger():
    return LedgerStore(currency="NGN")


class TestPosting:

    def test_resolved_net_defaults(self):
        assert Posting(TransactionType.ESCROW_RELEASE, 45000, fee=4500).resolved_net() == 40500
        assert Posting(TransactionType.PURCHASE, -500, fee=50).resolved_net() == -500
        assert Posting(TransactionType.FEE, 10, net_amount=7).resolved_net() == 7

    async def test_credit_updates_balance_and_totals(self, session, ledger):
        wallet = await ledger.lock_wallet(session, "seller-9")
        tx = await ledger.post(
            session, wallet, Posting(TransactionType.ESCROW_RELEASE, 45000, fee=4500, order_id="o-1")
        )

        assert tx.net_amount == 40500
        assert tx.balance_after == 40500
        assert wallet.available_balance == 40500
        assert wallet.total_earned == 40500
        assert tx.settled_at is not None

    async def test_debit_cannot_overdraw(self, session, ledger):
        wallet = await ledger.lock_wallet(session, "poor")
        await ledger.post(session, wallet, Posting(TransactionType.DEPOSIT, 100))

        with pytest.raises(InsufficientFunds):
            await ledger.post(session, wallet, Posting(TransactionType.PURCHASE, -101))
        assert wallet.available_balance == 100

    @pytest.mark.parametrize(
        "posting",
        [
            Posting(TransactionType.DEPOSIT, 0),
            Posting(TransactionType.DEPOSIT, 100, status=TransactionStatus.FAILED),
            Posting(TransactionType.DEPOSIT, 100, status=TransactionStatus.PENDING),
        ],
        ids=["zero", "failed", "pending-credit"],
    )
    async def test_rejects_invalid_postings(self, session, ledger, posting):
        wallet = await ledger.lock_wallet(session, "someone")

        with pytest.raises(ValidationFailed):
            await ledger.post(session, wallet, posting)

    async def test_reference_replay_returns_existing_row(self, session, ledger):
        wallet = await ledger.lock_wallet(session, "payer")
        first = await ledger.post(session, wallet, Posting(TransactionType.DEPOSIT, 700, reference="gw-1"))
        second = await ledger.post(session, wallet, Posting(TransactionType.DEPOSIT, 700, reference="gw-1"))

        assert second.id == first.id
        assert wallet.available_balance == 700


class TestSettle:

    async def _pending(self, session, ledger):
        wallet = await ledger.lock_wallet(session, "withdrawer")
        await ledger.post(session, wallet, Posting(TransactionType.DEPOSIT, 5000))
        tx = await ledger.post(
            session,
            wallet,
            Posting(TransactionType.WITHDRAWAL, -2000, status=TransactionStatus.PENDING),
        )
        return wallet, tx

    async def test_pending_debit_moves_to_pending_balance(self, session, ledger):
        wallet, tx = await self._pending(session, ledger)

        assert tx.status == TransactionStatus.PENDING
        assert tx.settled_at is None
        assert (wallet.available_balance, wallet.pending_balance) == (3000, 2000)

    async def test_settle_once(self, session, ledger):
        wallet, tx = await self._pending(session, ledger)

        await ledger.settle(session, wallet, tx, TransactionStatus.COMPLETED)

        assert (wallet.available_balance, wallet.pending_balance) == (3000, 0)
        assert wallet.total_withdrawn == 2000
        with pytest.raises(InvalidState):
            await ledger.settle(session, wallet, tx, TransactionStatus.FAILED)

    async def test_outcome_must_be_final(self, session, ledger):
        wallet, tx = await self._pending(session, ledger)

        with pytest.raises(ValidationFailed):
            await ledger.settle(session, wallet, tx, TransactionStatus.PENDING)

    async def test_wallet_must_own_transaction(self, session, ledger):
        _, tx = await self._pending(session, ledger)
        other = await ledger.lock_wallet(session, "someone-else")

        with pytest.raises(ValidationFailed):
            await ledger.settle(session, other, tx, TransactionStatus.COMPLETED)


# Fin del archivo tests/modules/ledger/test_ledger_store.py
