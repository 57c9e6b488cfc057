# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/reconciliation.py

Reconciliación de wallets contra su ledger.

Recalcula los buckets a partir de los asientos y los compara con los
saldos denormalizados:
    available + pending == Σ net(completed)
    pending             == Σ -net(pending)

Autor: TradeVault
Fecha: 2026-10-08
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tradevault.errors import NotFound
from tradevault.shared.utils.datetime_helpers import to_iso8601, utcnow
from .enums import TransactionStatus
from .repositories import WalletRepository, WalletTransactionRepository

logger = logging.getLogger(__name__)


class ReconciliationResult:
    """Resultado de reconciliar una wallet."""

    def __init__(self, wallet_id: int) -> None:
        self.wallet_id = wallet_id
        self.expected_total: int = 0
        self.expected_pending: int = 0
        self.actual_available: int = 0
        self.actual_pending: int = 0
        self.discrepancies: List[Dict[str, Any]] = []
        self.reconciled_at: datetime = utcnow()

    @property
    def is_balanced(self) -> bool:
        return not self.discrepancies

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wallet_id": self.wallet_id,
            "reconciled_at": to_iso8601(self.reconciled_at),
            "is_balanced": self.is_balanced,
            "expected_total": self.expected_total,
            "expected_available": self.expected_total - self.expected_pending,
            "expected_pending": self.expected_pending,
            "actual_available": self.actual_available,
            "actual_pending": self.actual_pending,
            "discrepancies": self.discrepancies,
        }


async def reconcile_wallet(
    session: AsyncSession,
    wallet_id: int,
    *,
    wallet_repo: Optional[WalletRepository] = None,
    tx_repo: Optional[WalletTransactionRepository] = None,
) -> ReconciliationResult:
    """
    Compara saldos de la wallet con la suma de sus asientos.

    Raises:
        NotFound: si la wallet no existe
    """
    wallet_repo = wallet_repo or WalletRepository()
    tx_repo = tx_repo or WalletTransactionRepository()

    wallet = await wallet_repo.get(session, wallet_id)
    if wallet is None:
        raise NotFound(f"Wallet {wallet_id} not found", wallet_id=wallet_id)

    result = ReconciliationResult(wallet_id)
    result.expected_total = await tx_repo.sum_net(
        session, wallet_id, status=TransactionStatus.COMPLETED
    )
    result.expected_pending = -await tx_repo.sum_net(
        session, wallet_id, status=TransactionStatus.PENDING
    )
    result.actual_available = wallet.available_balance
    result.actual_pending = wallet.pending_balance

    actual_total = wallet.available_balance + wallet.pending_balance
    if actual_total != result.expected_total:
        result.discrepancies.append(
            {
                "field": "total_balance",
                "expected": result.expected_total,
                "actual": actual_total,
                "difference": actual_total - result.expected_total,
            }
        )
    if wallet.pending_balance != result.expected_pending:
        result.discrepancies.append(
            {
                "field": "pending_balance",
                "expected": result.expected_pending,
                "actual": wallet.pending_balance,
                "difference": wallet.pending_balance - result.expected_pending,
            }
        )

    if result.discrepancies:
        logger.error(
            "wallet_reconciliation_mismatch wallet=%s discrepancies=%s",
            wallet_id, result.discrepancies,
        )
    else:
        logger.info(
            "wallet_reconciled wallet=%s total=%d pending=%d",
            wallet_id, result.expected_total, result.expected_pending,
        )
    return result


__all__ = ["ReconciliationResult", "reconcile_wallet"]

# Fin del archivo tradevault/modules/ledger/reconciliation.py
