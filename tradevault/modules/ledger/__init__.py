# -*- coding: utf-8 -*-
"""
tradevault/modules/ledger/__init__.py

Ledger de wallets: saldos por bucket, asientos append-only,
retiros y reconciliación.

Autor: TradeVault
Fecha: 2026-10-08
"""

from .enums import TransactionStatus, TransactionType
from .models import BankAccount, Wallet, WalletTransaction
from .reconciliation import ReconciliationResult, reconcile_wallet
from .services import BankAccountInput, WalletService, WalletStats
from .store import LedgerStore, Posting

__all__ = [
    "TransactionType",
    "TransactionStatus",
    "Wallet",
    "WalletTransaction",
    "BankAccount",
    "LedgerStore",
    "Posting",
    "ReconciliationResult",
    "reconcile_wallet",
    "WalletService",
    "WalletStats",
    "BankAccountInput",
]

# Fin del archivo tradevault/modules/ledger/__init__.py
