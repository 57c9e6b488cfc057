# -*- coding: utf-8 -*-
"""
tradevault/models.py

Registro central de modelos ORM. Importarlo deja todas las tablas en
Base.metadata (create_all, tests, migraciones).

Autor: TradeVault
Fecha: 2026-10-12
"""

from tradevault.modules.disputes.models import Dispute, DisputeMessage
from tradevault.modules.escrow.models import EscrowOperation, EscrowTransaction
from tradevault.modules.ledger.models import BankAccount, Wallet, WalletTransaction
from tradevault.modules.orders.models import Order
from tradevault.shared.database.base import Base
from tradevault.shared.locks.models import DistributedLock

__all__ = [
    "Base",
    "Wallet",
    "WalletTransaction",
    "BankAccount",
    "Order",
    "EscrowTransaction",
    "EscrowOperation",
    "Dispute",
    "DisputeMessage",
    "DistributedLock",
]

# Fin del archivo tradevault/models.py
